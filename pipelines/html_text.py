# HTML to plain text helpers for guideline pages.
# Confluence renders page bodies as HTML; the corpus keeps whitespace-collapsed text.

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")

def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()

def extract_text(html: str) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return normalize_whitespace(soup.get_text(" "))

def extract_title(html: str) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    h1 = soup.find("h1")
    return normalize_whitespace(h1.get_text(" ")) if h1 else ""
