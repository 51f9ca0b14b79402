"""Shared fixtures for the guideline server tests."""

from typing import Dict, Iterable, List, Optional

import pytest

from guidelines.models import PageContent
from guidelines.store import GuidelineStore
from pipelines.confluence import ConfluenceError

ROOT_ID = "100"
NAMING_ID = "101"
LOGGING_ID = "102"


class FakePageSource:
    """In-memory page source with switchable failures."""

    def __init__(self,
                 pages: Dict[str, PageContent],
                 children: Optional[Dict[str, List[str]]] = None,
                 fail_pages: Iterable[str] = (),
                 fail_children: bool = False):
        self.pages = dict(pages)
        self.children = dict(children or {})
        self.fail_pages = set(fail_pages)
        self.fail_children = fail_children
        self.fetch_calls: List[str] = []

    async def fetch_page(self, page_id: str) -> PageContent:
        self.fetch_calls.append(page_id)
        if page_id in self.fail_pages or page_id not in self.pages:
            raise ConfluenceError(page_id, 404, "Not Found")
        return self.pages[page_id]

    async def fetch_child_ids(self, page_id: str) -> List[str]:
        if self.fail_children:
            raise ConfluenceError(page_id, 500, "Internal Server Error")
        return list(self.children.get(page_id, []))


def make_page(page_id: str, title: str, body: str) -> PageContent:
    return PageContent(
        page_id=page_id,
        title=title,
        html=f"<h1>{title}</h1><p>{body}</p>",
        url=f"https://wiki.example.com/pages/{page_id}",
    )


@pytest.fixture
def standards_pages() -> Dict[str, PageContent]:
    return {
        ROOT_ID: make_page(ROOT_ID, "Standards", "Team   standards\n overview."),
        NAMING_ID: make_page(NAMING_ID, "Naming", "Use   kebab-case\n paths."),
        LOGGING_ID: make_page(LOGGING_ID, "Logging", "Use the injected\tlogger."),
    }


@pytest.fixture
def standards_source(standards_pages) -> FakePageSource:
    return FakePageSource(standards_pages, children={ROOT_ID: [NAMING_ID, LOGGING_ID]})


@pytest.fixture
def store() -> GuidelineStore:
    return GuidelineStore()
