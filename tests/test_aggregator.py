import pytest

from conftest import FakePageSource, ROOT_ID, NAMING_ID, LOGGING_ID, make_page
from guidelines.models import GuidelineRecord
from guidelines.store import GuidelineStore
from guidelines.views import combined_view, render_uri
from pipelines.aggregator import GuidelineAggregator, page_to_record
from pipelines.confluence import ConfluenceError


class TestGuidelineAggregator:
    """Load behavior of the two-level page traversal."""

    @pytest.mark.asyncio
    async def test_load_builds_root_and_children(self, standards_source, store):
        aggregator = GuidelineAggregator(standards_source, store)
        result = await aggregator.load(ROOT_ID)

        assert result is store
        assert len(store) == 3
        assert set(store.ids()) == {ROOT_ID, NAMING_ID, LOGGING_ID}
        assert store.ids()[0] == ROOT_ID

    @pytest.mark.asyncio
    async def test_end_to_end_views(self, standards_source, store):
        await GuidelineAggregator(standards_source, store).load(ROOT_ID)

        naming = render_uri(store, f"guideline://{NAMING_ID}")
        assert naming == "Naming Use kebab-case paths.\nURL: https://wiki.example.com/pages/101"

        combined = render_uri(store, "guidelines://all")
        assert "### Naming" in combined
        assert "### Logging" in combined

    @pytest.mark.asyncio
    async def test_root_failure_is_fatal(self, standards_pages, store):
        source = FakePageSource(standards_pages, children={ROOT_ID: [NAMING_ID]}, fail_pages=[ROOT_ID])
        aggregator = GuidelineAggregator(source, store)

        with pytest.raises(ConfluenceError):
            await aggregator.load(ROOT_ID)
        assert len(store) == 0
        assert store.generation == 0

    @pytest.mark.asyncio
    async def test_child_enumeration_failure_keeps_root(self, standards_pages, store):
        source = FakePageSource(standards_pages, fail_children=True)
        aggregator = GuidelineAggregator(source, store)

        await aggregator.load(ROOT_ID)

        assert store.ids() == [ROOT_ID]
        assert aggregator.last_report.children_enumerated is False

    @pytest.mark.asyncio
    async def test_single_child_failure_is_skipped(self, standards_pages, store):
        pages = dict(standards_pages)
        pages["103"] = make_page("103", "Testing", "Write tests.")
        source = FakePageSource(pages, children={ROOT_ID: [NAMING_ID, LOGGING_ID, "103"]},
                                fail_pages=[LOGGING_ID])
        aggregator = GuidelineAggregator(source, store)

        await aggregator.load(ROOT_ID)

        assert set(store.ids()) == {ROOT_ID, NAMING_ID, "103"}
        assert aggregator.last_report.failed == [LOGGING_ID]

    @pytest.mark.asyncio
    async def test_grandchildren_are_not_followed(self, standards_pages, store):
        pages = dict(standards_pages)
        pages["200"] = make_page("200", "Deep", "Too deep.")
        source = FakePageSource(pages, children={ROOT_ID: [NAMING_ID], NAMING_ID: ["200"]})

        await GuidelineAggregator(source, store).load(ROOT_ID)

        assert "200" not in store
        assert "200" not in source.fetch_calls

    @pytest.mark.asyncio
    async def test_duplicate_child_ids_last_wins(self, standards_pages, store):
        source = FakePageSource(standards_pages, children={ROOT_ID: [NAMING_ID, NAMING_ID]})

        await GuidelineAggregator(source, store).load(ROOT_ID)

        assert len(store) == 2
        assert store.get(NAMING_ID).title == "Naming"

    @pytest.mark.asyncio
    async def test_reload_is_idempotent(self, standards_source, store):
        aggregator = GuidelineAggregator(standards_source, store)

        await aggregator.load(ROOT_ID)
        first = {record.id: record.text for record in store.records()}
        await aggregator.load(ROOT_ID)
        second = {record.id: record.text for record in store.records()}

        assert first == second
        assert store.generation == 2

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_previous_snapshot(self, standards_source, store):
        aggregator = GuidelineAggregator(standards_source, store)
        await aggregator.load(ROOT_ID)

        standards_source.fail_pages.add(ROOT_ID)
        with pytest.raises(ConfluenceError):
            await aggregator.load(ROOT_ID)

        assert len(store) == 3
        assert store.generation == 1

    @pytest.mark.asyncio
    async def test_builtin_records_are_merged(self, standards_source, store):
        builtin = [GuidelineRecord.build("api-naming", "API Naming", "Use hyphens.", "internal://api-naming")]
        aggregator = GuidelineAggregator(standards_source, store, builtin_records=builtin)

        await aggregator.load(ROOT_ID)

        assert len(store) == 4
        assert store.ids()[-1] == "api-naming"
        assert aggregator.last_report.total == 4


def test_page_to_record_title_fallbacks():
    page = make_page("300", "", "Body")
    assert page_to_record(page).title == "Page 300"

    page.html = "<h1>Heading Title</h1><p>Body</p>"
    assert page_to_record(page).title == "Heading Title"


def test_page_to_record_appends_url():
    record = page_to_record(make_page("301", "Security", "Validate   input."))
    assert record.text.endswith("\nURL: https://wiki.example.com/pages/301")
    assert record.source_url == "https://wiki.example.com/pages/301"
