"""
Tests for PublisherCrawler using a fake Playwright page.
"""

from contextlib import contextmanager

import pytest
from playwright.sync_api import Error as PlaywrightError

from oekodata.discovery import CandidateMetadata, PublisherCrawler, filter_current_only
from oekodata.discovery.crawler import COLLAPSED_SELECTOR, CONTAINER_TEXT_JS, LINK_SELECTOR
from oekodata.errors import DiscoveryFailure
from oekodata.settings import CrawlerConfig


class FakeLink:
    """Anchor element handle returning canned values from evaluate()."""

    def __init__(self, href, title, container, error=None):
        self.href = href
        self.title = title
        self.container = container
        self.error = error

    def evaluate(self, script):
        if self.error:
            raise self.error
        if script == CONTAINER_TEXT_JS:
            return self.container
        if "el.href" in script:
            return self.href
        return self.title


class FakeSection:
    def __init__(self, page):
        self.page = page

    def click(self):
        self.page.expand(self)


class FakePage:
    """Page with collapsed sections revealed pass by pass and a set of links."""

    def __init__(self, links, section_passes=(), goto_error=None):
        self.links = links
        self.passes = [[FakeSection(self) for _ in range(n)] for n in section_passes]
        self.goto_error = goto_error
        self.visited = []
        self.clicks = 0

    def goto(self, url, wait_until=None, timeout=None):
        if self.goto_error:
            raise self.goto_error
        self.visited.append((url, wait_until, timeout))

    def wait_for_selector(self, selector, timeout=None):
        return True

    def expand(self, section):
        self.clicks += 1
        self.passes[0].remove(section)
        if not self.passes[0]:
            self.passes.pop(0)

    def query_selector_all(self, selector):
        if selector == COLLAPSED_SELECTOR:
            return list(self.passes[0]) if self.passes else []
        if selector == LINK_SELECTOR:
            return self.links
        return []


def make_crawler(page, sleeps=None, **config):
    """Crawler whose browser session yields the fake page."""
    crawler = PublisherCrawler(CrawlerConfig(**config),
                               sleep=(sleeps.append if sleeps is not None else lambda s: None))
    crawler.session_closed = False

    @contextmanager
    def fake_session():
        try:
            yield page
        finally:
            crawler.session_closed = True

    crawler._browser_session = fake_session
    return crawler


LINKS = [
    FakeLink("https://www.kbob.admin.ch/files/kbob_v5.xlsx",
             "Ökobilanzdaten 2009/1:2022, Version 5",
             "Ökobilanzdaten 2009/1:2022, Version 5 XLSX596.00 kB 3. Dezember 2023"),
    FakeLink("https://www.kbob.admin.ch/files/kbob_v6.xlsx",
             "Ökobilanzdaten 2009/1:2022, Version 6",
             "Ökobilanzdaten 2009/1:2022, Version 6 XLSX612.00 kB 1. Mai 2024"),
]


class TestPublisherCrawler:
    """Discovery against a fake page."""

    def test_discovers_candidates(self):
        page = FakePage(LINKS)
        crawler = make_crawler(page, source_url="https://example.org/page")

        candidates = crawler.discover()

        assert [c.version_label for c in candidates] == [
            "2009/1:2022, Version 5", "2009/1:2022, Version 6"]
        assert candidates[1].publish_date == "2024-05-01"
        assert candidates[1].file_size_text == "612.00 kB"
        assert candidates[1].filename == "kbob_v6.xlsx"
        assert page.visited[0][0] == "https://example.org/page"
        assert page.visited[0][1] == "networkidle"

    def test_expands_sections_until_none_remain(self):
        page = FakePage(LINKS, section_passes=(2, 1))
        crawler = make_crawler(page)

        passes = crawler.expand_collapsed_sections(page)

        assert page.clicks == 3
        assert passes == 2
        assert page.query_selector_all(COLLAPSED_SELECTOR) == []

    def test_expansion_stops_after_max_passes(self):
        page = FakePage(LINKS, section_passes=(1, 1, 1, 1))
        crawler = make_crawler(page, max_expand_passes=2)

        assert crawler.expand_collapsed_sections(page) == 2
        assert page.clicks == 2

    def test_failed_candidate_is_omitted(self):
        broken = FakeLink(None, None, None, error=PlaywrightError("detached"))
        page = FakePage([LINKS[0], broken, LINKS[1]])

        candidates = make_crawler(page).discover()

        assert len(candidates) == 2

    def test_links_without_url_are_discarded(self):
        page = FakePage([FakeLink("", "Version 1", ""), LINKS[0]])
        assert len(make_crawler(page).discover()) == 1

    def test_duplicate_links_collapsed(self):
        page = FakePage([LINKS[0], LINKS[0]])
        assert len(make_crawler(page).discover()) == 1

    def test_politeness_delay_between_links(self):
        sleeps = []
        page = FakePage(LINKS + [LINKS[0]])
        make_crawler(page, sleeps=sleeps, request_delay=2.0).discover()

        assert sleeps.count(2.0) == 2

    def test_navigation_failure_raises_and_releases_browser(self):
        page = FakePage(LINKS, goto_error=PlaywrightError("Timeout 60000ms exceeded"))
        crawler = make_crawler(page, source_url="https://example.org/page")

        with pytest.raises(DiscoveryFailure) as exc_info:
            crawler.discover()

        assert exc_info.value.url == "https://example.org/page"
        assert "Timeout" in exc_info.value.reason
        assert crawler.session_closed

    def test_browser_released_on_success(self):
        crawler = make_crawler(FakePage(LINKS))
        crawler.discover()
        assert crawler.session_closed


class TestFilterCurrentOnly:

    def test_keeps_newest_per_title(self):
        candidates = [
            CandidateMetadata(url="a", title="Liste Version 5", version_label="5", publish_date="2023-01-01"),
            CandidateMetadata(url="b", title="Liste Version 6", version_label="6", publish_date="2024-01-01"),
            CandidateMetadata(url="c", title="Anhang", version_label="1", publish_date="2020-01-01"),
        ]
        result = filter_current_only(candidates)
        assert sorted(c.url for c in result) == ["b", "c"]
