# Oekodata - Publisher Page Crawler
# =================================
# Headless-browser discovery of dataset releases on the publisher page
"""
Crawler for the KBOB publication page.

Features:
- Loads the page in a headless Chromium session (Playwright)
- Expands collapsed <details> sections until none remain
- Collects every spreadsheet link with version label, date and size
- Politeness delay between page interactions
- Browser resources are released on success and failure alike
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..errors import DiscoveryFailure
from ..settings import CrawlerConfig
from .models import CandidateMetadata
from .text_parsing import base_title, build_candidate

logger = logging.getLogger(__name__)

LINK_SELECTOR = 'a[href$=".xlsx"], a[href$=".xls"]'
COLLAPSED_SELECTOR = "details:not([open])"
EXPAND_CLICK_DELAY = 0.5

# Text of the list item's parent, where size and date are rendered
CONTAINER_TEXT_JS = """
el => {
    const item = el.parentElement || el;
    const container = item.parentElement || item;
    return (container.textContent || '').trim();
}
"""

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]


class CandidateSource:
    """Anything that can list candidate releases."""

    def discover(self) -> List[CandidateMetadata]:
        raise NotImplementedError


class PublisherCrawler(CandidateSource):
    """
    Discovers candidate dataset files on the publisher page.

    Example:
        crawler = PublisherCrawler(CrawlerConfig.from_env())
        for candidate in crawler.discover():
            print(candidate.version_label, candidate.url)
    """

    def __init__(self, config: Optional[CrawlerConfig] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config or CrawlerConfig()
        self._sleep = sleep

    @contextmanager
    def _browser_session(self) -> Iterator:
        """Yield a ready page; the browser is always closed afterwards."""
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(
                headless=self.config.headless,
                args=BROWSER_ARGS,
            )
            try:
                context = browser.new_context(
                    user_agent=self.config.user_agent,
                    extra_http_headers=self.config.extra_headers,
                    viewport={"width": 1920, "height": 1080},
                )
                page = context.new_page()
                page.set_default_timeout(self.config.selector_timeout * 1000)
                yield page
            finally:
                browser.close()
                logger.debug("Browser session closed")

    def discover(self) -> List[CandidateMetadata]:
        """
        Scan the publisher page and return all spreadsheet candidates.

        Raises:
            DiscoveryFailure: page navigation or initial selector wait failed
        """
        url = self.config.source_url
        logger.info(f"Discovering dataset files on {url}")

        try:
            with self._browser_session() as page:
                page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=self.config.navigation_timeout * 1000,
                )
                page.wait_for_selector("a", timeout=self.config.selector_timeout * 1000)
                self.expand_collapsed_sections(page)
                candidates = self._collect_candidates(page)
        except PlaywrightError as e:
            raise DiscoveryFailure(url, str(e)) from e

        logger.info(f"Discovered {len(candidates)} candidate files")
        return candidates

    def expand_collapsed_sections(self, page) -> int:
        """Open every collapsed section, re-scanning since expansion can be partial."""
        for pass_number in range(self.config.max_expand_passes):
            collapsed = page.query_selector_all(COLLAPSED_SELECTOR)
            if not collapsed:
                return pass_number
            logger.debug(f"Expanding {len(collapsed)} collapsed sections (pass {pass_number + 1})")
            for section in collapsed:
                try:
                    section.click()
                except PlaywrightError as e:
                    logger.debug(f"Could not expand section: {e}")
                self._sleep(EXPAND_CLICK_DELAY)

        remaining = len(page.query_selector_all(COLLAPSED_SELECTOR))
        if remaining:
            logger.warning(f"{remaining} sections still collapsed after "
                           f"{self.config.max_expand_passes} passes")
        return self.config.max_expand_passes

    def _collect_candidates(self, page) -> List[CandidateMetadata]:
        links = page.query_selector_all(LINK_SELECTOR)
        logger.info(f"Found {len(links)} spreadsheet links")

        candidates: List[CandidateMetadata] = []
        seen_urls = set()
        for index, link in enumerate(links):
            if index:
                self._sleep(self.config.request_delay)
            try:
                candidate = self._extract_candidate(link)
            except Exception as e:
                logger.warning(f"Skipping link {index + 1}: {e}")
                continue

            if candidate is None or candidate.url in seen_urls:
                continue
            seen_urls.add(candidate.url)
            candidates.append(candidate)

        return candidates

    @staticmethod
    def _extract_candidate(link) -> Optional[CandidateMetadata]:
        href = link.evaluate("el => el.href")
        if not href:
            return None
        title = link.evaluate("el => (el.textContent || '').trim()")
        container_text = link.evaluate(CONTAINER_TEXT_JS)
        return build_candidate(href, title, container_text)


def filter_current_only(candidates: List[CandidateMetadata]) -> List[CandidateMetadata]:
    """Keep only the newest release of each document title."""
    latest: Dict[str, CandidateMetadata] = {}
    for candidate in candidates:
        key = base_title(candidate.title) or candidate.filename
        current = latest.get(key)
        if current is None or _newer(candidate, current):
            latest[key] = candidate
    return list(latest.values())


def _newer(a: CandidateMetadata, b: CandidateMetadata) -> bool:
    return (a.publish_date or "", a.version_label) > (b.publish_date or "", b.version_label)
