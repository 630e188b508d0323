# Oekodata - Directory Monitor
# ============================
# Lightweight check of the publisher's file-server directory listings
"""
Directory monitor for the KBOB file service.

Uploaded files land under <base>/YYYY/MM/DD/<uuid>.xlsx, so probing the
listing of the current and previous month is enough to notice a new upload
without running a browser.
"""

import logging
import re
from datetime import date
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from ..errors import DiscoveryFailure
from ..settings import MonitorConfig
from .models import CandidateMetadata
from .text_parsing import filename_from_url

logger = logging.getLogger(__name__)

FILE_PATTERN = re.compile(
    r'/(\d{4})/(\d{2})/(\d{2})/'
    r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\.xlsx$',
    re.IGNORECASE
)


def months_to_scan(today: date, months_back: int = 1) -> List[Tuple[int, int]]:
    """(year, month) pairs from the current month back, wrapping over January."""
    year, month = today.year, today.month
    result = []
    for _ in range(months_back + 1):
        result.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return result


class DirectoryMonitor:
    """
    Finds the newest workbook on the file server.

    Example:
        monitor = DirectoryMonitor(MonitorConfig.from_env())
        latest = monitor.find_latest()
    """

    def __init__(self, config: Optional[MonitorConfig] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.config = config or MonitorConfig()
        self._transport = transport

    def directory_url(self, year: int, month: int) -> str:
        return f"{self.config.fileservice_url.rstrip('/')}/{year}/{month:02d}/"

    def find_latest(self, today: Optional[date] = None) -> Optional[str]:
        """
        Return the greatest matching file URL, or None if nothing was found.

        Months without a listing (404) are skipped.

        Raises:
            DiscoveryFailure: the file server timed out, was unreachable or
                answered with another error status
        """
        today = today or date.today()
        matches: List[str] = []

        with httpx.Client(timeout=self.config.http_timeout,
                          follow_redirects=True,
                          transport=self._transport) as client:
            for year, month in months_to_scan(today, self.config.months_back):
                url = self.directory_url(year, month)
                try:
                    response = client.get(url)
                    if response.status_code == 404:
                        logger.info(f"No listing for {year}/{month:02d}")
                        continue
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    raise DiscoveryFailure(url, str(e)) from e
                found = self.parse_listing(response.text, url)
                logger.debug(f"{len(found)} files listed under {year}/{month:02d}")
                matches.extend(found)

        if not matches:
            logger.info("Directory monitor found no dataset files")
            return None
        latest = max(matches)
        logger.info(f"Latest file on server: {latest}")
        return latest

    @staticmethod
    def parse_listing(html: str, base_url: str) -> List[str]:
        soup = BeautifulSoup(html, "html.parser")
        links: Iterable[str] = (
            urljoin(base_url, a["href"]) for a in soup.find_all("a", href=True)
        )
        return sorted({link for link in links if FILE_PATTERN.search(link)})

    @staticmethod
    def candidate_from_url(url: str) -> CandidateMetadata:
        """Candidate metadata for a file-server URL; the date comes from the path."""
        match = FILE_PATTERN.search(url)
        publish_date = "-".join(match.groups()) if match else None
        return CandidateMetadata(
            url=url,
            title=filename_from_url(url),
            publish_date=publish_date,
            filename=filename_from_url(url),
        )
