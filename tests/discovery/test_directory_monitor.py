"""
Tests for DirectoryMonitor against mocked directory listings.
"""

from datetime import date

import httpx
import pytest

from oekodata.discovery import DirectoryMonitor, months_to_scan
from oekodata.errors import DiscoveryFailure
from oekodata.settings import MonitorConfig

BASE = "https://files.example.org/files"

LISTING_DEC = """
<html><body>
<a href="/files/2024/12/03/3f2504e0-4f89-41d3-9a0c-0305e82c3301.xlsx">a</a>
<a href="/files/2024/12/17/9b2f1c7e-1a2b-4c3d-8e9f-0a1b2c3d4e5f.xlsx">b</a>
<a href="/files/2024/12/20/readme.pdf">readme</a>
<a href="/files/2024/12/21/not-a-uuid.xlsx">bad</a>
</body></html>
"""

LISTING_NOV = """
<a href="https://files.example.org/files/2024/11/28/aaaaaaaa-bbbb-4ccc-8ddd-eeeeeeeeeeee.xlsx">x</a>
"""


def make_monitor(listings):
    def handler(request):
        body = listings.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, text=body)

    return DirectoryMonitor(MonitorConfig(fileservice_url=BASE),
                            transport=httpx.MockTransport(handler))


class TestMonthsToScan:

    def test_current_and_previous(self):
        assert months_to_scan(date(2024, 12, 5)) == [(2024, 12), (2024, 11)]

    def test_january_wraps_to_december(self):
        assert months_to_scan(date(2025, 1, 2)) == [(2025, 1), (2024, 12)]


class TestDirectoryMonitor:

    def test_returns_greatest_matching_url(self):
        monitor = make_monitor({
            f"{BASE}/2024/12/": LISTING_DEC,
            f"{BASE}/2024/11/": LISTING_NOV,
        })
        latest = monitor.find_latest(date(2024, 12, 20))
        assert latest == (
            "https://files.example.org/files/2024/12/17/"
            "9b2f1c7e-1a2b-4c3d-8e9f-0a1b2c3d4e5f.xlsx"
        )

    def test_falls_back_to_previous_month(self):
        monitor = make_monitor({f"{BASE}/2024/11/": LISTING_NOV})
        latest = monitor.find_latest(date(2024, 12, 1))
        assert latest.endswith("2024/11/28/aaaaaaaa-bbbb-4ccc-8ddd-eeeeeeeeeeee.xlsx")

    def test_previous_year_scanned_in_january(self):
        monitor = make_monitor({f"{BASE}/2024/12/": LISTING_DEC})
        assert monitor.find_latest(date(2025, 1, 3)) is not None

    def test_nothing_found_returns_none(self):
        monitor = make_monitor({})
        assert monitor.find_latest(date(2024, 12, 1)) is None

    def test_non_matching_links_ignored(self):
        links = DirectoryMonitor.parse_listing(LISTING_DEC, f"{BASE}/2024/12/")
        assert len(links) == 2
        assert all(link.endswith(".xlsx") for link in links)

    def test_candidate_from_url(self):
        url = f"{BASE}/2024/12/17/9b2f1c7e-1a2b-4c3d-8e9f-0a1b2c3d4e5f.xlsx"
        candidate = DirectoryMonitor.candidate_from_url(url)
        assert candidate.publish_date == "2024-12-17"
        assert candidate.filename == "9b2f1c7e-1a2b-4c3d-8e9f-0a1b2c3d4e5f.xlsx"
        assert candidate.version_label == ""

    def test_timeout_raises_discovery_failure(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        monitor = DirectoryMonitor(MonitorConfig(fileservice_url=BASE),
                                   transport=httpx.MockTransport(handler))

        with pytest.raises(DiscoveryFailure) as exc_info:
            monitor.find_latest(date(2024, 12, 20))
        assert exc_info.value.url == f"{BASE}/2024/12/"

    def test_server_error_raises_discovery_failure(self):
        monitor = DirectoryMonitor(
            MonitorConfig(fileservice_url=BASE),
            transport=httpx.MockTransport(lambda request: httpx.Response(503)))

        with pytest.raises(DiscoveryFailure):
            monitor.find_latest(date(2024, 12, 20))
