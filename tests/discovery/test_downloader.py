"""
Tests for CandidateDownloader.
"""

import httpx
import pytest

from oekodata.discovery import CandidateDownloader
from oekodata.errors import DownloadFailure
from oekodata.settings import CrawlerConfig


def make_downloader(temp_dir, handler, sleeps=None):
    config = CrawlerConfig(download_dir=temp_dir, download_delay=3.0)
    return CandidateDownloader(
        config,
        sleep=(sleeps.append if sleeps is not None else lambda s: None),
        transport=httpx.MockTransport(handler),
    )


class TestCandidateDownloader:

    def test_downloads_to_versioned_filename(self, temp_dir, make_candidate):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, content=b"xlsx-bytes")

        sleeps = []
        downloader = make_downloader(temp_dir, handler, sleeps)
        path = downloader.download(make_candidate())

        assert path.name == "kbob_2024-1-2024,_Version_5_2024-12-03.xlsx"
        assert path.read_bytes() == b"xlsx-bytes"
        assert len(requests) == 1
        assert "Mozilla" in requests[0].headers["user-agent"]
        assert sleeps == [3.0]

    def test_existing_file_is_not_downloaded_again(self, temp_dir, make_candidate):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, content=b"data")

        downloader = make_downloader(temp_dir, handler)
        first = downloader.download(make_candidate())
        second = downloader.download(make_candidate())

        assert first == second
        assert len(calls) == 1

    def test_http_error_raises_download_failure(self, temp_dir, make_candidate):
        downloader = make_downloader(temp_dir, lambda request: httpx.Response(404))

        with pytest.raises(DownloadFailure) as exc_info:
            downloader.download(make_candidate())

        assert exc_info.value.url.endswith("kbob.xlsx")
        assert not downloader.destination_for(make_candidate()).exists()

    def test_network_error_raises_download_failure(self, temp_dir, make_candidate):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DownloadFailure):
            make_downloader(temp_dir, handler).download(make_candidate())
