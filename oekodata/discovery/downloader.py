# Oekodata - Candidate Downloader
# ===============================
"""
Downloads candidate workbooks into the download directory.

Downloads are idempotent by destination filename: a file that is already on
disk is reused without touching the network.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

import httpx

from ..errors import DownloadFailure
from ..settings import CrawlerConfig
from .models import CandidateMetadata
from .text_parsing import filename_from_url, versioned_filename

logger = logging.getLogger(__name__)


class CandidateDownloader:
    """Fetches candidate files over HTTP with a politeness delay."""

    def __init__(self, config: Optional[CrawlerConfig] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 transport: Optional[httpx.BaseTransport] = None):
        self.config = config or CrawlerConfig()
        self._sleep = sleep
        self._transport = transport

    def destination_for(self, candidate: CandidateMetadata) -> Path:
        filename = candidate.filename or filename_from_url(candidate.url)
        name = versioned_filename(filename, candidate.version_label, candidate.publish_date)
        return Path(self.config.download_dir) / name

    def download(self, candidate: CandidateMetadata) -> Path:
        """
        Download the candidate file and return its local path.

        Raises:
            DownloadFailure: network error, bad status or local write error
        """
        target = self.destination_for(candidate)
        if target.exists() and target.stat().st_size > 0:
            logger.info(f"File already downloaded: {target.name}")
            return target

        self._sleep(self.config.download_delay)
        logger.info(f"Downloading {candidate.url} -> {target.name}")

        tmp_path = target.with_name(target.name + ".part")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with httpx.Client(
                timeout=self.config.http_timeout,
                headers={"User-Agent": self.config.user_agent, **self.config.extra_headers},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                with client.stream("GET", candidate.url) as response:
                    response.raise_for_status()
                    with open(tmp_path, "wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
            tmp_path.replace(target)
        except httpx.HTTPError as e:
            tmp_path.unlink(missing_ok=True)
            raise DownloadFailure(candidate.url, str(e)) from e
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise DownloadFailure(candidate.url, f"could not write {target}: {e}") from e

        logger.info(f"Saved {target.stat().st_size} bytes to {target}")
        return target
