# Oekodata Discovery Module
"""
Discovery of new dataset releases: the browser crawler for the publisher
page, the file-server directory monitor and the downloader.
"""

from .models import CandidateMetadata
from .text_parsing import (
    extract_version_label,
    parse_publish_date,
    extract_file_size,
    is_spreadsheet_url,
    filename_from_url,
    sanitize_filename,
    versioned_filename,
    build_candidate,
)
from .downloader import CandidateDownloader
from .crawler import CandidateSource, PublisherCrawler, filter_current_only
from .directory_monitor import DirectoryMonitor, months_to_scan

__all__ = [
    # Models
    'CandidateMetadata',
    # Text parsing
    'extract_version_label',
    'parse_publish_date',
    'extract_file_size',
    'is_spreadsheet_url',
    'filename_from_url',
    'sanitize_filename',
    'versioned_filename',
    'build_candidate',
    # Fetching
    'CandidateDownloader',
    'CandidateSource',
    'PublisherCrawler',
    'filter_current_only',
    'DirectoryMonitor',
    'months_to_scan',
]
