# Oekodata - Page Text Parsing
# ============================
# Extraction of version labels, dates and sizes from publisher page text
"""
Text helpers used by the crawler to describe a candidate file.

The publisher page lists each workbook as a link followed by a size token
("XLSX596.00 kB") and a trailing German date ("3. Dezember 2024"). Version
labels appear either as a series label ("2022/1:2022, Version 5") or as a
bare "Version 6.2".
"""

import os
import re
from datetime import date
from typing import Optional
from urllib.parse import unquote, urlparse

from .models import CandidateMetadata

# Series label, optionally followed by ", Version N"
SERIES_LABEL_PATTERN = re.compile(
    r'\d{4}/\d+:\d{4}(?:\s*,\s*Version\s+\d+(?:\.\d+)*)?',
    re.IGNORECASE
)
VERSION_PATTERN = re.compile(r'Version\s+(\d+(?:\.\d+)*)', re.IGNORECASE)
FILE_SIZE_PATTERN = re.compile(r'XLSX?\s*(\d+(?:[.,]\d+)?)\s*(kB|MB)', re.IGNORECASE)
TRAILING_DATE_PATTERN = re.compile(r'(\d{1,2})\.\s*(\S+)\s+(\d{4})\s*$')
SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")

MONTHS = {
    # German
    "januar": 1, "jänner": 1, "februar": 2, "märz": 3, "mã¤rz": 3, "maerz": 3,
    "april": 4, "mai": 5, "juni": 6, "juli": 7, "august": 8,
    "september": 9, "oktober": 10, "november": 11, "dezember": 12,
    # French
    "janvier": 1, "février": 2, "fevrier": 2, "mars": 3, "avril": 4,
    "juin": 6, "juillet": 7, "août": 8, "aout": 8, "septembre": 9,
    "octobre": 10, "novembre": 11, "décembre": 12, "decembre": 12,
}


def extract_version_label(text: Optional[str]) -> str:
    """
    Find the version label in link or container text.

    Returns the full series label when present ("2024/1:2024, Version 5"),
    otherwise the number from "Version N" ("6.2"), otherwise "".
    """
    if not text:
        return ""
    series = SERIES_LABEL_PATTERN.search(text)
    if series:
        return re.sub(r'\s+', ' ', series.group(0)).strip()
    version = VERSION_PATTERN.search(text)
    if version:
        return version.group(1)
    return ""


def parse_publish_date(text: Optional[str]) -> Optional[str]:
    """Parse a trailing "D. Monat YYYY" date into ISO form, None if absent."""
    if not text:
        return None
    match = TRAILING_DATE_PATTERN.search(text.strip())
    if not match:
        return None
    day, month_name, year = match.groups()
    month = MONTHS.get(month_name.lower().rstrip(","))
    if month is None:
        return None
    try:
        return date(int(year), month, int(day)).isoformat()
    except ValueError:
        return None


def extract_file_size(text: Optional[str]) -> str:
    if not text:
        return ""
    match = FILE_SIZE_PATTERN.search(text)
    if not match:
        return ""
    return f"{match.group(1)} {match.group(2)}"


def is_spreadsheet_url(url: Optional[str]) -> bool:
    if not url:
        return False
    return urlparse(url).path.lower().endswith(SPREADSHEET_EXTENSIONS)


def filename_from_url(url: str) -> str:
    return unquote(os.path.basename(urlparse(url).path))


def sanitize_filename(filename: str) -> str:
    cleaned = re.sub(r'[/\\?%*:|"<>]', '-', filename)
    return re.sub(r'\s+', '_', cleaned).strip()


def versioned_filename(filename: str, version_label: str = "",
                       publish_date: Optional[str] = None) -> str:
    """Destination name embedding version and date, e.g. data_2024-1-2024_2024-12-03.xlsx"""
    base, ext = os.path.splitext(filename)
    safe_label = re.sub(r'[/\\:]', '-', version_label)
    version_part = f"_{safe_label}" if version_label else ""
    date_part = f"_{publish_date}" if publish_date else ""
    return sanitize_filename(f"{base}{version_part}{date_part}{ext}")


def base_title(title: str) -> str:
    """Title with the version number removed, used to group releases."""
    return VERSION_PATTERN.sub("", title).strip(" ,")


def build_candidate(href: str, title: str, container_text: str) -> Optional[CandidateMetadata]:
    """Assemble candidate metadata from a link and its surrounding text."""
    if not is_spreadsheet_url(href):
        return None
    title = (title or "").strip()
    container_text = (container_text or "").strip()
    return CandidateMetadata(
        url=href,
        title=title,
        version_label=extract_version_label(title) or extract_version_label(container_text),
        file_size_text=extract_file_size(container_text),
        publish_date=parse_publish_date(container_text),
        filename=filename_from_url(href),
    )
