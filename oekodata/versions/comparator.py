# Oekodata - Version Comparator
# =============================
"""Decides whether a discovered candidate is a new release."""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from ..discovery.models import CandidateMetadata
from ..errors import VersionLabelMissing

logger = logging.getLogger(__name__)


class VersionStatus(str, Enum):
    NEW = "new"
    UNCHANGED = "unchanged"


def compare(candidate: CandidateMetadata, current_label: Optional[str]) -> VersionStatus:
    """
    NEW when nothing is current yet or the labels differ (exact match).

    Raises:
        VersionLabelMissing: candidate label could not be extracted
    """
    if not candidate.has_label:
        raise VersionLabelMissing(candidate.url, candidate.title)
    if not current_label:
        return VersionStatus.NEW
    if candidate.version_label != current_label:
        return VersionStatus.NEW
    return VersionStatus.UNCHANGED


def version_sort_key(label: Optional[str], publish_date: Optional[str]) -> Tuple[int, str, str]:
    """Publish date first; versions without a date sort before dated ones."""
    return (1 if publish_date else 0, publish_date or "", label or "")


def pick_latest_candidate(candidates: List[CandidateMetadata]) -> Optional[CandidateMetadata]:
    """The most recently published candidate (label breaks ties)."""
    if not candidates:
        return None
    return max(candidates, key=lambda c: version_sort_key(c.version_label, c.publish_date))
