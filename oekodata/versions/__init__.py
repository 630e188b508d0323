# Oekodata Versions Module
"""
Version handling: comparison of candidates, the versioned store, the
approval workflow and the diff tool.
"""

from .comparator import VersionStatus, compare, version_sort_key, pick_latest_candidate
from .store import (
    VersionedStore,
    Version,
    CurrentVersion,
    PendingVersion,
    PromoteResult,
    record_set_name,
    CURRENT_VERSION_KEY,
    PENDING_VERSION_KEY,
    MONITORED_URL_KEY,
    LAST_INGESTION_KEY,
)
from .approval import ApprovalWorkflow, ApprovalState, ApprovalOutcome, StageResult
from .diff import (
    VersionDiff,
    DiffResult,
    FieldChange,
    MaterialChange,
    FieldStatistic,
    diff_records,
    field_statistics,
    format_report,
)

__all__ = [
    # Comparator
    'VersionStatus',
    'compare',
    'version_sort_key',
    'pick_latest_candidate',
    # Store
    'VersionedStore',
    'Version',
    'CurrentVersion',
    'PendingVersion',
    'PromoteResult',
    'record_set_name',
    'CURRENT_VERSION_KEY',
    'PENDING_VERSION_KEY',
    'MONITORED_URL_KEY',
    'LAST_INGESTION_KEY',
    # Approval
    'ApprovalWorkflow',
    'ApprovalState',
    'ApprovalOutcome',
    'StageResult',
    # Diff
    'VersionDiff',
    'DiffResult',
    'FieldChange',
    'MaterialChange',
    'FieldStatistic',
    'diff_records',
    'field_statistics',
    'format_report',
]
