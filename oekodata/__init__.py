# Oekodata - KBOB Dataset Version Pipeline
# ========================================
"""
Discovers, normalizes, stages and promotes releases of the KBOB
"Ökobilanzdaten im Baubereich" dataset into a versioned store.
"""

from .errors import (
    PipelineError,
    DiscoveryFailure,
    VersionLabelMissing,
    DownloadFailure,
    SpreadsheetError,
    SheetNotFound,
    HeaderNotFound,
    ParseFailure,
    VersionMismatch,
    NoPendingVersion,
    VersionNotFound,
    StoreWriteFailure,
)
from .pipeline import VersionPipeline, CheckResult, CheckStatus, MonitorResult

__version__ = "1.0.0"

__all__ = [
    # Errors
    'PipelineError',
    'DiscoveryFailure',
    'VersionLabelMissing',
    'DownloadFailure',
    'SpreadsheetError',
    'SheetNotFound',
    'HeaderNotFound',
    'ParseFailure',
    'VersionMismatch',
    'NoPendingVersion',
    'VersionNotFound',
    'StoreWriteFailure',
    # Pipeline
    'VersionPipeline',
    'CheckResult',
    'CheckStatus',
    'MonitorResult',
]
