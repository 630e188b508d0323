# Oekodata - Pipeline Errors
# ==========================
# Error taxonomy shared by discovery, ingestion and the version store
"""
Exceptions raised by the dataset version pipeline.

Every error derives from PipelineError so the scheduled job loop can catch
the whole family, turn it into an operator notification and carry on.
Messages are written for the operator reading them in Slack.
"""

from typing import List, Optional


class PipelineError(Exception):
    """Base exception for all pipeline errors."""
    pass


class DiscoveryFailure(PipelineError):
    """Raised when the publisher page cannot be loaded or scanned."""

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        super().__init__(
            f"Could not scan the publisher page at {url}. "
            f"Reason: {reason or 'Unknown'}. "
            "The next scheduled run will try again."
        )


class VersionLabelMissing(PipelineError):
    """Raised when a candidate has no resolvable version label."""

    def __init__(self, url: str, title: Optional[str] = None):
        self.url = url
        self.title = title
        super().__init__(
            f"Found a dataset file without a recognisable version label: "
            f"{title or url}. The page layout may have changed; "
            "please check the source manually."
        )


class DownloadFailure(PipelineError):
    """Raised when a candidate file cannot be downloaded or saved."""

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        super().__init__(
            f"Download of {url} failed. "
            f"Reason: {reason or 'Unknown'}."
        )


class SpreadsheetError(PipelineError):
    """Base exception for structural problems in a source workbook."""
    pass


class SheetNotFound(SpreadsheetError):
    """Raised when no worksheet matches the expected dataset sheet names."""

    def __init__(self, available: List[str], expected: List[str]):
        self.available = available
        self.expected = expected
        super().__init__(
            f"No worksheet matching {', '.join(expected)} was found. "
            f"Sheets in the workbook: {', '.join(available) or '(none)'}."
        )


class HeaderNotFound(SpreadsheetError):
    """Raised when the header row is missing or does not match the column table."""

    def __init__(self, message: str, mismatches: Optional[List[str]] = None):
        self.mismatches = mismatches or []
        detail = ""
        if self.mismatches:
            detail = " Mismatches: " + "; ".join(self.mismatches)
        super().__init__(f"{message}.{detail}")


class ParseFailure(SpreadsheetError):
    """Raised when a workbook cannot be read or yields no usable rows."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Spreadsheet could not be parsed: {reason}")


class VersionMismatch(PipelineError):
    """Raised when a decision names a different version than the staged one."""

    def __init__(self, staged: str, requested: str):
        self.staged = staged
        self.requested = requested
        super().__init__(
            f"Decision for version '{requested}' does not match the pending "
            f"version '{staged}'. Nothing was changed."
        )


class NoPendingVersion(PipelineError):
    """Raised when a decision arrives while nothing is staged."""

    def __init__(self, requested: Optional[str] = None):
        self.requested = requested
        super().__init__(
            f"No version is waiting for approval"
            + (f" (decision was for '{requested}')" if requested else "")
            + "."
        )


class VersionNotFound(PipelineError):
    """Raised when a version label is not present in the store."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Version '{label}' is not in the store.")


class StoreWriteFailure(PipelineError):
    """Raised when a promotion could not be committed."""

    def __init__(self, label: str, reason: Optional[str] = None):
        self.label = label
        self.reason = reason
        super().__init__(
            f"Could not promote version '{label}'. "
            f"Reason: {reason or 'Unknown'}. "
            "The previous current version is still being served."
        )
