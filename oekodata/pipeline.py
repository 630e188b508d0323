# Oekodata - Version Pipeline
# ===========================
# Orchestrates discovery, normalization, staging and decisions
"""
Dataset version pipeline.

One sequential flow:
    discover -> compare -> download -> normalize -> stage -> (decision) -> promote

Discovery, download and normalization run without holding the lock. The
comparison is repeated under the lock right before staging, so two passes
that find the same new release leave exactly one pending version. Errors
from discovery or ingestion become an operator notification and a FAILED
result; they never escape a scheduled run.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .discovery import (
    CandidateDownloader,
    CandidateMetadata,
    CandidateSource,
    DirectoryMonitor,
    PublisherCrawler,
)
from .errors import DownloadFailure, PipelineError
from .ingest import Material, SheetNormalizer
from .notify import LogNotifier, NotificationGateway, SlackWebhookNotifier
from .settings import PipelineConfig, get_config
from .versions import (
    ApprovalOutcome,
    ApprovalWorkflow,
    MONITORED_URL_KEY,
    VersionStatus,
    VersionedStore,
    compare,
    pick_latest_candidate,
)

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    NEW_PENDING = "new_pending"
    ALREADY_PENDING = "already_pending"
    REFUSED = "refused"            # another version is pending and policy keeps it
    UNCHANGED = "unchanged"
    INGESTED = "ingested"          # promoted directly (local ingest)
    NO_CANDIDATES = "no_candidates"
    FAILED = "failed"


@dataclass
class CheckResult:
    """Outcome of one pipeline pass."""
    status: CheckStatus
    version_label: Optional[str] = None
    materials_count: Optional[int] = None
    message: str = ""
    superseded_label: Optional[str] = None
    timestamp: str = field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%S"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'version': self.version_label,
            'materials_count': self.materials_count,
            'message': self.message,
            'superseded': self.superseded_label,
            'timestamp': self.timestamp,
        }


@dataclass
class MonitorResult:
    """Outcome of a directory monitor scan."""
    changed: bool
    latest_url: Optional[str] = None
    previous_url: Optional[str] = None
    check: Optional[CheckResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'changed': self.changed,
            'latest_url': self.latest_url,
            'previous_url': self.previous_url,
            'check': self.check.to_dict() if self.check else None,
        }


class VersionPipeline:
    """
    Single entry point for scheduled checks and operator decisions.

    Example:
        pipeline = VersionPipeline.from_config()
        result = pipeline.run_check()
        if result.status == CheckStatus.NEW_PENDING:
            pipeline.approve(result.version_label, user="alice")
    """

    def __init__(self, store: VersionedStore, notifier: NotificationGateway,
                 source: CandidateSource, downloader: CandidateDownloader,
                 normalizer: Optional[SheetNormalizer] = None,
                 monitor: Optional[DirectoryMonitor] = None,
                 config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.store = store
        self.notifier = notifier
        self.source = source
        self.downloader = downloader
        self.normalizer = normalizer or SheetNormalizer(strict_layout=self.config.strict_layout)
        self.monitor = monitor
        self.lock = threading.RLock()
        self.workflow = ApprovalWorkflow(
            store, notifier,
            supersede_policy=self.config.supersede_policy,
            preview_count=self.config.preview_count,
            promote_retries=self.config.promote_retries,
            lock=self.lock,
        )

    @classmethod
    def from_config(cls, config: Optional[PipelineConfig] = None) -> "VersionPipeline":
        config = config or get_config()
        if config.slack_webhook_url:
            notifier: NotificationGateway = SlackWebhookNotifier(
                config.slack_webhook_url, timeout=config.notify_timeout)
        else:
            notifier = LogNotifier()
        return cls(
            store=VersionedStore(config.db_path),
            notifier=notifier,
            source=PublisherCrawler(config.crawler),
            downloader=CandidateDownloader(config.crawler),
            monitor=DirectoryMonitor(config.monitor),
            config=config,
        )

    # ------------------------------------------------------------------
    # Scheduled check
    # ------------------------------------------------------------------

    def run_check(self) -> CheckResult:
        """Discover the latest release and stage it when it is new."""
        logger.info("Starting version check")
        try:
            candidates = self.source.discover()
            candidate = pick_latest_candidate(candidates)
            if candidate is None:
                message = "No dataset files found on the publisher page"
                logger.warning(message)
                self._notify(f"Version check: {message}. The page layout may have changed.")
                return CheckResult(CheckStatus.NO_CANDIDATES, message=message)

            early = self._precheck(candidate)
            if early is not None:
                return early

            path = self.downloader.download(candidate)
            materials = self.normalizer.normalize(self._read_file(path, candidate.url))
            return self._stage(candidate, materials, str(path))

        except PipelineError as e:
            logger.error(f"Version check failed: {e}")
            self._notify(f"KBOB version check failed ({type(e).__name__}): {e}")
            return CheckResult(CheckStatus.FAILED, message=str(e))

    def _precheck(self, candidate: CandidateMetadata) -> Optional[CheckResult]:
        """Skip the download when the candidate is current or already pending."""
        status = compare(candidate, self.store.current_label())
        label = candidate.version_label
        if status == VersionStatus.UNCHANGED:
            logger.info(f"Version '{label}' is current, nothing to do")
            return CheckResult(CheckStatus.UNCHANGED, label, message="Already current")

        pending = self.store.get_pending()
        if pending is not None and pending.version_label == label:
            logger.info(f"Version '{label}' is already awaiting approval")
            return CheckResult(CheckStatus.ALREADY_PENDING, label, len(pending.materials),
                               message="Awaiting approval")
        return None

    def _stage(self, candidate: CandidateMetadata, materials: List[Material],
               source_path: Optional[str], force: bool = False) -> CheckResult:
        label = candidate.version_label
        with self.lock:
            if not force and compare(candidate, self.store.current_label()) == VersionStatus.UNCHANGED:
                return CheckResult(CheckStatus.UNCHANGED, label, message="Already current")
            staged = self.workflow.stage(candidate, materials, source_path)

        if staged.reason == "already_pending":
            status = CheckStatus.ALREADY_PENDING
        elif staged.reason == "refused":
            status = CheckStatus.REFUSED
        else:
            status = CheckStatus.NEW_PENDING
        return CheckResult(status, label, len(materials),
                           message=staged.reason, superseded_label=staged.superseded_label)

    @staticmethod
    def _read_file(path: Path, url: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise DownloadFailure(url, f"cannot read {path}: {e}") from e

    def _notify(self, text: str) -> bool:
        try:
            return self.notifier.send(text)
        except Exception as e:
            logger.error(f"Notification gateway raised: {e}")
            return False

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def approve(self, label: str, user: str = "operator", force: bool = False) -> ApprovalOutcome:
        return self.workflow.approve(label, user=user, force=force)

    def reject(self, label: str, user: str = "operator") -> ApprovalOutcome:
        return self.workflow.reject(label, user=user)

    def decide(self, action: str, label: str, user: str = "operator") -> ApprovalOutcome:
        if action == "approve":
            return self.approve(label, user)
        if action == "reject":
            return self.reject(label, user)
        raise ValueError(f"Unknown decision '{action}'")

    # ------------------------------------------------------------------
    # Directory monitor
    # ------------------------------------------------------------------

    def run_monitor(self, today: Optional[date] = None) -> MonitorResult:
        """
        Scan the file server; a new file triggers a full version check.

        The URL is only recorded once its check did not fail, so a failed
        pass is repeated on the next scan.
        """
        if self.monitor is None:
            raise RuntimeError("No directory monitor configured")

        previous = self.store.get_value(MONITORED_URL_KEY)
        try:
            latest = self.monitor.find_latest(today)
        except PipelineError as e:
            logger.error(f"Directory monitor failed: {e}")
            self._notify(f"KBOB directory monitor failed ({type(e).__name__}): {e}")
            return MonitorResult(False, previous_url=previous,
                                 check=CheckResult(CheckStatus.FAILED, message=str(e)))

        if latest is None or latest == previous:
            return MonitorResult(False, latest, previous)

        logger.info(f"New file on server: {latest} (previous: {previous})")
        self._notify(
            f"New KBOB file detected on the file server.\n"
            f"New URL: {latest}\nPrevious URL: {previous or '-'}\n"
            f"Running a version check..."
        )
        check = self.run_check()
        if check.status != CheckStatus.FAILED:
            self.store.set_value(MONITORED_URL_KEY, latest)
        return MonitorResult(True, latest, previous, check)

    # ------------------------------------------------------------------
    # Manual ingestion
    # ------------------------------------------------------------------

    def ingest_local(self, path: str, version_label: str,
                     publish_date: Optional[str] = None,
                     url: Optional[str] = None,
                     auto_approve: bool = False,
                     force: bool = False) -> CheckResult:
        """
        Ingest a workbook from disk under an explicit version label.

        Without auto_approve the file is staged for approval like a
        discovered release; with it the version is promoted immediately.
        force re-ingests a label that is already in history (auto_approve)
        or stages it even when it is the current version.
        Errors propagate to the caller.
        """
        file_path = Path(path)
        candidate = CandidateMetadata(
            url=url or file_path.resolve().as_uri(),
            title=file_path.name,
            version_label=version_label,
            publish_date=publish_date,
            filename=file_path.name,
        )
        materials = self.normalizer.normalize(self._read_file(file_path, candidate.url))

        if auto_approve:
            with self.lock:
                result = self.store.promote(version_label, materials, {
                    'publish_date': publish_date,
                    'url': candidate.url,
                    'filename': candidate.filename,
                }, force=force)
            if not result.created:
                return CheckResult(CheckStatus.UNCHANGED, version_label, len(materials),
                                   message="Label already ingested")
            self._notify(f"Version '{version_label}' ingested from {file_path.name} "
                         f"({len(materials)} materials).")
            return CheckResult(CheckStatus.INGESTED, version_label, len(materials),
                               message="replaced" if result.replaced else "")

        if not force and compare(candidate, self.store.current_label()) == VersionStatus.UNCHANGED:
            return CheckResult(CheckStatus.UNCHANGED, version_label, message="Already current")
        return self._stage(candidate, materials, str(file_path), force=force)

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------

    def run_forever(self, interval: Optional[float] = None,
                    use_monitor: bool = False,
                    max_iterations: Optional[int] = None,
                    sleep: Callable[[float], None] = time.sleep) -> None:
        """Run checks on a fixed interval; exceptions are logged, never raised."""
        interval = interval or self.config.check_interval
        iteration = 0
        while max_iterations is None or iteration < max_iterations:
            iteration += 1
            try:
                if use_monitor and self.monitor is not None:
                    self.run_monitor()
                else:
                    self.run_check()
            except Exception:
                logger.exception("Scheduled run failed")
            if max_iterations is None or iteration < max_iterations:
                sleep(interval)
