# Oekodata - Approval Workflow
# ============================
# Human-in-the-loop gate between a staged candidate and the current version
"""
Approval state machine for new dataset releases.

States: IDLE -> PENDING -> (PROMOTED | REJECTED) -> IDLE

The pending slot lives in the VersionedStore, so the state survives
restarts. All transitions run under one re-entrant lock that the pipeline
also holds while it compares and stages candidates.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..discovery.models import CandidateMetadata
from ..errors import NoPendingVersion, StoreWriteFailure, VersionMismatch
from ..ingest.models import Material
from ..ingest.sheet_normalizer import preview
from ..notify.slack import NotificationGateway, build_approval_blocks
from ..settings import SupersedePolicy
from .store import PendingVersion, PromoteResult, VersionedStore

logger = logging.getLogger(__name__)


class ApprovalState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    PROMOTED = "promoted"
    REJECTED = "rejected"


@dataclass
class StageResult:
    """Outcome of staging a candidate."""
    staged: bool
    version_label: str
    reason: str  # staged, already_pending, superseded, refused
    superseded_label: Optional[str] = None
    notified: bool = False


@dataclass
class ApprovalOutcome:
    """Outcome of an approve or reject decision."""
    state: ApprovalState
    version_label: str
    user: str
    promote_result: Optional[PromoteResult] = None
    notified: bool = False

    def to_dict(self):
        return {
            'state': self.state.value,
            'version': self.version_label,
            'user': self.user,
            'created': self.promote_result.created if self.promote_result else None,
            'materials_count': (self.promote_result.version.materials_count
                                if self.promote_result else None),
            'notified': self.notified,
        }


class ApprovalWorkflow:
    """
    Stages NEW candidates and applies operator decisions.

    Example:
        workflow = ApprovalWorkflow(store, notifier)
        workflow.stage(candidate, materials)
        workflow.approve(candidate.version_label, user="alice")
    """

    def __init__(self, store: VersionedStore, notifier: NotificationGateway,
                 supersede_policy: SupersedePolicy = SupersedePolicy.REPLACE,
                 preview_count: int = 3,
                 promote_retries: int = 3,
                 retry_delay: float = 1.0,
                 lock: Optional[threading.RLock] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.store = store
        self.notifier = notifier
        self.supersede_policy = supersede_policy
        self.preview_count = preview_count
        self.promote_retries = max(1, promote_retries)
        self.retry_delay = retry_delay
        self.lock = lock or threading.RLock()
        self._sleep = sleep

    @property
    def state(self) -> ApprovalState:
        return ApprovalState.PENDING if self.store.get_pending() else ApprovalState.IDLE

    def _notify(self, text: str, blocks: Optional[list] = None) -> bool:
        try:
            delivered = self.notifier.send(text, blocks)
        except Exception as e:
            logger.error(f"Notification gateway raised: {e}")
            return False
        if not delivered:
            logger.warning(f"Notification not delivered: {text}")
        return delivered

    # ------------------------------------------------------------------
    # IDLE -> PENDING
    # ------------------------------------------------------------------

    def stage(self, candidate: CandidateMetadata, materials: List[Material],
              source_path: Optional[str] = None) -> StageResult:
        """Persist a NEW candidate as pending and ask the operator to decide."""
        label = candidate.version_label

        with self.lock:
            current = self.store.get_pending()
            if current is not None and current.version_label == label:
                logger.info(f"Version '{label}' is already pending approval")
                return StageResult(False, label, reason="already_pending")

            superseded = None
            if current is not None:
                if self.supersede_policy == SupersedePolicy.KEEP_EXISTING:
                    logger.warning(f"Refusing '{label}' while '{current.version_label}' is pending")
                    notified = self._notify(
                        f"New version '{label}' was detected but '{current.version_label}' "
                        f"is still waiting for a decision. Approve or reject it first."
                    )
                    return StageResult(False, label, reason="refused",
                                       superseded_label=None, notified=notified)
                superseded = current.version_label

            pending = PendingVersion(candidate, materials, source_path=source_path)
            self.store.stage_pending(pending)

        if superseded:
            logger.warning(f"Pending version '{superseded}' superseded by '{label}'")
            self._notify(
                f"Pending version '{superseded}' was discarded: newer version "
                f"'{label}' replaces it and needs your decision."
            )

        blocks = build_approval_blocks(
            label, candidate.publish_date, len(materials),
            preview(materials, self.preview_count), candidate.url,
        )
        notified = self._notify(
            f"New KBOB version {label} detected ({len(materials)} materials). "
            f"Approve or reject ingestion.",
            blocks,
        )
        return StageResult(
            True, label,
            reason="superseded" if superseded else "staged",
            superseded_label=superseded,
            notified=notified,
        )

    # ------------------------------------------------------------------
    # PENDING -> PROMOTED / REJECTED
    # ------------------------------------------------------------------

    def _require_pending(self, label: str) -> PendingVersion:
        pending = self.store.get_pending()
        if pending is None:
            raise NoPendingVersion(label)
        if pending.version_label != label:
            raise VersionMismatch(pending.version_label, label)
        return pending

    def approve(self, label: str, user: str = "operator",
                force: bool = False) -> ApprovalOutcome:
        """
        Promote the pending version.

        Raises:
            NoPendingVersion: nothing is staged
            VersionMismatch: a different version is staged
            StoreWriteFailure: promotion failed after all retries; the
                pending version is kept so the decision can be repeated
        """
        with self.lock:
            pending = self._require_pending(label)
            metadata = {
                'publish_date': pending.candidate.publish_date,
                'url': pending.candidate.url,
                'filename': pending.candidate.filename,
            }

            result = None
            last_error: Optional[StoreWriteFailure] = None
            for attempt in range(1, self.promote_retries + 1):
                try:
                    result = self.store.promote(label, pending.materials, metadata, force=force)
                    break
                except StoreWriteFailure as e:
                    last_error = e
                    logger.warning(f"Promotion attempt {attempt}/{self.promote_retries} "
                                   f"for '{label}' failed: {e.reason}")
                    if attempt < self.promote_retries:
                        self._sleep(self.retry_delay)

            if result is None:
                self._notify(
                    f"Promotion of version '{label}' failed after {self.promote_retries} "
                    f"attempts: {last_error.reason}. The previous version is still served "
                    f"and '{label}' remains pending."
                )
                raise last_error

        if result.created:
            text = (f"Version '{label}' approved by {user}: "
                    f"{result.version.materials_count} materials are now live.")
        else:
            text = f"Version '{label}' was already ingested; nothing changed."
        logger.info(text)
        notified = self._notify(text)
        return ApprovalOutcome(ApprovalState.PROMOTED, label, user, result, notified)

    def reject(self, label: str, user: str = "operator") -> ApprovalOutcome:
        """Discard the pending version; the store's history is untouched."""
        with self.lock:
            self._require_pending(label)
            self.store.clear_pending()

        logger.info(f"Version '{label}' rejected by {user}")
        notified = self._notify(f"Version '{label}' was rejected by {user}. Pending data discarded.")
        return ApprovalOutcome(ApprovalState.REJECTED, label, user, notified=notified)
