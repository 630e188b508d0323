# Oekodata API - Pipeline Router
# ==============================
"""Operator endpoints: trigger checks, inspect and decide the pending version."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ...pipeline import VersionPipeline
from ...versions import LAST_INGESTION_KEY, MONITORED_URL_KEY
from ..dependencies import get_pipeline
from ..models import DecisionRequest, MonitorRequest, ok

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/pending")
def pending_version(pipeline: VersionPipeline = Depends(get_pipeline)):
    """Summary of the staged version, or null."""
    pending = pipeline.store.get_pending()
    return ok(pending.summary() if pending else None)


@router.get("/status")
def pipeline_status(pipeline: VersionPipeline = Depends(get_pipeline)):
    store = pipeline.store
    return ok({
        'state': pipeline.workflow.state.value,
        'current_version': store.current_label(),
        'last_ingestion': store.get_value(LAST_INGESTION_KEY),
        'monitored_url': store.get_value(MONITORED_URL_KEY),
    })


@router.post("/check")
def trigger_check(pipeline: VersionPipeline = Depends(get_pipeline)):
    """Run a discovery pass now."""
    result = pipeline.run_check()
    return ok(result.to_dict())


@router.post("/monitor")
def trigger_monitor(request: Optional[MonitorRequest] = None,
                    pipeline: VersionPipeline = Depends(get_pipeline)):
    """Scan the file server; a new file triggers a discovery pass."""
    result = pipeline.run_monitor(request.today if request else None)
    return ok(result.to_dict())


@router.post("/decision")
def submit_decision(request: DecisionRequest,
                    pipeline: VersionPipeline = Depends(get_pipeline)):
    """Approve or reject the pending version by label."""
    logger.info(f"Decision '{request.action}' for '{request.version}' by {request.user}")
    if request.action == "approve":
        outcome = pipeline.approve(request.version, user=request.user, force=request.force)
    else:
        outcome = pipeline.reject(request.version, user=request.user)
    return ok(outcome.to_dict())
