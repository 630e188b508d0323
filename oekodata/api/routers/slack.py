# Oekodata API - Slack Router
# ===========================
"""Receives button clicks from the approval message."""

import json
import logging

from fastapi import APIRouter, Depends, Form
from fastapi.responses import JSONResponse

from ...errors import PipelineError
from ...notify import parse_interaction_payload
from ...pipeline import VersionPipeline
from ..dependencies import get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/interactive")
def slack_interactive(payload: str = Form(...),
                      pipeline: VersionPipeline = Depends(get_pipeline)):
    """Apply an approve/reject button press and replace the original message."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return JSONResponse({"error": "Invalid payload"}, status_code=400)

    decision = parse_interaction_payload(data)
    if decision is None:
        return JSONResponse({"error": "Unsupported interaction"}, status_code=400)

    verb = "approved" if decision.action == "approve" else "rejected"
    try:
        pipeline.decide(decision.action, decision.version_label, user=decision.user)
    except PipelineError as e:
        logger.error(f"Slack decision for '{decision.version_label}' failed: {e}")
        return {
            "text": f"Could not apply decision for version {decision.version_label}: {e}",
            "replace_original": False,
        }

    return {
        "text": f"KBOB data version {decision.version_label} has been {verb} by {decision.user}.",
        "replace_original": True,
    }
