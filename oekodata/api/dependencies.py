# Oekodata API - Dependencies
# ===========================
"""Shared pipeline instance for request handlers."""

import threading
from typing import Optional

from ..pipeline import VersionPipeline

_pipeline: Optional[VersionPipeline] = None
_pipeline_lock = threading.Lock()


def get_pipeline() -> VersionPipeline:
    """Get the process-wide pipeline, building it from configuration on first use."""
    global _pipeline
    if _pipeline is None:
        with _pipeline_lock:
            if _pipeline is None:
                _pipeline = VersionPipeline.from_config()
    return _pipeline
