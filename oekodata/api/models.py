# Oekodata API Models
# ===================
"""Pydantic models for API requests and responses."""

from datetime import date, datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


# ============================================
# Base Response Models
# ============================================

class MetaInfo(BaseModel):
    """Response metadata."""
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    count: Optional[int] = None


class ErrorDetail(BaseModel):
    """Error details."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class APIResponse(BaseModel):
    """Standard API response wrapper."""
    success: bool = True
    data: Optional[Any] = None
    error: Optional[ErrorDetail] = None
    meta: MetaInfo = Field(default_factory=MetaInfo)


def ok(data: Any = None, count: Optional[int] = None) -> Dict[str, Any]:
    return APIResponse(data=data, meta=MetaInfo(count=count)).model_dump()


def failure(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return APIResponse(
        success=False,
        error=ErrorDetail(code=code, message=message, details=details),
    ).model_dump()


# ============================================
# Requests
# ============================================

class DecisionRequest(BaseModel):
    """Approve or reject the pending version."""
    action: Literal["approve", "reject"] = Field(..., description="Decision to apply")
    version: str = Field(..., min_length=1, description="Version label the decision is for")
    user: str = Field(default="operator", description="Who made the decision")
    force: bool = Field(default=False, description="Re-ingest a label already in history")


class MonitorRequest(BaseModel):
    """Optional date override for the directory monitor."""
    today: Optional[date] = Field(default=None, description="ISO date used instead of today")
