"""
Oekodata API - FastAPI Application
==================================
HTTP access to the dataset version pipeline.

Features:
- Version history, current version and archived versions by label
- Diff between two promoted versions
- Operator endpoints to trigger checks and decide pending versions
- Slack interactive endpoint for approve/reject buttons
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import (
    NoPendingVersion,
    PipelineError,
    StoreWriteFailure,
    VersionMismatch,
    VersionNotFound,
)
from ..settings import get_config
from .models import failure
from .routers import pipeline, slack, versions

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    VersionNotFound: 404,
    NoPendingVersion: 404,
    VersionMismatch: 409,
    StoreWriteFailure: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"Oekodata API starting up (db: {config.db_path})")
    yield
    logger.info("Oekodata API shutting down")


app = FastAPI(
    title="Oekodata API",
    description="""
## KBOB dataset version pipeline

- **Versions**: history, current version, archived versions, diffs
- **Pipeline**: trigger discovery, inspect and decide the pending version
- **Slack**: interactive approve/reject buttons
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost,http://localhost:3000").split(",")
_cors_origins = [origin.strip() for origin in _cors_origins if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    status = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    return JSONResponse(
        status_code=status,
        content=failure(type(exc).__name__, str(exc)),
    )


# ============================================
# Include Routers
# ============================================

app.include_router(versions.router, prefix="/api/v1/versions", tags=["Versions"])
app.include_router(pipeline.router, prefix="/api/v1/pipeline", tags=["Pipeline"])
app.include_router(slack.router, prefix="/api/v1/slack", tags=["Slack"])


@app.get("/")
async def root():
    return {
        "name": "Oekodata API",
        "version": "1.0.0",
        "docs": "/docs",
        "timestamp": datetime.now().isoformat()
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
