# Oekodata API - Versions Router
# ==============================
"""Read access to promoted versions for the presentation layer."""

from fastapi import APIRouter, Depends, Query

from ...pipeline import VersionPipeline
from ...versions import VersionDiff
from ..dependencies import get_pipeline
from ..models import ok

router = APIRouter()


@router.get("")
def list_versions(pipeline: VersionPipeline = Depends(get_pipeline)):
    """Version history, newest publish date first."""
    history = [v.to_dict() for v in pipeline.store.list_history()]
    return ok(history, count=len(history))


@router.get("/current")
def current_version(
    include_materials: bool = Query(True, description="Include the record set"),
    pipeline: VersionPipeline = Depends(get_pipeline),
):
    """The served version; data is null before the first promotion."""
    current = pipeline.store.get_current()
    if current is None:
        return ok(None, count=0)
    data = current.version.to_dict()
    if include_materials:
        data['materials'] = [m.to_dict() for m in current.materials]
    return ok(data, count=current.materials_count)


@router.get("/diff")
def diff_versions(
    from_label: str = Query(..., alias="from"),
    to_label: str = Query(..., alias="to"),
    pipeline: VersionPipeline = Depends(get_pipeline),
):
    """Per-material differences between two promoted versions."""
    result = VersionDiff(pipeline.store).diff(from_label, to_label)
    return ok(result.to_dict())


@router.get("/{label:path}")
def get_version(label: str, pipeline: VersionPipeline = Depends(get_pipeline)):
    """Metadata and record set of one version (label may contain '/')."""
    version = pipeline.store.get_version(label)
    materials = pipeline.store.get_by_label(label)
    data = version.to_dict()
    data['materials'] = [m.to_dict() for m in materials]
    return ok(data, count=len(materials))
