"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...services import SessionIntake
from ..deps import get_intake

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


@router.get("/healthz")
def healthz() -> JSONResponse:
    """Kubernetes-style readiness endpoint."""

    return JSONResponse({"ok": True})


@router.get("/stats")
def stats(intake: SessionIntake = Depends(get_intake)) -> Dict[str, Any]:
    """Rejected submissions per reason code since startup."""

    return {"rejections": intake.rejection_counts()}


__all__ = ["router"]
