"""Meta endpoints — health and version."""

from __future__ import annotations

from fastapi import APIRouter, Request

VERSION = "0.1.0"

router = APIRouter(prefix="/api/v1", tags=["meta"])


@router.get("/health")
def health():
    return {"status": "ok", "service": "acelink"}


@router.get("/version")
def version(request: Request):
    return {
        "connector": VERSION,
        "upstream": request.app.state.config.service_url,
    }
