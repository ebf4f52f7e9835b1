"""Profile photo and resume endpoints.

POST /upload-photo   {"photo": "<data URL>"}   -> {"success": true}
GET  /get-photo                               -> {"photo": str | null}
POST /upload-resume  {"resume": "<data URL>"}  -> {"success": true}
GET  /get-resume                              -> {"resumeUrl": str | null}

Latest upload wins; there is no delete.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, ValidationError

from portfolio.infra.db import txn
from portfolio.infra.repositories.assets_repository import (
    AssetKind,
    get_latest_asset,
    insert_asset,
    to_pdf_data_url,
)
from portfolio.observability.correlation import get_correlation_id
from portfolio.observability.logging import get_logger
from portfolio.observability.redaction import safe_log_context

router = APIRouter(tags=["assets"])

logger = get_logger(__name__)


# ── Schemas ───────────────────────────────────────────────────────────────────


class PhotoUpload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    photo: str | None = None


class ResumeUpload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resume: str | None = None


# ── Helpers ───────────────────────────────────────────────────────────────────


def _missing_fields() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Missing required fields"})


async def _store(request: Request, kind: AssetKind, schema: type[BaseModel]) -> JSONResponse:
    correlation_id = get_correlation_id()

    try:
        body = schema.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _missing_fields()

    data = getattr(body, kind)
    if not data:
        return _missing_fields()

    try:
        with txn() as cur:
            insert_asset(cur, kind, data)
    except Exception:
        logger.exception(
            "asset upload failed",
            extra={"extra_fields": safe_log_context(correlationId=correlation_id, kind=kind)},
        )
        return JSONResponse(status_code=500, content={"error": "Upload failed"})

    logger.info(
        "asset uploaded",
        extra={
            "extra_fields": safe_log_context(
                correlationId=correlation_id, kind=kind, size=len(data)
            )
        },
    )
    return JSONResponse(content={"success": True})


def _load(kind: AssetKind) -> str | None:
    with txn() as cur:
        return get_latest_asset(cur, kind)


# ── Photo ─────────────────────────────────────────────────────────────────────


@router.post("/upload-photo")
async def upload_photo(request: Request) -> JSONResponse:
    return await _store(request, "photo", PhotoUpload)


@router.get("/get-photo")
def get_photo() -> JSONResponse:
    try:
        photo = _load("photo")
    except Exception:
        logger.exception(
            "fetch photo failed",
            extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
        )
        return JSONResponse(status_code=500, content={"error": "Failed to fetch photo"})

    return JSONResponse(content={"photo": photo or None})


# ── Resume ────────────────────────────────────────────────────────────────────


@router.post("/upload-resume")
async def upload_resume(request: Request) -> JSONResponse:
    return await _store(request, "resume", ResumeUpload)


@router.get("/get-resume")
def get_resume() -> JSONResponse:
    try:
        resume = _load("resume")
    except Exception:
        logger.exception(
            "fetch resume failed",
            extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
        )
        return JSONResponse(status_code=500, content={"error": "Failed to fetch resume"})

    resume_url = to_pdf_data_url(resume) if resume else None
    return JSONResponse(content={"resumeUrl": resume_url})
