# jobassist/api/v1/cv.py
"""
CV pipeline and CV storage.

parse -> review -> improve -> tailor run through the generation client and
are open; save/list/get/update/delete need a bearer token. The parse step
leaves the parsed structure in the CV cache under `cacheKey` so review and
improve can be called with the key instead of resending the JSON.
"""

import logging
from typing import Any, Dict, Tuple

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from jobassist.api.v1.deps import db_failed, generation_failed, get_current_user
from jobassist.api.v1.uploads import check_upload_type, too_large
from jobassist.core.errors import BadRequest, Forbidden, NotFound, envelope
from jobassist.db.session import get_db
from jobassist.models.cv import CVJson, CVJsonRequest, ParseCVRequest, ParsedCV, SaveCVRequest, TailorCVRequest
from jobassist.repositories import cvs as cv_repo
from jobassist.repositories.generic import NotOwner, RecordNotFound
from jobassist.services import generation, storage
from jobassist.services.cv_cache import get_cv_cache
from jobassist.services.llm_errors import GenerationError
from jobassist.services.parse_utils import UnsupportedDocument, extract_text_auto

logger = logging.getLogger(__name__)

router = APIRouter()


async def _cv_from(payload: CVJsonRequest, consume: bool = False) -> CVJson:
    """The cached parse for cacheKey when it is still there, else cvJson from the body."""
    if payload.cache_key:
        cache = get_cv_cache()
        cached = await (cache.pop(payload.cache_key) if consume else cache.get(payload.cache_key))
        if cached is not None:
            return cached
    if payload.cv_json:
        return payload.cv_json
    raise BadRequest("Parsed CV data or a valid cache key is required")


def _require_brief(job_brief) -> str:
    if not job_brief or not job_brief.strip():
        raise BadRequest("Job brief is required")
    return job_brief


def _validated_for_save(payload: SaveCVRequest) -> Tuple[CVJson, str]:
    if not payload.original_content:
        raise BadRequest("CV content is required")
    if not payload.cv_json:
        raise BadRequest("Parsed CV data is required")
    try:
        parsed = ParsedCV.model_validate(payload.cv_json)
    except ValidationError:
        raise BadRequest("Parsed CV data is malformed")
    missing = parsed.missing_required()
    if missing:
        raise BadRequest(missing, "MISSING_REQUIRED_FIELDS")
    return payload.cv_json, payload.original_content


@router.post("/parse")
async def parse_cv(payload: ParseCVRequest):
    if not payload.cv_text or not payload.cv_text.strip():
        raise BadRequest("CV text is required")
    try:
        parsed = await generation.parse_cv(payload.cv_text)
    except GenerationError as exc:
        raise generation_failed(exc, "Failed to parse CV")
    cache_key = await get_cv_cache().put(parsed)
    return envelope("CV parsed successfully", {"parsedCV": parsed, "cacheKey": cache_key})


@router.post("/review")
async def review_cv(payload: CVJsonRequest):
    cv = await _cv_from(payload)
    try:
        review = await generation.review_cv(cv)
    except GenerationError as exc:
        raise generation_failed(exc, "Failed to review CV")
    return envelope("CV reviewed successfully", review)


@router.post("/improve")
async def improve_cv(payload: CVJsonRequest):
    cv = await _cv_from(payload, consume=True)
    try:
        improved = await generation.improve_cv(cv)
    except GenerationError as exc:
        raise generation_failed(exc, "Failed to improve CV")
    return envelope("CV improved successfully", improved)


@router.post("/tailor")
async def tailor_cv(payload: TailorCVRequest):
    if not payload.cv_json:
        raise BadRequest("Parsed CV data is required")
    brief = _require_brief(payload.job_brief)
    try:
        tailored = await generation.tailor_cv(payload.cv_json, brief)
    except GenerationError as exc:
        raise generation_failed(exc, "Failed to tailor CV")
    return envelope("CV tailored successfully", tailored)


@router.post("/generate-questions")
async def generate_questions(payload: TailorCVRequest):
    if not payload.cv_json:
        raise BadRequest("Parsed CV data is required")
    brief = _require_brief(payload.job_brief)
    try:
        questions = await generation.generate_cv_questions(payload.cv_json, brief)
    except GenerationError as exc:
        raise generation_failed(exc, "Failed to generate interview questions")
    return envelope("Questions generated successfully", {"questions": questions, "count": len(questions)})


@router.post("/extract-text")
async def extract_text(file: UploadFile = File(...)):
    check_upload_type(file)
    try:
        content = await storage.read_limited(file)
    except storage.FileTooLarge:
        raise too_large()
    try:
        text, fmt = await run_in_threadpool(extract_text_auto, content, file.content_type)
    except UnsupportedDocument as exc:
        raise BadRequest(str(exc), "UNSUPPORTED_DOCUMENT")
    except Exception:
        # pdfminer / python-docx raise a wide range of errors on damaged input
        logger.warning("Text extraction failed for %s", file.filename, exc_info=True)
        raise BadRequest("Could not extract text from file", "EXTRACTION_FAILED")
    if not text:
        raise BadRequest("No text found in file", "EXTRACTION_FAILED")
    return envelope("Text extracted successfully", {"text": text, "format": fmt})


@router.post("/save", status_code=201)
def save_cv(
    payload: SaveCVRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    cv_json, original_content = _validated_for_save(payload)
    try:
        saved = cv_repo.save_cv(db, current_user["id"], cv_json, original_content)
    except SQLAlchemyError:
        raise db_failed("Failed to save CV")
    logger.info("CV %s saved for user %s", saved["id"], current_user["id"])
    data: Dict[str, Any] = {
        "id": saved["id"],
        "fullName": saved["fullName"],
        "email": saved["email"],
        "createdAt": saved["createdAt"],
    }
    return envelope("CV saved successfully", data)


@router.get("")
def list_cvs(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        return envelope("CVs retrieved successfully", cv_repo.list_cvs(db, current_user["id"]))
    except SQLAlchemyError:
        raise db_failed("Failed to retrieve CVs")


@router.get("/{cv_id}")
def get_cv(cv_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        cv = cv_repo.get_cv(db, cv_id, current_user["id"])
    except SQLAlchemyError:
        raise db_failed("Failed to retrieve CV")
    if cv is None:
        raise NotFound("CV not found", "CV_NOT_FOUND")
    return envelope("CV retrieved successfully", cv)


@router.put("/{cv_id}")
def update_cv(
    cv_id: int,
    payload: SaveCVRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    cv_json, original_content = _validated_for_save(payload)
    try:
        cv = cv_repo.update_cv(db, cv_id, current_user["id"], cv_json, original_content)
    except SQLAlchemyError:
        raise db_failed("Failed to update CV")
    if cv is None:
        raise NotFound("CV not found", "CV_NOT_FOUND")
    return envelope("CV updated successfully", cv)


@router.delete("/{cv_id}")
def delete_cv(cv_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        cv_repo.delete_cv(db, cv_id, current_user["id"])
    except RecordNotFound:
        raise NotFound("CV not found", "CV_NOT_FOUND")
    except NotOwner:
        logger.warning("user %s tried to delete CV %s", current_user["id"], cv_id)
        raise Forbidden()
    except SQLAlchemyError:
        raise db_failed("Failed to delete CV")
    return envelope("CV deleted successfully")
