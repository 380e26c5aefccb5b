"""Document processing routes: learner extraction and bulk registration."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from api.errors import DOMAIN_ERRORS, http_error
from api.routes.auth import AdminSession
from core.dependencies import AuditLogManagerDep, ChildManagerDep, LearnerExtractorDep
from schemas.extraction import (
    ExtractResponse,
    RegisterLearnersRequest,
    RegisterLearnersResponse,
)
from utils.document_text import read_document_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


@router.post("/extract", response_model=ExtractResponse, summary="Extract learners from a document")
async def extract_learners(
    session: AdminSession,
    extractor: LearnerExtractorDep,
    content: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
) -> ExtractResponse:
    """Turn pasted text or an uploaded .txt, .csv or .pdf file into candidate learners.

    Raises:
        HTTPException: 400 for empty or unsupported input, 502 when the AI
            reply is unusable, 429/402 when the gateway refuses.
    """
    text = content or ""
    if file is not None and file.filename:
        raw = await file.read()
        try:
            text = read_document_text(file.filename, raw)
        except DOMAIN_ERRORS as e:
            raise http_error(e) from e

    logger.info("Processing document for learner extraction")
    try:
        learners = await run_in_threadpool(extractor.extract, text)
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e
    return ExtractResponse(learners=learners)


@router.post("/register", response_model=RegisterLearnersResponse, summary="Register extracted learners")
def register_learners(
    req: RegisterLearnersRequest,
    session: AdminSession,
    child_manager: ChildManagerDep,
    audit_log_manager: AuditLogManagerDep,
) -> RegisterLearnersResponse:
    """Create child records from reviewed candidates.

    Partial success is normal: each candidate carries its own status and
    message in the response.
    """
    if not any(c.status in ("pending", "success") for c in req.learners):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No learners to register. Process a document first to extract learner information.",
        )

    results = child_manager.register_candidates(req.learners)
    success_count = sum(1 for c in results if c.status == "success")
    error_count = sum(1 for c in results if c.status == "error")
    audit_log_manager.log_action(
        session.user_id,
        "learners_registered",
        {"success_count": success_count, "error_count": error_count},
    )
    return RegisterLearnersResponse(
        learners=results, success_count=success_count, error_count=error_count
    )
