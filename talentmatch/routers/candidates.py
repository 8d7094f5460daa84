import asyncio
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from talentmatch.helpers.parsing import MAX_FILE_SIZE, SUPPORTED_EXTENSIONS, extract_document
from talentmatch.models.models import Candidate
from talentmatch.models.schemas import CandidateDelete, CandidateResponse, CandidateUpdate
from talentmatch.routers.deps import get_orchestrator, get_store
from talentmatch.services.db import RecordStore
from talentmatch.services.matching import MatchingOrchestrator
from talentmatch.utils.exceptions import NotFoundError, ValidationError
from talentmatch.utils.logging_config import get_logger, log_api_call

router = APIRouter(tags=["candidates"])
logger = get_logger(__name__)


@router.get("", response_model=List[Candidate])
async def list_candidates(store: RecordStore = Depends(get_store)):
    """Get all candidates"""
    return await store.list_candidates()


@router.post("", response_model=CandidateResponse)
@log_api_call("add candidate")
async def add_candidate(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    linkedin: Optional[str] = Form(""),
    skills: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    store: RecordStore = Depends(get_store),
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """Add a candidate with a résumé upload and index it for search"""
    if not name or not email or not skills or not experience or resume is None:
        raise ValidationError("Missing required fields")

    ext = Path(resume.filename or "").suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValidationError(
            f"Invalid file type. Please upload one of: {', '.join(SUPPORTED_EXTENSIONS)}",
            field="resume",
            value=resume.filename,
        )

    data = await resume.read()
    if len(data) > MAX_FILE_SIZE:
        raise ValidationError("File size too large. Maximum 5MB", field="resume")

    document = await asyncio.to_thread(extract_document, data, resume.filename)
    candidate = await store.add_candidate({
        "name": name,
        "email": email,
        "linkedin": linkedin or "",
        "skills": skills,
        "experience": experience,
        "resume_text": document.text,
        "job_title": document.title_guess,
    })

    if not await orchestrator.index_candidate(candidate):
        logger.warning(f"Candidate {candidate.id} saved but not indexed; it is only reachable by model-only search")

    return CandidateResponse(message="Application submitted successfully!", candidate=candidate)


@router.put("", response_model=CandidateResponse)
async def update_candidate(
    payload: CandidateUpdate,
    store: RecordStore = Depends(get_store),
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """Update candidate details; empty fields keep their stored value"""
    changes = payload.model_dump(exclude={"id"})
    candidate = await store.update_candidate(payload.id, changes)
    if candidate is None:
        raise NotFoundError("Candidate not found", kind="candidate", record_id=payload.id)

    await orchestrator.index_candidate(candidate)
    return CandidateResponse(message="Candidate updated successfully!", candidate=candidate)


@router.delete("", response_model=CandidateResponse)
async def delete_candidate(
    payload: CandidateDelete,
    store: RecordStore = Depends(get_store),
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """Remove a candidate and its index entry"""
    candidate = await store.delete_candidate(payload.id)
    if candidate is None:
        raise NotFoundError("Candidate not found", kind="candidate", record_id=payload.id)

    await orchestrator.remove_candidate(payload.id)
    return CandidateResponse(message="Candidate deleted successfully!")
