from typing import List

from fastapi import APIRouter, Depends

from talentmatch.models.models import Job
from talentmatch.models.schemas import JobCreate, JobResponse
from talentmatch.routers.deps import get_orchestrator, get_store
from talentmatch.services.db import RecordStore
from talentmatch.services.matching import MatchingOrchestrator
from talentmatch.utils.exceptions import NotFoundError

router = APIRouter(tags=["jobs"])


@router.get("", response_model=List[Job])
async def list_jobs(store: RecordStore = Depends(get_store)):
    """Get all jobs"""
    return await store.list_jobs()


@router.post("", response_model=JobResponse)
async def create_job(
    payload: JobCreate,
    store: RecordStore = Depends(get_store),
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """Create a job and index it"""
    job = await store.add_job(payload.model_dump())
    await orchestrator.index_job(job)
    return JobResponse(message="Job created successfully", job=job)


@router.get("/{job_id}", response_model=Job)
async def get_job(job_id: int, store: RecordStore = Depends(get_store)):
    """Get one job by id"""
    job = await store.get_job(job_id)
    if job is None:
        raise NotFoundError("Job not found", kind="job", record_id=job_id)
    return job
