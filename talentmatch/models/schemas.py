from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

from talentmatch.models.models import Candidate, Evaluation, Job, SearchResult

SearchMethod = Literal["vector-and-model", "model-only"]

# -------- Matching --------
class EvaluateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: Optional[int] = Field(default=None, alias="jobId")


class EvaluateResponse(BaseModel):
    evaluations: List[Evaluation] = []
    message: Optional[str] = None


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = None
    job_id: Optional[int] = Field(default=None, alias="jobId")
    limit: int = Field(default=10, ge=1, le=100)


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    results: List[SearchResult] = []
    search_method: SearchMethod = Field(alias="searchMethod")

# -------- Candidates --------
class CandidateUpdate(BaseModel):
    """Partial update; empty fields keep the stored value"""
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    linkedin: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None


class CandidateDelete(BaseModel):
    id: int


class CandidateResponse(BaseModel):
    success: bool = True
    message: str
    candidate: Optional[Candidate] = None

# -------- Jobs --------
class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    requirements: str = Field(min_length=1)


class JobResponse(BaseModel):
    success: bool = True
    message: str
    job: Job
