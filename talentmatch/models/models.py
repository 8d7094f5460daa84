from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Candidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(gt=0)
    name: str
    email: str
    linkedin: Optional[str] = None
    skills: str = ""
    experience: str = ""
    resume_text: Optional[str] = Field(default=None, alias="resumeText")
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")


class Job(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(gt=0)
    title: str
    description: str = ""
    requirements: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")


class IndexEntry(BaseModel):
    """One vector in the index: id is '<kind>_<record id>'"""
    id: str
    values: List[float]
    metadata: Dict[str, Any] = Field(default_factory=dict)


class IndexMatch(BaseModel):
    id: str
    score: float
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ModelEvaluation(BaseModel):
    """Parsed evaluator output for one candidate"""
    score: float = Field(ge=0, le=100)
    feedback: str
    recommendations: Optional[str] = None


class Evaluation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    candidate_id: int = Field(alias="candidateId")
    candidate_name: str = Field(alias="candidateName")
    score: float = Field(ge=0, le=100)
    feedback: str
    recommendations: Optional[str] = None


class SearchResult(Candidate):
    score: Optional[float] = Field(default=None, ge=0, le=1)
    explanation: Optional[str] = None
    vector_score: Optional[float] = Field(default=None, alias="vectorScore")


class ExtractedDocument(BaseModel):
    text: str
    title_guess: Optional[str] = None
