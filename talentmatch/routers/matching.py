from fastapi import APIRouter, Depends

from talentmatch.models.schemas import EvaluateRequest, EvaluateResponse, SearchRequest, SearchResponse
from talentmatch.routers.deps import get_orchestrator
from talentmatch.services.matching import MatchingOrchestrator
from talentmatch.utils.logging_config import log_api_call

router = APIRouter(tags=["matching"])


@router.post("/evaluate", response_model=EvaluateResponse)
@log_api_call("evaluate")
async def evaluate_candidates(
    payload: EvaluateRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """Score every candidate against one job, best first"""
    evaluations = await orchestrator.evaluate(payload.job_id)
    if not evaluations:
        return EvaluateResponse(evaluations=[], message="No candidates found in the system")
    return EvaluateResponse(evaluations=evaluations)


@router.post("/search", response_model=SearchResponse)
@log_api_call("search")
async def search_candidates(
    payload: SearchRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    """Retrieve and rerank candidates for a query and/or a job's requirements"""
    results, method = await orchestrator.search(payload.query, payload.job_id, payload.limit)
    return SearchResponse(results=results, search_method=method)
