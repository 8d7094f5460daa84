"""
Candidate/job matching pipelines.

``MatchingOrchestrator.evaluate`` scores every candidate against one job with
the evaluator, one concurrent call per candidate. ``MatchingOrchestrator.search``
retrieves candidates through the vector tier and reranks them, falling back
to reranking a bounded prefix of all candidates when that tier is
unavailable. Both pipelines prefer a degraded answer over an error once the
request itself is valid.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from talentmatch.helpers.prompts import CANDIDATE_PROFILE, JOB_TEXT
from talentmatch.models.models import Candidate, Evaluation, Job, SearchResult
from talentmatch.models.settings import MatchingSettings
from talentmatch.services.vector_index import (
    KIND_CANDIDATE,
    candidate_entry,
    candidate_index_text,
    entry_id,
    job_entry,
    job_index_text,
    parse_entry_id,
)
from talentmatch.utils.exceptions import DatabaseError, UpstreamUnavailable, ValidationError
from talentmatch.utils.logging_config import PerformanceMonitor, get_logger

logger = get_logger(__name__)

METHOD_VECTOR = "vector-and-model"
METHOD_MODEL_ONLY = "model-only"


def placeholder_job(job_id: int) -> Job:
    return Job(
        id=job_id,
        title="Unknown Position",
        description="Job details not available",
        requirements="Unknown requirements",
    )


def format_job_text(job: Job) -> str:
    return JOB_TEXT.format(
        title=job.title or "No title",
        description=job.description or "No description",
        requirements=job.requirements or "No requirements",
    )


def format_candidate_profile(candidate: Candidate) -> str:
    return CANDIDATE_PROFILE.format(
        name=candidate.name or "Unknown",
        email=candidate.email or "Not provided",
        linkedin=candidate.linkedin or "Not provided",
        skills=candidate.skills or "Not specified",
        experience=candidate.experience or "Not specified",
        resume_text=candidate.resume_text or "Not available",
    )


@dataclass
class TierOutcome:
    """Result of one search tier: either results or the reason it was unavailable"""
    method: str
    results: List[SearchResult] = field(default_factory=list)
    unavailable: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.unavailable is None


class VectorSearchTier:
    """Embed the search text, pull nearest candidates from the index, rerank them"""

    method = METHOD_VECTOR

    def __init__(self, embeddings, index, reranker):
        self.embeddings = embeddings
        self.index = index
        self.reranker = reranker

    async def run(
        self,
        search_text: str,
        requirements: str,
        candidates_by_id: Dict[int, Candidate],
        limit: int,
    ) -> TierOutcome:
        try:
            vector = await asyncio.to_thread(self.embeddings.embed, search_text)
            matches = await asyncio.to_thread(self.index.query, vector, limit * 2, {"type": KIND_CANDIDATE})
        except UpstreamUnavailable as e:
            return TierOutcome(self.method, unavailable=f"vector search failed: {e.message}")

        logger.info(f"Vector index returned {len(matches)} matches")
        if not matches:
            return TierOutcome(self.method, unavailable="no vector matches")

        resolved = []
        for match in matches:
            parsed = parse_entry_id(match.id)
            if parsed is None or parsed[0] != KIND_CANDIDATE:
                continue
            candidate = candidates_by_id.get(parsed[1])
            if candidate is None:
                logger.debug(f"Dropping unresolved index entry {match.id}")
                continue
            resolved.append(SearchResult(**candidate.model_dump(), vector_score=match.score))

        if not resolved:
            return TierOutcome(self.method, unavailable="no vector matches resolved to stored candidates")

        results = await asyncio.to_thread(self.reranker.rerank, resolved, requirements, limit)
        return TierOutcome(self.method, results=results)


class ModelOnlyTier:
    """Rerank a bounded prefix of all candidates directly with the model"""

    method = METHOD_MODEL_ONLY

    def __init__(self, reranker, max_candidates: int = 15):
        self.reranker = reranker
        self.max_candidates = max_candidates

    async def run(self, requirements: str, candidates: Sequence[Candidate], limit: int) -> TierOutcome:
        subset = list(candidates[:self.max_candidates])
        results = await asyncio.to_thread(self.reranker.rerank, subset, requirements, limit)
        return TierOutcome(self.method, results=results)


class MatchingOrchestrator:
    """Owns the injected clients and runs the Evaluate and Search pipelines"""

    def __init__(self, store, embeddings, index, evaluator, reranker, settings: MatchingSettings = None):
        self.store = store
        self.embeddings = embeddings
        self.index = index
        self.evaluator = evaluator
        self.reranker = reranker
        self.settings = settings or MatchingSettings()
        self.vector_tier = VectorSearchTier(embeddings, index, reranker)
        self.fallback_tier = ModelOnlyTier(reranker, self.settings.fallback_candidate_limit)

    async def _fetch_job(self, job_id: int) -> Optional[Job]:
        try:
            job = await self.store.get_job(job_id)
        except DatabaseError as e:
            logger.error(f"Error fetching job with ID {job_id}: {e.message}")
            return None
        if job is None:
            logger.error(f"Job with ID {job_id} not found")
        return job

    # -------- Evaluate --------
    async def _evaluate_one(self, candidate: Candidate, job_text: str, semaphore: asyncio.Semaphore) -> Evaluation:
        async with semaphore:
            try:
                logger.debug(f"Evaluating candidate: {candidate.name}")
                result = await asyncio.to_thread(
                    self.evaluator.evaluate, format_candidate_profile(candidate), job_text
                )
                return Evaluation(
                    candidate_id=candidate.id,
                    candidate_name=candidate.name,
                    score=result.score,
                    feedback=result.feedback or "No feedback available",
                    recommendations=result.recommendations or "No recommendations available",
                )
            except Exception as e:
                logger.exception(f"Error evaluating candidate {candidate.id}: {e}")
                return Evaluation(
                    candidate_id=candidate.id,
                    candidate_name=candidate.name,
                    score=0,
                    feedback=f"Error during evaluation: {e}",
                )

    async def evaluate(self, job_id: Optional[int]) -> List[Evaluation]:
        """Score every stored candidate against one job, best first.

        A missing job is replaced by a placeholder so every candidate is
        still evaluated. Equal scores keep store order.
        """
        if not job_id or job_id <= 0:
            raise ValidationError("Job ID is required", field="jobId", value=job_id)

        with PerformanceMonitor(f"evaluate job {job_id}", logger, threshold_ms=30000):
            candidates = await self.store.list_candidates()
            if not candidates:
                logger.info("No candidates found in the system")
                return []

            logger.info(f"Evaluating {len(candidates)} candidates for job ID: {job_id}")
            job = await self._fetch_job(job_id) or placeholder_job(job_id)
            job_text = format_job_text(job)

            semaphore = asyncio.Semaphore(self.settings.max_concurrent_evaluations)
            evaluations = await asyncio.gather(
                *(self._evaluate_one(c, job_text, semaphore) for c in candidates)
            )
            return sorted(evaluations, key=lambda e: e.score, reverse=True)

    # -------- Search --------
    async def search(
        self,
        query: Optional[str] = None,
        job_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[SearchResult], str]:
        """Return ``(results, method)`` for a free-text query and/or a job's requirements"""
        if not query and not job_id:
            raise ValidationError("Either search query or job ID is required")
        limit = limit or self.settings.default_search_limit

        search_text = (query or "").strip()
        requirements = ""
        if job_id:
            job = await self._fetch_job(job_id)
            if job is not None:
                requirements = job.requirements or ""
                search_text = f"{requirements} {query or ''}".strip()

        if not search_text:
            raise ValidationError("No valid search text available", field="query")
        requirements = requirements or (query or "")

        with PerformanceMonitor(f"search limit={limit}", logger, threshold_ms=15000):
            try:
                candidates = await self.store.list_candidates()
            except DatabaseError as e:
                logger.error(f"Could not load candidates for search: {e.message}")
                candidates = []

            outcome = await self.vector_tier.run(
                search_text, requirements, {c.id: c for c in candidates}, limit
            )
            if not outcome.ok:
                logger.warning(f"Falling back to model-only search: {outcome.unavailable}")
                outcome = await self.fallback_tier.run(requirements, candidates, limit)

            logger.info(f"Search via {outcome.method} returned {len(outcome.results)} results")
            return outcome.results, outcome.method

    # -------- Indexing --------
    async def index_candidate(self, candidate: Candidate) -> bool:
        try:
            vector = await asyncio.to_thread(self.embeddings.embed, candidate_index_text(candidate))
            await asyncio.to_thread(self.index.upsert, [candidate_entry(candidate, vector)])
        except UpstreamUnavailable as e:
            logger.error(f"Error indexing candidate {candidate.id}: {e.message}")
            return False
        logger.info(f"Candidate {candidate.id} indexed")
        return True

    async def remove_candidate(self, candidate_id: int) -> bool:
        try:
            await asyncio.to_thread(self.index.delete, [entry_id(KIND_CANDIDATE, candidate_id)])
        except UpstreamUnavailable as e:
            logger.error(f"Error removing candidate {candidate_id} from index: {e.message}")
            return False
        return True

    async def index_job(self, job: Job) -> bool:
        try:
            vector = await asyncio.to_thread(self.embeddings.embed, job_index_text(job))
            await asyncio.to_thread(self.index.upsert, [job_entry(job, vector)])
        except UpstreamUnavailable as e:
            logger.error(f"Error indexing job {job.id}: {e.message}")
            return False
        logger.info(f"Job {job.id} indexed")
        return True

    async def index_all_jobs(self) -> int:
        jobs = await self.store.list_jobs()
        indexed = 0
        for job in jobs:
            if await self.index_job(job):
                indexed += 1
        logger.info(f"Indexed {indexed}/{len(jobs)} jobs")
        return indexed
