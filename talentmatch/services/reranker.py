from typing import Any, Dict, List, Optional, Sequence

from talentmatch.helpers.llm_output import extract_json_object, extract_rankings
from talentmatch.helpers.prompts import DEFAULT_REQUIREMENTS, RERANK_CANDIDATE, RERANK_PROMPT
from talentmatch.models.models import Candidate, SearchResult
from talentmatch.models.settings import UNRANKED_SCORE
from talentmatch.utils.exceptions import MalformedModelOutput, UpstreamUnavailable
from talentmatch.utils.logging_config import get_logger

logger = get_logger(__name__)

UNRANKED_EXPLANATION = "Not specifically ranked by AI"


def _as_search_result(candidate: Candidate) -> SearchResult:
    if isinstance(candidate, SearchResult):
        return candidate
    return SearchResult(**candidate.model_dump())


def _ranking_score(value: Any) -> Optional[float]:
    try:
        return max(0.0, min(1.0, float(value)))
    except (TypeError, ValueError):
        return None


def parse_rankings(text: str) -> Optional[Dict[int, Dict[str, Any]]]:
    """Map candidate id -> ranking, or None when nothing usable came back.

    The first ranking seen for an id wins.
    """
    try:
        data = extract_json_object(text)
        rankings = data.get("rankings")
        if not isinstance(rankings, list):
            raise MalformedModelOutput("Invalid rankings format", raw_text=text)
    except MalformedModelOutput as e:
        logger.warning(f"Could not decode rankings JSON ({e.message}), trying field extraction")
        rankings = extract_rankings(text)
        if not rankings:
            return None

    by_id = {}
    for ranking in rankings:
        if not isinstance(ranking, dict):
            continue
        try:
            id = int(ranking.get("id"))
        except (TypeError, ValueError):
            continue
        by_id.setdefault(id, ranking)
    return by_id


class Reranker:
    """Scores a batch of candidates against one requirement set in a single model call.

    Callers must keep the batch small enough for the model context.
    """

    temperature = 0.2
    max_tokens = 1024

    def __init__(self, llm, resume_excerpt_chars: int = 800):
        self.llm = llm
        self.resume_excerpt_chars = resume_excerpt_chars

    def build_prompt(self, candidates: Sequence[Candidate], requirements: str) -> str:
        blocks = [
            RERANK_CANDIDATE.format(
                position=i + 1,
                id=c.id,
                name=c.name,
                skills=c.skills,
                experience=c.experience,
                resume_excerpt=(c.resume_text or "")[:self.resume_excerpt_chars] or "No resume text available",
            )
            for i, c in enumerate(candidates)
        ]
        return RERANK_PROMPT.format(
            requirements=requirements or DEFAULT_REQUIREMENTS,
            candidates="\n".join(blocks),
        )

    def rerank(self, candidates: Sequence[Candidate], requirements: str, limit: int) -> List[SearchResult]:
        if not candidates:
            return []

        rows = [_as_search_result(c) for c in candidates]
        logger.info(f"Reranking {len(rows)} candidates")

        try:
            text = self.llm.generate(
                self.build_prompt(rows, requirements),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except UpstreamUnavailable as e:
            logger.error(f"Error using model for ranking: {e.message}")
            return rows[:limit]

        rankings = parse_rankings(text)
        if rankings is None:
            logger.error("Could not find valid rankings in model response")
            return rows[:limit]

        ranked = []
        for row in rows:
            ranking = rankings.get(row.id)
            score = _ranking_score(ranking.get("score")) if ranking else None
            if score is None:
                ranked.append(row.model_copy(update={"score": UNRANKED_SCORE, "explanation": UNRANKED_EXPLANATION}))
            else:
                explanation = ranking.get("explanation")
                ranked.append(row.model_copy(update={
                    "score": score,
                    "explanation": None if explanation is None else str(explanation),
                }))

        # stable: equal scores keep input order
        ranked.sort(key=lambda r: r.score, reverse=True)
        logger.debug(f"Ranked candidate scores: {[(r.id, r.score) for r in ranked]}")
        return ranked[:limit]
