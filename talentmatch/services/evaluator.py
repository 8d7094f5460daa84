from talentmatch.helpers.llm_output import EVALUATION_EXTRACTORS, extract_fields, extract_json_object
from talentmatch.helpers.prompts import EVALUATION_PROMPT
from talentmatch.models.models import ModelEvaluation
from talentmatch.utils.exceptions import MalformedModelOutput, UpstreamUnavailable
from talentmatch.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SCORE = 60
DEFAULT_FEEDBACK = (
    "The candidate shows some relevant skills for the position. Their background includes "
    "experience that could be valuable, though there may be some gaps in specific technical "
    "requirements. Further discussion recommended to assess cultural fit and technical depth."
)
DEFAULT_RECOMMENDATIONS = (
    "• Focus on strengthening core technical skills required for the position\n"
    "• Consider gaining more hands-on project experience\n"
    "• Highlight relevant achievements more prominently"
)
ERROR_FEEDBACK = "Error generating evaluation. Please try again later."
ERROR_RECOMMENDATIONS = "• Unable to provide recommendations at this time"


def _as_text(x) -> str:
    if x is None:
        return ""
    if isinstance(x, list):
        return "\n".join(f"• {str(t).strip()}" for t in x if str(t).strip())
    return str(x).strip()


def _as_score(x):
    try:
        return max(0.0, min(100.0, float(x)))
    except (TypeError, ValueError):
        return None


def _merge_with_defaults(fields: dict) -> ModelEvaluation:
    score = _as_score(fields.get("score"))
    return ModelEvaluation(
        score=DEFAULT_SCORE if score is None else score,
        feedback=_as_text(fields.get("feedback")) or DEFAULT_FEEDBACK,
        recommendations=_as_text(fields.get("recommendations")) or DEFAULT_RECOMMENDATIONS,
    )


def parse_evaluation(text: str) -> ModelEvaluation:
    """Strict JSON first, then per-field regexes, then static defaults"""
    try:
        return _merge_with_defaults(extract_json_object(text))
    except MalformedModelOutput as e:
        logger.warning(f"Evaluation response not in proper JSON format ({e.message}): {(text or '')[:100]}...")

    fields = extract_fields(text, EVALUATION_EXTRACTORS)
    if not fields:
        logger.warning("No evaluation fields recovered from model response, using defaults")
    return _merge_with_defaults(fields)


class Evaluator:
    """Scores one candidate profile against one job text"""

    temperature = 0.7
    top_k = 40
    top_p = 0.95
    max_tokens = 1024

    def __init__(self, llm):
        self.llm = llm

    def evaluate(self, candidate_profile: str, job_text: str) -> ModelEvaluation:
        prompt = EVALUATION_PROMPT.format(job_text=job_text, candidate_profile=candidate_profile)
        try:
            text = self.llm.generate(
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                top_k=self.top_k,
                top_p=self.top_p,
            )
        except UpstreamUnavailable as e:
            logger.error(f"Error generating AI evaluation: {e.message}")
            return ModelEvaluation(score=0, feedback=ERROR_FEEDBACK, recommendations=ERROR_RECOMMENDATIONS)

        return parse_evaluation(text)
