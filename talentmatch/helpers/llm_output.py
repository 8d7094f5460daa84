"""
Lenient parsing of semi-structured model output.

Model replies are decoded in two stages. First the substring between the
first ``{`` and the last ``}`` is decoded as strict JSON. When that fails,
callers run a set of named regex extractors over the raw text; each one is
optional and contributes a single field when it matches.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern

from talentmatch.utils.exceptions import MalformedModelOutput


def extract_json_object(text: str) -> Dict[str, Any]:
    """Strictly decode the outermost ``{...}`` span of ``text``.

    Raises:
        MalformedModelOutput: no braces, invalid JSON, or a non-object payload.
    """
    if not text:
        raise MalformedModelOutput("Empty model response", raw_text="")

    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise MalformedModelOutput("No JSON object in model response", raw_text=text)

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise MalformedModelOutput(f"Invalid JSON in model response: {e.msg}", raw_text=text, cause=e) from e

    if not isinstance(data, dict):
        raise MalformedModelOutput("Model response JSON is not an object", raw_text=text)
    return data


def _clean_span(value: str) -> str:
    return value.strip().strip('",\'').strip()


def _unescape(value: str) -> str:
    return value.replace('\\n', '\n').replace('\\"', '"').strip()


@dataclass(frozen=True)
class FieldExtractor:
    """Pull one field out of free text with a regex capture group"""
    name: str
    pattern: Pattern
    convert: Callable[[str], Any] = _clean_span

    def extract(self, text: str) -> Optional[Any]:
        match = self.pattern.search(text)
        if not match:
            return None
        try:
            value = self.convert(match.group(1))
        except (TypeError, ValueError):
            return None
        if value is None or value == "":
            return None
        return value


def extract_fields(text: str, extractors: Iterable[FieldExtractor]) -> Dict[str, Any]:
    """Run every extractor over ``text``; only matching fields are returned"""
    found = {}
    for extractor in extractors:
        value = extractor.extract(text or "")
        if value is not None:
            found[extractor.name] = value
    return found


# -------- Evaluation fields --------
SCORE_EXTRACTOR = FieldExtractor(
    "score",
    re.compile(r'score["\'\s:]+(\d+(?:\.\d+)?)', re.IGNORECASE),
    float,
)
FEEDBACK_EXTRACTOR = FieldExtractor(
    "feedback",
    re.compile(r'feedback["\'\s:]+(.+?)["\'\s,]*(?=\brecommendations\b|\}|$)', re.IGNORECASE | re.DOTALL),
    lambda s: _unescape(_clean_span(s)),
)
RECOMMENDATIONS_EXTRACTOR = FieldExtractor(
    "recommendations",
    re.compile(r'recommendations["\'\s:]+([^}]+)', re.IGNORECASE | re.DOTALL),
    lambda s: _unescape(_clean_span(s)),
)

EVALUATION_EXTRACTORS = (SCORE_EXTRACTOR, FEEDBACK_EXTRACTOR, RECOMMENDATIONS_EXTRACTOR)


# -------- Ranking fields --------
_OBJECT_CHUNK = re.compile(r'\{[^{}]*\}', re.DOTALL)

RANKING_EXTRACTORS = (
    FieldExtractor("id", re.compile(r'"?\bid"?\s*:\s*"?(\d+)', re.IGNORECASE), int),
    FieldExtractor("score", re.compile(r'"?\bscore"?\s*:\s*"?(\d*\.?\d+)', re.IGNORECASE), float),
    FieldExtractor(
        "explanation",
        re.compile(r'"?\bexplanation"?\s*:\s*"((?:[^"\\]|\\.)*)"', re.IGNORECASE | re.DOTALL),
        _unescape,
    ),
)


def extract_rankings(text: str) -> List[Dict[str, Any]]:
    """Recover ``{id, score, explanation}`` objects from broken ranking JSON.

    Each innermost ``{...}`` chunk is scanned on its own; chunks without
    both an id and a score are skipped.
    """
    rankings = []
    for chunk in _OBJECT_CHUNK.findall(text or ""):
        fields = extract_fields(chunk, RANKING_EXTRACTORS)
        if "id" in fields and "score" in fields:
            rankings.append(fields)
    return rankings
