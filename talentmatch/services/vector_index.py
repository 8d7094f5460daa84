import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
from pinecone import Pinecone

from talentmatch.helpers.prompts import CANDIDATE_INDEX_TEXT, JOB_TEXT
from talentmatch.models.models import Candidate, IndexEntry, IndexMatch, Job
from talentmatch.models.settings import VectorIndexSettings
from talentmatch.utils.exceptions import UpstreamUnavailable
from talentmatch.utils.logging_config import get_logger

logger = get_logger(__name__)

KIND_CANDIDATE = "candidate"
KIND_JOB = "job"


def entry_id(kind: str, record_id: int) -> str:
    return f"{kind}_{record_id}"


def parse_entry_id(value: str) -> Optional[Tuple[str, int]]:
    """'candidate_12' -> ('candidate', 12); None when the id is not ours"""
    kind, _, raw = value.rpartition("_")
    if kind not in (KIND_CANDIDATE, KIND_JOB):
        return None
    try:
        return kind, int(raw)
    except ValueError:
        return None


def candidate_index_text(candidate: Candidate) -> str:
    return CANDIDATE_INDEX_TEXT.format(
        name=candidate.name or "",
        skills=candidate.skills or "",
        experience=candidate.experience or "",
        resume_text=candidate.resume_text or "",
    )


def job_index_text(job: Job) -> str:
    return JOB_TEXT.format(title=job.title, description=job.description, requirements=job.requirements)


def candidate_entry(candidate: Candidate, vector: List[float]) -> IndexEntry:
    return IndexEntry(
        id=entry_id(KIND_CANDIDATE, candidate.id),
        values=vector,
        metadata={
            "type": KIND_CANDIDATE,
            "name": candidate.name,
            "skills": candidate.skills,
            "experience": candidate.experience,
        },
    )


def job_entry(job: Job, vector: List[float]) -> IndexEntry:
    return IndexEntry(
        id=entry_id(KIND_JOB, job.id),
        values=vector,
        metadata={"type": KIND_JOB, "title": job.title},
    )


class VectorIndex:
    """Append-only vector store with metadata-filtered similarity queries.

    Implementations surface their failures as ``UpstreamUnavailable``; the
    caller decides whether to degrade.
    """

    def upsert(self, entries: Iterable[IndexEntry]) -> bool:
        raise NotImplementedError

    def query(self, vector: List[float], top_k: int, filter: Optional[Dict[str, Any]] = None) -> List[IndexMatch]:
        raise NotImplementedError

    def delete(self, ids: Iterable[str]) -> bool:
        raise NotImplementedError


class InMemoryVectorIndex(VectorIndex):
    """Process-local index scored by cosine similarity"""

    def __init__(self):
        self._entries: Dict[str, Tuple[np.ndarray, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._entries)

    def get(self, id: str) -> Optional[IndexEntry]:
        with self._lock:
            item = self._entries.get(id)
        if item is None:
            return None
        return IndexEntry(id=id, values=item[0].tolist(), metadata=dict(item[1]))

    def upsert(self, entries: Iterable[IndexEntry]) -> bool:
        with self._lock:
            for entry in entries:
                self._entries[entry.id] = (np.asarray(entry.values, dtype=np.float32), dict(entry.metadata))
        return True

    def query(self, vector: List[float], top_k: int, filter: Optional[Dict[str, Any]] = None) -> List[IndexMatch]:
        q = np.asarray(vector, dtype=np.float32)
        q_norm = float(np.linalg.norm(q)) or 1e-8
        filter = filter or {}

        with self._lock:
            items = list(self._entries.items())

        scored = []
        for id, (values, metadata) in items:
            if any(metadata.get(k) != v for k, v in filter.items()):
                continue
            if values.shape != q.shape:
                raise UpstreamUnavailable(
                    f"Query dimension {q.shape[0]} does not match entry {id} ({values.shape[0]})",
                    service_name="memory-index",
                )
            den = q_norm * (float(np.linalg.norm(values)) or 1e-8)
            scored.append(IndexMatch(id=id, score=float(np.dot(q, values)) / den, metadata=dict(metadata)))

        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:max(0, top_k)]

    def delete(self, ids: Iterable[str]) -> bool:
        with self._lock:
            for id in ids:
                self._entries.pop(id, None)
        return True


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


class PineconeVectorIndex(VectorIndex):
    """Pinecone-backed index.

    The connection is opened on first use, so an unreachable index only
    fails the calls that need it.
    """

    def __init__(self, settings: VectorIndexSettings, index: Any = None):
        self.settings = settings
        self._index = index
        self._lock = threading.Lock()

    @property
    def index(self) -> Any:
        with self._lock:
            if self._index is None:
                try:
                    self._index = Pinecone(api_key=self.settings.api_key).Index(self.settings.index_name)
                except Exception as e:
                    raise UpstreamUnavailable(
                        f"Could not connect to Pinecone index '{self.settings.index_name}': {e}",
                        service_name="pinecone",
                        cause=e,
                    ) from e
                logger.info(f"Connected to Pinecone index '{self.settings.index_name}'")
            return self._index

    def upsert(self, entries: Iterable[IndexEntry]) -> bool:
        vectors = [entry.model_dump() for entry in entries]
        index = self.index
        try:
            index.upsert(vectors=vectors)
        except Exception as e:
            raise UpstreamUnavailable(f"Vector upsert failed: {e}", service_name="pinecone", cause=e) from e
        return True

    def query(self, vector: List[float], top_k: int, filter: Optional[Dict[str, Any]] = None) -> List[IndexMatch]:
        pinecone_filter = {k: {"$eq": v} for k, v in (filter or {}).items()} or None
        index = self.index
        try:
            res = index.query(
                vector=vector,
                top_k=top_k,
                filter=pinecone_filter,
                include_metadata=True,
            )
        except Exception as e:
            raise UpstreamUnavailable(f"Vector query failed: {e}", service_name="pinecone", cause=e) from e

        matches = [
            IndexMatch(
                id=_field(m, "id"),
                score=float(_field(m, "score", 0.0) or 0.0),
                metadata=dict(_field(m, "metadata") or {}),
            )
            for m in (_field(res, "matches") or [])
        ]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    def delete(self, ids: Iterable[str]) -> bool:
        ids = list(ids)
        index = self.index
        try:
            index.delete(ids=ids)
        except Exception as e:
            raise UpstreamUnavailable(f"Vector delete failed: {e}", service_name="pinecone", cause=e) from e
        return True


def build_vector_index(settings: VectorIndexSettings) -> VectorIndex:
    if settings.backend == "pinecone":
        logger.info(f"Using Pinecone index '{settings.index_name}'")
        return PineconeVectorIndex(settings)
    logger.warning("Using in-memory vector index; vectors are lost on restart")
    return InMemoryVectorIndex()
