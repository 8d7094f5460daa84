import hashlib
from typing import List, Optional

import numpy as np
import requests

from talentmatch.models.settings import EmbeddingSettings
from talentmatch.utils.logging_config import get_logger

logger = get_logger(__name__)


def fallback_embedding(text: str, dim: int) -> List[float]:
    """Pseudo-random vector in [-1, 1], seeded from the text so it is repeatable"""
    seed = int.from_bytes(hashlib.sha256((text or "").encode("utf-8")).digest()[:8], "big")
    rng = np.random.default_rng(seed)
    return rng.uniform(-1.0, 1.0, dim).astype(np.float32).tolist()


class EmbeddingClient:
    """Turns text into a fixed-dimension vector.

    ``embed`` never raises. Any provider failure (network, HTTP status,
    malformed body, wrong dimension) is logged and replaced by
    ``fallback_embedding`` so index operations keep working with degraded
    relevance.
    """

    def __init__(self, settings: EmbeddingSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.dimension = settings.dimension
        self.session = session or requests.Session()

    def _request(self, text: str) -> List[float]:
        url = f"{self.settings.base_url}/api/embed"
        resp = self.session.post(
            url,
            json={"model": self.settings.model_name, "input": text},
            timeout=self.settings.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        vector = np.asarray(data["embeddings"][0], dtype=np.float32)
        if vector.shape != (self.dimension,):
            raise ValueError(f"expected {self.dimension} dimensions, got {vector.shape}")
        return vector.tolist()

    def embed(self, text: str) -> List[float]:
        try:
            return self._request(text)
        except (requests.RequestException, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Error generating embedding, using fallback vector: {e}")
            return fallback_embedding(text, self.dimension)
