from typing import Optional

import requests

from talentmatch.models.settings import LLMSettings
from talentmatch.utils.exceptions import UpstreamUnavailable
from talentmatch.utils.logging_config import get_logger

logger = get_logger(__name__)


class OllamaLLMClient:
    """Text generation against an Ollama server"""

    def __init__(self, settings: LLMSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def generate(
        self,
        prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        top_k: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> str:
        """Return the model's completion for ``prompt``.

        Raises:
            UpstreamUnavailable: transport failure, HTTP error or an unreadable body.
        """
        options = {"temperature": temperature, "num_predict": max_tokens}
        if top_k is not None:
            options["top_k"] = top_k
        if top_p is not None:
            options["top_p"] = top_p

        url = f"{self.settings.base_url}/api/generate"
        try:
            resp = self.session.post(
                url,
                json={
                    "model": self.settings.model_name,
                    "prompt": prompt,
                    "options": options,
                    "stream": False,
                },
                timeout=self.settings.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            raise UpstreamUnavailable(
                f"Language model request failed: {e}",
                service_name="ollama-generate",
                status_code=status,
                cause=e,
            ) from e
        except ValueError as e:
            raise UpstreamUnavailable(
                "Language model returned a non-JSON body",
                service_name="ollama-generate",
                cause=e,
            ) from e

        if not isinstance(body, dict):
            raise UpstreamUnavailable(
                "Language model returned an unexpected body",
                service_name="ollama-generate",
                details={"body_type": type(body).__name__},
            )

        text = body.get("response", "") or ""
        if not isinstance(text, str):
            raise UpstreamUnavailable(
                "Language model response field is not text",
                service_name="ollama-generate",
            )
        logger.debug(f"Model {self.settings.model_name} returned {len(text)} characters")
        return text
