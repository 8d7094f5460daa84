from unittest.mock import MagicMock

import pytest
import requests

from talentmatch.models.settings import LLMSettings
from talentmatch.services.llm import OllamaLLMClient
from talentmatch.utils.exceptions import UpstreamUnavailable


class TestOllamaLLMClient:
    """Generation requests against Ollama"""

    def test_generate_sends_options(self):
        session = MagicMock()
        session.post.return_value.json.return_value = {"response": '{"score": 80}'}
        client = OllamaLLMClient(LLMSettings(timeout=45), session=session)

        text = client.generate("Rate this", temperature=0.7, max_tokens=512, top_k=40, top_p=0.95)

        assert text == '{"score": 80}'
        args, kwargs = session.post.call_args
        assert args[0] == "http://localhost:11434/api/generate"
        assert kwargs["timeout"] == 45
        body = kwargs["json"]
        assert body["model"] == "llama3.1:8b"
        assert body["stream"] is False
        assert body["options"] == {"temperature": 0.7, "num_predict": 512, "top_k": 40, "top_p": 0.95}

    def test_optional_sampling_params_omitted(self):
        session = MagicMock()
        session.post.return_value.json.return_value = {"response": "ok"}

        OllamaLLMClient(LLMSettings(), session=session).generate("Rank these")

        options = session.post.call_args.kwargs["json"]["options"]
        assert options == {"temperature": 0.2, "num_predict": 1024}

    def test_http_error_raises_upstream_unavailable(self):
        session = MagicMock()
        response = MagicMock(status_code=503)
        session.post.return_value.raise_for_status.side_effect = requests.HTTPError("503", response=response)

        with pytest.raises(UpstreamUnavailable) as exc_info:
            OllamaLLMClient(LLMSettings(), session=session).generate("prompt")

        assert exc_info.value.details["status_code"] == 503
        assert exc_info.value.details["service_name"] == "ollama-generate"

    def test_timeout_raises_upstream_unavailable(self):
        session = MagicMock()
        session.post.side_effect = requests.Timeout("timed out")

        with pytest.raises(UpstreamUnavailable):
            OllamaLLMClient(LLMSettings(), session=session).generate("prompt")

    @pytest.mark.parametrize("body", [["not", "an", "object"], None, "text", {"response": 42}])
    def test_unexpected_body_shape_raises_upstream_unavailable(self, body):
        session = MagicMock()
        session.post.return_value.json.return_value = body

        with pytest.raises(UpstreamUnavailable):
            OllamaLLMClient(LLMSettings(), session=session).generate("prompt")

    def test_non_json_body_raises_upstream_unavailable(self):
        session = MagicMock()
        session.post.return_value.json.side_effect = ValueError("Expecting value")

        with pytest.raises(UpstreamUnavailable):
            OllamaLLMClient(LLMSettings(), session=session).generate("prompt")
