"""Tests for the in-process Gemini generator."""

import json

import pytest
import requests
import responses

from RepoScribe.gemini import GeminiGenerator
from RepoScribe.generation import GenerationError, GenerationRateLimitError
from RepoScribe.models import ArtifactKind

URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-1.5-flash-latest:generateContent"
)


def _ok(text: str = "# Generated") -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _generator(sleeps: list) -> GeminiGenerator:
    return GeminiGenerator("test-key", sleep=sleeps.append)


class TestGenerateArtifact:
    @responses.activate
    def test_returns_text(self):
        responses.add(responses.POST, URL, json=_ok(), status=200)
        result = _generator([]).generate_artifact("DOC", "owner/repo", ArtifactKind.README)
        assert result == "# Generated"

        request = responses.calls[0].request
        assert "key=test-key" in request.url
        body = json.loads(request.body)
        prompt = body["contents"][0]["parts"][0]["text"]
        assert "Repository: owner/repo" in prompt
        assert prompt.endswith(
            "DOC\n\nBe accurate: describe only what the code above actually contains."
        )
        assert body["generationConfig"]["maxOutputTokens"] == 8192

    @responses.activate
    def test_docker_prompt_requests_fenced_sections(self):
        responses.add(responses.POST, URL, json=_ok("```dockerfile\n```"), status=200)
        _generator([]).generate_artifact("DOC", "owner/repo", ArtifactKind.DOCKER_FILES)
        body = json.loads(responses.calls[0].request.body)
        prompt = body["contents"][0]["parts"][0]["text"]
        for fence in ("```dockerfile", "```yaml", "```env"):
            assert fence in prompt

    def test_missing_fields(self):
        with pytest.raises(GenerationError, match="Missing required fields"):
            _generator([]).generate_artifact("", "owner/repo", ArtifactKind.README)

    def test_missing_api_key(self):
        with pytest.raises(GenerationError, match="GEMINI_API_KEY"):
            GeminiGenerator("")

    @responses.activate
    def test_invalid_response_shape(self):
        responses.add(responses.POST, URL, json={"candidates": []}, status=200)
        with pytest.raises(GenerationError, match="Invalid response"):
            _generator([]).generate_artifact("DOC", "owner/repo", ArtifactKind.README)


class TestRetry:
    @responses.activate
    def test_rate_limit_then_success(self):
        responses.add(responses.POST, URL, json={"error": {}}, status=429)
        responses.add(responses.POST, URL, json={"error": {}}, status=429)
        responses.add(responses.POST, URL, json=_ok(), status=200)
        sleeps = []
        result = _generator(sleeps).generate_artifact(
            "DOC", "owner/repo", ArtifactKind.README
        )
        assert result == "# Generated"
        assert sleeps == [2.0, 4.0]
        assert len(responses.calls) == 3

    @responses.activate
    def test_rate_limit_exhausted(self):
        for _ in range(3):
            responses.add(responses.POST, URL, json={"error": {}}, status=429)
        sleeps = []
        with pytest.raises(GenerationRateLimitError, match="Rate limit exceeded"):
            _generator(sleeps).generate_artifact(
                "DOC", "owner/repo", ArtifactKind.DOCKER_FILES
            )
        assert len(responses.calls) == 3
        assert sleeps == [2.0, 4.0]

    @responses.activate
    def test_transport_error_then_success(self):
        responses.add(responses.POST, URL, body=requests.ConnectionError("reset"))
        responses.add(responses.POST, URL, json=_ok(), status=200)
        sleeps = []
        _generator(sleeps).generate_artifact("DOC", "owner/repo", ArtifactKind.README)
        assert sleeps == [1.0]

    @responses.activate
    def test_client_error_not_retried(self):
        responses.add(responses.POST, URL, json={"error": {}}, status=400)
        with pytest.raises(GenerationError, match="400") as excinfo:
            _generator([]).generate_artifact("DOC", "owner/repo", ArtifactKind.README)
        assert not isinstance(excinfo.value, GenerationRateLimitError)
        assert len(responses.calls) == 1

    @responses.activate
    def test_server_error_exhausted(self):
        for _ in range(3):
            responses.add(responses.POST, URL, json={}, status=503)
        with pytest.raises(GenerationError, match="503"):
            _generator([]).generate_artifact("DOC", "owner/repo", ArtifactKind.README)
        assert len(responses.calls) == 3
