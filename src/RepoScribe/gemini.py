"""In-process generation through the Gemini REST API.

This is the server side of the generation endpoint: it builds the prompt,
calls the model and retries when the model is rate limited. It exposes the
same ``generate_artifact`` call as :class:`RepoScribe.generation.GenerationClient`
so either can back the application.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import requests

from RepoScribe.generation import GenerationError, GenerationRateLimitError
from RepoScribe.models import ArtifactKind
from RepoScribe.prompts import build_prompt

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}


class GeminiGenerator:
    """Generates artifacts by calling Gemini's ``generateContent`` directly."""

    API_BASE = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-1.5-flash-latest"
    MAX_ATTEMPTS = 3
    RATE_LIMIT_DELAY = 2.0
    ERROR_DELAY = 1.0

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float = 120,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not api_key:
            raise GenerationError("GEMINI_API_KEY not configured")
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.timeout = timeout
        self.session = session or requests.Session()
        self._sleep = sleep

    @property
    def url(self) -> str:
        return f"{self.API_BASE}/models/{self.model}:generateContent"

    def generate_artifact(
        self, document: str, repository_id: str, kind: ArtifactKind
    ) -> str:
        if not document or not repository_id:
            raise GenerationError("Missing required fields: repoContent and repoName")

        logger.info(
            "Generating %s for %s, content length: %d characters",
            kind.value,
            repository_id,
            len(document),
        )
        prompt = build_prompt(kind, document, repository_id)
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": GENERATION_CONFIG,
        }
        data = self._post_with_retry(body)

        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("Invalid response from Gemini API") from exc

    def _post_with_retry(self, body: dict) -> dict:
        """POST *body*, retrying rate limits, server errors and transport errors.

        Rate limits wait ``RATE_LIMIT_DELAY * attempt`` seconds, other
        retryable failures ``ERROR_DELAY * attempt``.
        """
        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            last_attempt = attempt == self.MAX_ATTEMPTS
            try:
                resp = self.session.post(
                    self.url,
                    params={"key": self.api_key},
                    json=body,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                if last_attempt:
                    raise GenerationError(f"Gemini API request failed: {exc}") from exc
                logger.warning(
                    "API call failed, retrying %d/%d: %s", attempt, self.MAX_ATTEMPTS, exc
                )
                self._sleep(self.ERROR_DELAY * attempt)
                continue

            if resp.status_code == 429:
                if last_attempt:
                    raise GenerationRateLimitError()
                logger.warning(
                    "Rate limited, waiting before retry %d/%d", attempt, self.MAX_ATTEMPTS
                )
                self._sleep(self.RATE_LIMIT_DELAY * attempt)
                continue

            if resp.status_code >= 500 and not last_attempt:
                logger.warning(
                    "Gemini API error %d, retrying %d/%d",
                    resp.status_code,
                    attempt,
                    self.MAX_ATTEMPTS,
                )
                self._sleep(self.ERROR_DELAY * attempt)
                continue

            if not resp.ok:
                raise GenerationError(
                    f"Gemini API error: {resp.status_code} {resp.reason}"
                )
            try:
                return resp.json()
            except ValueError as exc:
                raise GenerationError("Invalid response from Gemini API") from exc

        # The loop always returns or raises on its last attempt.
        raise GenerationError("Gemini API request failed")
