"""Client for the remote README / Docker file generation endpoint."""

from __future__ import annotations

import logging

import requests

from RepoScribe.models import ArtifactKind

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."

# Route appended to the endpoint base URL, and the response field holding the text.
ROUTES: dict[ArtifactKind, tuple[str, str]] = {
    ArtifactKind.README: ("generate-readme", "generatedReadme"),
    ArtifactKind.DOCKER_FILES: ("generate-dockerfile", "generatedDockerFiles"),
}


class GenerationError(Exception):
    """Raised when the generation backend fails or returns no content."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class GenerationRateLimitError(GenerationError):
    """Raised when the generation backend is still rate limited after retrying."""

    def __init__(self, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(message)


class GenerationClient:
    """Posts an aggregated document to the generation endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 120,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = "RepoScribe/1.0"
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def generate_artifact(
        self, document: str, repository_id: str, kind: ArtifactKind
    ) -> str:
        route, result_field = ROUTES[kind]
        url = f"{self.base_url}/{route}"
        logger.info(
            "Generating %s for %s (%d characters)",
            kind.value,
            repository_id,
            len(document),
        )

        try:
            resp = self.session.post(
                url,
                json={"repoContent": document, "repoName": repository_id},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GenerationError(f"Generation request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {}

        if resp.status_code == 429:
            raise GenerationRateLimitError(data.get("error") or RATE_LIMIT_MESSAGE)
        if data.get("error"):
            raise GenerationError(data["error"])
        if not resp.ok:
            raise GenerationError(
                f"Generation endpoint returned HTTP {resp.status_code}"
            )

        content = data.get(result_field)
        if not content:
            raise GenerationError("no content received")
        return content
