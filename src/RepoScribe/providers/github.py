"""GitHub REST contents API provider."""

from __future__ import annotations

import logging
import time
from urllib.parse import quote

import requests

from RepoScribe.credentials import CredentialProvider
from RepoScribe.models import Entry, Repository
from RepoScribe.providers.base import FileFetchError, ListingError, RepoProvider

logger = logging.getLogger(__name__)


class RateLimitError(ListingError):
    """Raised when GitHub rate limit is exceeded."""

    def __init__(self, status: int, reset_at: int, path: str = ""):
        self.reset_at = reset_at
        wait = max(0, reset_at - int(time.time()))
        super().__init__(
            status,
            path,
            f"GitHub API rate limit exceeded. Resets in {wait} seconds.",
        )


class GitHubProvider(RepoProvider):
    """Provider for GitHub repositories using the contents API.

    The credential is looked up from *credentials* on every request, so a
    token refreshed by the sign-in session is picked up without rebuilding
    the provider.
    """

    API_BASE = "https://api.github.com"

    def __init__(
        self,
        credentials: CredentialProvider,
        api_base: str | None = None,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.credentials = credentials
        self.api_base = (api_base or self.API_BASE).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/vnd.github+json"
        self.session.headers["User-Agent"] = "RepoScribe/1.0"

    def _get(self, path: str, params: dict | None = None) -> requests.Response:
        token = self.credentials.require_credential()
        url = f"{self.api_base}{path}"
        logger.debug("GET %s", url)
        return self.session.get(
            url,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )

    def _is_rate_limited(self, response: requests.Response) -> bool:
        if response.status_code not in (403, 429):
            return False
        return response.headers.get("X-RateLimit-Remaining") == "0"

    def _contents_path(self, repository_id: str, path: str) -> str:
        return f"/repos/{repository_id}/contents/{quote(path.strip('/'))}"

    def list_directory(self, repository_id: str, path: str) -> list[Entry]:
        try:
            resp = self._get(self._contents_path(repository_id, path))
        except requests.RequestException as exc:
            raise ListingError(0, path, f"Could not list '{path or '/'}': {exc}") from exc

        if self._is_rate_limited(resp):
            reset_at = int(resp.headers.get("X-RateLimit-Reset", 0))
            raise RateLimitError(resp.status_code, reset_at, path)
        if not resp.ok:
            raise ListingError(resp.status_code, path)

        try:
            data = resp.json()
            if isinstance(data, dict):
                # A file path lists as the file itself.
                data = [data]
            return [Entry.from_api(item) for item in data]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise ListingError(
                resp.status_code,
                path,
                f"Unexpected listing for '{path or '/'}': {exc!r}",
            ) from exc

    def fetch_file(self, repository_id: str, path: str) -> dict:
        resp = self._get(self._contents_path(repository_id, path))
        if not resp.ok:
            raise FileFetchError(resp.status_code, path)
        return resp.json()

    def list_user_repositories(self) -> list[Repository]:
        """Repositories of the signed-in user, most recently updated first."""
        try:
            resp = self._get("/user/repos", params={"sort": "updated", "per_page": 100})
        except requests.RequestException as exc:
            raise ListingError(0, "", f"Could not list repositories: {exc}") from exc
        if not resp.ok:
            raise ListingError(
                resp.status_code,
                "",
                f"Failed to fetch repositories from GitHub (HTTP {resp.status_code}).",
            )
        return [
            Repository(
                full_name=item["full_name"],
                name=item["name"],
                private=item.get("private", False),
                description=item.get("description"),
                language=item.get("language"),
                updated_at=item.get("updated_at"),
            )
            for item in resp.json()
        ]
