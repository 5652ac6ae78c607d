"""The user-facing repository operations, wired to their collaborators."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from RepoScribe.aggregator import ContentAggregator
from RepoScribe.cancellation import CancellationToken
from RepoScribe.config import Settings
from RepoScribe.credentials import CredentialProvider
from RepoScribe.gemini import GeminiGenerator
from RepoScribe.generation import GenerationClient, GenerationError
from RepoScribe.models import ArtifactKind, Entry, FetchProgress, RepositoryMetadata
from RepoScribe.providers.base import RepoProvider
from RepoScribe.providers.github import GitHubProvider
from RepoScribe.token_estimator import calculate_repository_metadata, estimate_tokens
from RepoScribe.tree_builder import render_structure

logger = logging.getLogger(__name__)


class ArtifactGenerator(Protocol):
    def generate_artifact(
        self, document: str, repository_id: str, kind: ArtifactKind
    ) -> str: ...


@dataclass
class StructureResult:
    structure: str
    metadata: RepositoryMetadata
    entries: list[Entry]


@dataclass
class IngestResult:
    document: str
    file_count: int
    token_count: int
    errors: list[str] = field(default_factory=list)


class RepositoryService:
    """Runs one operation per call; nothing is shared between calls."""

    def __init__(
        self,
        provider: RepoProvider,
        credentials: CredentialProvider,
        generator: ArtifactGenerator | None = None,
        max_workers: int = 4,
    ):
        self.provider = provider
        self.credentials = credentials
        self.generator = generator
        self.aggregator = ContentAggregator(provider, max_workers)

    def analyze_structure(
        self, repository_id: str, cancel_token: CancellationToken | None = None
    ) -> StructureResult:
        """Directory listing plus file count and estimated token total."""
        self.credentials.require_credential()
        entries = self.provider.fetch_all_entries(repository_id, "", cancel_token)
        structure = render_structure(entries, repository_id)
        metadata = calculate_repository_metadata(
            self.provider, repository_id, entries, cancel_token
        )
        return StructureResult(structure=structure, metadata=metadata, entries=entries)

    def ingest_contents(
        self,
        repository_id: str,
        cancel_token: CancellationToken | None = None,
        on_progress: Callable[[FetchProgress], None] | None = None,
    ) -> IngestResult:
        """Fetch every file and return the aggregated document."""
        self.credentials.require_credential()
        entries = self.provider.fetch_all_entries(repository_id, "", cancel_token)
        files = [entry for entry in entries if entry.is_file]
        errors: list[str] = []

        def _track(progress: FetchProgress) -> None:
            errors[:] = progress.errors
            if on_progress is not None:
                on_progress(progress)

        document = self.aggregator.aggregate(
            repository_id, files, cancel_token, on_progress=_track
        )
        return IngestResult(
            document=document,
            file_count=len(files),
            token_count=estimate_tokens(document),
            errors=list(errors),
        )

    def generate(
        self,
        repository_id: str,
        kind: ArtifactKind,
        cancel_token: CancellationToken | None = None,
        on_progress: Callable[[FetchProgress], None] | None = None,
    ) -> str:
        if self.generator is None:
            raise GenerationError(
                "No generation backend configured. "
                "Set REPOSCRIBE_GENERATION_URL or GEMINI_API_KEY."
            )
        ingest = self.ingest_contents(repository_id, cancel_token, on_progress)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        return self.generator.generate_artifact(ingest.document, repository_id, kind)

    def generate_readme(
        self,
        repository_id: str,
        cancel_token: CancellationToken | None = None,
        on_progress: Callable[[FetchProgress], None] | None = None,
    ) -> str:
        return self.generate(repository_id, ArtifactKind.README, cancel_token, on_progress)

    def generate_docker_files(
        self,
        repository_id: str,
        cancel_token: CancellationToken | None = None,
        on_progress: Callable[[FetchProgress], None] | None = None,
    ) -> str:
        return self.generate(
            repository_id, ArtifactKind.DOCKER_FILES, cancel_token, on_progress
        )


def build_generator(settings: Settings) -> ArtifactGenerator | None:
    """Prefer the remote endpoint; fall back to calling Gemini in-process."""
    if settings.generation_url:
        return GenerationClient(settings.generation_url, api_key=settings.generation_key)
    if settings.gemini_api_key:
        return GeminiGenerator(settings.gemini_api_key, model=settings.gemini_model)
    return None


def build_service(settings: Settings, credentials: CredentialProvider) -> RepositoryService:
    provider = GitHubProvider(
        credentials, api_base=settings.api_base, timeout=settings.timeout
    )
    return RepositoryService(
        provider,
        credentials,
        generator=build_generator(settings),
        max_workers=settings.max_workers,
    )
