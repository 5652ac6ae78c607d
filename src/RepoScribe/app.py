"""Streamlit UI for RepoScribe."""

from __future__ import annotations

import logging

import streamlit as st

from RepoScribe import credentials
from RepoScribe.cancellation import OperationCancelled
from RepoScribe.config import ConfigError, Settings, load_settings
from RepoScribe.credentials import (
    GITHUB_TOKEN_KEY,
    CredentialProvider,
    NoCredentialError,
    resolve_credentials,
)
from RepoScribe.generation import GenerationError, GenerationRateLimitError
from RepoScribe.models import ArtifactKind, FetchProgress
from RepoScribe.providers.base import ListingError
from RepoScribe.providers.github import RateLimitError
from RepoScribe.service import RepositoryService, build_service
from RepoScribe.url_parser import URLParseError, parse_repository_id, repository_name

logger = logging.getLogger(__name__)

_PREVIEW_MAX_LINES = 1000


def main() -> None:
    st.set_page_config(page_title="RepoScribe", page_icon="📄", layout="wide")

    try:
        settings = load_settings()
    except ConfigError as exc:
        st.error(f"Configuration error: {exc}")
        return
    logging.basicConfig(level=settings.log_level)

    header_left, header_right = st.columns([8, 1])
    with header_left:
        st.title("RepoScribe")
    with header_right:
        with st.popover("⚙", use_container_width=True):
            credential_provider = _token_settings(settings)

    st.caption(
        "Ingest a GitHub repository for an LLM, or generate its README "
        "and Docker deployment files."
    )

    service = build_service(settings, credential_provider)
    repository_id = _pick_repository(service)
    if not repository_id:
        return

    actions = {
        "Analyze Repository": "structure",
        "Create LLM Ingest": "ingest",
        "Generate README": ArtifactKind.README,
        "Generate Docker Files": ArtifactKind.DOCKER_FILES,
    }
    columns = st.columns(len(actions))
    for column, (label, action) in zip(columns, actions.items()):
        if column.button(label, use_container_width=True):
            _run_action(service, repository_id, action)

    if "result" in st.session_state:
        _show_result(st.session_state["result"])


def _token_settings(settings: Settings) -> CredentialProvider:
    st.subheader("Settings")
    saved = credentials.load(GITHUB_TOKEN_KEY)
    if saved:
        source = "Using the token saved in the OS keychain."
    elif settings.github_token:
        source = "Using GITHUB_TOKEN from the environment."
    else:
        source = "No token configured."
    override = st.text_input(
        "GitHub Token",
        type="password",
        help="A token with read access to the repositories you want to use.",
        placeholder=source,
    ).strip()

    if credentials.is_available():
        remember = st.checkbox("Save token to OS keychain", value=bool(saved))
        if remember and override:
            credentials.save(GITHUB_TOKEN_KEY, override)
        elif saved and not remember:
            credentials.delete(GITHUB_TOKEN_KEY)
    return resolve_credentials(override, fallback=settings.github_token)


def _pick_repository(service: RepositoryService) -> str | None:
    options: list[str] = []
    if service.credentials.get_current_credential():
        try:
            options = [repo.full_name for repo in _user_repositories(service)]
        except ListingError as exc:
            st.warning(f"Could not load your repositories: {exc}")

    if options:
        choice = st.selectbox("Repository", options)
    else:
        choice = st.text_input("Repository", placeholder="owner/repo")
    if not choice:
        return None

    try:
        return parse_repository_id(choice)
    except URLParseError as exc:
        st.error(f"Invalid repository: {exc}")
        return None


def _user_repositories(service: RepositoryService):
    token = service.credentials.get_current_credential()
    if st.session_state.get("repositories_token") != token:
        st.session_state["repositories"] = service.provider.list_user_repositories()
        st.session_state["repositories_token"] = token
    return st.session_state["repositories"]


def _run_action(service: RepositoryService, repository_id: str, action) -> None:
    progress_bar = st.progress(0, text="Fetching files...")

    def _on_progress(progress: FetchProgress) -> None:
        pct = progress.fetched_files / max(progress.total_files, 1)
        progress_bar.progress(pct, text=f"Fetching: {progress.current_file}")

    try:
        if action == "structure":
            with st.spinner("Analyzing repository..."):
                result = service.analyze_structure(repository_id)
            meta = result.metadata
            st.session_state["result"] = {
                "title": "Directory Structure",
                "text": result.structure,
                "language": "text",
                "filename": f"{meta.repository_name}_structure.txt",
                "caption": (
                    f"{meta.repository_name}: {meta.file_count:,} files, "
                    f"~{meta.estimated_tokens:,} tokens (estimated)"
                ),
                "errors": [],
            }
        elif action == "ingest":
            result = service.ingest_contents(repository_id, on_progress=_on_progress)
            st.session_state["result"] = {
                "title": "Files Content",
                "text": result.document,
                "language": "text",
                "filename": f"{repository_name(repository_id)}_ingest.txt",
                "caption": (
                    f"Fetched content from {result.file_count:,} files, "
                    f"~{result.token_count:,} tokens (estimated)"
                ),
                "errors": result.errors,
            }
        else:
            text = service.generate(repository_id, action, on_progress=_on_progress)
            readme = action is ArtifactKind.README
            st.session_state["result"] = {
                "title": "README.md" if readme else "Docker Files",
                "text": text,
                "language": "markdown",
                "filename": "README.md" if readme else "docker-files.md",
                "caption": f"Generated for {repository_id}",
                "errors": [],
            }
        progress_bar.progress(1.0, text="Done!")
    except (NoCredentialError, RateLimitError, GenerationRateLimitError) as exc:
        st.error(str(exc))
    except ListingError as exc:
        st.error(f"Failed to fetch repository contents: {exc}")
    except GenerationError as exc:
        st.error(f"Generation failed: {exc.message}")
    except OperationCancelled:
        st.warning("Operation cancelled.")
    except Exception as exc:
        logger.exception("Unexpected error")
        st.error(f"Unexpected error: {exc}")


def _show_result(result: dict) -> None:
    """Display download button and preview from a stored result."""
    st.subheader(result["title"])
    st.caption(result["caption"])

    errors = result["errors"]
    if errors:
        with st.expander(f"⚠ {len(errors)} errors", expanded=False):
            for err in errors:
                st.text(err)

    text = result["text"]
    st.download_button(
        label=f"Download {result['filename']}",
        data=text,
        file_name=result["filename"],
        mime="text/plain",
        use_container_width=True,
    )

    preview_lines = text.split("\n")
    with st.expander("Preview", expanded=True):
        if len(preview_lines) > _PREVIEW_MAX_LINES:
            truncated = "\n".join(preview_lines[:_PREVIEW_MAX_LINES])
            st.code(truncated, language=result["language"])
            st.caption(
                f"Preview is truncated to {_PREVIEW_MAX_LINES:,} lines "
                f"(total {len(preview_lines):,} lines). "
                "Download the file for the full content."
            )
        else:
            st.code(text, language=result["language"])


if __name__ == "__main__":
    main()
