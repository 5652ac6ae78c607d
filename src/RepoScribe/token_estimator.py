"""Approximate LLM token counts for repository text."""

from __future__ import annotations

import logging
import math
import re

import requests

from RepoScribe.aggregator import decode_content
from RepoScribe.cancellation import CancellationToken
from RepoScribe.models import Entry, RepositoryMetadata
from RepoScribe.providers.base import FileFetchError, RepoProvider
from RepoScribe.url_parser import repository_name

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10
WORD_TOKEN_RATIO = 1.3
CHARS_PER_TOKEN = 4

_WHITESPACE = re.compile(r"\s+")


def estimate_tokens(text: str) -> int:
    """Estimate tokens as the larger of a word-based and a char-based guess.

    Words are the pieces left by splitting on whitespace runs, including the
    empty pieces before leading and after trailing whitespace. Empty text is
    one empty word, so it estimates to 2.
    """
    word_based = math.ceil(len(_WHITESPACE.split(text)) * WORD_TOKEN_RATIO)
    char_based = math.ceil(len(text) / CHARS_PER_TOKEN)
    return max(word_based, char_based)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def estimate_repository_tokens(sample_tokens: list[int], file_count: int) -> int:
    """Scale the per-file average of *sample_tokens* up to *file_count* files."""
    if not sample_tokens:
        return 0
    average = sum(sample_tokens) / len(sample_tokens)
    return _round_half_up(average * file_count)


def calculate_repository_metadata(
    provider: RepoProvider,
    repository_id: str,
    entries: list[Entry],
    cancel_token: CancellationToken | None = None,
) -> RepositoryMetadata:
    """Summarize a traversal, fetching the first few files to estimate size.

    Sampled files that cannot be fetched or decoded count as zero tokens
    but still take part in the average.
    """
    files = [entry for entry in entries if entry.is_file]
    sample = files[:SAMPLE_SIZE]

    sample_tokens: list[int] = []
    for entry in sample:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        tokens = 0
        try:
            payload = provider.fetch_file(repository_id, entry.path)
            text = decode_content(payload.get("content"))
            if text is not None:
                tokens = estimate_tokens(text)
        except (FileFetchError, requests.RequestException, ValueError) as exc:
            logger.warning("Could not sample %s: %s", entry.path, exc)
        sample_tokens.append(tokens)

    return RepositoryMetadata(
        repository_name=repository_name(repository_id),
        file_count=len(files),
        estimated_tokens=estimate_repository_tokens(sample_tokens, len(files)),
    )
