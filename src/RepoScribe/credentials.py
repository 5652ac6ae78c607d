"""Access credential lookup, backed by the OS keychain where available."""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

_SERVICE_NAME = "RepoScribe"
_AVAILABLE = False

try:
    import keyring
    import keyring.errors

    # PyInstaller frozen bundles cannot auto-detect keyring backends
    # via entry points, so we set them explicitly.
    if getattr(sys, "frozen", False):
        if sys.platform == "darwin":
            from keyring.backends import macOS

            keyring.set_keyring(macOS.Keyring())
        elif sys.platform == "win32":
            from keyring.backends import Windows

            keyring.set_keyring(Windows.WinVaultKeyring())

    _AVAILABLE = True
except Exception:
    logger.warning("keyring not available; token persistence disabled")


GITHUB_TOKEN_KEY = "github_token"


class NoCredentialError(Exception):
    """Raised when no access credential is available for a request."""

    def __init__(self, message: str = "No GitHub token available. Please sign in again."):
        super().__init__(message)


def is_available() -> bool:
    """Return True if the OS keychain is usable."""
    return _AVAILABLE


def load(key: str) -> str | None:
    """Load a token from the OS keychain. Returns None on failure."""
    if not _AVAILABLE:
        return None
    try:
        return keyring.get_password(_SERVICE_NAME, key)
    except keyring.errors.KeyringError as exc:
        logger.warning("Failed to read %s from keyring: %s", key, exc)
        return None


def save(key: str, value: str) -> bool:
    """Save a token to the OS keychain. Returns True on success."""
    if not _AVAILABLE or not value:
        return False
    try:
        keyring.set_password(_SERVICE_NAME, key, value)
        return True
    except keyring.errors.KeyringError:
        logger.warning("Failed to save %s to keyring", key)
        return False


def delete(key: str) -> bool:
    """Delete a token from the OS keychain. Returns True on success."""
    if not _AVAILABLE:
        return False
    try:
        keyring.delete_password(_SERVICE_NAME, key)
        return True
    except keyring.errors.KeyringError:
        return False


class CredentialProvider(ABC):
    """Supplies the current access credential on demand."""

    @abstractmethod
    def get_current_credential(self) -> str | None:
        """Return the current credential, or None when signed out."""

    def require_credential(self) -> str:
        credential = self.get_current_credential()
        if not credential or not credential.strip():
            raise NoCredentialError()
        return credential.strip()


class StaticCredentialProvider(CredentialProvider):
    def __init__(self, credential: str | None):
        self._credential = credential

    def get_current_credential(self) -> str | None:
        return self._credential


class KeyringCredentialProvider(CredentialProvider):
    """Reads the token from the keychain, falling back to a fixed value."""

    def __init__(self, key: str = GITHUB_TOKEN_KEY, fallback: str | None = None):
        self.key = key
        self.fallback = fallback

    def get_current_credential(self) -> str | None:
        return load(self.key) or self.fallback


def resolve_credentials(
    override: str | None, fallback: str | None = None
) -> CredentialProvider:
    """A token typed by the user wins; otherwise keychain, then *fallback*."""
    if override and override.strip():
        return StaticCredentialProvider(override.strip())
    return KeyringCredentialProvider(fallback=fallback)
