"""Tests for credentials module."""

from unittest import mock

import pytest
from keyring.errors import KeyringError, PasswordDeleteError, PasswordSetError

from RepoScribe import credentials
from RepoScribe.credentials import (
    KeyringCredentialProvider,
    NoCredentialError,
    StaticCredentialProvider,
    resolve_credentials,
)


def _mock_keyring() -> mock.MagicMock:
    mock_keyring = mock.MagicMock()
    mock_keyring.errors.KeyringError = KeyringError
    return mock_keyring


class TestIsAvailable:
    def test_returns_bool(self):
        assert isinstance(credentials.is_available(), bool)


class TestWhenUnavailable:
    def test_load_returns_none(self):
        with mock.patch.object(credentials, "_AVAILABLE", False):
            assert credentials.load("any_key") is None

    def test_save_returns_false(self):
        with mock.patch.object(credentials, "_AVAILABLE", False):
            assert credentials.save("key", "value") is False

    def test_delete_returns_false(self):
        with mock.patch.object(credentials, "_AVAILABLE", False):
            assert credentials.delete("any_key") is False

    def test_empty_value_not_saved(self):
        with mock.patch.object(credentials, "_AVAILABLE", True):
            assert credentials.save("key", "") is False


class TestWithKeyring:
    def test_load_returns_password(self):
        mock_keyring = _mock_keyring()
        mock_keyring.get_password.return_value = "my-token"
        with mock.patch.object(credentials, "_AVAILABLE", True), \
             mock.patch.dict(credentials.__dict__, {"keyring": mock_keyring}):
            assert credentials.load("github_token") == "my-token"
            mock_keyring.get_password.assert_called_once_with(
                "RepoScribe", "github_token"
            )

    def test_load_returns_none_on_keyring_error(self):
        mock_keyring = _mock_keyring()
        mock_keyring.get_password.side_effect = KeyringError("locked")
        with mock.patch.object(credentials, "_AVAILABLE", True), \
             mock.patch.dict(credentials.__dict__, {"keyring": mock_keyring}):
            assert credentials.load("github_token") is None

    def test_save_and_return_true(self):
        mock_keyring = _mock_keyring()
        with mock.patch.object(credentials, "_AVAILABLE", True), \
             mock.patch.dict(credentials.__dict__, {"keyring": mock_keyring}):
            assert credentials.save("github_token", "my-token") is True
            mock_keyring.set_password.assert_called_once_with(
                "RepoScribe", "github_token", "my-token"
            )

    def test_save_returns_false_on_error(self):
        mock_keyring = _mock_keyring()
        mock_keyring.set_password.side_effect = PasswordSetError("denied")
        with mock.patch.object(credentials, "_AVAILABLE", True), \
             mock.patch.dict(credentials.__dict__, {"keyring": mock_keyring}):
            assert credentials.save("github_token", "my-token") is False

    def test_delete_returns_false_on_error(self):
        mock_keyring = _mock_keyring()
        mock_keyring.delete_password.side_effect = PasswordDeleteError("missing")
        with mock.patch.object(credentials, "_AVAILABLE", True), \
             mock.patch.dict(credentials.__dict__, {"keyring": mock_keyring}):
            assert credentials.delete("github_token") is False


class TestCredentialProviders:
    def test_static_returns_stripped_token(self):
        assert StaticCredentialProvider(" tok \n").require_credential() == "tok"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_credential_raises(self, value):
        with pytest.raises(NoCredentialError, match="sign in"):
            StaticCredentialProvider(value).require_credential()

    def test_keyring_provider_prefers_keychain(self):
        with mock.patch.object(credentials, "load", return_value="from-keychain"):
            provider = KeyringCredentialProvider(fallback="from-env")
            assert provider.get_current_credential() == "from-keychain"

    def test_keyring_provider_falls_back(self):
        with mock.patch.object(credentials, "load", return_value=None):
            provider = KeyringCredentialProvider(fallback="from-env")
            assert provider.get_current_credential() == "from-env"


class TestResolveCredentials:
    def test_typed_token_wins(self):
        with mock.patch.object(credentials, "load", return_value="from-keychain"):
            provider = resolve_credentials(" typed ", fallback="from-env")
            assert isinstance(provider, StaticCredentialProvider)
            assert provider.require_credential() == "typed"

    def test_blank_override_uses_keychain(self):
        with mock.patch.object(credentials, "load", return_value="from-keychain"):
            provider = resolve_credentials("  ", fallback="from-env")
            assert isinstance(provider, KeyringCredentialProvider)
            assert provider.require_credential() == "from-keychain"

    def test_falls_back_to_environment_token(self):
        with mock.patch.object(credentials, "load", return_value=None):
            provider = resolve_credentials("", fallback="from-env")
            assert provider.require_credential() == "from-env"

    def test_nothing_configured(self):
        with mock.patch.object(credentials, "load", return_value=None):
            with pytest.raises(NoCredentialError):
                resolve_credentials(None).require_credential()
