"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock, patch

import pytest
import structlog
from keyring.errors import PasswordDeleteError

from secret_lover.credentials import AuthenticationGate, CredentialStore, NoAuthenticator
from secret_lover.exceptions import StorageFailureError


class InMemoryBackend:
    """Dictionary-backed credential backend that records every call.

    ``fail_on`` maps an operation name to an error message; that operation
    then raises StorageFailureError instead of touching the data.
    """

    def __init__(self):
        self.data: dict[tuple[str, str], str] = {}
        self.calls: list[tuple] = []
        self.fail_on: dict[str, str] = {}

    @property
    def name(self):
        return "memory"

    @property
    def available(self):
        return True

    def _record(self, operation, *args):
        self.calls.append((operation, *args))
        if operation in self.fail_on:
            raise StorageFailureError("Backend failure", reason=self.fail_on[operation])

    def get(self, service, account):
        self._record("get", service, account)
        return self.data.get((service, account))

    def set(self, service, account, value):
        self._record("set", service, account)
        self.data[(service, account)] = value

    def delete(self, service, account):
        self._record("delete", service, account)
        return self.data.pop((service, account), None) is not None

    def list_accounts(self, service):
        self._record("list_accounts", service)
        return sorted(account for entry_service, account in self.data if entry_service == service)

    def list_all(self):
        self._record("list_all")
        return sorted(self.data)

    def operations(self):
        """Names of the operations called so far, in order."""
        return [call[0] for call in self.calls]


class ScriptedAuthenticator:
    """Authenticator answering every challenge with a fixed decision."""

    def __init__(self, approve=True, available=True):
        self.approve = approve
        self._available = available
        self.reasons: list[str] = []

    @property
    def name(self):
        return "scripted"

    @property
    def available(self):
        return self._available

    def challenge(self, reason, on_decision):
        self.reasons.append(reason)
        on_decision(self.approve)


@pytest.fixture
def backend():
    """Empty in-memory backend."""
    return InMemoryBackend()


@pytest.fixture
def store(backend):
    """CredentialStore with an isolated namespace and a pass-through gate."""
    return CredentialStore(backend, namespace="test-ns", gate=AuthenticationGate(NoAuthenticator()))


@pytest.fixture
def approving_authenticator():
    return ScriptedAuthenticator(approve=True)


@pytest.fixture
def denying_authenticator():
    return ScriptedAuthenticator(approve=False)


@pytest.fixture
def unavailable_authenticator():
    return ScriptedAuthenticator(approve=False, available=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop logging configuration made by CLI invocations (bound to their streams)."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_keyring():
    """Patch the keyring module with a dictionary-backed fake."""
    passwords: dict[tuple[str, str], str] = {}

    def get_password(service, account):
        return passwords.get((service, account))

    def set_password(service, account, value):
        passwords[(service, account)] = value

    def delete_password(service, account):
        if (service, account) not in passwords:
            raise PasswordDeleteError("Password not found")
        del passwords[(service, account)]

    with (
        patch("secret_lover.credentials.keyring_backend.KEYRING_AVAILABLE", True),
        patch("secret_lover.credentials.keyring_backend.keyring") as mock_keyring,
    ):
        mock_keyring.get_keyring.return_value = MagicMock()
        mock_keyring.get_password.side_effect = get_password
        mock_keyring.set_password.side_effect = set_password
        mock_keyring.delete_password.side_effect = delete_password
        mock_keyring.passwords = passwords
        yield mock_keyring

