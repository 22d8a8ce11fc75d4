"""Project-scoped credential storage.

Key Components:
    - CredentialStore: add/get/delete/list across project and global tiers
    - NamespaceResolver: (project) -> service identifier mapping
    - AuthenticationGate: synchronous wrapper over callback authenticators
    - KeyringBackend: system keyring storage

Example:
    >>> from secret_lover.credentials import CredentialStore, KeyringBackend
    >>> store = CredentialStore(KeyringBackend())
    >>> store.add("DATABASE_URL", "postgres://localhost/dev", project="webapp")
"""

from secret_lover.exceptions import (
    AuthenticationDeniedError,
    AuthenticationTimeoutError,
    BackendNotAvailableError,
    CredentialError,
    CredentialFormatError,
    CredentialNotFoundError,
    InvalidProjectError,
    StorageFailureError,
)

from .backend import CredentialBackend
from .gate import (
    AuthenticationGate,
    Authenticator,
    CommandAuthenticator,
    ConfirmAuthenticator,
    GateState,
    NoAuthenticator,
    build_authenticator,
    build_gate,
)
from .keyring_backend import KeyringBackend
from .listing import CredentialRecord, format_records, list_all_credentials
from .namespace import GLOBAL_PROJECT, NamespaceResolver
from .store import DEFAULT_NAMESPACE, CredentialStore

__all__ = [
    "AuthenticationDeniedError",
    "AuthenticationGate",
    "AuthenticationTimeoutError",
    "Authenticator",
    "BackendNotAvailableError",
    "CommandAuthenticator",
    "ConfirmAuthenticator",
    "CredentialBackend",
    "CredentialError",
    "CredentialFormatError",
    "CredentialNotFoundError",
    "CredentialRecord",
    "CredentialStore",
    "DEFAULT_NAMESPACE",
    "GLOBAL_PROJECT",
    "GateState",
    "InvalidProjectError",
    "KeyringBackend",
    "NamespaceResolver",
    "NoAuthenticator",
    "StorageFailureError",
    "build_authenticator",
    "build_gate",
    "format_records",
    "list_all_credentials",
]
