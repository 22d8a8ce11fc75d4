"""Project-scoped credential store on top of a key/value backend.

Secrets live in two tiers under one application namespace: a project tier
(``namespace/project``) and the global tier (``namespace``). Reads and
deletes that name a project fall back to the global tier exactly once, and
only when the project tier reports "not found". Backend errors are never
treated as a miss.
"""

from collections.abc import Callable
from typing import TypeVar

import structlog

from secret_lover.exceptions import (
    CredentialError,
    CredentialFormatError,
    CredentialNotFoundError,
    StorageFailureError,
)

from .backend import CredentialBackend
from .gate import AuthenticationGate, NoAuthenticator
from .listing import CredentialRecord, list_all_credentials
from .namespace import NamespaceResolver

log = structlog.get_logger(__name__)

DEFAULT_NAMESPACE = "secret-lover"

T = TypeVar("T")


class CredentialStore:
    """Add, read, delete and list secrets across project and global tiers.

    The store keeps no state of its own beyond its collaborators; every call
    is answered from the backend.

    Example:
        >>> store = CredentialStore(KeyringBackend())
        >>> store.add("OPENAI_API_KEY", "sk-global")
        >>> store.get("OPENAI_API_KEY", project="webapp")  # falls back
        'sk-global'
        >>> store.add("OPENAI_API_KEY", "sk-webapp", project="webapp")
        >>> store.get("OPENAI_API_KEY", project="webapp")
        'sk-webapp'
    """

    def __init__(
        self,
        backend: CredentialBackend,
        namespace: str = DEFAULT_NAMESPACE,
        gate: AuthenticationGate | None = None,
    ) -> None:
        """Initialize credential store.

        Args:
            backend: Key/value backend holding the secrets
            namespace: Application namespace every service is derived from
            gate: Authentication gate for ``get_with_gate``. Defaults to a
                gate with no mechanism, which always passes.
        """
        self.backend = backend
        self.resolver = NamespaceResolver(namespace)
        self.gate = gate or AuthenticationGate(NoAuthenticator())

    @property
    def namespace(self) -> str:
        return self.resolver.namespace

    def add(self, name: str, value: str, project: str | None = None) -> None:
        """Store ``value`` under ``name``, replacing any existing value.

        The old entry is deleted before the new one is written, so repeated
        adds converge on the latest value. The two steps are not atomic: a
        crash in between leaves the key absent.

        Raises:
            CredentialFormatError: If the name or project is malformed
            StorageFailureError: If the backend fails
        """
        self._validate_name(name)
        service = self.resolver.resolve_service(project)
        reference = f"{service}/{name}"

        replaced = self._call(reference, self.backend.delete, service, name)
        self._call(reference, self.backend.set, service, name, value)

        log.info("credential_added", service=service, name=name, replaced=replaced)

    def get(self, name: str, project: str | None = None) -> str:
        """Return the value of ``name``, searching the project tier first.

        Raises:
            CredentialNotFoundError: If neither tier holds the secret
            CredentialFormatError: If the name or project is malformed
            StorageFailureError: If the backend fails
        """
        self._validate_name(name)
        tiers = self.resolver.tiers(project)

        for service in tiers:
            value = self._call(f"{service}/{name}", self.backend.get, service, name)
            if value is not None:
                log.debug("credential_read", service=service, name=name)
                return value
            log.debug("credential_tier_miss", service=service, name=name)

        scope = f" --project {project}" if project else ""
        raise CredentialNotFoundError(
            f"Secret not found: {name}",
            reference=f"{tiers[0]}/{name}",
            suggestion=f"Store the secret with:\n  secret-lover add {name}{scope}",
        )

    def get_with_gate(self, name: str, project: str | None = None, reason: str | None = None) -> str:
        """Authenticate, then read ``name`` exactly as ``get`` does.

        The backend is not touched unless the gate approves.

        Raises:
            AuthenticationDeniedError: If the gate denies access
            CredentialNotFoundError: If neither tier holds the secret
            StorageFailureError: If the backend fails
        """
        self._validate_name(name)
        # Reject a malformed project before prompting anyone
        self.resolver.tiers(project)
        self.gate.authorize(reason or f"Access secret: {name}", reference=name)
        return self.get(name, project)

    def delete(self, name: str, project: str | None = None) -> bool:
        """Delete ``name`` from the first tier that holds it.

        Deleting a secret that does not exist is not an error.

        Returns:
            True if a secret was removed, False if there was nothing to remove

        Raises:
            CredentialFormatError: If the name or project is malformed
            StorageFailureError: If the backend fails
        """
        self._validate_name(name)

        for service in self.resolver.tiers(project):
            if self._call(f"{service}/{name}", self.backend.delete, service, name):
                log.info("credential_deleted", service=service, name=name)
                return True

        log.info("credential_delete_noop", name=name, project=project)
        return False

    def list_names(self, project: str | None = None) -> list[str]:
        """List secret names in exactly one tier. No fallback, no merging."""
        service = self.resolver.resolve_service(project)
        return self._call(service, self.backend.list_accounts, service)

    def list_all(self) -> list[CredentialRecord]:
        """List every secret in the namespace, classified by project."""
        return self._call(self.namespace, list_all_credentials, self.backend, self.resolver)

    @staticmethod
    def _validate_name(name: str) -> None:
        if not name:
            raise CredentialFormatError("Secret name cannot be empty")

    @staticmethod
    def _call(reference: str, operation: Callable[..., T], *args: object) -> T:
        """Run a backend operation, reporting unexpected errors as storage failures."""
        try:
            return operation(*args)
        except CredentialError:
            raise
        except Exception as e:
            raise StorageFailureError(
                "Credential backend operation failed", reason=str(e), reference=reference
            ) from e
