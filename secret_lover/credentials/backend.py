"""Abstract backend protocol for credential storage."""

from typing import Protocol


class CredentialBackend(Protocol):
    """Protocol defining the interface for credential storage backends.

    Backends are keyed by ``(service, account)`` and are expected to be
    atomic per key. Nothing is promised across keys.
    """

    @property
    def name(self) -> str:
        """Backend identifier (e.g., 'keyring')."""
        ...

    @property
    def available(self) -> bool:
        """Check if this backend is available on the current system."""
        ...

    def get(self, service: str, account: str) -> str | None:
        """Retrieve a credential.

        Args:
            service: Service identifier (e.g., 'secret-lover/webapp')
            account: Account name within the service (e.g., 'OPENAI_API_KEY')

        Returns:
            Credential value or None if not found

        Raises:
            StorageFailureError: If the backend operation fails
        """
        ...

    def set(self, service: str, account: str, value: str) -> None:
        """Store a credential.

        Raises:
            StorageFailureError: If the backend operation fails
        """
        ...

    def delete(self, service: str, account: str) -> bool:
        """Delete a credential.

        Returns:
            True if credential was deleted, False if not found

        Raises:
            StorageFailureError: If the backend operation fails
        """
        ...

    def list_accounts(self, service: str) -> list[str]:
        """List account names stored under a single service."""
        ...

    def list_all(self) -> list[tuple[str, str]]:
        """List every stored ``(service, account)`` pair."""
        ...
