"""OS-level keyring backend using system credential stores.

Platform Support:
- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Locker

The keyring API has no portable way to enumerate stored entries, so this
backend records every ``(service, account)`` pair it writes in an index
entry kept in the keyring itself. Entries written by other tools under the
same service names are readable but do not show up in listings until they
are stored again through this backend.
"""

from __future__ import annotations

import json
from typing import cast

import structlog

try:
    import keyring
    from keyring.errors import KeyringError, PasswordDeleteError

    KEYRING_AVAILABLE = True
except ImportError:
    KEYRING_AVAILABLE = False

from secret_lover.exceptions import BackendNotAvailableError, StorageFailureError

log = structlog.get_logger(__name__)

DEFAULT_INDEX_SERVICE = "secret-lover.index"
INDEX_ACCOUNT = "entries"


class KeyringBackend:
    """Credential storage in the system keyring.

    Example:
        >>> backend = KeyringBackend()
        >>> backend.set('secret-lover/webapp', 'OPENAI_API_KEY', 'sk-abc123')
        >>> backend.get('secret-lover/webapp', 'OPENAI_API_KEY')
        'sk-abc123'
        >>> backend.list_all()
        [('secret-lover/webapp', 'OPENAI_API_KEY')]
    """

    def __init__(self, index_service: str = DEFAULT_INDEX_SERVICE) -> None:
        """Initialize keyring backend.

        Args:
            index_service: Keyring service holding the entry index. Must not
                be a service that credentials are stored under.
        """
        self.index_service = index_service

    @property
    def name(self) -> str:
        """Get backend identifier.

        Returns:
            Backend name constant "keyring"
        """
        return "keyring"

    @property
    def available(self) -> bool:
        """Check if keyring is available.

        Returns False if:
        - keyring package not installed
        - No backend configured (headless systems)
        - Backend fails to initialize
        """
        if not KEYRING_AVAILABLE:
            return False

        try:
            keyring.get_keyring()
            return True
        except Exception as e:
            log.debug("keyring_unavailable", error=str(e))
            return False

    def get(self, service: str, account: str) -> str | None:
        """Retrieve credential from OS keyring.

        Returns:
            Credential value or None if not found

        Raises:
            BackendNotAvailableError: If keyring is not available
            StorageFailureError: If keyring operation fails
        """
        self._require_available()

        try:
            credential = cast(str | None, keyring.get_password(service, account))
        except KeyringError as e:
            raise StorageFailureError(
                "Keyring read failed", reason=str(e), reference=f"{service}/{account}"
            ) from e

        if credential is not None:
            log.debug("keyring_credential_read", service=service, account=account)
        return credential

    def set(self, service: str, account: str, value: str) -> None:
        """Store credential in OS keyring and record it in the index.

        Raises:
            BackendNotAvailableError: If keyring is not available
            StorageFailureError: If keyring operation fails
        """
        self._require_available()

        try:
            keyring.set_password(service, account, value)
        except KeyringError as e:
            raise StorageFailureError(
                "Failed to store credential", reason=str(e), reference=f"{service}/{account}"
            ) from e

        entries = self._load_index()
        if (service, account) not in entries:
            entries.add((service, account))
            self._save_index(entries)

        log.info("keyring_credential_stored", service=service, account=account)

    def delete(self, service: str, account: str) -> bool:
        """Delete credential from OS keyring.

        Returns:
            True if deleted, False if not found

        Raises:
            BackendNotAvailableError: If keyring is not available
            StorageFailureError: If keyring operation fails
        """
        self._require_available()

        try:
            keyring.delete_password(service, account)
            deleted = True
        except PasswordDeleteError:
            # Credential doesn't exist - not an error
            deleted = False
        except KeyringError as e:
            raise StorageFailureError(
                "Failed to delete credential", reason=str(e), reference=f"{service}/{account}"
            ) from e

        # Drop the index entry even when the keyring copy was already gone
        entries = self._load_index()
        if (service, account) in entries:
            entries.discard((service, account))
            self._save_index(entries)

        if deleted:
            log.info("keyring_credential_deleted", service=service, account=account)
        return deleted

    def list_accounts(self, service: str) -> list[str]:
        """List account names recorded under ``service``."""
        self._require_available()
        return sorted(account for entry_service, account in self._load_index() if entry_service == service)

    def list_all(self) -> list[tuple[str, str]]:
        """List every recorded ``(service, account)`` pair."""
        self._require_available()
        return sorted(self._load_index())

    def _require_available(self) -> None:
        if not self.available:
            raise BackendNotAvailableError(
                "Keyring backend is not available",
                suggestion="Install keyring and configure a system backend: pip install keyring",
            )

    def _load_index(self) -> set[tuple[str, str]]:
        """Read the entry index from the keyring.

        Raises:
            StorageFailureError: If the index cannot be read or is corrupt
        """
        try:
            raw = keyring.get_password(self.index_service, INDEX_ACCOUNT)
        except KeyringError as e:
            raise StorageFailureError(
                "Failed to read credential index", reason=str(e), reference=self.index_service
            ) from e

        if not raw:
            return set()

        try:
            data = json.loads(raw)
            return {(str(service), str(account)) for service, account in data}
        except (ValueError, TypeError) as e:
            raise StorageFailureError(
                "Credential index is corrupt",
                reason=str(e),
                reference=f"{self.index_service}/{INDEX_ACCOUNT}",
                suggestion="Delete the index entry and store the credentials again",
            ) from e

    def _save_index(self, entries: set[tuple[str, str]]) -> None:
        payload = json.dumps([list(entry) for entry in sorted(entries)])
        try:
            keyring.set_password(self.index_service, INDEX_ACCOUNT, payload)
        except KeyringError as e:
            raise StorageFailureError(
                "Failed to update credential index", reason=str(e), reference=self.index_service
            ) from e
        log.debug("keyring_index_saved", entries=len(entries))
