"""Custom exception hierarchy for secret-lover.

Exception Hierarchy:
    SecretLoverError (base)
    ├── ConfigurationError
    └── CredentialError
        ├── CredentialNotFoundError
        ├── CredentialFormatError
        │   └── InvalidProjectError
        ├── StorageFailureError
        │   └── BackendNotAvailableError
        └── AuthenticationDeniedError
            └── AuthenticationTimeoutError

Example Usage:
    >>> from secret_lover.exceptions import CredentialNotFoundError
    >>> try:
    ...     store.get("OPENAI_API_KEY", project="webapp")
    ... except CredentialNotFoundError as e:
    ...     print(e.suggestion)
"""


class SecretLoverError(Exception):
    """Base exception for all secret-lover errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(SecretLoverError):
    """Configuration file is missing, unreadable or invalid."""

    pass


class CredentialError(SecretLoverError):
    """Credential-related errors.

    This is the base class for everything the credential store raises, so
    callers can handle any store failure with a single except clause.

    Attributes:
        message: Human-readable error description
        reference: The credential that failed, as "service/name"
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: The credential reference that failed
            suggestion: Optional suggestion for resolution
        """
        self.reference = reference
        self.suggestion = suggestion

        full_message = message
        if reference:
            full_message = f"{message} (reference: {reference})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class CredentialNotFoundError(CredentialError):
    """Credential is absent from every tier that was searched."""

    pass


class CredentialFormatError(CredentialError):
    """Credential name or scope is malformed."""

    pass


class InvalidProjectError(CredentialFormatError):
    """Project scope contains the tier separator."""

    pass


class StorageFailureError(CredentialError):
    """Backend operation failed for a reason other than "not found".

    The backend's own diagnostic text is kept verbatim in ``reason``.
    """

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.reason = reason
        if reason and reason not in message:
            message = f"{message}: {reason}"
        super().__init__(message, reference=reference, suggestion=suggestion)


class BackendNotAvailableError(StorageFailureError):
    """Requested backend is not available on this system."""

    pass


class AuthenticationDeniedError(CredentialError):
    """Authentication gate refused access to a secret."""

    pass


class AuthenticationTimeoutError(AuthenticationDeniedError):
    """Authentication gate did not decide within the configured timeout.

    Attributes:
        timeout_seconds: The timeout that was exceeded
    """

    def __init__(
        self,
        message: str,
        timeout_seconds: float | None = None,
        reference: str | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        if timeout_seconds is not None and "timeout" not in message.lower():
            message = f"{message} (timeout: {timeout_seconds}s)"
        super().__init__(message, reference=reference)
