"""Application error hierarchy.

Every error carries the HTTP status code the API layer answers with, so the
FastAPI exception handler can translate them without knowing each type.
"""


class AppError(Exception):
    """Base class for all errors raised by the chat and ingestion core."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Raised when a request is incomplete. Always raised before any external call."""

    status_code = 400


class CredentialError(AppError):
    """Raised when a user's provider API key is missing or unusable."""

    status_code = 400


class InvalidFormatError(CredentialError):
    """Raised when a serialized secret is not '<hex iv>:<hex ciphertext>'."""


class NotFoundError(AppError):
    """Raised when a conversation or store does not exist for the calling user."""

    status_code = 404


class ProviderError(AppError):
    """Raised when the retrieval/generation provider fails or returns an embedded error.

    Attributes:
        upstream_status: HTTP status returned by the provider, if any.
    """

    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class IngestionTimeoutError(AppError):
    """Raised by the ingestion poll loop when the attempt ceiling is reached."""

    status_code = 504

    def __init__(self, message: str, operation_name: str | None = None) -> None:
        super().__init__(message)
        self.operation_name = operation_name
