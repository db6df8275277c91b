"""Custom exceptions for Registry API v2 client."""

from typing import Optional


class RegistryError(Exception):
    """Base exception for all registry-related errors."""

    pass


class RegistryConnectionError(RegistryError):
    """Raised when unable to connect to the registry."""

    pass


class HTTPStatusError(RegistryError):
    """Raised for any registry response with a status code of 400 or above.

    Attributes:
        status: HTTP status code of the response
        body: Raw response body
        url: URL of the failed request
        method: HTTP method of the failed request
    """

    def __init__(self, status: int, body: bytes, url: str, method: str = "GET") -> None:
        self.status = status
        self.body = body
        self.url = url
        self.method = method
        super().__init__(
            f"{method} {url}: unexpected status {status}: "
            f"{body.decode('utf-8', errors='replace')[:512]}"
        )


class AuthenticationError(RegistryError):
    """Raised when a bearer token cannot be obtained."""

    pass


class CannotReplayRequestBody(AuthenticationError):
    """Raised when a challenged request has a body but no body factory."""

    def __init__(self, method: str, url: str) -> None:
        self.method = method
        self.url = url
        super().__init__(
            f"{method} {url}: authentication required but the request body "
            "cannot be replayed (no body factory supplied)"
        )


class BlobUploadError(RegistryError):
    """Raised when blob upload fails."""

    def __init__(
        self,
        message: str,
        repository: Optional[str] = None,
        digest: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        self.repository = repository
        self.digest = digest
        self.status = status
        super().__init__(message)


class ManifestError(RegistryError):
    """Raised when manifest operations fail."""

    pass


class DigestMismatchError(RegistryError):
    """Raised when downloaded content does not match its digest."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Digest mismatch: expected {expected}, got {actual}")
