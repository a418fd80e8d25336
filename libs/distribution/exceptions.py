"""Errors raised while distributing a credential to external repositories."""

from libs.common.exceptions import CredentialRotationError


class DistributionError(CredentialRotationError):
    """
    Raised when a repository's public key can't be read, a value can't be
    sealed, or a sealed value can't be uploaded.

    Attributes:
        repository: "owner/name" of the target, if known
        operation: Step that failed ("get_public_key", "seal", "put_secret")
        status_code: HTTP status returned by the API, if any

    Example:
        >>> str(DistributionError("HTTP 404", repository="acme/app", operation="get_public_key"))
        'HTTP 404 (repository: acme/app, operation: get_public_key)'
    """

    def __init__(
        self,
        message: str,
        repository: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.repository = repository
        self.operation = operation
        self.status_code = status_code

    def __str__(self) -> str:
        context_parts = []
        if self.repository:
            context_parts.append(f"repository: {self.repository}")
        if self.operation:
            context_parts.append(f"operation: {self.operation}")
        if context_parts:
            return f"{self.message} ({', '.join(context_parts)})"
        return self.message
