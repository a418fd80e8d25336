"""
Rotation Error Taxonomy.

Every failure of a rotation invocation surfaces as one of these exceptions.
None of them are retried inside the service; the scheduler that triggered
the invocation retries according to its own policy.

Exception hierarchy:
    RotationError (base)
    ├── RotationDisabledError - rotation is turned off for the secret
    ├── UnknownVersionError - request version not in the version map
    ├── AlreadyCurrentError - request version already holds CURRENT
    ├── NotPendingError - request version doesn't hold PENDING
    ├── NoCurrentVersionError - secret has no CURRENT version to rotate from
    ├── MissingConfigurationError - required setting absent or invalid
    ├── UpstreamUnavailableError - secret store or repository API failure
    └── InvalidStepError - unknown step or malformed trigger event

Each exception carries secret id, version and step so the operator can
diagnose a failed invocation from the error alone.
"""

from libs.common.exceptions import CredentialRotationError


class RotationError(CredentialRotationError):
    """
    Base exception for rotation failures.

    Attributes:
        secret_id: Secret being rotated
        version: Request token (version id) of the rotation
        step: Step name of the failed invocation
        message: Human-readable message (MUST NOT include secret values)

    Example:
        >>> str(NotPendingError(secret_id="artifact-key", version="v2", step="setSecret"))
        'Secret version v2 is not staged AWSPENDING (secret: artifact-key, version: v2, step: setSecret)'
    """

    default_message = "Rotation failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        secret_id: str | None = None,
        version: str | None = None,
        step: str | None = None,
    ) -> None:
        self.secret_id = secret_id
        self.version = version
        self.step = step
        self.message = message or self._build_message()
        super().__init__(self.message)

    def _build_message(self) -> str:
        return self.default_message

    def __str__(self) -> str:
        context_parts = []
        if self.secret_id:
            context_parts.append(f"secret: {self.secret_id}")
        if self.version:
            context_parts.append(f"version: {self.version}")
        if self.step:
            context_parts.append(f"step: {self.step}")
        if context_parts:
            return f"{self.message} ({', '.join(context_parts)})"
        return self.message


class RotationDisabledError(RotationError):
    """Raised when the secret doesn't have rotation enabled."""

    default_message = "Secret rotation is not enabled"


class UnknownVersionError(RotationError):
    """Raised when the request version has no stage on the secret."""

    def _build_message(self) -> str:
        return f"Secret version {self.version} has no stage for rotation"


class AlreadyCurrentError(RotationError):
    """Raised when the request version already holds AWSCURRENT."""

    def _build_message(self) -> str:
        return f"Secret version {self.version} is already staged AWSCURRENT"


class NotPendingError(RotationError):
    """Raised when the request version isn't staged AWSPENDING."""

    def _build_message(self) -> str:
        return f"Secret version {self.version} is not staged AWSPENDING"


class NoCurrentVersionError(RotationError):
    """Raised when createSecret finds no AWSCURRENT value to rotate from."""

    default_message = "Secret has no AWSCURRENT version"


class MissingConfigurationError(RotationError):
    """
    Raised when a required setting is absent or invalid.

    Always raised before any network call, so a misconfigured deployment
    fails without touching the secret store or any repository.

    Attributes:
        settings: Names of the offending settings (environment variable names)
    """

    def __init__(self, settings: list[str], message: str | None = None) -> None:
        self.settings = settings
        super().__init__(message or f"Missing or invalid configuration: {', '.join(settings)}")


class UpstreamUnavailableError(RotationError):
    """Raised when the secret store or a repository API call fails.

    The underlying SecretStoreError/DistributionError is chained as __cause__.
    """

    default_message = "Upstream service unavailable"


class InvalidStepError(RotationError):
    """Raised when the trigger event names an unknown step or lacks required keys."""

    def _build_message(self) -> str:
        return f"Invalid step parameter: {self.step!r}"
