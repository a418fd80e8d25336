"""
Secret Store Exception Hierarchy.

This module defines the exceptions raised by the versioned secret store
adapter, giving the rotation state machine clear semantics for "value does
not exist", "backend refused or unreachable" and "write rejected".

Exception hierarchy:
    SecretStoreError (base)
    ├── SecretNotFoundError - Secret, version or stage doesn't exist
    ├── SecretAccessError - Permission/authentication/network failure on read
    └── SecretWriteError - Failed to write a version or move a stage label

All exceptions include structured context (secret name, backend type) without
exposing secret values.
"""

from libs.common.exceptions import CredentialRotationError


class SecretStoreError(CredentialRotationError):
    """
    Base exception for all secret store errors.

    Attributes:
        secret_name: Secret id (name or ARN) the operation targeted
        backend: Backend type ("aws", "memory")
        message: Human-readable error message (MUST NOT include secret value)

    Example:
        >>> str(SecretStoreError("Timeout", "artifact-key", "aws"))
        'Timeout (secret: artifact-key, backend: aws)'
    """

    def __init__(
        self,
        message: str,
        secret_name: str | None = None,
        backend: str | None = None,
    ) -> None:
        super().__init__(message)
        self.secret_name = secret_name
        self.backend = backend
        self.message = message

    def __str__(self) -> str:
        context_parts = []
        if self.secret_name:
            context_parts.append(f"secret: {self.secret_name}")
        if self.backend:
            context_parts.append(f"backend: {self.backend}")

        if context_parts:
            context = ", ".join(context_parts)
            return f"{self.message} ({context})"
        return self.message


class SecretNotFoundError(SecretStoreError):
    """
    Raised when a secret, or the requested version/stage of it, doesn't exist.

    The rotation state machine relies on this exception to detect that no
    PENDING value has been written yet (createSecret) and that no CURRENT
    version exists, so backends MUST raise it (and only it) for those cases.

    Example:
        >>> store.get_secret_value("artifact-key", version_id="v2", stage=VersionStage.PENDING)
        SecretNotFoundError: Secret 'artifact-key' not found in AWS. No value at
                             version v2 with stage AWSPENDING (secret: artifact-key, backend: aws)
    """

    def __init__(
        self,
        secret_name: str,
        backend: str,
        additional_context: str | None = None,
    ) -> None:
        if not isinstance(secret_name, str) or not secret_name:
            raise TypeError("secret_name must be a non-empty string")
        if not isinstance(backend, str) or not backend:
            raise TypeError("backend must be a non-empty string")

        base_message = f"Secret '{secret_name}' not found in {backend.upper()}"
        if additional_context:
            base_message += f". {additional_context}"

        super().__init__(
            message=base_message,
            secret_name=secret_name,
            backend=backend,
        )


class SecretAccessError(SecretStoreError):
    """
    Raised when reading from the secret store fails for a reason other than
    absence: missing IAM permission, invalid credentials, throttling after
    SDK retries, or the endpoint being unreachable.

    Resolution:
    - Verify the function role: `aws sts get-caller-identity`
    - Check IAM policy grants secretsmanager:DescribeSecret/GetSecretValue
    - Check SECRET_MANAGER_ENDPOINT if overridden (VPC endpoint)
    """

    def __init__(
        self,
        secret_name: str,
        backend: str,
        reason: str,
    ) -> None:
        if not isinstance(secret_name, str) or not secret_name:
            raise TypeError("secret_name must be a non-empty string")
        if not isinstance(backend, str) or not backend:
            raise TypeError("backend must be a non-empty string")
        if not isinstance(reason, str) or not reason:
            raise TypeError("reason must be a non-empty string")

        super().__init__(
            message=f"Failed to access secret: {reason}",
            secret_name=secret_name,
            backend=backend,
        )


class SecretWriteError(SecretStoreError):
    """
    Raised when writing a new version or moving a stage label fails.

    Common causes:
    - Missing secretsmanager:PutSecretValue/UpdateSecretVersionStage permission
    - A different value already exists at the requested version id
    - remove_from_version_id doesn't currently hold the stage being moved
    """

    def __init__(
        self,
        secret_name: str,
        backend: str,
        reason: str,
    ) -> None:
        if not isinstance(secret_name, str) or not secret_name:
            raise TypeError("secret_name must be a non-empty string")
        if not isinstance(backend, str) or not backend:
            raise TypeError("backend must be a non-empty string")
        if not isinstance(reason, str) or not reason:
            raise TypeError("reason must be a non-empty string")

        super().__init__(
            message=f"Failed to write secret: {reason}",
            secret_name=secret_name,
            backend=backend,
        )
