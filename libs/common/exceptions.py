"""
Exception root for the credential rotation service.

Every custom exception raised by the secret store adapter, the credential
distributor and the rotation state machine inherits from
CredentialRotationError, so the invocation entrypoint can log any failure
with one handler before letting it propagate.

Hierarchy:
    CredentialRotationError
    ├── SecretStoreError (libs/secrets/exceptions.py)
    ├── DistributionError (libs/distribution/exceptions.py)
    └── RotationError (libs/rotation/exceptions.py)
"""


class CredentialRotationError(Exception):
    """
    Base exception for all credential rotation errors.

    Messages MUST NOT contain secret values, generated passwords or API
    tokens. Identify the failing resource by name only.

    Example:
        >>> try:
        ...     rotator.handle(request)
        ... except CredentialRotationError as e:
        ...     logger.error("rotation_failed", extra={"error": str(e)})
        ...     raise
    """

    pass
