"""
Versioned Secret Store Interface.

This module defines the contract the rotation state machine consumes: a
secret store whose secrets carry multiple versions, each tagged with zero or
more stage labels. The contract mirrors AWS Secrets Manager, which is the
production backend; the in-memory backend implements the same semantics for
local runs and tests.

Architecture:
    VersionedSecretStore (ABC)
    ├── AWSSecretsManagerStore - AWS Secrets Manager via boto3 (aws_backend.py)
    └── InMemorySecretStore - process-local emulation (memory_backend.py)

Staging semantics every backend MUST honour:
    - A stage label is attached to at most one version of a secret.
    - Attaching a label to a version removes it from whichever version had it.
    - Moving CURRENT to a new version attaches PREVIOUS to the version that
      lost CURRENT, in the same operation.
    - update_version_stage with remove_from_version_id fails unless that
      version currently holds the label.

Security Requirements:
    - Secret values NEVER logged (only secret ids, version ids, stages)
    - No caching: every call reads live state from the backend
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import TracebackType

from libs.secrets.exceptions import (
    SecretAccessError,  # noqa: F401 - Used in docstrings for documentation
    SecretNotFoundError,  # noqa: F401 - Used in docstrings for documentation
    SecretWriteError,  # noqa: F401 - Used in docstrings for documentation
)


class VersionStage(str, Enum):
    """Stage labels used by the rotation lifecycle (AWS wire values)."""

    CURRENT = "AWSCURRENT"
    PENDING = "AWSPENDING"
    PREVIOUS = "AWSPREVIOUS"


@dataclass(frozen=True)
class SecretMetadata:
    """
    Rotation-relevant metadata of a secret, as returned by describe_secret().

    Attributes:
        rotation_enabled: Whether rotation is turned on for the secret
        version_stages: version id -> stage labels attached to that version.
            Labels outside VersionStage (custom labels) are kept as plain strings.
    """

    rotation_enabled: bool
    version_stages: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def stages_of(self, version_id: str) -> frozenset[str]:
        """Return the labels attached to version_id (empty if unknown)."""
        return self.version_stages.get(version_id, frozenset())

    def has_stage(self, version_id: str, stage: VersionStage) -> bool:
        return stage.value in self.stages_of(version_id)

    def version_with_stage(self, stage: VersionStage) -> str | None:
        """Return the version currently holding stage, or None."""
        for version_id, stages in self.version_stages.items():
            if stage.value in stages:
                return version_id
        return None

    @classmethod
    def from_mapping(
        cls, rotation_enabled: bool, versions: Mapping[str, Iterable[str]] | None
    ) -> "SecretMetadata":
        """Build metadata from a raw version -> labels mapping (e.g. boto3 response)."""
        return cls(
            rotation_enabled=rotation_enabled,
            version_stages={
                version_id: frozenset(stages) for version_id, stages in (versions or {}).items()
            },
        )


class VersionedSecretStore(ABC):
    """
    Abstract base class for versioned secret store backends.

    Implementations MUST raise SecretNotFoundError when the secret, the
    version or the version/stage combination doesn't exist, and MUST NOT
    raise it for any other failure; the state machine treats it as a normal
    "absent" answer rather than an outage.

    Example:
        >>> with create_secret_store() as store:
        ...     metadata = store.describe_secret("artifact-key")
        ...     metadata.version_with_stage(VersionStage.CURRENT)
        'v1'
    """

    backend_name: str = "unknown"

    @abstractmethod
    def describe_secret(self, secret_id: str) -> SecretMetadata:
        """
        Return rotation flag and version -> stages map of a secret.

        Raises:
            SecretNotFoundError: Secret doesn't exist
            SecretAccessError: Permission denied or backend unreachable
        """

    @abstractmethod
    def get_secret_value(
        self,
        secret_id: str,
        version_id: str | None = None,
        stage: VersionStage | None = None,
    ) -> str:
        """
        Return the string value of a secret version.

        With neither version_id nor stage, the CURRENT version is returned.
        With both, the version must carry the stage.

        Raises:
            SecretNotFoundError: No such secret/version/stage
            SecretAccessError: Permission denied, binary secret, or backend unreachable
        """

    @abstractmethod
    def put_secret_value(
        self,
        secret_id: str,
        version_id: str,
        value: str,
        stages: Iterable[VersionStage],
    ) -> None:
        """
        Store value as a new version with the given id and stage labels.

        Re-putting the same value at an existing version is a no-op; a
        different value at an existing version is rejected.

        Raises:
            SecretWriteError: Write rejected
        """

    @abstractmethod
    def get_random_password(self, length: int, exclude_characters: str) -> str:
        """
        Generate a random password of length characters, none of which
        appear in exclude_characters.

        Raises:
            SecretAccessError: Generation failed on the backend
        """

    @abstractmethod
    def update_version_stage(
        self,
        secret_id: str,
        stage: VersionStage,
        move_to_version_id: str | None = None,
        remove_from_version_id: str | None = None,
    ) -> None:
        """
        Attach stage to move_to_version_id and/or detach it from
        remove_from_version_id, as one atomic operation.

        Moving CURRENT applies PREVIOUS to the version that lost it.

        Raises:
            SecretWriteError: remove_from_version_id doesn't hold the stage,
                unknown version, or permission denied
        """

    def close(self) -> None:  # noqa: B027 - Intentionally optional hook with default no-op
        """Release backend resources (optional hook)."""

    def __enter__(self) -> "VersionedSecretStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
