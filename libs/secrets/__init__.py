"""
Versioned secret store for credential rotation.

This package provides the secret store contract consumed by the rotation
state machine, with an AWS Secrets Manager backend and an in-memory backend.

Architecture (Abstract Factory Pattern):
    - VersionedSecretStore: Abstract interface (store.py)
    - Backend implementations: AWSSecretsManagerStore, InMemorySecretStore
    - Factory: create_secret_store() selects backend via SECRET_BACKEND env var

Quick Start:
    >>> from libs.secrets import VersionStage, create_secret_store
    >>> store = create_secret_store()
    >>> metadata = store.describe_secret("artifact-store-access-key")
    >>> metadata.version_with_stage(VersionStage.CURRENT)
    'a1b2c3d4-...'

Security Requirements:
    - Secret values NEVER logged (only ids, versions and stages)
    - No caching of values across calls
"""

from libs.secrets.aws_backend import AWSSecretsManagerStore
from libs.secrets.exceptions import (
    SecretAccessError,
    SecretNotFoundError,
    SecretStoreError,
    SecretWriteError,
)
from libs.secrets.factory import create_secret_store, resolve_region
from libs.secrets.memory_backend import InMemorySecretStore
from libs.secrets.store import SecretMetadata, VersionedSecretStore, VersionStage

__all__ = [
    # Core interface
    "VersionedSecretStore",
    "SecretMetadata",
    "VersionStage",
    # Factory
    "create_secret_store",
    "resolve_region",
    # Backend implementations
    "AWSSecretsManagerStore",
    "InMemorySecretStore",
    # Exceptions (callers should catch these)
    "SecretStoreError",
    "SecretNotFoundError",
    "SecretAccessError",
    "SecretWriteError",
]
