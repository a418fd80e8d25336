"""
Factory for creating VersionedSecretStore instances.

Backend selection:
    - SECRET_BACKEND="aws" → AWSSecretsManagerStore (default)
    - SECRET_BACKEND="memory" → InMemorySecretStore (local development only)

Production Guardrails:
    - InMemorySecretStore is ONLY allowed when DEPLOYMENT_ENV="local"
    - Factory raises SecretStoreError if configuration is invalid

Environment Variables:
    SECRET_BACKEND (str):
        Backend selection: "aws" or "memory" (default: "aws")
    DEPLOYMENT_ENV (str):
        Environment name: "local", "staging", or "production" (default: "production")
    SECRET_MANAGER_ENDPOINT (str, optional):
        Endpoint override for AWS Secrets Manager
    AWS_REGION (str, optional):
        Falls back to AWS_DEFAULT_REGION, then "us-east-1"
"""

import logging
import os

from libs.secrets.aws_backend import AWSSecretsManagerStore
from libs.secrets.exceptions import SecretStoreError
from libs.secrets.memory_backend import InMemorySecretStore
from libs.secrets.store import VersionedSecretStore

logger = logging.getLogger(__name__)


def resolve_region(region_name: str | None = None) -> str:
    """Return region_name, else AWS_REGION, else AWS_DEFAULT_REGION, else us-east-1."""
    return (
        region_name
        or os.environ.get("AWS_REGION")
        or os.environ.get("AWS_DEFAULT_REGION", "us-east-1")
    )


def create_secret_store(
    backend: str | None = None,
    endpoint_url: str | None = None,
    region_name: str | None = None,
    deployment_env: str | None = None,
) -> VersionedSecretStore:
    """
    Create a VersionedSecretStore for the configured backend.

    Args:
        backend: "aws" or "memory". If None, reads SECRET_BACKEND (default: "aws").
        endpoint_url: Secrets Manager endpoint override. If None, reads
            SECRET_MANAGER_ENDPOINT.
        region_name: AWS region override (see resolve_region()).
        deployment_env: If None, reads DEPLOYMENT_ENV (default: "production").

    Returns:
        Configured store instance

    Raises:
        SecretStoreError: Unknown backend, or memory backend outside local

    Examples:
        >>> store = create_secret_store()  # AWS, region from environment
        >>> store = create_secret_store(backend="memory", deployment_env="local")
        >>> create_secret_store(backend="memory", deployment_env="production")
        SecretStoreError: InMemorySecretStore not allowed in production environment...
    """
    selected_backend = (
        backend if backend is not None else os.getenv("SECRET_BACKEND", "aws")
    ).lower().strip() or "aws"
    selected_env = (
        deployment_env if deployment_env is not None else os.getenv("DEPLOYMENT_ENV", "production")
    ).lower().strip()

    if selected_backend == "aws":
        endpoint = (
            endpoint_url if endpoint_url is not None else os.getenv("SECRET_MANAGER_ENDPOINT")
        )
        return AWSSecretsManagerStore(
            region_name=resolve_region(region_name),
            endpoint_url=endpoint or None,
        )

    elif selected_backend == "memory":
        if selected_env != "local":
            raise SecretStoreError(
                f"InMemorySecretStore not allowed in {selected_env} environment. "
                f"Rotated values would be lost when the process exits. "
                f"Use SECRET_BACKEND='aws' outside local development."
            )
        logger.warning("Using InMemorySecretStore; rotated values are not persisted")
        return InMemorySecretStore()

    else:
        raise SecretStoreError(
            f"Invalid SECRET_BACKEND: '{selected_backend}'. Valid options: 'aws', 'memory'."
        )
