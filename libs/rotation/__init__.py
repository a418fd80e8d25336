"""
Credential rotation protocol.

Quick Start:
    >>> from libs.rotation import RotationRequest, SecretRotator, load_settings
    >>> from libs.secrets import create_secret_store
    >>> settings = load_settings()
    >>> with create_secret_store(endpoint_url=settings.secret_manager_endpoint) as store:
    ...     SecretRotator(store, settings).handle(RotationRequest.from_event(event))
"""

from libs.rotation.config import RotationSettings, load_settings
from libs.rotation.exceptions import (
    AlreadyCurrentError,
    InvalidStepError,
    MissingConfigurationError,
    NoCurrentVersionError,
    NotPendingError,
    RotationDisabledError,
    RotationError,
    UnknownVersionError,
    UpstreamUnavailableError,
)
from libs.rotation.models import RotatedCredential, RotationRequest, RotationStep
from libs.rotation.state_machine import SecretRotator, github_distributor_factory

__all__ = [
    "SecretRotator",
    "github_distributor_factory",
    "RotationRequest",
    "RotationStep",
    "RotatedCredential",
    "RotationSettings",
    "load_settings",
    # Exceptions
    "RotationError",
    "RotationDisabledError",
    "UnknownVersionError",
    "AlreadyCurrentError",
    "NotPendingError",
    "NoCurrentVersionError",
    "MissingConfigurationError",
    "UpstreamUnavailableError",
    "InvalidStepError",
]
