"""
Credential distribution to GitHub repositories.

Seals the rotated credential with each repository's Actions public key
(libsodium sealed box via PyNaCl) and uploads it as repository secrets.

Quick Start:
    >>> from libs.distribution import CredentialDistributor, DistributionTarget, GitHubActionsClient
    >>> with GitHubActionsClient(token=pat) as client:
    ...     CredentialDistributor(client).distribute(
    ...         access_key_id,
    ...         access_key_secret,
    ...         [DistributionTarget(owner="acme", name="app")],
    ...     )
"""

from libs.distribution.distributor import CredentialDistributor
from libs.distribution.exceptions import DistributionError
from libs.distribution.github_client import DEFAULT_API_URL, GitHubActionsClient
from libs.distribution.models import (
    ACCESS_KEY_ID_SECRET_NAME,
    ACCESS_KEY_SECRET_SECRET_NAME,
    DistributionTarget,
    RepositoryPublicKey,
    SealedPayload,
)
from libs.distribution.sealing import load_public_key, seal_value

__all__ = [
    "CredentialDistributor",
    "GitHubActionsClient",
    "DEFAULT_API_URL",
    "DistributionTarget",
    "RepositoryPublicKey",
    "SealedPayload",
    "ACCESS_KEY_ID_SECRET_NAME",
    "ACCESS_KEY_SECRET_SECRET_NAME",
    "seal_value",
    "load_public_key",
    "DistributionError",
]
