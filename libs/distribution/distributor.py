"""Distribution of a rotated credential to GitHub repositories.

For each target, in order:
    1. fetch the repository public key (key bytes + key id)
    2. seal the identifier and the secret independently under that key
    3. upload both as Actions secrets tagged with the key id

Targets are processed sequentially. The first failure propagates and the
remaining targets are left untouched; uploads overwrite secrets of the same
name, so the caller can safely retry the whole distribution.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from libs.distribution.exceptions import DistributionError
from libs.distribution.github_client import GitHubActionsClient
from libs.distribution.models import (
    ACCESS_KEY_ID_SECRET_NAME,
    ACCESS_KEY_SECRET_SECRET_NAME,
    DistributionTarget,
)
from libs.distribution.sealing import seal_value

logger = logging.getLogger(__name__)


class CredentialDistributor:
    """Seals a two-part credential and uploads it to every configured repository."""

    def __init__(
        self,
        client: GitHubActionsClient,
        identifier_secret_name: str = ACCESS_KEY_ID_SECRET_NAME,
        secret_secret_name: str = ACCESS_KEY_SECRET_SECRET_NAME,
    ) -> None:
        self.client = client
        self.identifier_secret_name = identifier_secret_name
        self.secret_secret_name = secret_secret_name

    def distribute_to(
        self, identifier_part: str, secret_part: str, target: DistributionTarget
    ) -> None:
        """Deliver both credential parts to one repository.

        The public key is fetched before anything is sealed or uploaded, so a
        key-fetch failure leaves the repository unchanged.
        """
        public_key = self.client.get_public_key(target)

        sealed = [
            (self.identifier_secret_name, seal_value(identifier_part, public_key)),
            (self.secret_secret_name, seal_value(secret_part, public_key)),
        ]
        for secret_name, payload in sealed:
            self.client.put_secret(target, secret_name, payload)

        logger.info(
            "credential_distributed",
            extra={"repository": target.full_name, "key_id": public_key.key_id},
        )

    def distribute(
        self,
        identifier_part: str,
        secret_part: str,
        targets: Sequence[DistributionTarget],
    ) -> None:
        """Deliver the credential to every target, stopping at the first failure.

        Raises:
            DistributionError: A key fetch, seal or upload failed; carries the
                repository that failed
        """
        if not identifier_part or not secret_part:
            raise DistributionError("Refusing to distribute an empty credential part")

        for index, target in enumerate(targets):
            try:
                self.distribute_to(identifier_part, secret_part, target)
            except DistributionError as e:
                if e.repository is None:
                    e.repository = target.full_name
                logger.error(
                    "credential_distribution_aborted",
                    extra={
                        "repository": target.full_name,
                        "completed": index,
                        "remaining": len(targets) - index - 1,
                    },
                )
                raise

        logger.info("credential_distribution_complete", extra={"targets": len(targets)})
