"""
Rotation State Machine.

Implements the four-step rotation protocol the secrets scheduler drives:

    createSecret  → generate a new secret value and store it under AWSPENDING
    setSecret     → seal the pending credential and upload it to every repository
    testSecret    → no-op (the new credential is validated by its consumers)
    finishSecret  → move AWSCURRENT onto the pending version

Every invocation is independent: all state is read from the secret store on
each call and nothing is kept in memory between calls. Each step is safe to
re-run after a partial failure:

    - createSecret never overwrites an existing pending value
    - setSecret overwrites the same named repository secrets
    - finishSecret on a version that is already current is a no-op

Preconditions checked before every step (in order):
    1. rotation enabled                       → RotationDisabledError
    2. request version in the version map     → UnknownVersionError
    3. request version not already CURRENT    → AlreadyCurrentError
       (finishSecret: completed rotation, no-op success instead)
    4. request version staged PENDING         → NotPendingError

Usage:
    >>> rotator = SecretRotator(store, settings)
    >>> rotator.handle(RotationRequest.from_event(event))
"""

import logging
from collections.abc import Callable

from libs.distribution.distributor import CredentialDistributor
from libs.distribution.exceptions import DistributionError
from libs.distribution.github_client import GitHubActionsClient
from libs.rotation.config import RotationSettings
from libs.rotation.exceptions import (
    AlreadyCurrentError,
    InvalidStepError,
    NoCurrentVersionError,
    NotPendingError,
    RotationDisabledError,
    UnknownVersionError,
    UpstreamUnavailableError,
)
from libs.rotation.models import RotatedCredential, RotationRequest, RotationStep
from libs.secrets.exceptions import SecretNotFoundError, SecretStoreError
from libs.secrets.store import SecretMetadata, VersionedSecretStore, VersionStage

logger = logging.getLogger(__name__)

# Builds an authenticated distributor from the GitHub token
DistributorFactory = Callable[[str], CredentialDistributor]


def github_distributor_factory(settings: RotationSettings) -> DistributorFactory:
    """Return a factory creating distributors against the configured GitHub API."""

    def factory(token: str) -> CredentialDistributor:
        client = GitHubActionsClient(
            token=token,
            api_url=settings.github_api_url,
            timeout_seconds=settings.github_timeout_seconds,
        )
        return CredentialDistributor(client)

    return factory


class SecretRotator:
    """Drives a secret through the rotation protocol, one step per call."""

    def __init__(
        self,
        store: VersionedSecretStore,
        settings: RotationSettings,
        distributor_factory: DistributorFactory | None = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.distributor_factory = distributor_factory or github_distributor_factory(settings)
        self._handlers: dict[RotationStep, Callable[[RotationRequest], None]] = {
            RotationStep.CREATE_SECRET: self.create_secret,
            RotationStep.SET_SECRET: self.set_secret,
            RotationStep.TEST_SECRET: self.test_secret,
            RotationStep.FINISH_SECRET: self.finish_secret,
        }

    def handle(self, request: RotationRequest) -> None:
        """
        Validate preconditions and run the requested step.

        Raises:
            RotationError: A precondition or the step failed. Store and
                repository failures surface as UpstreamUnavailableError.
        """
        handler = self._handlers.get(request.step)
        if handler is None:
            raise InvalidStepError(
                secret_id=request.secret_id, version=request.request_token, step=str(request.step)
            )

        logger.info("rotation_step_started")
        if not self._check_preconditions(request):
            return
        handler(request)
        logger.info("rotation_step_completed")

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _describe(self, request: RotationRequest) -> SecretMetadata:
        try:
            return self.store.describe_secret(request.secret_id)
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to describe secret", e) from e

    def _check_preconditions(self, request: RotationRequest) -> bool:
        """Return False when the request is a completed finishSecret (no-op)."""
        context = _context(request)
        metadata = self._describe(request)

        if not metadata.rotation_enabled:
            raise RotationDisabledError(**context)

        version = request.request_token
        if version not in metadata.version_stages:
            raise UnknownVersionError(**context)

        if metadata.has_stage(version, VersionStage.CURRENT):
            if request.step is RotationStep.FINISH_SECRET:
                logger.info("rotation_already_finished")
                if metadata.has_stage(version, VersionStage.PENDING):
                    self._clear_pending(request)
                return False
            raise AlreadyCurrentError(**context)

        if not metadata.has_stage(version, VersionStage.PENDING):
            raise NotPendingError(**context)

        return True

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def create_secret(self, request: RotationRequest) -> None:
        """Store a freshly generated secret under AWSPENDING unless one exists."""
        try:
            self.store.get_secret_value(request.secret_id, stage=VersionStage.CURRENT)
        except SecretNotFoundError as e:
            raise NoCurrentVersionError(**_context(request)) from e
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to read current secret value", e) from e

        try:
            self.store.get_secret_value(
                request.secret_id,
                version_id=request.request_token,
                stage=VersionStage.PENDING,
            )
            logger.info("pending_value_exists")
            return
        except SecretNotFoundError:
            pass
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to read pending secret value", e) from e

        try:
            password = self.store.get_random_password(
                length=self.settings.password_length,
                exclude_characters=self.settings.exclude_characters,
            )
            self.store.put_secret_value(
                request.secret_id,
                version_id=request.request_token,
                value=password,
                stages=[VersionStage.PENDING],
            )
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to store pending secret value", e) from e

        logger.info(
            "pending_value_created",
            extra={"length": self.settings.password_length},
        )

    def set_secret(self, request: RotationRequest) -> None:
        """Seal the pending credential and upload it to every configured repository."""
        try:
            secret_part = self.store.get_secret_value(
                request.secret_id,
                version_id=request.request_token,
                stage=VersionStage.PENDING,
            )
        except SecretNotFoundError as e:
            # Version is staged PENDING but createSecret never stored a value
            raise NotPendingError(
                "Pending secret value has not been created",
                **_context(request),
            ) from e
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to read pending secret value", e) from e

        credential = RotatedCredential(
            identifier_part=self.settings.access_key_id,
            secret_part=secret_part,
        )

        try:
            github_token = self.store.get_secret_value(self.settings.github_pat_arn)
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to read GitHub token", e) from e

        targets = list(self.settings.github_repositories)
        try:
            distributor = self.distributor_factory(github_token)
            try:
                distributor.distribute(credential.identifier_part, credential.secret_part, targets)
            finally:
                distributor.client.close()
        except DistributionError as e:
            raise self._upstream(request, "Failed to distribute credential", e) from e

        logger.info(
            "pending_credential_distributed",
            extra={"repositories": [target.full_name for target in targets]},
        )

    def test_secret(self, request: RotationRequest) -> None:
        """Nothing to test here; consumers validate the credential on first use."""
        logger.info("test_step_skipped")

    def finish_secret(self, request: RotationRequest) -> None:
        """Promote the pending version to AWSCURRENT, demoting the old one."""
        metadata = self._describe(request)
        version = request.request_token

        current_version = next(
            (
                version_id
                for version_id, stages in metadata.version_stages.items()
                if VersionStage.CURRENT.value in stages and version_id != version
            ),
            None,
        )
        if current_version is None:
            logger.info("rotation_already_finished")
            return

        try:
            self.store.update_version_stage(
                request.secret_id,
                VersionStage.CURRENT,
                move_to_version_id=version,
                remove_from_version_id=current_version,
            )
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to promote pending version", e) from e

        logger.info(
            "version_promoted",
            extra={"previous_version": current_version},
        )
        self._clear_pending(request)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _clear_pending(self, request: RotationRequest) -> None:
        """Detach AWSPENDING from a version that has become current."""
        try:
            self.store.update_version_stage(
                request.secret_id,
                VersionStage.PENDING,
                remove_from_version_id=request.request_token,
            )
        except SecretStoreError as e:
            raise self._upstream(request, "Failed to clear pending stage", e) from e

    @staticmethod
    def _upstream(
        request: RotationRequest, message: str, cause: Exception
    ) -> UpstreamUnavailableError:
        logger.error(
            "rotation_upstream_failure",
            extra={"error": str(cause), "error_type": type(cause).__name__},
        )
        return UpstreamUnavailableError(f"{message}: {cause}", **_context(request))


def _context(request: RotationRequest) -> dict[str, str]:
    return {
        "secret_id": request.secret_id,
        "version": request.request_token,
        "step": request.step.value,
    }
