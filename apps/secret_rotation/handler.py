"""Rotation function entrypoint.

The secrets scheduler invokes ``handler`` once per rotation step with an
event of the form::

    {"SecretId": "...", "ClientRequestToken": "...", "Step": "createSecret"}

The handler parses the event and validates configuration before any network
call, then runs the step. Every failure is logged and re-raised so the
invocation is reported as failed and the scheduler retries it.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from libs.common.exceptions import CredentialRotationError
from libs.common.logging import RotationLogContext, configure_logging
from libs.rotation.config import RotationSettings, load_settings
from libs.rotation.exceptions import InvalidStepError
from libs.rotation.models import RotationRequest
from libs.rotation.state_machine import DistributorFactory, SecretRotator
from libs.secrets.factory import create_secret_store
from libs.secrets.store import VersionedSecretStore

SERVICE_NAME = "secret_rotation"

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO")
    try:
        configure_logging(service_name=SERVICE_NAME, log_level=log_level)
    except ValueError:
        configure_logging(service_name=SERVICE_NAME, log_level="INFO")
        logger.warning("invalid_log_level", extra={"log_level": log_level})


def build_store(settings: RotationSettings) -> VersionedSecretStore:
    return create_secret_store(
        backend=settings.secret_backend,
        endpoint_url=settings.secret_manager_endpoint,
        region_name=settings.aws_region,
        deployment_env=settings.deployment_env,
    )


def run(
    event: Any,
    settings: RotationSettings | None = None,
    store: VersionedSecretStore | None = None,
    distributor_factory: DistributorFactory | None = None,
) -> None:
    """Handle one rotation event with optional injected collaborators.

    Raises:
        CredentialRotationError: Any rotation failure, after logging it
    """
    try:
        request = RotationRequest.from_event(event)
    except InvalidStepError as e:
        logger.error("rotation_event_invalid", extra={"error": str(e)})
        raise

    with RotationLogContext(
        request.request_token, secret_id=request.secret_id, step=request.step.value
    ):
        try:
            settings = settings or load_settings()
            owns_store = store is None
            active_store = store or build_store(settings)
            try:
                SecretRotator(active_store, settings, distributor_factory).handle(request)
            finally:
                if owns_store:
                    active_store.close()
        except CredentialRotationError as e:
            logger.error(
                "rotation_failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            raise


def handler(event: dict[str, Any], context: Any = None) -> None:
    """Function runtime entrypoint."""
    _configure_logging()
    try:
        run(event)
    except CredentialRotationError:
        raise
    except Exception:
        logger.exception("rotation_unexpected_error")
        raise
