"""
AWS Secrets Manager Backend for the Versioned Secret Store.

This module implements AWSSecretsManagerStore, the production backend of
VersionedSecretStore, on top of the boto3 "secretsmanager" client.

Architecture:
    - One boto3 client per store instance (one store per invocation)
    - IAM role authentication (function execution role)
    - Optional endpoint override (VPC interface endpoint, LocalStack)
    - No caching: rotation must always observe live stage labels
    - No retries beyond the SDK's own; failed invocations are retried by
      the rotation scheduler

API mapping:
    describe_secret       -> DescribeSecret
    get_secret_value      -> GetSecretValue
    put_secret_value      -> PutSecretValue
    get_random_password   -> GetRandomPassword
    update_version_stage  -> UpdateSecretVersionStage

Security Considerations:
    - Secret values NEVER logged (only secret ids, version ids, stages)
    - IAM permissions required: secretsmanager:DescribeSecret, GetSecretValue,
      PutSecretValue, UpdateSecretVersionStage, GetRandomPassword

Usage Example:
    >>> from libs.secrets.aws_backend import AWSSecretsManagerStore
    >>> store = AWSSecretsManagerStore(region_name="us-east-1")
    >>> metadata = store.describe_secret("artifact-store-access-key")
    >>> metadata.rotation_enabled
    True
"""

import logging
from collections.abc import Iterable
from typing import Any, cast

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from libs.secrets.exceptions import (
    SecretAccessError,
    SecretNotFoundError,
    SecretWriteError,
)
from libs.secrets.store import SecretMetadata, VersionedSecretStore, VersionStage

logger = logging.getLogger(__name__)

BACKEND = "aws"


def _error_code(exception: ClientError) -> str:
    return cast(str, exception.response.get("Error", {}).get("Code", "Unknown"))


class AWSSecretsManagerStore(VersionedSecretStore):
    """
    AWS Secrets Manager implementation of VersionedSecretStore.

    Error translation:
        - ResourceNotFoundException -> SecretNotFoundError
        - AccessDeniedException, other ClientError, BotoCoreError on reads
          -> SecretAccessError
        - Any failure on PutSecretValue/UpdateSecretVersionStage
          -> SecretWriteError

    Example:
        >>> # Default endpoint, IAM role authentication
        >>> store = AWSSecretsManagerStore(region_name="eu-west-1")
        >>>
        >>> # VPC interface endpoint
        >>> store = AWSSecretsManagerStore(
        ...     region_name="eu-west-1",
        ...     endpoint_url="https://vpce-0abc.secretsmanager.eu-west-1.vpce.amazonaws.com",
        ... )
    """

    backend_name = BACKEND

    def __init__(
        self,
        region_name: str = "us-east-1",
        endpoint_url: str | None = None,
    ) -> None:
        """
        Initialize the boto3 Secrets Manager client.

        Args:
            region_name: AWS region of the secrets. Default: "us-east-1"
            endpoint_url: Optional endpoint override (SECRET_MANAGER_ENDPOINT)

        Raises:
            SecretAccessError: boto3 could not build the client (bad region,
                malformed endpoint URL)
        """
        self._region_name = region_name
        self._endpoint_url = endpoint_url

        client_kwargs: dict[str, str] = {"region_name": region_name}
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url

        try:
            self._client = boto3.client("secretsmanager", **client_kwargs)
        except (BotoCoreError, ValueError) as e:
            raise SecretAccessError(
                secret_name="aws_initialization",
                backend=BACKEND,
                reason=f"AWS SDK error during initialization: {e}",
            ) from e

        logger.info(
            "AWS Secrets Manager store initialized",
            extra={"region": region_name, "endpoint_url": endpoint_url, "backend": BACKEND},
        )

    def _read_error(
        self, e: ClientError | BotoCoreError, secret_id: str, operation: str, detail: str = ""
    ) -> SecretNotFoundError | SecretAccessError:
        """Translate a boto3 read failure into the store exception hierarchy."""
        if isinstance(e, BotoCoreError):
            return SecretAccessError(
                secret_name=secret_id,
                backend=BACKEND,
                reason=f"AWS SDK error during {operation}: {e}",
            )

        error_code = _error_code(e)
        if error_code == "ResourceNotFoundException":
            return SecretNotFoundError(
                secret_name=secret_id,
                backend=BACKEND,
                additional_context=detail or None,
            )
        if error_code == "AccessDeniedException":
            return SecretAccessError(
                secret_name=secret_id,
                backend=BACKEND,
                reason=(
                    f"Access denied for {operation}. "
                    f"Verify IAM role has secretsmanager:{operation} permission."
                ),
            )
        return SecretAccessError(
            secret_name=secret_id,
            backend=BACKEND,
            reason=f"AWS API error during {operation}: {error_code}",
        )

    def describe_secret(self, secret_id: str) -> SecretMetadata:
        """Return rotation flag and version -> stages map via DescribeSecret."""
        try:
            response = self._client.describe_secret(SecretId=secret_id)
        except (ClientError, BotoCoreError) as e:
            raise self._read_error(e, secret_id, "DescribeSecret") from e

        return SecretMetadata.from_mapping(
            rotation_enabled=bool(response.get("RotationEnabled", False)),
            versions=response.get("VersionIdsToStages"),
        )

    def get_secret_value(
        self,
        secret_id: str,
        version_id: str | None = None,
        stage: VersionStage | None = None,
    ) -> str:
        """
        Retrieve a text secret value via GetSecretValue.

        Raises:
            SecretNotFoundError: Secret, version or stage doesn't exist
            SecretAccessError: Permission denied, binary secret, SDK error
        """
        request: dict[str, Any] = {"SecretId": secret_id}
        if version_id is not None:
            request["VersionId"] = version_id
        if stage is not None:
            request["VersionStage"] = stage.value

        try:
            response = self._client.get_secret_value(**request)
        except (ClientError, BotoCoreError) as e:
            detail = (
                f"No value at version {version_id or '<any>'} "
                f"with stage {stage.value if stage else '<any>'}"
            )
            raise self._read_error(e, secret_id, "GetSecretValue", detail) from e

        if "SecretString" not in response:
            raise SecretAccessError(
                secret_name=secret_id,
                backend=BACKEND,
                reason="Secret is binary, expected text (SecretString)",
            )

        logger.debug(
            "Secret value read",
            extra={
                "secret_id": secret_id,
                "version_id": response.get("VersionId"),
                "backend": BACKEND,
            },
        )
        return cast(str, response["SecretString"])

    def put_secret_value(
        self,
        secret_id: str,
        version_id: str,
        value: str,
        stages: Iterable[VersionStage],
    ) -> None:
        """
        Store a new version via PutSecretValue, using version_id as the
        ClientRequestToken (which makes retried writes idempotent server-side).

        Raises:
            SecretWriteError: Permission denied, different value already at
                version_id (ResourceExistsException), SDK error
        """
        stage_values = [stage.value for stage in stages]
        try:
            self._client.put_secret_value(
                SecretId=secret_id,
                ClientRequestToken=version_id,
                SecretString=value,
                VersionStages=stage_values,
            )
        except ClientError as e:
            error_code = _error_code(e)
            if error_code == "AccessDeniedException":
                reason = (
                    "Access denied for writing secret. "
                    "Verify IAM role has secretsmanager:PutSecretValue permission."
                )
            elif error_code == "ResourceExistsException":
                reason = f"A different value already exists at version {version_id}"
            else:
                reason = f"AWS error writing secret: {error_code}"
            raise SecretWriteError(secret_name=secret_id, backend=BACKEND, reason=reason) from e
        except BotoCoreError as e:
            raise SecretWriteError(
                secret_name=secret_id,
                backend=BACKEND,
                reason=f"AWS SDK error writing secret: {e}",
            ) from e

        logger.info(
            "Secret version stored",
            extra={
                "secret_id": secret_id,
                "version_id": version_id,
                "stages": stage_values,
                "backend": BACKEND,
            },
        )

    def get_random_password(self, length: int, exclude_characters: str) -> str:
        """Generate a password server-side via GetRandomPassword."""
        request: dict[str, Any] = {"PasswordLength": length}
        if exclude_characters:
            request["ExcludeCharacters"] = exclude_characters

        try:
            response = self._client.get_random_password(**request)
        except ClientError as e:
            raise SecretAccessError(
                secret_name="get_random_password",
                backend=BACKEND,
                reason=f"AWS API error during GetRandomPassword: {_error_code(e)}",
            ) from e
        except BotoCoreError as e:
            raise SecretAccessError(
                secret_name="get_random_password",
                backend=BACKEND,
                reason=f"AWS SDK error during GetRandomPassword: {e}",
            ) from e

        return cast(str, response["RandomPassword"])

    def update_version_stage(
        self,
        secret_id: str,
        stage: VersionStage,
        move_to_version_id: str | None = None,
        remove_from_version_id: str | None = None,
    ) -> None:
        """
        Move or detach a stage label via UpdateSecretVersionStage.

        Secrets Manager attaches AWSPREVIOUS to the version losing AWSCURRENT
        as part of the same call.

        Raises:
            ValueError: Neither move_to_version_id nor remove_from_version_id given
            SecretWriteError: Label not held by remove_from_version_id
                (InvalidParameterException), permission denied, SDK error
        """
        if move_to_version_id is None and remove_from_version_id is None:
            raise ValueError("move_to_version_id or remove_from_version_id is required")

        request: dict[str, Any] = {"SecretId": secret_id, "VersionStage": stage.value}
        if move_to_version_id is not None:
            request["MoveToVersionId"] = move_to_version_id
        if remove_from_version_id is not None:
            request["RemoveFromVersionId"] = remove_from_version_id

        try:
            self._client.update_secret_version_stage(**request)
        except ClientError as e:
            error_code = _error_code(e)
            if error_code == "AccessDeniedException":
                reason = (
                    "Access denied for moving stage. "
                    "Verify IAM role has secretsmanager:UpdateSecretVersionStage permission."
                )
            else:
                reason = f"AWS error moving stage {stage.value}: {error_code}"
            raise SecretWriteError(secret_name=secret_id, backend=BACKEND, reason=reason) from e
        except BotoCoreError as e:
            raise SecretWriteError(
                secret_name=secret_id,
                backend=BACKEND,
                reason=f"AWS SDK error moving stage {stage.value}: {e}",
            ) from e

        logger.info(
            "Secret version stage updated",
            extra={
                "secret_id": secret_id,
                "stage": stage.value,
                "move_to_version_id": move_to_version_id,
                "remove_from_version_id": remove_from_version_id,
                "backend": BACKEND,
            },
        )
