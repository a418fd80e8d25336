"""GitHub Actions secrets API client.

Only the two endpoints the distributor needs are wrapped:

    GET /repos/{owner}/{repo}/actions/secrets/public-key
    PUT /repos/{owner}/{repo}/actions/secrets/{secret_name}

The personal access token is sent as a bearer token and never appears in
log records or exception messages.
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx
from pydantic import ValidationError

from libs.distribution.exceptions import DistributionError
from libs.distribution.models import DistributionTarget, RepositoryPublicKey, SealedPayload

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


class GitHubActionsClient:
    """Client for repository-level GitHub Actions secrets.

    Example:
        >>> with GitHubActionsClient(token=pat) as client:
        ...     key = client.get_public_key(target)
        ...     client.put_secret(target, "ARTIFACT_BUCKET_ACCESS_KEY_ID", seal_value(key_id, key))
    """

    TIMEOUT = 10.0  # seconds

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout_seconds: float = TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: GitHub personal access token with Actions secrets write access
            api_url: API base URL (override for GitHub Enterprise Server)
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport (tests)
        """
        if not token:
            raise DistributionError("GitHub token is empty", operation="authenticate")

        self.api_url = api_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.api_url,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        )

    def _request(
        self,
        method: str,
        path: str,
        target: DistributionTarget,
        operation: str,
        json: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            logger.error(
                "github_timeout",
                extra={"repository": target.full_name, "operation": operation},
            )
            raise DistributionError(
                "GitHub API timed out", repository=target.full_name, operation=operation
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "github_connection_error",
                extra={
                    "repository": target.full_name,
                    "operation": operation,
                    "error": type(e).__name__,
                },
            )
            raise DistributionError(
                f"GitHub API unreachable: {type(e).__name__}",
                repository=target.full_name,
                operation=operation,
            ) from e

        if response.is_success:
            return response

        logger.error(
            "github_request_failed",
            extra={
                "repository": target.full_name,
                "operation": operation,
                "status": response.status_code,
            },
        )
        raise DistributionError(
            f"GitHub API returned HTTP {response.status_code}",
            repository=target.full_name,
            operation=operation,
            status_code=response.status_code,
        )

    def get_public_key(self, target: DistributionTarget) -> RepositoryPublicKey:
        """Fetch the repository's current Actions secrets public key.

        Raises:
            DistributionError: Request failed or the response isn't a key
        """
        response = self._request(
            "GET",
            f"/repos/{target.owner}/{target.name}/actions/secrets/public-key",
            target,
            "get_public_key",
        )
        try:
            public_key = RepositoryPublicKey.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DistributionError(
                "Malformed public key response",
                repository=target.full_name,
                operation="get_public_key",
            ) from e

        logger.info(
            "github_public_key_fetched",
            extra={"repository": target.full_name, "key_id": public_key.key_id},
        )
        return public_key

    def put_secret(
        self, target: DistributionTarget, secret_name: str, payload: SealedPayload
    ) -> None:
        """Create or replace a repository secret with a sealed value.

        GitHub answers 201 when the secret is created and 204 when updated.
        """
        response = self._request(
            "PUT",
            f"/repos/{target.owner}/{target.name}/actions/secrets/{secret_name}",
            target,
            "put_secret",
            json={"encrypted_value": payload.encrypted_value, "key_id": payload.key_id},
        )
        logger.info(
            "github_secret_uploaded",
            extra={
                "repository": target.full_name,
                "secret_name": secret_name,
                "key_id": payload.key_id,
                "status": response.status_code,
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubActionsClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
