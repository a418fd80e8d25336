"""
Tests for libs/secrets/factory.py - Secret Store Factory.

Test Coverage:
    - Backend selection via SECRET_BACKEND environment variable
    - Production guardrail (InMemorySecretStore only allowed in local)
    - Invalid backend name error handling
    - Endpoint and region resolution
"""

import os
from unittest.mock import Mock, patch

import pytest

from libs.secrets import create_secret_store, resolve_region
from libs.secrets.exceptions import SecretStoreError
from libs.secrets.memory_backend import InMemorySecretStore


class TestCreateSecretStoreBackendSelection:
    """Test backend selection via SECRET_BACKEND environment variable."""

    @pytest.mark.unit()
    @patch("libs.secrets.factory.AWSSecretsManagerStore")
    def test_default_backend_aws(self, mock_aws_store: Mock) -> None:
        """The AWS backend is used when SECRET_BACKEND isn't set."""
        with patch.dict(os.environ, {"AWS_DEFAULT_REGION": "eu-west-1"}, clear=True):
            create_secret_store()

        mock_aws_store.assert_called_once_with(region_name="eu-west-1", endpoint_url=None)

    @pytest.mark.unit()
    @patch("libs.secrets.factory.AWSSecretsManagerStore")
    def test_endpoint_from_environment(self, mock_aws_store: Mock) -> None:
        with patch.dict(
            os.environ,
            {"SECRET_MANAGER_ENDPOINT": "http://localhost:4566", "AWS_REGION": "eu-central-1"},
            clear=True,
        ):
            create_secret_store()

        mock_aws_store.assert_called_once_with(
            region_name="eu-central-1", endpoint_url="http://localhost:4566"
        )

    @pytest.mark.unit()
    @patch("libs.secrets.factory.AWSSecretsManagerStore")
    def test_explicit_arguments_win(self, mock_aws_store: Mock) -> None:
        with patch.dict(
            os.environ,
            {"SECRET_BACKEND": "memory", "SECRET_MANAGER_ENDPOINT": "http://ignored"},
            clear=True,
        ):
            create_secret_store(
                backend="AWS", endpoint_url="http://localhost:4566", region_name="ap-south-1"
            )

        mock_aws_store.assert_called_once_with(
            region_name="ap-south-1", endpoint_url="http://localhost:4566"
        )

    @pytest.mark.unit()
    def test_memory_backend_in_local(self) -> None:
        with patch.dict(os.environ, {"SECRET_BACKEND": "memory", "DEPLOYMENT_ENV": "local"}):
            store = create_secret_store()

        assert isinstance(store, InMemorySecretStore)


class TestCreateSecretStoreProductionGuardrail:
    """The in-memory backend must never run outside local development."""

    @pytest.mark.unit()
    @pytest.mark.parametrize("env", ["production", "staging"])
    def test_memory_backend_rejected(self, env: str) -> None:
        with pytest.raises(SecretStoreError, match=f"not allowed in {env}"):
            create_secret_store(backend="memory", deployment_env=env)

    @pytest.mark.unit()
    def test_memory_backend_rejected_by_default(self) -> None:
        """DEPLOYMENT_ENV defaults to production."""
        with patch.dict(os.environ, {"SECRET_BACKEND": "memory"}, clear=True):
            with pytest.raises(SecretStoreError):
                create_secret_store()


class TestCreateSecretStoreErrorHandling:
    @pytest.mark.unit()
    def test_invalid_backend(self) -> None:
        with pytest.raises(SecretStoreError, match="Invalid SECRET_BACKEND: 'vault'"):
            create_secret_store(backend="vault")


class TestResolveRegion:
    @pytest.mark.unit()
    def test_explicit_region(self) -> None:
        assert resolve_region("eu-west-3") == "eu-west-3"

    @pytest.mark.unit()
    def test_aws_region_before_default_region(self) -> None:
        with patch.dict(
            os.environ, {"AWS_REGION": "eu-west-1", "AWS_DEFAULT_REGION": "us-west-2"}, clear=True
        ):
            assert resolve_region() == "eu-west-1"

    @pytest.mark.unit()
    def test_fallback(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_region() == "us-east-1"
