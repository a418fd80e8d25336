"""Common utilities and exceptions."""

from libs.common.exceptions import CredentialRotationError

__all__ = [
    "CredentialRotationError",
]
