"""Sealed-box encryption of credential parts for GitHub Actions secrets.

GitHub expects secret values encrypted with libsodium's ``crypto_box_seal``
under the repository's Curve25519 public key. The sender uses a fresh
ephemeral key pair per message, so the receiver can decrypt but not
authenticate the sender.

Example:
    >>> key = RepositoryPublicKey(key_id="kid-1", key="hBT5WZEj8ZoOv6TYJsfCq7j1rXJvt+7v0RfPq1G0dSo=")
    >>> payload = seal_value("AKIAEXAMPLE", key)
    >>> payload.key_id
    'kid-1'
"""

from __future__ import annotations

import base64
import binascii

from nacl.exceptions import CryptoError
from nacl.public import PublicKey, SealedBox

from libs.distribution.exceptions import DistributionError
from libs.distribution.models import RepositoryPublicKey, SealedPayload


def load_public_key(public_key: RepositoryPublicKey) -> PublicKey:
    """Decode the base64 key material returned by the API.

    Raises:
        DistributionError: Key isn't valid base64 or isn't a 32-byte Curve25519 key
    """
    try:
        raw = base64.b64decode(public_key.key, validate=True)
        return PublicKey(raw)
    except (binascii.Error, ValueError, TypeError, CryptoError) as e:
        raise DistributionError(
            f"Invalid repository public key {public_key.key_id}: {e}",
            operation="seal",
        ) from e


def seal_value(plaintext: str, public_key: RepositoryPublicKey) -> SealedPayload:
    """Seal plaintext under public_key and return base64 ciphertext with the key id."""
    sealed_box = SealedBox(load_public_key(public_key))
    try:
        ciphertext = sealed_box.encrypt(plaintext.encode("utf-8"))
    except CryptoError as e:
        raise DistributionError(f"Sealed-box encryption failed: {e}", operation="seal") from e

    return SealedPayload(
        encrypted_value=base64.b64encode(bytes(ciphertext)).decode("ascii"),
        key_id=public_key.key_id,
    )
