"""Pydantic models for credential distribution targets and payloads."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Names of the Actions secrets written to every target repository
ACCESS_KEY_ID_SECRET_NAME = "ARTIFACT_BUCKET_ACCESS_KEY_ID"
ACCESS_KEY_SECRET_SECRET_NAME = "ARTIFACT_BUCKET_ACCESS_KEY_SECRET"


class DistributionTarget(BaseModel):
    """One GitHub repository that receives the rotated credential.

    Configuration historically spells the repository name both as "name"
    and as "repo"; either is accepted.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1)
    name: str = Field(min_length=1, validation_alias=AliasChoices("name", "repo"))

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


class RepositoryPublicKey(BaseModel):
    """Public key a repository uses to decrypt Actions secrets."""

    key_id: str = Field(min_length=1)
    key: str = Field(min_length=1)  # base64 encoded Curve25519 public key


class SealedPayload(BaseModel):
    """A value sealed under one repository key, ready for upload."""

    model_config = ConfigDict(frozen=True)

    encrypted_value: str  # base64 encoded sealed-box ciphertext
    key_id: str

    def __repr__(self) -> str:
        length = len(self.encrypted_value)
        return f"SealedPayload(key_id={self.key_id!r}, encrypted_value=<{length} chars>)"
