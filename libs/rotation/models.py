"""Rotation request and credential models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from libs.rotation.exceptions import InvalidStepError


class RotationStep(str, Enum):
    """The four steps of the rotation protocol, in execution order."""

    CREATE_SECRET = "createSecret"
    SET_SECRET = "setSecret"
    TEST_SECRET = "testSecret"
    FINISH_SECRET = "finishSecret"


class RotationRequest(BaseModel):
    """One rotation invocation, parsed from the scheduler's trigger event.

    Example:
        >>> RotationRequest.from_event(
        ...     {"SecretId": "artifact-key", "ClientRequestToken": "v2", "Step": "createSecret"}
        ... ).step
        <RotationStep.CREATE_SECRET: 'createSecret'>
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    secret_id: str = Field(alias="SecretId", min_length=1)
    request_token: str = Field(alias="ClientRequestToken", min_length=1)
    step: RotationStep = Field(alias="Step")

    @classmethod
    def from_event(cls, event: Any) -> RotationRequest:
        """Parse a trigger event.

        Raises:
            InvalidStepError: Event isn't a mapping, lacks a key, or names an
                unknown step
        """
        if not isinstance(event, dict):
            raise InvalidStepError("Rotation event must be a JSON object")
        try:
            return cls.model_validate(event)
        except ValidationError as e:
            raise InvalidStepError(
                f"Invalid rotation event: {_describe_errors(e)}",
                secret_id=_as_str(event.get("SecretId")),
                version=_as_str(event.get("ClientRequestToken")),
                step=_as_str(event.get("Step")),
            ) from e


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _describe_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
    )


@dataclass(frozen=True)
class RotatedCredential:
    """The two-part access credential being distributed.

    Only secret_part changes on rotation; identifier_part is the access key
    id configured for the deployment.
    """

    identifier_part: str
    secret_part: str

    def __repr__(self) -> str:
        return f"RotatedCredential(identifier_part={self.identifier_part!r}, secret_part='***')"
