"""
In-Memory Versioned Secret Store.

This module implements InMemorySecretStore, a process-local backend that
emulates the AWS Secrets Manager staging rules closely enough to run the
full rotation protocol without AWS (local dry runs, unit tests).

It MUST NOT be used outside local development: values live only in the
process and vanish with it. The factory refuses to build it unless
DEPLOYMENT_ENV is "local".

Usage Example:
    >>> store = InMemorySecretStore()
    >>> version_id = store.create_secret("artifact-key", "initial", version_id="v1")
    >>> store.describe_secret("artifact-key").version_stages
    {'v1': frozenset({'AWSCURRENT'})}
"""

import logging
import secrets
import string
import threading
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from libs.secrets.exceptions import (
    SecretAccessError,
    SecretNotFoundError,
    SecretWriteError,
)
from libs.secrets.store import SecretMetadata, VersionedSecretStore, VersionStage

logger = logging.getLogger(__name__)

BACKEND = "memory"

# Same default alphabet as GetRandomPassword (letters, digits, punctuation)
PASSWORD_ALPHABET = string.ascii_letters + string.digits + string.punctuation


@dataclass
class _StoredSecret:
    rotation_enabled: bool = True
    values: dict[str, str] = field(default_factory=dict)
    stages: dict[str, set[str]] = field(default_factory=dict)


class InMemorySecretStore(VersionedSecretStore):
    """
    Process-local VersionedSecretStore.

    Thread Safety:
        All operations are protected by one threading.Lock, so a stage move
        is atomic with respect to concurrent readers.
    """

    backend_name = BACKEND

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._secrets: dict[str, _StoredSecret] = {}

    # ------------------------------------------------------------------
    # Seeding helpers (not part of the store contract)
    # ------------------------------------------------------------------

    def create_secret(
        self,
        secret_id: str,
        value: str,
        version_id: str | None = None,
        rotation_enabled: bool = True,
    ) -> str:
        """Create a secret whose first version holds CURRENT. Returns the version id."""
        version_id = version_id or str(uuid.uuid4())
        with self._lock:
            if secret_id in self._secrets:
                raise SecretWriteError(
                    secret_name=secret_id, backend=BACKEND, reason="Secret already exists"
                )
            self._secrets[secret_id] = _StoredSecret(
                rotation_enabled=rotation_enabled,
                values={version_id: value},
                stages={version_id: {VersionStage.CURRENT.value}},
            )
        return version_id

    def add_version_label(self, secret_id: str, version_id: str, stage: VersionStage) -> None:
        """
        Attach a label to a version that may have no value yet.

        Mirrors what the rotation scheduler does before invoking createSecret:
        it reserves the new version id under PENDING without storing a value.
        """
        with self._lock:
            stored = self._get(secret_id)
            self._detach_everywhere(stored, stage.value)
            stored.stages.setdefault(version_id, set()).add(stage.value)

    def set_rotation_enabled(self, secret_id: str, enabled: bool) -> None:
        with self._lock:
            self._get(secret_id).rotation_enabled = enabled

    # ------------------------------------------------------------------
    # VersionedSecretStore contract
    # ------------------------------------------------------------------

    def _get(self, secret_id: str) -> _StoredSecret:
        stored = self._secrets.get(secret_id)
        if stored is None:
            raise SecretNotFoundError(secret_name=secret_id, backend=BACKEND)
        return stored

    @staticmethod
    def _detach_everywhere(stored: _StoredSecret, label: str) -> str | None:
        """Remove label from every version; return the version that held it."""
        holder = None
        for version_id, labels in stored.stages.items():
            if label in labels:
                labels.discard(label)
                holder = version_id
        return holder

    def describe_secret(self, secret_id: str) -> SecretMetadata:
        with self._lock:
            stored = self._get(secret_id)
            # Versions with no labels left are deprecated and not reported
            return SecretMetadata.from_mapping(
                rotation_enabled=stored.rotation_enabled,
                versions={
                    version_id: set(labels)
                    for version_id, labels in stored.stages.items()
                    if labels
                },
            )

    def get_secret_value(
        self,
        secret_id: str,
        version_id: str | None = None,
        stage: VersionStage | None = None,
    ) -> str:
        with self._lock:
            stored = self._get(secret_id)

            if version_id is None:
                wanted = (stage or VersionStage.CURRENT).value
                version_id = next(
                    (vid for vid, labels in stored.stages.items() if wanted in labels), None
                )
                if version_id is None:
                    raise SecretNotFoundError(
                        secret_name=secret_id,
                        backend=BACKEND,
                        additional_context=f"No version with stage {wanted}",
                    )
            elif stage is not None and stage.value not in stored.stages.get(version_id, set()):
                raise SecretNotFoundError(
                    secret_name=secret_id,
                    backend=BACKEND,
                    additional_context=f"No value at version {version_id} with stage {stage.value}",
                )

            if version_id not in stored.values:
                raise SecretNotFoundError(
                    secret_name=secret_id,
                    backend=BACKEND,
                    additional_context=f"No value stored at version {version_id}",
                )
            return stored.values[version_id]

    def put_secret_value(
        self,
        secret_id: str,
        version_id: str,
        value: str,
        stages: Iterable[VersionStage],
    ) -> None:
        stage_values = [stage.value for stage in stages]
        with self._lock:
            try:
                stored = self._get(secret_id)
            except SecretNotFoundError as e:
                raise SecretWriteError(
                    secret_name=secret_id, backend=BACKEND, reason="Secret doesn't exist"
                ) from e

            existing = stored.values.get(version_id)
            if existing is not None:
                if existing != value:
                    raise SecretWriteError(
                        secret_name=secret_id,
                        backend=BACKEND,
                        reason=f"A different value already exists at version {version_id}",
                    )
                return

            stored.values[version_id] = value
            labels = stored.stages.setdefault(version_id, set())
            for label in stage_values:
                self._detach_everywhere(stored, label)
                labels.add(label)

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
        alphabet = [char for char in PASSWORD_ALPHABET if char not in exclude_characters]
        if length <= 0 or not alphabet:
            raise SecretAccessError(
                secret_name="get_random_password",
                backend=BACKEND,
                reason="Password length must be positive and the alphabet non-empty",
            )
        return "".join(secrets.choice(alphabet) for _ in range(length))

    def update_version_stage(
        self,
        secret_id: str,
        stage: VersionStage,
        move_to_version_id: str | None = None,
        remove_from_version_id: str | None = None,
    ) -> None:
        if move_to_version_id is None and remove_from_version_id is None:
            raise ValueError("move_to_version_id or remove_from_version_id is required")

        label = stage.value
        with self._lock:
            try:
                stored = self._get(secret_id)
            except SecretNotFoundError as e:
                raise SecretWriteError(
                    secret_name=secret_id, backend=BACKEND, reason="Secret doesn't exist"
                ) from e

            holder = next((vid for vid, labels in stored.stages.items() if label in labels), None)

            if remove_from_version_id is not None and holder != remove_from_version_id:
                raise SecretWriteError(
                    secret_name=secret_id,
                    backend=BACKEND,
                    reason=f"Version {remove_from_version_id} doesn't hold stage {label}",
                )
            if move_to_version_id is not None and move_to_version_id not in stored.stages:
                raise SecretWriteError(
                    secret_name=secret_id,
                    backend=BACKEND,
                    reason=f"Unknown version {move_to_version_id}",
                )
            if (
                move_to_version_id is not None
                and holder is not None
                and holder != move_to_version_id
                and remove_from_version_id is None
            ):
                raise SecretWriteError(
                    secret_name=secret_id,
                    backend=BACKEND,
                    reason=(
                        f"Stage {label} is attached to version {holder}; "
                        "remove_from_version_id is required to move it"
                    ),
                )

            if holder is not None:
                stored.stages[holder].discard(label)
            if move_to_version_id is not None:
                stored.stages[move_to_version_id].add(label)
                demoted = holder is not None and holder != move_to_version_id
                if stage is VersionStage.CURRENT and demoted:
                    self._detach_everywhere(stored, VersionStage.PREVIOUS.value)
                    stored.stages[holder].add(VersionStage.PREVIOUS.value)

        logger.info(
            "Secret version stage updated",
            extra={
                "secret_id": secret_id,
                "stage": label,
                "move_to_version_id": move_to_version_id,
                "remove_from_version_id": remove_from_version_id,
                "backend": BACKEND,
            },
        )
