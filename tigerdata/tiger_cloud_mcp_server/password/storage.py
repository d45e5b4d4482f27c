# Copyright Timescale, Inc. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Disabled and fallback password storage, and backend selection."""

from ..constants import (
    PASSWORD_STORAGE_FALLBACK,
    PASSWORD_STORAGE_KEYRING,
    PASSWORD_STORAGE_NONE,
    PASSWORD_STORAGE_PGPASS,
)
from ..exceptions import (
    PasswordRemovalError,
    PasswordStorageDisabledError,
    PasswordStorageError,
    PasswordValidationError,
)
from .base import PasswordStorage
from .identity import SecretIdentity, StorageOutcome, sanitize_error_message
from .keyring_storage import KeyringStorage
from .pgpass_storage import PgpassStorage
from enum import Enum
from loguru import logger
from pathlib import Path
from typing import Optional


class PasswordStorageMethod(str, Enum):
    """Configured password storage backend."""

    KEYRING = PASSWORD_STORAGE_KEYRING
    PGPASS = PASSWORD_STORAGE_PGPASS
    NONE = PASSWORD_STORAGE_NONE
    FALLBACK = PASSWORD_STORAGE_FALLBACK

    @classmethod
    def parse(cls, value: Optional[str]) -> 'PasswordStorageMethod':
        """Parse a configuration value; empty means the fallback chain.

        Raises:
            ValueError: If the value names no known backend
        """
        if not value:
            return cls.FALLBACK
        value = value.strip().lower()
        if value == 'auto':
            return cls.FALLBACK
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f'invalid password_storage value: {value} '
                '(must be keyring, pgpass, none, or fallback)'
            ) from None


class NoStorage(PasswordStorage):
    """Used when the user opted out of persisting passwords."""

    method = PASSWORD_STORAGE_NONE
    location = 'nowhere'

    def save(self, identity: SecretIdentity, password: str) -> None:
        pass

    def get(self, identity: SecretIdentity) -> str:
        raise PasswordStorageDisabledError('password storage disabled', backend=self.method)

    def remove(self, identity: SecretIdentity) -> None:
        pass

    def describe_outcome(self, error: Optional[BaseException], password: str) -> StorageOutcome:
        return StorageOutcome(
            success=False,
            method=self.method,
            message='Password not saved (password_storage=none). Make sure to store it securely.',
        )


class FallbackStorage(PasswordStorage):
    """Tries a primary backend and falls back to a secondary one on any storage error.

    Instances hold no per-call state, so one chain can serve concurrent tool calls.
    """

    method = PASSWORD_STORAGE_FALLBACK
    location = 'password storage'

    def __init__(self, primary: PasswordStorage, secondary: PasswordStorage):
        """Initialize the fallback chain.

        Args:
            primary: Backend tried first
            secondary: Backend used when the primary fails
        """
        self.primary = primary
        self.secondary = secondary

    def _save_primary(self, identity: SecretIdentity, password: str) -> bool:
        """Save to the primary backend; return False when the secondary must be used."""
        try:
            self.primary.save(identity, password)
        except PasswordStorageError as e:
            logger.warning(
                f'Could not save password to {self.primary.method} '
                f'({sanitize_error_message(e, password)}), trying {self.secondary.method}'
            )
            return False
        return True

    def save(self, identity: SecretIdentity, password: str) -> None:
        if not self._save_primary(identity, password):
            self.secondary.save(identity, password)

    def save_with_outcome(self, identity: SecretIdentity, password: str) -> StorageOutcome:
        """Save through the chain; the outcome names the backend that was actually used."""
        if self._save_primary(identity, password):
            return self.primary.describe_outcome(None, password)
        return self.secondary.save_with_outcome(identity, password)

    def get(self, identity: SecretIdentity) -> str:
        try:
            return self.primary.get(identity)
        except PasswordStorageError as e:
            logger.debug(
                f'{self.primary.method} lookup failed ({e}), trying {self.secondary.method}'
            )
            return self.secondary.get(identity)

    def remove(self, identity: SecretIdentity) -> None:
        errors = []
        for backend in (self.primary, self.secondary):
            try:
                backend.remove(identity)
            except PasswordStorageError as e:
                if not e.backend:
                    e.backend = backend.method
                errors.append(e)
        if len(errors) == 2:
            raise PasswordRemovalError(errors)


def build_password_storage(
    method: PasswordStorageMethod = PasswordStorageMethod.FALLBACK,
    keyring_service_name: Optional[str] = None,
    pgpass_path: Optional[Path] = None,
) -> PasswordStorage:
    """Construct the password storage selected by configuration.

    Args:
        method: Configured backend
        keyring_service_name: Keyring service name override
        pgpass_path: pgpass file location override

    Returns:
        PasswordStorage: The configured backend
    """
    method = PasswordStorageMethod(method)

    def make_keyring() -> KeyringStorage:
        if keyring_service_name:
            return KeyringStorage(keyring_service_name)
        return KeyringStorage()

    if method == PasswordStorageMethod.KEYRING:
        return make_keyring()
    if method == PasswordStorageMethod.PGPASS:
        return PgpassStorage(pgpass_path)
    if method == PasswordStorageMethod.NONE:
        return NoStorage()
    return FallbackStorage(make_keyring(), PgpassStorage(pgpass_path))


def save_password_with_outcome(
    storage: PasswordStorage, identity: SecretIdentity, password: str
) -> StorageOutcome:
    """Save ``password`` and describe the result for display.

    An empty password or an incomplete identity is reported without touching
    the backend.
    """
    if not password:
        return StorageOutcome(
            success=False, method=PASSWORD_STORAGE_NONE, message='No password provided'
        )
    try:
        identity.require_complete()
    except PasswordValidationError as e:
        return StorageOutcome(success=False, method=PASSWORD_STORAGE_NONE, message=str(e))

    outcome = storage.save_with_outcome(identity, password)
    if outcome.success:
        logger.info(f'Saved password for {identity} ({outcome.method})')
    else:
        logger.warning(outcome.message)
    return outcome
