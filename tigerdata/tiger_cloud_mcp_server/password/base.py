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

"""Base class for password storage backends."""

from ..exceptions import PasswordStorageError
from .identity import SecretIdentity, StorageOutcome, sanitize_error_message
from abc import ABC, abstractmethod
from typing import Optional


class PasswordStorage(ABC):
    """Persists, retrieves and removes one password per identity.

    Subclasses set ``method`` to their backend label and describe where the
    password lands through ``location``.
    """

    method: str = ''
    location: str = ''

    @abstractmethod
    def save(self, identity: SecretIdentity, password: str) -> None:
        """Store ``password`` for ``identity``, replacing any previous value."""

    @abstractmethod
    def get(self, identity: SecretIdentity) -> str:
        """Return the password stored for ``identity``."""

    @abstractmethod
    def remove(self, identity: SecretIdentity) -> None:
        """Delete the password stored for ``identity``; absence is not an error."""

    def save_with_outcome(self, identity: SecretIdentity, password: str) -> StorageOutcome:
        """Save ``password`` and describe the result through the backend that handled it.

        Storage errors are reported in the outcome instead of being raised.
        """
        try:
            self.save(identity, password)
        except PasswordStorageError as e:
            return self.describe_outcome(e, password)
        return self.describe_outcome(None, password)

    def describe_outcome(self, error: Optional[BaseException], password: str) -> StorageOutcome:
        """Turn the result of ``save`` into a message safe to show to the user.

        Args:
            error: The exception raised by ``save``, or None on success
            password: The password that was being saved, masked out of the message

        Returns:
            StorageOutcome: Backend-labeled outcome
        """
        if error is not None:
            return StorageOutcome(
                success=False,
                method=self.method,
                message=f'Failed to save password to {self.location}: '
                f'{sanitize_error_message(error, password)}',
            )
        return StorageOutcome(
            success=True,
            method=self.method,
            message=f'Password saved to {self.location} for automatic authentication',
        )
