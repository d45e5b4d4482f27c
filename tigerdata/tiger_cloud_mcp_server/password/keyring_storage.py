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

"""Password storage backed by the operating system keyring."""

import keyring
from ..constants import DEFAULT_KEYRING_SERVICE_NAME, PASSWORD_STORAGE_KEYRING
from ..exceptions import BackendUnavailableError, PasswordNotFoundError
from .base import PasswordStorage
from .identity import SecretIdentity, sanitize_error_message
from keyring.errors import PasswordDeleteError
from loguru import logger


class KeyringStorage(PasswordStorage):
    """Stores passwords in the platform secret manager through ``keyring``."""

    method = PASSWORD_STORAGE_KEYRING
    location = 'system keyring'

    def __init__(self, service_name: str = DEFAULT_KEYRING_SERVICE_NAME):
        """Initialize the keyring storage.

        Args:
            service_name: Keyring service name the passwords are filed under
        """
        self.service_name = service_name

    @staticmethod
    def keyring_username(identity: SecretIdentity) -> str:
        """Build the keyring username for ``identity``."""
        identity.require_complete()
        return f'password-{identity.project_id}-{identity.service_id}-{identity.role}'

    def save(self, identity: SecretIdentity, password: str) -> None:
        username = self.keyring_username(identity)
        logger.debug(f'Saving password for {identity} to keyring')
        try:
            keyring.set_password(self.service_name, username, password)
        # keyring backends surface daemon and D-Bus failures with their own types
        except Exception as e:
            raise BackendUnavailableError(
                f'keyring unavailable: {sanitize_error_message(e, password)}',
                backend=self.method,
            ) from None

    def get(self, identity: SecretIdentity) -> str:
        username = self.keyring_username(identity)
        logger.debug(f'Reading password for {identity} from keyring')
        try:
            password = keyring.get_password(self.service_name, username)
        except Exception as e:
            raise BackendUnavailableError(f'keyring unavailable: {e}', backend=self.method) from e
        if password is None:
            raise PasswordNotFoundError(
                'no password found in keyring for this service', backend=self.method
            )
        return password

    def remove(self, identity: SecretIdentity) -> None:
        username = self.keyring_username(identity)
        logger.debug(f'Removing password for {identity} from keyring')
        try:
            keyring.delete_password(self.service_name, username)
        except PasswordDeleteError:
            logger.debug(f'No keyring entry for {identity}, nothing to remove')
        except Exception as e:
            raise BackendUnavailableError(f'keyring unavailable: {e}', backend=self.method) from e
