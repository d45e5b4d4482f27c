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

"""Context management for Tiger Cloud MCP Server."""

from .constants import DEFAULT_WAIT_TIMEOUT_MINUTES
from .password import PasswordStorage, PasswordStorageMethod, build_password_storage
from typing import Optional


class TigerContext:
    """Context class for Tiger Cloud MCP Server.

    Set once by ``initialize`` at startup and only read afterwards.
    """

    _readonly = True
    _password_storage: Optional[PasswordStorage] = None
    _wait_timeout_minutes = DEFAULT_WAIT_TIMEOUT_MINUTES

    @classmethod
    def initialize(
        cls,
        readonly: bool = True,
        password_storage: Optional[PasswordStorage] = None,
        wait_timeout_minutes: int = DEFAULT_WAIT_TIMEOUT_MINUTES,
    ):
        """Initialize the context.

        Args:
            readonly (bool): Whether to run in readonly mode. Defaults to True.
            password_storage (PasswordStorage): Storage for service passwords.
                Defaults to the keyring with ~/.pgpass fallback.
            wait_timeout_minutes (int): Default timeout for waiting tools. Defaults to 30.
        """
        cls._readonly = readonly
        cls._password_storage = password_storage
        cls._wait_timeout_minutes = wait_timeout_minutes

    @classmethod
    def readonly_mode(cls) -> bool:
        """Check if the server is running in readonly mode.

        Returns:
            True if readonly mode is enabled, False otherwise
        """
        return cls._readonly

    @classmethod
    def password_storage(cls) -> PasswordStorage:
        """Get the configured password storage, building the default one on first use."""
        if cls._password_storage is None:
            cls._password_storage = build_password_storage(PasswordStorageMethod.FALLBACK)
        return cls._password_storage

    @classmethod
    def wait_timeout_minutes(cls) -> int:
        """Get the default timeout, in minutes, used by tools that wait."""
        return cls._wait_timeout_minutes
