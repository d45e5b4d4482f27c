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

"""Password storage backends for service database roles."""

from .base import PasswordStorage
from .identity import SecretIdentity, StorageOutcome, sanitize_error_message
from .keyring_storage import KeyringStorage
from .pgpass_storage import PgpassStorage
from .storage import (
    FallbackStorage,
    NoStorage,
    PasswordStorageMethod,
    build_password_storage,
    save_password_with_outcome,
)

__all__ = [
    'PasswordStorage',
    'SecretIdentity',
    'StorageOutcome',
    'sanitize_error_message',
    'KeyringStorage',
    'PgpassStorage',
    'NoStorage',
    'FallbackStorage',
    'PasswordStorageMethod',
    'build_password_storage',
    'save_password_with_outcome',
]
