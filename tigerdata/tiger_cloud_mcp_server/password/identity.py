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

"""Identity and outcome types shared by the password storage backends."""

from ..constants import DEFAULT_PORT, PASSWORD_MASK
from ..exceptions import PasswordValidationError
from ..models import Endpoint, Service
from pydantic import BaseModel, Field
from typing import Optional


class SecretIdentity(BaseModel):
    """Composite key of one stored password.

    ``project_id``, ``service_id`` and ``role`` identify the password. The
    endpoint is only consulted by backends that key on host and port.
    """

    project_id: str = Field('', description='Project (namespace) the service belongs to')
    service_id: str = Field('', description='Service identifier')
    role: str = Field('', description='Database role the password belongs to')
    endpoint: Optional[Endpoint] = Field(None, description='Direct endpoint of the service')

    @classmethod
    def for_service(cls, service: Service, role: str) -> 'SecretIdentity':
        """Build the identity of ``role`` on ``service``."""
        return cls(
            project_id=service.project_id or '',
            service_id=service.service_id or '',
            role=role or '',
            endpoint=service.endpoint,
        )

    def require_complete(self) -> None:
        """Raise PasswordValidationError unless project, service and role are set."""
        if not self.service_id:
            raise PasswordValidationError('service ID is required')
        if not self.project_id:
            raise PasswordValidationError('project ID is required')
        self.require_role()

    def require_role(self) -> None:
        """Raise PasswordValidationError unless the role is set."""
        if not self.role:
            raise PasswordValidationError('role is required')

    @property
    def host(self) -> Optional[str]:
        """Host of the direct endpoint, if known."""
        if self.endpoint is None:
            return None
        return self.endpoint.host or None

    @property
    def port(self) -> int:
        """Port of the direct endpoint, defaulting to the PostgreSQL port."""
        if self.endpoint is None or self.endpoint.port is None:
            return DEFAULT_PORT
        return self.endpoint.port

    def __str__(self) -> str:
        return f'{self.project_id}/{self.service_id}/{self.role}'


class StorageOutcome(BaseModel):
    """User-facing result of a password save attempt."""

    success: bool = Field(..., description='Whether the password was persisted')
    method: str = Field(..., description='Label of the backend that handled the save')
    message: str = Field(..., description='Human-readable, sanitized message')


def sanitize_error_message(error: Optional[BaseException], password: str) -> str:
    """Render ``error`` as text with every occurrence of ``password`` masked."""
    if error is None:
        return ''
    message = str(error)
    if password and password in message:
        message = message.replace(password, PASSWORD_MASK)
    return message
