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

"""Connection details for Tiger Cloud services.

Picks the direct or pooled endpoint of a service, optionally attaches the
stored password of a role, and renders the result as a PostgreSQL URI.
"""

from .constants import (
    DEFAULT_DATABASE,
    DEFAULT_PORT,
    DEFAULT_ROLE,
    ERROR_ENDPOINT_HOST_UNAVAILABLE,
    ERROR_ENDPOINT_UNAVAILABLE,
    PASSWORD_STORAGE_KEYRING,
    PASSWORD_STORAGE_PGPASS,
)
from .exceptions import (
    EndpointUnavailableError,
    PasswordNotFoundError,
    PasswordStorageDisabledError,
    PasswordStorageError,
    PasswordUnavailableError,
)
from .models import Service
from .password import PasswordStorage, SecretIdentity
from enum import Enum
from loguru import logger
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from urllib.parse import quote


POOLER_UNAVAILABLE_WARNING = (
    'Warning: Connection pooler not available for this service, using direct connection\n'
)


class PasswordMode(str, Enum):
    """Whether connection details should carry a password."""

    EXCLUDE = 'exclude'
    REQUIRED = 'required'
    OPTIONAL = 'optional'


class ConnectionDetailsOptions(BaseModel):
    """Options controlling how connection details are resolved."""

    pooled: bool = Field(False, description='Use the pooled endpoint when available')
    role: str = Field(DEFAULT_ROLE, description='Database role to connect as')
    password_mode: PasswordMode = Field(PasswordMode.EXCLUDE, description='Password policy')
    initial_password: Optional[str] = Field(
        None,
        description='Password to use instead of the stored one, e.g. from a create call',
        repr=False,
    )
    warn_writer: Optional[Any] = Field(
        None, description='Where to write advisory warnings; None suppresses them'
    )


class ConnectionDetails(BaseModel):
    """Fully resolved connection target of a service."""

    role: str
    host: str
    port: int
    database: str
    password: Optional[str] = Field(None, repr=False)

    def __str__(self) -> str:
        """Render a PostgreSQL connection URI, embedding the password only when present."""
        user = quote(self.role, safe='')
        if self.password:
            user = f'{user}:{quote(self.password, safe="")}'
        return f'postgresql://{user}@{self.host}:{self.port}/{self.database}?sslmode=require'

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for tool output, leaving out an absent password."""
        return self.model_dump(exclude_none=True)


def get_connection_details(
    service: Service,
    options: ConnectionDetailsOptions,
    storage: Optional[PasswordStorage] = None,
) -> ConnectionDetails:
    """Resolve how to connect to ``service``.

    Args:
        service: Service descriptor returned by the platform API
        options: Endpoint selection and password policy
        storage: Password storage consulted when a password is wanted and no
            initial password was supplied

    Returns:
        ConnectionDetails: The resolved connection target

    Raises:
        EndpointUnavailableError: If the selected endpoint has no host or an invalid port
        PasswordUnavailableError: If a required password cannot be retrieved
    """
    if service.endpoint is None:
        raise EndpointUnavailableError(ERROR_ENDPOINT_UNAVAILABLE)

    endpoint = service.endpoint
    pooler = service.pooler_endpoint
    if options.pooled:
        if pooler is not None:
            endpoint = pooler
        elif options.warn_writer is not None:
            options.warn_writer.write(POOLER_UNAVAILABLE_WARNING)

    if not endpoint.host:
        raise EndpointUnavailableError(ERROR_ENDPOINT_HOST_UNAVAILABLE)
    port = DEFAULT_PORT if endpoint.port is None else endpoint.port
    if port <= 0:
        raise EndpointUnavailableError(f'endpoint port {port} is not valid')

    details = ConnectionDetails(
        role=options.role,
        host=endpoint.host,
        port=port,
        database=DEFAULT_DATABASE,
    )

    if options.password_mode == PasswordMode.EXCLUDE:
        return details

    if options.initial_password:
        details.password = options.initial_password
        return details

    identity = SecretIdentity.for_service(service, options.role)
    if options.password_mode == PasswordMode.REQUIRED:
        details.password = get_password(storage, identity)
        return details

    try:
        details.password = get_password(storage, identity)
    except PasswordUnavailableError as e:
        logger.debug(f'Continuing without password for {identity}: {e}')
    return details


def get_password(storage: Optional[PasswordStorage], identity: SecretIdentity) -> str:
    """Fetch the stored password for ``identity``.

    Raises:
        PasswordUnavailableError: With a message that names why no password is available
    """
    if storage is None:
        raise PasswordUnavailableError('no password storage configured')
    try:
        password = storage.get(identity)
    except PasswordStorageDisabledError as e:
        raise PasswordUnavailableError(
            'password storage is disabled (password_storage=none)'
        ) from e
    except PasswordNotFoundError as e:
        if e.backend == PASSWORD_STORAGE_KEYRING:
            raise PasswordUnavailableError('no password found in keyring for this service') from e
        if e.backend == PASSWORD_STORAGE_PGPASS:
            raise PasswordUnavailableError('no password found in ~/.pgpass for this service') from e
        raise PasswordUnavailableError(f'failed to retrieve password: {e}') from e
    except PasswordStorageError as e:
        raise PasswordUnavailableError(f'failed to retrieve password: {e}') from e

    if not password:
        raise PasswordUnavailableError('no password available for service')
    return password
