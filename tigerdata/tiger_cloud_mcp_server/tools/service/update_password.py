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

"""Tool to update the master password of a Tiger Cloud service."""

import asyncio
from ...common.connection import TigerConnectionManager
from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...common.utils import parse_service, raise_for_api_status
from ...constants import DEFAULT_ROLE, SUCCESS_PASSWORD_UPDATED
from ...context import TigerContext
from ...password import SecretIdentity, save_password_with_outcome
from loguru import logger
from pydantic import Field
from typing import Any, Dict
from typing_extensions import Annotated


UPDATE_PASSWORD_TOOL_DESCRIPTION = """Update the master password of a Tiger Cloud service.

The new password of the 'tsdbadmin' role is set on the service and then stored locally
(system keyring or ~/.pgpass, depending on configuration) for later connections.
"""


@mcp.tool(
    name='tiger_service_update_password',
    description=UPDATE_PASSWORD_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def update_password(
    service_id: Annotated[str, Field(description='The unique identifier of the service')],
    password: Annotated[str, Field(description="The new password for the 'tsdbadmin' user")],
) -> Dict[str, Any]:
    """Update the master password of a Tiger Cloud service.

    Args:
        service_id: The identifier of the service
        password: The new password

    Returns:
        Dict[str, Any]: A summary message and the password storage outcome
    """
    client = TigerConnectionManager.get_connection()
    project_id = TigerConnectionManager.get_project_id()

    logger.info(f'Updating master password of service {service_id}')
    response = await client.update_password(project_id, service_id, password)
    raise_for_api_status(response, 'update service passwords', project_id, service_id)

    response = await client.get_service(project_id, service_id)
    raise_for_api_status(response, 'service', project_id, service_id)
    service = parse_service(response)
    service.project_id = service.project_id or project_id

    outcome = await asyncio.to_thread(
        save_password_with_outcome,
        TigerContext.password_storage(),
        SecretIdentity.for_service(service, DEFAULT_ROLE),
        password,
    )
    return {
        'message': SUCCESS_PASSWORD_UPDATED.format(DEFAULT_ROLE),
        'password_storage': outcome.model_dump(),
    }
