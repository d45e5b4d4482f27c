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

"""Tool to delete a Tiger Cloud service."""

import asyncio
from ...common.connection import TigerConnectionManager
from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...common.utils import parse_service, raise_for_api_status
from ...constants import CONFIRM_DELETE, DEFAULT_ROLE, SUCCESS_DELETED
from ...context import TigerContext
from ...exceptions import PasswordStorageError
from ...password import SecretIdentity
from ...wait import DeletionWaitHandler, wait_for_service
from loguru import logger
from pydantic import Field
from typing import Any, Dict, Optional
from typing_extensions import Annotated


DELETE_SERVICE_TOOL_DESCRIPTION = """Delete a Tiger Cloud database service.

This tool permanently deletes a service and all of its data. The locally stored password of
the 'tsdbadmin' role is removed once the deletion is confirmed.

<warning>
This is a destructive operation that cannot be undone.
</warning>
"""


@mcp.tool(
    name='tiger_service_delete',
    description=DELETE_SERVICE_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def delete_service(
    service_id: Annotated[str, Field(description='The unique identifier of the service')],
    confirmation: Annotated[
        Optional[str],
        Field(description=f'Must be exactly "{CONFIRM_DELETE}" to proceed'),
    ] = None,
    wait: Annotated[
        bool, Field(description='Whether to wait until the service no longer exists')
    ] = True,
    timeout_minutes: Annotated[
        Optional[int], Field(description='Timeout in minutes when waiting', gt=0)
    ] = None,
) -> Dict[str, Any]:
    """Delete a Tiger Cloud service.

    Args:
        service_id: The identifier of the service
        confirmation: Confirmation text for the destructive operation
        wait: Whether to wait for the deletion to complete
        timeout_minutes: How long to wait

    Returns:
        Dict[str, Any]: A summary of the operation
    """
    warning_message = (
        f'WARNING: You are about to delete service {service_id}. All of its data will be lost. '
        f'To confirm, please provide the confirmation parameter with the value "{CONFIRM_DELETE}".'
    )
    if not confirmation:
        return {
            'requires_confirmation': True,
            'warning': warning_message,
            'message': warning_message,
        }
    if confirmation != CONFIRM_DELETE:
        return {
            'error': f'Confirmation value must be exactly "{CONFIRM_DELETE}" to proceed with this '
            'operation. Operation aborted.'
        }

    client = TigerConnectionManager.get_connection()
    project_id = TigerConnectionManager.get_project_id()

    # read the endpoint first, the pgpass entry is keyed on it
    response = await client.get_service(project_id, service_id)
    raise_for_api_status(response, 'service', project_id, service_id)
    service = parse_service(response)
    service.project_id = service.project_id or project_id

    logger.info(f'Deleting service {service_id}')
    response = await client.delete_service(project_id, service_id)
    raise_for_api_status(response, 'delete services', project_id, service_id)
    logger.success(f'Deletion of service {service_id} accepted')

    result: Dict[str, Any] = {'message': SUCCESS_DELETED.format(f'service {service_id}')}
    if not wait:
        result['message'] = f'Deletion of service {service_id} initiated'
        return result

    minutes = timeout_minutes or TigerContext.wait_timeout_minutes()
    await wait_for_service(
        client,
        project_id,
        service_id,
        DeletionWaitHandler(service_id),
        timeout=minutes * 60,
        timeout_message=f'service {service_id} may still be deleting',
    )

    try:
        await asyncio.to_thread(
            TigerContext.password_storage().remove,
            SecretIdentity.for_service(service, DEFAULT_ROLE),
        )
        result['password_removed'] = True
    except PasswordStorageError as e:
        logger.warning(f'Could not remove stored password for service {service_id}: {e}')
        result['password_removed'] = False
    return result
