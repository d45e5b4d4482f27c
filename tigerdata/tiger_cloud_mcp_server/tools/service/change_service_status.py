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

"""Tool to start or stop a Tiger Cloud service."""

from ...common.connection import TigerConnectionManager
from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...common.utils import format_service_detail, parse_service, raise_for_api_status
from ...constants import STATUS_PAUSED, STATUS_READY, SUCCESS_STARTED, SUCCESS_STOPPED
from ...context import TigerContext
from ...models import Service
from ...wait import StatusWaitHandler, wait_for_service
from loguru import logger
from pydantic import Field
from typing import Any, Dict, Literal, Optional
from typing_extensions import Annotated


CHANGE_STATUS_TOOL_DESCRIPTION = """Start or stop a Tiger Cloud database service.

- **Start**: Resumes a paused service, making it available for connections
- **Stop**: Pauses a running service, making it unavailable until started again

<warning>
Starting a paused service resumes billing charges. Stopping a service drops all open connections.
</warning>
"""

TARGET_STATUS = {
    'start': STATUS_READY,
    'stop': STATUS_PAUSED,
}


@mcp.tool(
    name='tiger_service_change_status',
    description=CHANGE_STATUS_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def change_service_status(
    service_id: Annotated[str, Field(description='The unique identifier of the service')],
    action: Annotated[Literal['start', 'stop'], Field(description='Action to perform')],
    wait: Annotated[
        bool, Field(description='Whether to wait for the service to reach its target status')
    ] = True,
    timeout_minutes: Annotated[
        Optional[int], Field(description='Timeout in minutes when waiting', gt=0)
    ] = None,
) -> Dict[str, Any]:
    """Start or stop a Tiger Cloud service.

    Args:
        service_id: The identifier of the service
        action: "start" or "stop"
        wait: Whether to wait for READY (start) or PAUSED (stop)
        timeout_minutes: How long to wait

    Returns:
        Dict[str, Any]: The service and a summary message
    """
    client = TigerConnectionManager.get_connection()
    project_id = TigerConnectionManager.get_project_id()

    if action == 'start':
        logger.info(f'Starting service {service_id}')
        response = await client.start_service(project_id, service_id)
        message = SUCCESS_STARTED.format(f'service {service_id}')
    else:
        logger.info(f'Stopping service {service_id}')
        response = await client.stop_service(project_id, service_id)
        message = SUCCESS_STOPPED.format(f'service {service_id}')
    raise_for_api_status(response, f'{action} services', project_id, service_id)

    service = parse_service(response) if response.json_dict() else Service(service_id=service_id)
    logger.success(message)

    if wait:
        minutes = timeout_minutes or TigerContext.wait_timeout_minutes()
        await wait_for_service(
            client,
            project_id,
            service_id,
            StatusWaitHandler(TARGET_STATUS[action], service),
            timeout=minutes * 60,
            timeout_message=f'service {service_id} may still be changing status',
        )

    return {
        'message': message,
        'service': format_service_detail(service).model_dump(),
    }
