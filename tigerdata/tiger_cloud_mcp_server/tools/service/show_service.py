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

"""Tool to show the details of a Tiger Cloud service."""

from ...common.connection import TigerConnectionManager
from ...common.decorator import handle_exceptions
from ...common.server import mcp
from ...common.utils import format_service_detail, parse_service, raise_for_api_status
from loguru import logger
from pydantic import Field
from typing import Any, Dict
from typing_extensions import Annotated


SHOW_SERVICE_TOOL_DESCRIPTION = """Show details of a Tiger Cloud database service.

<use_case>
Use this tool to check the status of a service and to find its direct and pooled endpoints.
</use_case>

## Response structure
- `service.id`: The service identifier
- `service.status`: Current status (e.g. READY, PAUSED, CONFIGURING)
- `service.direct_endpoint`: host:port of the direct endpoint
- `service.pooler_endpoint`: host:port of the connection pooler, if enabled
"""


@mcp.tool(
    name='tiger_service_show',
    description=SHOW_SERVICE_TOOL_DESCRIPTION,
)
@handle_exceptions
async def show_service(
    service_id: Annotated[
        str,
        Field(
            description='The unique identifier of the service to show details for. '
            'Use tiger_service_list to find service IDs.'
        ),
    ],
) -> Dict[str, Any]:
    """Show details of a Tiger Cloud service.

    Args:
        service_id: The identifier of the service

    Returns:
        Dict[str, Any]: The formatted service details
    """
    client = TigerConnectionManager.get_connection()
    project_id = TigerConnectionManager.get_project_id()

    logger.info(f'Showing service {service_id} in project {project_id}')
    response = await client.get_service(project_id, service_id)
    raise_for_api_status(response, 'service', project_id, service_id)

    service = parse_service(response)
    return {'service': format_service_detail(service).model_dump()}
