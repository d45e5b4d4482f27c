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

"""Tool to list the Tiger Cloud services of the current project."""

from ...common.connection import TigerConnectionManager
from ...common.decorator import handle_exceptions
from ...common.server import mcp
from ...common.utils import format_service_detail, parse_services, raise_for_api_status
from loguru import logger
from typing import Any, Dict


LIST_SERVICES_TOOL_DESCRIPTION = """List all Tiger Cloud database services in the current project.

<use_case>
Use this tool to discover services and their IDs before calling the other service tools.
</use_case>

## Response structure
- `services`: One entry per service with `id`, `name`, `status`, `type`, `region` and endpoints
- `count`: Number of services
"""


@mcp.tool(
    name='tiger_service_list',
    description=LIST_SERVICES_TOOL_DESCRIPTION,
)
@handle_exceptions
async def list_services() -> Dict[str, Any]:
    """List the services of the configured project.

    Returns:
        Dict[str, Any]: The formatted services and their count
    """
    client = TigerConnectionManager.get_connection()
    project_id = TigerConnectionManager.get_project_id()

    logger.info(f'Listing services in project {project_id}')
    response = await client.list_services(project_id)
    raise_for_api_status(response, 'project')

    services = [format_service_detail(service).model_dump() for service in parse_services(response)]
    return {
        'services': services,
        'count': len(services),
        'message': f'Successfully retrieved information for {len(services)} services',
    }
