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

"""Tool to build the connection string of a Tiger Cloud service."""

import asyncio
import io
from ...common.connection import TigerConnectionManager
from ...common.decorator import handle_exceptions
from ...common.server import mcp
from ...common.utils import parse_service, raise_for_api_status
from ...connection import ConnectionDetailsOptions, PasswordMode, get_connection_details
from ...constants import DEFAULT_ROLE
from ...context import TigerContext
from loguru import logger
from pydantic import Field
from typing import Any, Dict
from typing_extensions import Annotated


CONNECTION_STRING_TOOL_DESCRIPTION = """Get the PostgreSQL connection string of a Tiger Cloud service.

<use_case>
Use this tool to obtain a connection string for psql or a database driver.
</use_case>

<important_notes>
1. With `pooled` the connection pooler endpoint is used when the service has one; otherwise the
   direct endpoint is returned together with a warning
2. With `with_password` the locally stored password (system keyring or ~/.pgpass) is embedded when
   one is found; a missing password is not an error
</important_notes>
"""


@mcp.tool(
    name='tiger_service_connection_string',
    description=CONNECTION_STRING_TOOL_DESCRIPTION,
)
@handle_exceptions
async def get_connection_string(
    service_id: Annotated[str, Field(description='The unique identifier of the service')],
    pooled: Annotated[
        bool, Field(description='Use the connection pooler endpoint when available')
    ] = False,
    role: Annotated[str, Field(description='Database role to connect as')] = DEFAULT_ROLE,
    with_password: Annotated[
        bool, Field(description='Embed the stored password in the connection string')
    ] = False,
) -> Dict[str, Any]:
    """Build the connection string of a Tiger Cloud service.

    Args:
        service_id: The identifier of the service
        pooled: Whether to prefer the pooled endpoint
        role: Database role to connect as
        with_password: Whether to embed the stored password

    Returns:
        Dict[str, Any]: Connection string, details and any warnings
    """
    client = TigerConnectionManager.get_connection()
    project_id = TigerConnectionManager.get_project_id()

    logger.info(f'Building connection string for service {service_id}')
    response = await client.get_service(project_id, service_id)
    raise_for_api_status(response, 'service', project_id, service_id)
    service = parse_service(response)
    service.project_id = service.project_id or project_id

    warnings = io.StringIO()
    options = ConnectionDetailsOptions(
        pooled=pooled,
        role=role,
        password_mode=PasswordMode.OPTIONAL if with_password else PasswordMode.EXCLUDE,
        warn_writer=warnings,
    )
    details = await asyncio.to_thread(
        get_connection_details, service, options, TigerContext.password_storage()
    )

    result = {
        'connection_string': str(details),
        'details': details.to_dict(),
    }
    if warnings.getvalue():
        result['warnings'] = warnings.getvalue().splitlines()
    return result
