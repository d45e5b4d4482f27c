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

"""Tool to create a Tiger Cloud service."""

import asyncio
import random
from ...common.connection import TigerConnectionManager
from ...common.decorator import handle_exceptions, readonly_check
from ...common.server import mcp
from ...common.utils import format_service_detail, parse_service, raise_for_api_status
from ...connection import ConnectionDetailsOptions, PasswordMode, get_connection_details
from ...constants import DEFAULT_ROLE, STATUS_READY, SUCCESS_CREATED
from ...context import TigerContext
from ...exceptions import EndpointUnavailableError, WaitError
from ...password import SecretIdentity, save_password_with_outcome
from ...wait import StatusWaitHandler, wait_for_service
from loguru import logger
from pydantic import Field
from typing import Any, Dict, Literal, Optional
from typing_extensions import Annotated


CREATE_SERVICE_TOOL_DESCRIPTION = """Create a new Tiger Cloud database service.

<use_case>
Use this tool to provision a TimescaleDB, PostgreSQL or vector database service.
</use_case>

<important_notes>
1. The initial password of the 'tsdbadmin' role is stored locally (system keyring or ~/.pgpass)
   right after the service is accepted, before any waiting
2. With `wait` the tool returns once the service is READY or the timeout elapses
3. A new service is billed as soon as it is created
</important_notes>

## Response structure
- `service`: The created service
- `password_storage`: Where the initial password was stored
- `connection_string`: Connection string of the direct endpoint
- `message`: Summary of the operation
"""


@mcp.tool(
    name='tiger_service_create',
    description=CREATE_SERVICE_TOOL_DESCRIPTION,
)
@handle_exceptions
@readonly_check
async def create_service(
    region: Annotated[str, Field(description='Region code where the service will be deployed')],
    name: Annotated[
        Optional[str], Field(description='Human-readable name; generated when omitted')
    ] = None,
    service_type: Annotated[
        Literal['timescaledb', 'postgres', 'vector'],
        Field(description='The type of database service to create'),
    ] = 'timescaledb',
    cpu_millis: Annotated[int, Field(description='CPU allocation in millicores', gt=0)] = 500,
    memory_gbs: Annotated[float, Field(description='Memory allocation in gigabytes', gt=0)] = 2.0,
    replicas: Annotated[
        int, Field(description='Number of high-availability replicas', ge=0)
    ] = 0,
    wait: Annotated[
        bool, Field(description='Whether to wait for the service to be ready before returning')
    ] = True,
    timeout_minutes: Annotated[
        Optional[int], Field(description='Timeout in minutes when waiting', gt=0)
    ] = None,
) -> Dict[str, Any]:
    """Create a Tiger Cloud service.

    Args:
        region: Region code
        name: Service name
        service_type: Database flavour
        cpu_millis: CPU allocation in millicores
        memory_gbs: Memory allocation in gigabytes
        replicas: Number of high-availability replicas
        wait: Whether to wait until the service is READY
        timeout_minutes: How long to wait

    Returns:
        Dict[str, Any]: The created service, password storage outcome and connection string
    """
    client = TigerConnectionManager.get_connection()
    project_id = TigerConnectionManager.get_project_id()
    name = name or f'mcp-service-{random.randint(0, 9999)}'

    payload = {
        'name': name,
        'service_type': service_type.upper(),
        'region_code': region,
        'replica_count': replicas,
        'cpu_millis': cpu_millis,
        'memory_gbs': memory_gbs,
    }
    logger.info(f"Creating service '{name}' in project {project_id}")
    response = await client.create_service(project_id, payload)
    raise_for_api_status(response, 'create services', project_id)
    service = parse_service(response)
    service.project_id = service.project_id or project_id
    logger.success(f"Service '{name}' accepted with ID {service.service_id}")

    storage = TigerContext.password_storage()
    initial_password = service.initial_password or ''
    outcome = await asyncio.to_thread(
        save_password_with_outcome,
        storage,
        SecretIdentity.for_service(service, DEFAULT_ROLE),
        initial_password,
    )

    result: Dict[str, Any] = {
        'password_storage': outcome.model_dump(),
        'message': SUCCESS_CREATED.format(name, service.service_id),
    }

    try:
        details = await asyncio.to_thread(
            get_connection_details,
            service,
            ConnectionDetailsOptions(
                role=DEFAULT_ROLE,
                password_mode=PasswordMode.OPTIONAL,
                initial_password=initial_password,
            ),
            storage,
        )
        result['connection_string'] = str(details)
    except EndpointUnavailableError as e:
        logger.debug(f'No connection string yet: {e}')

    if wait:
        minutes = timeout_minutes or TigerContext.wait_timeout_minutes()
        handler = StatusWaitHandler(STATUS_READY, service)
        try:
            await wait_for_service(
                client,
                project_id,
                service.service_id,
                handler,
                timeout=minutes * 60,
                timeout_message=f'service {service.service_id} may still be provisioning',
            )
            result['message'] += '. Service is now ready!'
        except WaitError as e:
            result['message'] += f'. Warning: {e}'

    result['service'] = format_service_detail(service).model_dump()
    return result
