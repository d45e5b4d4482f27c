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

"""General utility functions for the Tiger Cloud MCP Server."""

from ..constants import (
    ERROR_API_STATUS,
    ERROR_AUTHENTICATION,
    ERROR_NOT_FOUND,
    ERROR_PERMISSION_DENIED,
    EXIT_AUTHENTICATION_ERROR,
    EXIT_GENERAL_ERROR,
    EXIT_INVALID_PARAMETERS,
    EXIT_PERMISSION_DENIED,
    EXIT_SERVICE_NOT_FOUND,
    EXIT_TIMEOUT,
    STATUS_PAUSED,
)
from ..exceptions import APIRequestError
from ..models import ApiResponse, Endpoint, Service, ServiceDetail
from typing import List, Optional


def exit_code_for_status(status_code: int) -> int:
    """Map an HTTP status code to a CLI exit code.

    Args:
        status_code: HTTP status code returned by the API

    Returns:
        The exit code the command-line client would use
    """
    if status_code == 400:
        return EXIT_INVALID_PARAMETERS
    if status_code == 401:
        return EXIT_AUTHENTICATION_ERROR
    if status_code == 403:
        return EXIT_PERMISSION_DENIED
    if status_code == 404:
        return EXIT_SERVICE_NOT_FOUND
    if status_code in (408, 504):
        return EXIT_TIMEOUT
    return EXIT_GENERAL_ERROR


def raise_for_api_status(
    response: ApiResponse,
    action: str,
    project_id: str = '',
    service_id: str = '',
) -> None:
    """Raise APIRequestError for an error response.

    Args:
        response: Response returned by the API client
        action: What was attempted, used in the permission-denied message
        project_id: Project of the request, used in the not-found message
        service_id: Service of the request, used in the not-found message
    """
    code = response.status_code
    if 200 <= code < 300:
        return

    if code == 401:
        message = ERROR_AUTHENTICATION
    elif code == 403:
        message = ERROR_PERMISSION_DENIED.format(action)
    elif code == 404 and service_id:
        message = ERROR_NOT_FOUND.format(service_id, project_id)
    elif code == 400:
        body = response.json_dict() or {}
        message = f'Invalid request: {body.get("message") or "invalid request parameters"}'
    else:
        message = ERROR_API_STATUS.format(code)
    raise APIRequestError(message, status_code=code, exit_code=exit_code_for_status(code))


def parse_service(response: ApiResponse) -> Service:
    """Decode the service carried by a successful response.

    Raises:
        APIRequestError: If the response has no JSON body
    """
    body = response.json_dict()
    if body is None:
        raise APIRequestError('empty response from API', status_code=response.status_code)
    return Service.model_validate(body)


def parse_services(response: ApiResponse) -> List[Service]:
    """Decode the list of services carried by a successful response.

    A missing body is an empty list.

    Raises:
        APIRequestError: If the body is not a JSON array
    """
    if response.body is None:
        return []
    if not isinstance(response.body, list):
        raise APIRequestError('unexpected response from API', status_code=response.status_code)
    return [Service.model_validate(item) for item in response.body]


def format_endpoint(endpoint: Optional[Endpoint]) -> Optional[str]:
    """Render an endpoint as ``host:port``."""
    if endpoint is None or not endpoint.host:
        return None
    if endpoint.port is None:
        return endpoint.host
    return f'{endpoint.host}:{endpoint.port}'


def format_service_detail(service: Service) -> ServiceDetail:
    """Format service information for MCP output.

    The initial password is never part of the output.

    Args:
        service: Service returned by the API

    Returns:
        Formatted service information
    """
    return ServiceDetail(
        id=service.service_id,
        name=service.name,
        status=service.status,
        type=service.service_type,
        region=service.region_code,
        created=service.created,
        direct_endpoint=format_endpoint(service.endpoint),
        pooler_endpoint=format_endpoint(service.pooler_endpoint),
        paused=service.status == STATUS_PAUSED,
    )
