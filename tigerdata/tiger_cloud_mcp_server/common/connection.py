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

"""Connection management for the Tiger Cloud API used by the MCP server."""

import httpx
import os
from ..common.server import SERVER_VERSION
from ..constants import DEFAULT_API_URL, DEFAULT_REQUEST_TIMEOUT, EXIT_AUTHENTICATION_ERROR
from ..exceptions import APIRequestError
from ..models import ApiResponse
from loguru import logger
from typing import Any, Dict, Optional


class TigerApiClient:
    """Thin async client for the Tiger Cloud REST API.

    Every call returns an ``ApiResponse`` whatever the status code; callers
    decide which codes are errors. Transport failures raise ``httpx.HTTPError``.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        """Initialize the API client.

        Args:
            http_client: Configured httpx client with base URL and credentials
        """
        self._http = http_client

    async def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None
    ) -> ApiResponse:
        logger.debug(f'{method} {path}')
        response = await self._http.request(method, path, json=json)
        body = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None
        return ApiResponse(
            status_code=response.status_code, reason=response.reason_phrase, body=body
        )

    async def get_service(self, project_id: str, service_id: str) -> ApiResponse:
        return await self._request('GET', f'/projects/{project_id}/services/{service_id}')

    async def list_services(self, project_id: str) -> ApiResponse:
        return await self._request('GET', f'/projects/{project_id}/services')

    async def create_service(self, project_id: str, payload: Dict[str, Any]) -> ApiResponse:
        return await self._request('POST', f'/projects/{project_id}/services', json=payload)

    async def start_service(self, project_id: str, service_id: str) -> ApiResponse:
        return await self._request('POST', f'/projects/{project_id}/services/{service_id}/start')

    async def stop_service(self, project_id: str, service_id: str) -> ApiResponse:
        return await self._request('POST', f'/projects/{project_id}/services/{service_id}/stop')

    async def delete_service(self, project_id: str, service_id: str) -> ApiResponse:
        return await self._request('DELETE', f'/projects/{project_id}/services/{service_id}')

    async def update_password(
        self, project_id: str, service_id: str, password: str
    ) -> ApiResponse:
        return await self._request(
            'POST',
            f'/projects/{project_id}/services/{service_id}/updatePassword',
            json={'password': password},
        )

    async def aclose(self) -> None:
        await self._http.aclose()


class TigerConnectionManager:
    """Manages the shared API client built from the environment."""

    _client: Optional[TigerApiClient] = None
    _env_prefix = 'TIGER'
    _api_url: Optional[str] = None
    _project_id: Optional[str] = None

    @classmethod
    def initialize(cls, api_url: Optional[str] = None, project_id: Optional[str] = None):
        """Initialize the connection manager with the API URL and project.

        Args:
            api_url (str): Base URL of the Tiger Cloud API
            project_id (str): Project the tools operate on
        """
        cls._api_url = api_url or os.environ.get(f'{cls._env_prefix}_API_URL', DEFAULT_API_URL)
        cls._project_id = project_id or os.environ.get(f'{cls._env_prefix}_PROJECT_ID')

        cls._client = None

    @classmethod
    def get_connection(cls) -> TigerApiClient:
        """Get or create the API client with retry capabilities.

        Returns:
            TigerApiClient: An API client configured with retries and timeouts

        Raises:
            APIRequestError: If no credentials are configured
        """
        if cls._client is None:
            public_key = os.environ.get(f'{cls._env_prefix}_PUBLIC_KEY', '')
            secret_key = os.environ.get(f'{cls._env_prefix}_SECRET_KEY', '')
            if not public_key or not secret_key:
                raise APIRequestError(
                    'authentication required: set TIGER_PUBLIC_KEY and TIGER_SECRET_KEY',
                    exit_code=EXIT_AUTHENTICATION_ERROR,
                )

            # configuration retry settings
            max_retries = int(os.environ.get(f'{cls._env_prefix}_MAX_RETRIES', '3'))
            connect_timeout = float(os.environ.get(f'{cls._env_prefix}_CONNECT_TIMEOUT', '5'))
            read_timeout = float(
                os.environ.get(f'{cls._env_prefix}_READ_TIMEOUT', str(DEFAULT_REQUEST_TIMEOUT))
            )

            http_client = httpx.AsyncClient(
                base_url=cls.get_api_url(),
                auth=httpx.BasicAuth(public_key, secret_key),
                timeout=httpx.Timeout(read_timeout, connect=connect_timeout),
                transport=httpx.AsyncHTTPTransport(retries=max_retries),
                # identify requests coming from the MCP server
                headers={'User-Agent': f'tiger-cloud-mcp-server/{SERVER_VERSION}'},
            )
            cls._client = TigerApiClient(http_client)

        return cls._client

    @classmethod
    async def close_connection(cls) -> None:
        """Close the API client connection."""
        if cls._client is not None:
            await cls._client.aclose()
            cls._client = None

    @classmethod
    def get_api_url(cls) -> str:
        """Get the base URL of the Tiger Cloud API."""
        return cls._api_url or os.environ.get(f'{cls._env_prefix}_API_URL', DEFAULT_API_URL)

    @classmethod
    def get_project_id(cls) -> str:
        """Get the project the tools operate on.

        Raises:
            APIRequestError: If no project is configured
        """
        project_id = cls._project_id or os.environ.get(f'{cls._env_prefix}_PROJECT_ID')
        if not project_id:
            raise APIRequestError(
                'project ID is required: pass --project-id or set TIGER_PROJECT_ID',
                exit_code=EXIT_AUTHENTICATION_ERROR,
            )
        return project_id
