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

"""Data models for the Tiger Cloud MCP Server."""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class Endpoint(BaseModel):
    """Network endpoint advertised by a service."""

    host: Optional[str] = Field(None, description='Hostname of the endpoint')
    port: Optional[int] = Field(None, description='Port of the endpoint')


class ConnectionPooler(BaseModel):
    """Connection pooler attached to a service."""

    endpoint: Optional[Endpoint] = Field(None, description='Pooled endpoint')


class Service(BaseModel):
    """Database service as returned by the platform API."""

    service_id: Optional[str] = Field(None, description='Unique service identifier')
    project_id: Optional[str] = Field(None, description='Project the service belongs to')
    name: Optional[str] = Field(None, description='Human-readable service name')
    status: Optional[str] = Field(None, description='Current service status')
    service_type: Optional[str] = Field(None, description='Service type')
    region_code: Optional[str] = Field(None, description='Region the service runs in')
    created: Optional[str] = Field(None, description='Creation timestamp')
    endpoint: Optional[Endpoint] = Field(None, description='Direct endpoint')
    connection_pooler: Optional[ConnectionPooler] = Field(
        None, description='Connection pooler, if enabled'
    )
    initial_password: Optional[str] = Field(
        None, description='Password issued by the create call', repr=False
    )

    @property
    def pooler_endpoint(self) -> Optional[Endpoint]:
        """Return the pooled endpoint, if the service advertises one."""
        if self.connection_pooler is None:
            return None
        return self.connection_pooler.endpoint


class ApiResponse(BaseModel):
    """Status code and decoded body of a platform API call."""

    status_code: int = Field(..., description='HTTP status code')
    reason: str = Field('', description='HTTP reason phrase')
    body: Optional[Any] = Field(None, description='Decoded JSON body, if any')

    @property
    def status(self) -> str:
        """Return the status line, e.g. ``503 Service Unavailable``."""
        return f'{self.status_code} {self.reason}'.strip()

    def json_dict(self) -> Optional[Dict[str, Any]]:
        """Return the body when it is a JSON object."""
        if isinstance(self.body, dict):
            return self.body
        return None


class ServiceDetail(BaseModel):
    """Service information returned by the MCP tools."""

    id: Optional[str] = Field(None, description='Service identifier')
    name: Optional[str] = Field(None, description='Service name')
    status: Optional[str] = Field(None, description='Service status')
    type: Optional[str] = Field(None, description='Service type')
    region: Optional[str] = Field(None, description='Region code')
    created: Optional[str] = Field(None, description='Creation timestamp')
    direct_endpoint: Optional[str] = Field(None, description='host:port of the direct endpoint')
    pooler_endpoint: Optional[str] = Field(None, description='host:port of the pooled endpoint')
    paused: bool = Field(False, description='Whether the service is paused')
