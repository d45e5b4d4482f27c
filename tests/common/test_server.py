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

"""Tests for server module."""

import pytest
import tigerdata.tiger_cloud_mcp_server.tools  # noqa: F401 - imported for side effects to register tools
from tigerdata.tiger_cloud_mcp_server.common.server import mcp


class TestMCPServer:
    """Test cases for MCP server setup."""

    def test_mcp_server_configuration(self):
        """Test MCP server configuration."""
        assert mcp.name == 'tigerdata.tiger-cloud-mcp-server'
        assert 'read-only mode' in mcp.instructions

    @pytest.mark.asyncio
    async def test_tools_are_registered(self):
        """Test every service tool is registered."""
        tools = await mcp.list_tools()

        names = {tool.name for tool in tools}
        assert {
            'tiger_service_list',
            'tiger_service_show',
            'tiger_service_create',
            'tiger_service_change_status',
            'tiger_service_delete',
            'tiger_service_update_password',
            'tiger_service_connection_string',
        } <= names

    @pytest.mark.asyncio
    async def test_tool_parameters(self):
        """Test tool parameters are described from their annotations."""
        tools = {tool.name: tool for tool in await mcp.list_tools()}

        schema = tools['tiger_service_connection_string'].inputSchema
        assert schema['required'] == ['service_id']
        assert 'pooled' in schema['properties']
