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

"""Common MCP server configuration."""

from ..constants import MCP_SERVER_VERSION
from mcp.server.fastmcp import FastMCP

SERVER_VERSION = MCP_SERVER_VERSION

SERVER_INSTRUCTIONS = """
This server manages Tiger Cloud database services (TimescaleDB, PostgreSQL and vector).

Key capabilities:
- Service Management: List, show, create, start, stop and delete services
- Credentials: Update the master password of a service and store it locally (system keyring or ~/.pgpass)
- Connection Details: Build connection strings for the direct or pooled endpoint

The server operates in read-only mode by default for safety. Write operations require explicit configuration.

Mutating tools can wait until the service reaches its target state. Always verify service identifiers
before executing destructive operations.
"""

# FastMCP instance
mcp = FastMCP(
    'tigerdata.tiger-cloud-mcp-server',
    instructions=SERVER_INSTRUCTIONS,
)
