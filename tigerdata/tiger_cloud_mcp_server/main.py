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

"""Tiger Cloud MCP Server implementation."""

import argparse
import os
import sys
import tigerdata.tiger_cloud_mcp_server.tools  # noqa: F401 - imported for side effects to register tools
from loguru import logger
from tigerdata.tiger_cloud_mcp_server.common.connection import TigerConnectionManager
from tigerdata.tiger_cloud_mcp_server.common.server import SERVER_VERSION, mcp
from tigerdata.tiger_cloud_mcp_server.constants import (
    DEFAULT_KEYRING_SERVICE_NAME,
    DEFAULT_PASSWORD_STORAGE,
    DEFAULT_WAIT_TIMEOUT_MINUTES,
)
from tigerdata.tiger_cloud_mcp_server.context import TigerContext
from tigerdata.tiger_cloud_mcp_server.password import (
    PasswordStorageMethod,
    build_password_storage,
)


def main():
    """Run the MCP server with CLI argument support."""
    parser = argparse.ArgumentParser(
        description='An MCP server for managing Tiger Cloud database services'
    )
    parser.add_argument('--port', type=int, default=8888, help='Port to run the server on')
    parser.add_argument(
        '--api-url',
        type=str,
        default=None,
        help='Base URL of the Tiger Cloud API (defaults to TIGER_API_URL)',
    )
    parser.add_argument(
        '--project-id',
        type=str,
        default=None,
        help='Tiger Cloud project to operate on (defaults to TIGER_PROJECT_ID)',
    )
    parser.add_argument(
        '--readonly',
        default=True,
        action=argparse.BooleanOptionalAction,
        help='Prevents the MCP server from performing mutating operations',
    )
    parser.add_argument(
        '--password-storage',
        type=str,
        default=os.environ.get('TIGER_PASSWORD_STORAGE', DEFAULT_PASSWORD_STORAGE),
        help='Where service passwords are stored: keyring, pgpass, none or fallback',
    )
    parser.add_argument(
        '--keyring-service',
        type=str,
        default=DEFAULT_KEYRING_SERVICE_NAME,
        help='Service name under which passwords are kept in the system keyring',
    )
    parser.add_argument(
        '--wait-timeout',
        type=int,
        default=DEFAULT_WAIT_TIMEOUT_MINUTES,
        help='Default timeout in minutes for tools that wait on a service',
    )

    args = parser.parse_args()
    logger.remove()
    logger.add(sys.stderr, level=os.environ.get('FASTMCP_LOG_LEVEL', 'INFO'))

    try:
        storage_method = PasswordStorageMethod.parse(args.password_storage)
    except ValueError as e:
        parser.error(str(e))

    # init connection manager and context
    TigerConnectionManager.initialize(api_url=args.api_url, project_id=args.project_id)
    TigerContext.initialize(
        readonly=args.readonly,
        password_storage=build_password_storage(
            storage_method, keyring_service_name=args.keyring_service
        ),
        wait_timeout_minutes=args.wait_timeout,
    )

    # config server port
    mcp.settings.port = args.port

    logger.info(f'Starting Tiger Cloud MCP Server v{SERVER_VERSION}')
    logger.info(f'API URL: {TigerConnectionManager.get_api_url()}')
    logger.info(f'Read-only mode: {TigerContext.readonly_mode()}')
    logger.info(f'Password storage: {storage_method.value}')

    mcp.run()


if __name__ == '__main__':
    main()
