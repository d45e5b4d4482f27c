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

"""Tests for main module."""

import pytest
from tigerdata.tiger_cloud_mcp_server.common.connection import TigerConnectionManager
from tigerdata.tiger_cloud_mcp_server.context import TigerContext
from tigerdata.tiger_cloud_mcp_server.main import main
from tigerdata.tiger_cloud_mcp_server.password import FallbackStorage, NoStorage, PgpassStorage
from unittest.mock import patch


MCP_RUN = 'tigerdata.tiger_cloud_mcp_server.main.mcp.run'


class TestMain:
    """Test cases for main function."""

    def test_main_success(self):
        """Test successful main function execution."""
        with patch(MCP_RUN) as mock_run:
            with patch('sys.argv', ['test']):
                main()

            mock_run.assert_called_once()
        assert TigerContext.readonly_mode() is True
        assert isinstance(TigerContext.password_storage(), FallbackStorage)
        assert TigerContext.wait_timeout_minutes() == 30

    def test_main_with_args(self):
        """Test main function with command line arguments."""
        argv = [
            'test',
            '--no-readonly',
            '--password-storage',
            'none',
            '--wait-timeout',
            '10',
            '--project-id',
            'proj-cli',
            '--api-url',
            'https://api.example.com/v1',
        ]
        with patch(MCP_RUN) as mock_run:
            with patch('sys.argv', argv):
                main()

            mock_run.assert_called_once()
        assert TigerContext.readonly_mode() is False
        assert isinstance(TigerContext.password_storage(), NoStorage)
        assert TigerContext.wait_timeout_minutes() == 10
        assert TigerConnectionManager.get_project_id() == 'proj-cli'
        assert TigerConnectionManager.get_api_url() == 'https://api.example.com/v1'

    def test_main_password_storage_from_env(self, monkeypatch):
        """Test the storage backend can be selected through the environment."""
        monkeypatch.setenv('TIGER_PASSWORD_STORAGE', 'pgpass')
        with patch(MCP_RUN):
            with patch('sys.argv', ['test']):
                main()

        assert isinstance(TigerContext.password_storage(), PgpassStorage)

    def test_main_invalid_password_storage(self):
        """Test an unknown storage backend is rejected."""
        with patch(MCP_RUN) as mock_run:
            with patch('sys.argv', ['test', '--password-storage', 'vault']):
                with pytest.raises(SystemExit):
                    main()

            mock_run.assert_not_called()

    def test_main_exception_handling(self):
        """Test main function exception handling."""
        with patch(MCP_RUN) as mock_run:
            mock_run.side_effect = Exception('Test exception')

            with patch('sys.argv', ['test']):
                with pytest.raises(Exception, match='Test exception'):
                    main()
