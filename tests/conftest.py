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

"""Global pytest fixtures for Tiger Cloud MCP Server tests."""

import keyring
import os
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError
from tigerdata.tiger_cloud_mcp_server.common.connection import TigerConnectionManager
from tigerdata.tiger_cloud_mcp_server.context import TigerContext
from tigerdata.tiger_cloud_mcp_server.models import ApiResponse, Endpoint, Service
from tigerdata.tiger_cloud_mcp_server.password import (
    FallbackStorage,
    KeyringStorage,
    PgpassStorage,
    SecretIdentity,
)
from unittest.mock import AsyncMock, MagicMock, patch


TEST_PROJECT_ID = 'proj-1'
TEST_SERVICE_ID = 'svc-1'


class InMemoryKeyring(KeyringBackend):
    """Keyring backend that keeps passwords in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError('Password not found') from None


class BrokenKeyring(KeyringBackend):
    """Keyring backend whose daemon is unreachable; errors echo the secret."""

    priority = 1

    def get_password(self, service, username):
        raise KeyringError('Secret service is not available')

    def set_password(self, service, username, password):
        raise KeyringError(f'D-Bus call failed while storing {password!r}')

    def delete_password(self, service, username):
        raise KeyringError('Secret service is not available')


@pytest.fixture(scope='session', autouse=True)
def tests_setup_and_teardown():
    """Mock environment variables for testing."""
    # Will be executed before the first test
    old_environ = dict(os.environ)
    os.environ.update(
        {
            'TIGER_PUBLIC_KEY': 'mock_public_key',  # pragma: allowlist secret
            'TIGER_SECRET_KEY': 'mock_secret_key',  # pragma: allowlist secret
            'TIGER_PROJECT_ID': TEST_PROJECT_ID,
        }
    )

    yield
    # Will be executed after the last test
    os.environ.clear()
    os.environ.update(old_environ)


@pytest.fixture(autouse=True)
def reset_context():
    """Restore the process-wide context after each test."""
    yield
    TigerContext.initialize()
    TigerConnectionManager._client = None
    TigerConnectionManager._api_url = None
    TigerConnectionManager._project_id = None


@pytest.fixture
def fake_keyring():
    """Install an in-memory keyring backend for the duration of a test."""
    previous = keyring.get_keyring()
    backend = InMemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def broken_keyring():
    """Install a keyring backend that fails every call."""
    previous = keyring.get_keyring()
    backend = BrokenKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def pgpass_path(tmp_path):
    """Location of a pgpass file inside the test's temporary directory."""
    return tmp_path / '.pgpass'


@pytest.fixture
def identity():
    """Identity of the admin role of a service with a direct endpoint."""
    return SecretIdentity(
        project_id=TEST_PROJECT_ID,
        service_id=TEST_SERVICE_ID,
        role='tsdbadmin',
        endpoint=Endpoint(host='h', port=5432),
    )


@pytest.fixture
def storage(fake_keyring, pgpass_path):
    """Fallback storage over the in-memory keyring and a temporary pgpass file.

    Installed as the context's password storage.
    """
    backend = FallbackStorage(KeyringStorage(), PgpassStorage(pgpass_path))
    with patch.object(TigerContext, 'password_storage', return_value=backend):
        yield backend


@pytest.fixture
def sample_service():
    """Return a sample service as decoded from the API."""
    return {
        'service_id': TEST_SERVICE_ID,
        'project_id': TEST_PROJECT_ID,
        'name': 'my-service',
        'status': 'READY',
        'service_type': 'TIMESCALEDB',
        'region_code': 'us-east-1',
        'created': '2025-01-01T00:00:00Z',
        'endpoint': {'host': 'svc-1.tsdb.cloud.timescale.com', 'port': 31234},
        'connection_pooler': {
            'endpoint': {'host': 'svc-1.pooler.tsdb.cloud.timescale.com', 'port': 6432}
        },
    }


@pytest.fixture
def service(sample_service):
    """The sample service as a model."""
    return Service.model_validate(sample_service)


@pytest.fixture
def api_response():
    """Factory building an ApiResponse for a mocked API call."""

    def make(status_code=200, body=None, reason=''):
        return ApiResponse(status_code=status_code, reason=reason, body=body)

    return make


@pytest.fixture
def mock_tiger_client():
    """Fixture providing a mock API client for tests.

    Resets the connection manager before and after the test.
    Returns a mock client that's automatically patched into the TigerConnectionManager.
    """
    TigerConnectionManager._client = None

    mock_client = MagicMock()
    for name in (
        'get_service',
        'list_services',
        'create_service',
        'start_service',
        'stop_service',
        'delete_service',
        'update_password',
    ):
        setattr(mock_client, name, AsyncMock())

    with patch.object(TigerConnectionManager, 'get_connection', return_value=mock_client):
        with patch.object(TigerConnectionManager, 'get_project_id', return_value=TEST_PROJECT_ID):
            yield mock_client

    TigerConnectionManager._client = None


@pytest.fixture
def mock_tiger_context_allowed():
    """Mock context to allow operations (readonly_mode returns False)."""
    with patch.object(TigerContext, 'readonly_mode', return_value=False) as mock:
        yield mock


@pytest.fixture
def mock_tiger_context_readonly():
    """Mock context to deny operations (readonly_mode returns True)."""
    with patch.object(TigerContext, 'readonly_mode', return_value=True) as mock:
        yield mock
