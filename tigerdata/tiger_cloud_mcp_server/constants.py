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

"""Constants for Tiger Cloud MCP Server."""

# Version
MCP_SERVER_VERSION = '0.1.0'

# Error Messages
ERROR_READONLY_MODE = (
    'This operation requires write access. The server is currently in read-only mode.'
)
ERROR_UNEXPECTED = 'Unexpected error: {}'
ERROR_NOT_FOUND = "Service '{}' not found in project '{}'"
ERROR_API_STATUS = 'API request failed with status {}'
ERROR_AUTHENTICATION = 'Authentication failed: invalid API key'
ERROR_PERMISSION_DENIED = 'Permission denied: insufficient access to {}'
ERROR_ENDPOINT_UNAVAILABLE = 'service endpoint not available'
ERROR_ENDPOINT_HOST_UNAVAILABLE = 'endpoint host not available'

# Success Messages
SUCCESS_CREATED = "Service '{}' creation request accepted. Service ID: {}"
SUCCESS_DELETED = 'Successfully deleted {}'
SUCCESS_STARTED = 'Successfully started {}'
SUCCESS_STOPPED = 'Successfully stopped {}'
SUCCESS_PASSWORD_UPDATED = "Master password for '{}' user updated successfully"

# Confirmation
CONFIRM_DELETE = 'CONFIRM_DELETE'

# Exit codes shared with the command-line client
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_TIMEOUT = 2
EXIT_INVALID_PARAMETERS = 3
EXIT_AUTHENTICATION_ERROR = 4
EXIT_PERMISSION_DENIED = 5
EXIT_SERVICE_NOT_FOUND = 6

# Database defaults
DEFAULT_PORT = 5432
DEFAULT_DATABASE = 'tsdb'
DEFAULT_ROLE = 'tsdbadmin'

# Password storage
PASSWORD_STORAGE_KEYRING = 'keyring'
PASSWORD_STORAGE_PGPASS = 'pgpass'
PASSWORD_STORAGE_NONE = 'none'
PASSWORD_STORAGE_FALLBACK = 'fallback'
DEFAULT_PASSWORD_STORAGE = PASSWORD_STORAGE_FALLBACK
DEFAULT_KEYRING_SERVICE_NAME = 'tiger-cli'
PASSWORD_MASK = '***'

# Service statuses
STATUS_READY = 'READY'
STATUS_PAUSED = 'PAUSED'
FATAL_STATUSES = ('FAILED', 'ERROR')

# Waiting
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_WAIT_TIMEOUT_MINUTES = 30

# API
DEFAULT_API_URL = 'https://console.cloud.timescale.com/public/api/v1'
DEFAULT_REQUEST_TIMEOUT = 30.0
