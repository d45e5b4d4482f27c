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

"""Custom exceptions for the Tiger Cloud MCP Server."""

from .constants import (
    EXIT_GENERAL_ERROR,
    EXIT_INVALID_PARAMETERS,
    EXIT_SERVICE_NOT_FOUND,
    EXIT_TIMEOUT,
)
from typing import List, Optional


class TigerMCPException(Exception):
    """Base exception for Tiger Cloud MCP Server."""

    exit_code = EXIT_GENERAL_ERROR


class ReadOnlyModeException(TigerMCPException):
    """Exception raised when a write operation is attempted in read-only mode."""

    def __init__(self, operation: str):
        """Initialize the ReadOnlyModeException.

        Args:
            operation: The name of the operation that was attempted
        """
        self.operation = operation
        super().__init__(
            f"Operation '{operation}' requires write access. The server is currently in read-only mode."
        )


class APIRequestError(TigerMCPException):
    """Raised when the platform API answers with an unexpected status code."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, exit_code: Optional[int] = None
    ):
        """Initialize the APIRequestError.

        Args:
            message: Human readable description of the failure
            status_code: HTTP status code returned by the API, if any
            exit_code: CLI exit code derived from the status code
        """
        self.status_code = status_code
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class PasswordStorageError(TigerMCPException):
    """Base class for failures reported by a password storage backend.

    ``backend`` is the label of the backend that produced the error
    (``keyring``, ``pgpass`` or ``none``).
    """

    def __init__(self, message: str, backend: str = ''):
        self.backend = backend
        super().__init__(message)


class PasswordValidationError(PasswordStorageError, ValueError):
    """The identity is incomplete; raised before any I/O is attempted."""

    exit_code = EXIT_INVALID_PARAMETERS


class PasswordNotFoundError(PasswordStorageError):
    """The identity is valid but no password is stored for it."""


class PgpassFileNotFoundError(PasswordNotFoundError):
    """The pgpass file does not exist at all."""


class PasswordStorageDisabledError(PasswordStorageError):
    """A read was attempted while password storage is disabled."""


class BackendUnavailableError(PasswordStorageError):
    """The keyring daemon or the file system failed."""


class PasswordRemovalError(BackendUnavailableError):
    """Removal failed on every backend of a fallback chain."""

    def __init__(self, errors: List[PasswordStorageError]):
        """Initialize the PasswordRemovalError.

        Args:
            errors: One error per backend, in the order they were attempted
        """
        self.errors = errors
        message = ', '.join(f'{err.backend}: {err}' for err in errors)
        super().__init__(message, backend='fallback')


class PasswordUnavailableError(TigerMCPException):
    """A password was required to build connection details but none could be retrieved."""


class EndpointUnavailableError(TigerMCPException):
    """The service descriptor does not carry a usable endpoint."""


class WaitError(TigerMCPException):
    """Base class for errors that end a wait loop."""


class WaitTimeoutError(WaitError):
    """The wait deadline elapsed before the handler reported completion."""

    exit_code = EXIT_TIMEOUT


class WaitCanceledError(WaitError):
    """The wait was canceled by the caller before the deadline."""


class FatalRemoteStateError(WaitError):
    """The resource reached an unrecoverable status or disappeared while polling."""

    def __init__(
        self, message: str, status: Optional[str] = None, status_code: Optional[int] = None
    ):
        """Initialize the FatalRemoteStateError.

        Args:
            message: Human readable description of the failure
            status: Remote status that triggered the failure, if any
            status_code: HTTP status code of the last response, if relevant
        """
        self.status = status
        self.status_code = status_code
        if status_code == 404:
            self.exit_code = EXIT_SERVICE_NOT_FOUND
        super().__init__(message)
