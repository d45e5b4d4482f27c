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

"""Decorators used by the Tiger Cloud MCP Server."""

import httpx
from ..constants import ERROR_READONLY_MODE, ERROR_UNEXPECTED, EXIT_GENERAL_ERROR
from ..context import TigerContext
from ..exceptions import ReadOnlyModeException, TigerMCPException
from functools import wraps
from inspect import iscoroutinefunction
from loguru import logger
from typing import Any, Callable


def handle_exceptions(func: Callable) -> Callable:
    """Decorator to handle exceptions in MCP operations.

    Wraps the function in a try-catch block and returns any exceptions
    in a standardized error format.

    Args:
        func: The function to wrap

    Returns:
        The wrapped function that handles exceptions
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any):
        try:
            if iscoroutinefunction(func):
                return await func(*args, **kwargs)
            return func(*args, **kwargs)
        except ReadOnlyModeException as error:
            logger.warning(f'Operation blocked in readonly mode: {error.operation}')
            return {
                'error': ERROR_READONLY_MODE,
                'operation': error.operation,
                'message': str(error),
            }
        except TigerMCPException as error:
            logger.error(f'{func.__name__} failed: {error}')
            return {
                'error': str(error),
                'error_type': type(error).__name__,
                'error_message': str(error),
                'exit_code': error.exit_code,
                'operation': func.__name__,
            }
        except httpx.HTTPError as error:
            logger.error(f'{func.__name__} failed with request error: {error}')
            return {
                'error': f'Request error: {error}',
                'error_type': type(error).__name__,
                'error_message': str(error),
                'exit_code': EXIT_GENERAL_ERROR,
                'operation': func.__name__,
            }
        except Exception as error:
            logger.exception(f'Failed with unexpected error: {str(error)}')
            return {
                'error': ERROR_UNEXPECTED.format(str(error)),
                'error_type': type(error).__name__,
                'error_message': str(error),
                'exit_code': EXIT_GENERAL_ERROR,
                'operation': func.__name__,
            }

    return wrapper


def readonly_check(func: Callable) -> Callable:
    """Decorator to check if operation is allowed in readonly mode.

    Operations whose name starts with a read prefix always run; every other
    operation raises ReadOnlyModeException while the server is read-only.

    Args:
        func: The function to wrap

    Returns:
        The wrapped function that checks readonly mode
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any):
        func_name = func.__name__.lower()
        is_read_operation = any(
            func_name.startswith(prefix) for prefix in ['describe', 'list', 'get', 'show']
        )

        if not is_read_operation and TigerContext.readonly_mode():
            raise ReadOnlyModeException(func.__name__)

        if iscoroutinefunction(func):
            return await func(*args, **kwargs)
        return func(*args, **kwargs)

    return wrapper
