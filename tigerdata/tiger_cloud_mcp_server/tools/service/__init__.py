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

"""Tools for Tiger Cloud service operations."""

from .list_services import list_services
from .show_service import show_service
from .create_service import create_service
from .change_service_status import change_service_status
from .delete_service import delete_service
from .update_password import update_password
from .connection_string import get_connection_string

__all__ = [
    'list_services',
    'show_service',
    'create_service',
    'change_service_status',
    'delete_service',
    'update_password',
    'get_connection_string',
]
