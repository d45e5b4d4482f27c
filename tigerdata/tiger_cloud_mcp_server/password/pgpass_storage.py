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

"""Password storage backed by the libpq ``~/.pgpass`` file.

Each record is one ``hostname:port:database:username:password`` line. Colons
and backslashes inside a field are escaped with a backslash, as libpq expects.
"""

import os
import tempfile
from ..constants import DEFAULT_DATABASE, PASSWORD_STORAGE_PGPASS
from ..exceptions import (
    BackendUnavailableError,
    PasswordNotFoundError,
    PasswordValidationError,
    PgpassFileNotFoundError,
)
from .base import PasswordStorage
from .identity import SecretIdentity, sanitize_error_message
from loguru import logger
from pathlib import Path
from typing import List, Optional, Tuple


PGPASS_FILE_MODE = 0o600


def escape_field(value: str) -> str:
    """Escape ``\\`` and ``:`` for use inside a pgpass field."""
    return value.replace('\\', '\\\\').replace(':', '\\:')


def split_line(line: str) -> List[str]:
    """Split a pgpass line on unescaped colons, unescaping each field."""
    fields = []
    current = []
    chars = iter(line)
    for char in chars:
        if char == '\\':
            current.append(next(chars, ''))
        elif char == ':':
            fields.append(''.join(current))
            current = []
        else:
            current.append(char)
    fields.append(''.join(current))
    return fields


def format_line(host: str, port: int, database: str, username: str, password: str) -> str:
    """Render one pgpass record."""
    return ':'.join(
        escape_field(field) for field in (host, str(port), database, username, password)
    )


class PgpassStorage(PasswordStorage):
    """Stores passwords as lines of a pgpass file readable only by its owner."""

    method = PASSWORD_STORAGE_PGPASS
    location = '~/.pgpass'

    def __init__(self, path: Optional[Path] = None):
        """Initialize the pgpass storage.

        Args:
            path: Location of the pgpass file. Defaults to ``~/.pgpass``.
        """
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        """Resolved location of the pgpass file."""
        if self._path is not None:
            return self._path
        try:
            return Path.home() / '.pgpass'
        except RuntimeError as e:
            raise BackendUnavailableError(
                f'failed to get user home directory: {e}', backend=self.method
            ) from e

    def _target(self, identity: SecretIdentity) -> Tuple[str, str, str]:
        if not identity.host:
            raise PasswordValidationError('service endpoint not available', backend=self.method)
        identity.require_role()
        return identity.host, str(identity.port), identity.role

    def save(self, identity: SecretIdentity, password: str) -> None:
        host, port, username = self._target(identity)
        path = self.path
        logger.debug(f'Saving password for {identity} to {path}')

        lines = self._read_lines(path, missing_ok=True)
        lines = self._without_entry(lines, host, port, username)
        lines.append(format_line(host, int(port), DEFAULT_DATABASE, username, password))
        try:
            self._write_lines(path, lines)
        except OSError as e:
            raise BackendUnavailableError(
                f'failed to write .pgpass file: {sanitize_error_message(e, password)}',
                backend=self.method,
            ) from None

    def get(self, identity: SecretIdentity) -> str:
        host, port, username = self._target(identity)
        path = self.path
        if not path.exists():
            raise PgpassFileNotFoundError('no .pgpass file found', backend=self.method)

        for line in self._read_lines(path):
            stripped = line.strip()
            if not stripped or stripped.startswith('#'):
                continue
            fields = split_line(stripped)
            if len(fields) != 5:
                continue
            if fields[0] == host and fields[1] == port and fields[3] == username:
                return fields[4]

        raise PasswordNotFoundError(
            'no matching entry found in .pgpass file', backend=self.method
        )

    def remove(self, identity: SecretIdentity) -> None:
        host, port, username = self._target(identity)
        path = self.path
        if not path.exists():
            return
        logger.debug(f'Removing password for {identity} from {path}')

        lines = self._read_lines(path)
        remaining = self._without_entry(lines, host, port, username)
        if len(remaining) == len(lines):
            return
        try:
            self._write_lines(path, remaining)
        except OSError as e:
            raise BackendUnavailableError(
                f'failed to replace .pgpass file: {e}', backend=self.method
            ) from e

    @staticmethod
    def _without_entry(lines: List[str], host: str, port: str, username: str) -> List[str]:
        """Drop every record for ``username`` on ``host:port``, keeping other lines in order."""
        prefix = f'{escape_field(host)}:{port}:'
        kept = []
        for line in lines:
            if line.startswith(prefix):
                fields = split_line(line.strip())
                if len(fields) == 5 and fields[3] == username:
                    continue
            kept.append(line)
        return kept

    def _read_lines(self, path: Path, missing_ok: bool = False) -> List[str]:
        try:
            return path.read_text().splitlines()
        except FileNotFoundError:
            if missing_ok:
                return []
            raise PgpassFileNotFoundError('no .pgpass file found', backend=self.method)
        except UnicodeDecodeError as e:
            raise BackendUnavailableError(
                f'failed to read .pgpass file: not valid UTF-8 ({e.reason})', backend=self.method
            ) from e
        except OSError as e:
            raise BackendUnavailableError(
                f'failed to read .pgpass file: {e}', backend=self.method
            ) from e

    @staticmethod
    def _write_lines(path: Path, lines: List[str]) -> None:
        """Atomically replace ``path`` with ``lines`` and restrict it to its owner."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix='.pgpass.', suffix='.tmp', dir=path.parent)
        try:
            with os.fdopen(fd, 'w') as tmp:
                for line in lines:
                    tmp.write(line + '\n')
            os.chmod(tmp_name, PGPASS_FILE_MODE)
            os.replace(tmp_name, path)
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
        os.chmod(path, PGPASS_FILE_MODE)
