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

"""Tests for the pgpass password storage."""

import os
import pytest
import stat
from tigerdata.tiger_cloud_mcp_server.exceptions import (
    BackendUnavailableError,
    PasswordNotFoundError,
    PasswordValidationError,
    PgpassFileNotFoundError,
)
from tigerdata.tiger_cloud_mcp_server.models import Endpoint
from tigerdata.tiger_cloud_mcp_server.password import PgpassStorage, SecretIdentity
from tigerdata.tiger_cloud_mcp_server.password.pgpass_storage import (
    escape_field,
    format_line,
    split_line,
)


def other_identity(host='other', port=6543, role='tsdbadmin'):
    return SecretIdentity(
        project_id='proj-1',
        service_id='svc-2',
        role=role,
        endpoint=Endpoint(host=host, port=port),
    )


class TestPgpassFormat:
    """Test cases for pgpass line formatting."""

    def test_plain_fields_are_verbatim(self):
        """Test plain values are written unchanged."""
        assert format_line('h', 5432, 'tsdb', 'tsdbadmin', 'p') == 'h:5432:tsdb:tsdbadmin:p'

    def test_escaping(self):
        """Test colons and backslashes are escaped."""
        assert escape_field('a:b\\c') == 'a\\:b\\\\c'

    def test_split_unescapes(self):
        """Test split_line reverses escaping."""
        line = format_line('h', 5432, 'tsdb', 'tsdbadmin', 'a:b\\c')

        assert split_line(line) == ['h', '5432', 'tsdb', 'tsdbadmin', 'a:b\\c']


class TestPgpassStorage:
    """Test cases for PgpassStorage."""

    def test_exact_line(self, pgpass_path, identity):
        """Test saving writes exactly one libpq line."""
        PgpassStorage(pgpass_path).save(identity, 'p')

        assert pgpass_path.read_text() == 'h:5432:tsdb:tsdbadmin:p\n'

    def test_second_identity_is_appended(self, pgpass_path, identity):
        """Test an unrelated entry is preserved and the new one appended."""
        storage = PgpassStorage(pgpass_path)
        storage.save(identity, 'p')
        storage.save(other_identity(), 'q')

        assert pgpass_path.read_text().splitlines() == [
            'h:5432:tsdb:tsdbadmin:p',
            'other:6543:tsdb:tsdbadmin:q',
        ]

    def test_save_and_get(self, pgpass_path, identity):
        """Test a saved password is returned by get."""
        storage = PgpassStorage(pgpass_path)
        storage.save(identity, 's3:cr\\et')

        assert storage.get(identity) == 's3:cr\\et'

    def test_overwrite(self, pgpass_path, identity):
        """Test the last saved password wins and no duplicate line remains."""
        storage = PgpassStorage(pgpass_path)
        storage.save(identity, 'first')
        storage.save(identity, 'second')

        assert storage.get(identity) == 'second'
        assert pgpass_path.read_text() == 'h:5432:tsdb:tsdbadmin:second\n'

    def test_default_port(self, pgpass_path):
        """Test an endpoint without port is keyed on 5432."""
        identity = SecretIdentity(
            project_id='p', service_id='s', role='tsdbadmin', endpoint=Endpoint(host='h')
        )
        PgpassStorage(pgpass_path).save(identity, 'p')

        assert pgpass_path.read_text() == 'h:5432:tsdb:tsdbadmin:p\n'

    def test_file_mode(self, pgpass_path, identity):
        """Test the file is readable by its owner only."""
        PgpassStorage(pgpass_path).save(identity, 'p')

        assert stat.S_IMODE(os.stat(pgpass_path).st_mode) == 0o600

    def test_comments_are_preserved(self, pgpass_path, identity):
        """Test comments and blank lines survive a rewrite."""
        pgpass_path.write_text('# my databases\n\nlocalhost:5432:*:postgres:pg\n')
        storage = PgpassStorage(pgpass_path)
        storage.save(identity, 'p')
        storage.remove(identity)

        assert pgpass_path.read_text() == '# my databases\n\nlocalhost:5432:*:postgres:pg\n'

    def test_get_skips_comments_and_malformed_lines(self, pgpass_path, identity):
        """Test only well-formed matching lines are considered."""
        pgpass_path.write_text(
            '# h:5432:tsdb:tsdbadmin:commented\nh:5432:broken\nh:5432:tsdb:tsdbadmin:p\n'
        )

        assert PgpassStorage(pgpass_path).get(identity) == 'p'

    def test_get_missing_file(self, pgpass_path, identity):
        """Test a missing file has its own not-found error."""
        with pytest.raises(PgpassFileNotFoundError, match='no .pgpass file found'):
            PgpassStorage(pgpass_path).get(identity)

    def test_get_no_match(self, pgpass_path, identity):
        """Test a file without a matching entry."""
        PgpassStorage(pgpass_path).save(other_identity(), 'q')

        with pytest.raises(PasswordNotFoundError) as exc_info:
            PgpassStorage(pgpass_path).get(identity)

        assert not isinstance(exc_info.value, PgpassFileNotFoundError)
        assert exc_info.value.backend == 'pgpass'

    def test_remove_is_idempotent(self, pgpass_path, identity):
        """Test removing twice never errors."""
        storage = PgpassStorage(pgpass_path)
        storage.save(identity, 'p')

        storage.remove(identity)
        storage.remove(identity)

        assert pgpass_path.read_text() == ''

    def test_remove_without_file(self, pgpass_path, identity):
        """Test removing from a missing file is a no-op."""
        PgpassStorage(pgpass_path).remove(identity)

        assert not pgpass_path.exists()

    def test_remove_keeps_other_roles(self, pgpass_path, identity):
        """Test removal only drops the exact role on the same endpoint."""
        storage = PgpassStorage(pgpass_path)
        storage.save(other_identity(host='h', port=5432, role='tsdbadmin_ro'), 'ro')
        storage.save(identity, 'p')

        storage.remove(identity)

        assert pgpass_path.read_text() == 'h:5432:tsdb:tsdbadmin_ro:ro\n'

    def test_requires_endpoint(self, pgpass_path):
        """Test the pgpass backend needs the service endpoint."""
        identity = SecretIdentity(project_id='p', service_id='s', role='tsdbadmin')

        with pytest.raises(PasswordValidationError, match='service endpoint not available'):
            PgpassStorage(pgpass_path).save(identity, 'p')
        assert not pgpass_path.exists()

    def test_requires_role(self, pgpass_path, identity):
        """Test the pgpass backend needs the role."""
        with pytest.raises(PasswordValidationError, match='role is required'):
            PgpassStorage(pgpass_path).get(identity.model_copy(update={'role': ''}))

    def test_default_path(self, tmp_path, monkeypatch):
        """Test the file defaults to ~/.pgpass."""
        monkeypatch.setenv('HOME', str(tmp_path))

        assert PgpassStorage().path == tmp_path / '.pgpass'

    def test_undecodable_file(self, pgpass_path, identity):
        """Test a file that is not UTF-8 is reported as backend unavailable."""
        pgpass_path.write_bytes(b'\xff\xfe garbage\n')
        storage = PgpassStorage(pgpass_path)

        for operation in (storage.get, storage.remove):
            with pytest.raises(BackendUnavailableError, match='not valid UTF-8') as exc_info:
                operation(identity)
            assert exc_info.value.backend == 'pgpass'
        with pytest.raises(BackendUnavailableError):
            storage.save(identity, 'p')
        assert pgpass_path.read_bytes() == b'\xff\xfe garbage\n'

    def test_unwritable_location(self, tmp_path, identity):
        """Test I/O failures are reported as backend unavailable without the secret."""
        blocker = tmp_path / 'not-a-dir'
        blocker.write_text('')
        storage = PgpassStorage(blocker / '.pgpass')

        with pytest.raises(BackendUnavailableError) as exc_info:
            storage.save(identity, 'hunter2')

        outcome = storage.describe_outcome(exc_info.value, 'hunter2')
        assert outcome.success is False
        assert outcome.message.startswith('Failed to save password to ~/.pgpass: ')
        assert 'hunter2' not in outcome.message

    def test_describe_success(self):
        """Test the success message."""
        outcome = PgpassStorage().describe_outcome(None, 'p')

        assert outcome.success is True
        assert outcome.method == 'pgpass'
        assert outcome.message == 'Password saved to ~/.pgpass for automatic authentication'
