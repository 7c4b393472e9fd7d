from __future__ import annotations
import os

import pytest

from effective_permissions.principals import PosixPrincipal, StaticPrincipal
from effective_permissions.resolver import resolve
from effective_permissions.rights import FileSystemRights as R
from effective_permissions.sid import EVERYONE, unix_group_sid, unix_user_sid
from effective_permissions.sources import LocalFileSystem

pytestmark = pytest.mark.skipif(os.name != "posix", reason="POSIX mode bits and pwd/grp")


def test_mode_bits_become_three_entries(tmp_path):
    f = tmp_path / "notes.txt"
    f.write_text("x")
    os.chmod(f, 0o640)
    owner, group, other = LocalFileSystem().query(str(f))
    assert owner.rights == R.READ | R.WRITE | R.CHANGE_PERMISSIONS
    assert group.rights == R.READ
    assert other.identity == EVERYONE
    assert int(other.rights) == 0


def test_directory_write_includes_deleting_children(tmp_path):
    os.chmod(tmp_path, 0o700)
    owner = LocalFileSystem().query(str(tmp_path))[0]
    assert owner.rights & R.DELETE_SUBDIRECTORIES_AND_FILES
    assert owner.rights & R.EXECUTE_FILE


def test_current_user_owns_what_it_creates(tmp_path):
    f = tmp_path / "run.sh"
    f.write_text("#!/bin/sh\n")
    os.chmod(f, 0o700)
    result = resolve(f, PosixPrincipal.current())
    assert result.ok
    assert result.can_read and result.can_write and result.can_execute
    assert result.applicable_entries[0].identity == PosixPrincipal.current().name


def test_stranger_only_gets_everyone_bits(tmp_path):
    f = tmp_path / "shared.txt"
    f.write_text("x")
    os.chmod(f, 0o604)
    result = resolve(f, StaticPrincipal.of("nobody-in-particular"))
    assert [e.identity for e in result.applicable_entries] == [EVERYONE]
    assert result.effective_rights == R.READ


def test_missing_path_is_not_found(tmp_path):
    result = resolve(tmp_path / "gone", StaticPrincipal.of("x"))
    assert result.failure.kind == "NOT_FOUND"


def test_walk_yields_root_then_files(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "2.txt").write_text("2")
    (tmp_path / "1.txt").write_text("1")
    walked = list(LocalFileSystem().walk(str(tmp_path)))
    assert walked == [str(tmp_path), str(tmp_path / "1.txt"), str(tmp_path / "b" / "2.txt")]


def test_posix_principal_sids():
    me = PosixPrincipal.current()
    assert me.is_in_role(unix_user_sid(me.uid))
    assert me.is_in_role(unix_group_sid(os.getgid()))
    assert me.is_in_role("Everyone")
    assert not me.is_in_role(me.name.upper() + "-someone-else")
