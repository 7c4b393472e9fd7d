from __future__ import annotations
import os
import stat
from pathlib import Path
from typing import Iterator, List, Protocol, Sequence

from . import AccessControlEntry
from .rights import FileSystemRights
from .sid import EVERYONE, unix_group_sid, unix_user_sid


class SecurityDescriptorSource(Protocol):
    """Where access-control entries come from (local disk, an ACL dump, ...)."""

    def exists(self, target: str) -> bool: ...

    def query(self, target: str) -> Sequence[AccessControlEntry]: ...

    def walk(self, root: str) -> Iterator[str]: ...


def _mode_rights(bits: int, is_dir: bool) -> FileSystemRights:
    """Map one rwx triplet onto the rights mask."""
    rights = FileSystemRights.NONE
    if bits & 4:
        rights |= FileSystemRights.READ
    if bits & 2:
        rights |= FileSystemRights.WRITE
        if is_dir:
            rights |= FileSystemRights.DELETE_SUBDIRECTORIES_AND_FILES
    if bits & 1:
        rights |= FileSystemRights.EXECUTE_FILE
    return rights


def _user_name(uid: int) -> str:
    import pwd
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return unix_user_sid(uid).value


def _group_name(gid: int) -> str:
    import grp
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return unix_group_sid(gid).value


class LocalFileSystem:
    """
    Entries derived from the POSIX mode of a path:
      owner -> the owning user (plus the right to read/change permissions)
      group -> the owning group
      other -> Everyone
    """

    def exists(self, target: str) -> bool:
        return os.path.exists(target)

    def query(self, target: str) -> List[AccessControlEntry]:
        st = os.stat(target)
        is_dir = stat.S_ISDIR(st.st_mode)
        owner = _mode_rights((st.st_mode >> 6) & 7, is_dir)
        owner |= FileSystemRights.READ_PERMISSIONS | FileSystemRights.CHANGE_PERMISSIONS
        return [
            AccessControlEntry(identity=_user_name(st.st_uid), rights=owner),
            AccessControlEntry(identity=_group_name(st.st_gid), rights=_mode_rights((st.st_mode >> 3) & 7, is_dir)),
            AccessControlEntry(identity=EVERYONE, rights=_mode_rights(st.st_mode & 7, is_dir)),
        ]

    def walk(self, root: str) -> Iterator[str]:
        """The root itself, then every file below it."""
        yield root
        base = Path(root)
        if base.is_dir():
            for p in sorted(base.rglob("*")):
                if p.is_file():
                    yield str(p)
