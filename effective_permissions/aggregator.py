from __future__ import annotations
from typing import Iterable, List

from . import AccessControlEntry
from .rights import FileSystemRights


def allow_entries(entries: Iterable[AccessControlEntry]) -> List[AccessControlEntry]:
    return [e for e in entries if e.effect == "ALLOW"]


def deny_entries(entries: Iterable[AccessControlEntry]) -> List[AccessControlEntry]:
    return [e for e in entries if e.effect == "DENY"]


def aggregate(applicable: Iterable[AccessControlEntry]) -> FileSystemRights:
    """Union of allowed rights, minus the union of denied rights. Deny wins."""
    entries = list(applicable)
    rights = 0
    for e in allow_entries(entries):
        rights |= int(e.rights)
    for e in deny_entries(entries):
        rights &= ~int(e.rights)
    return FileSystemRights(rights)
