from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Union

from .sid import (
    AUTHENTICATED_USERS, EVERYONE, SecurityIdentifier, WELL_KNOWN,
    unix_group_sid, unix_user_sid,
)

# Every logged-on identity holds these.
IMPLICIT_SIDS: FrozenSet[str] = frozenset({EVERYONE, AUTHENTICATED_USERS})


def _fold(names: Iterable[str]) -> FrozenSet[str]:
    return frozenset(n.strip().casefold() for n in names if n and n.strip())


@dataclass(frozen=True)
class StaticPrincipal:
    """
    A principal with a fixed set of roles and SIDs. Names compare
    case-insensitively, as Windows account names do.
    """
    name: str
    roles: FrozenSet[str] = field(default_factory=frozenset)
    sids: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, name: str, roles: Iterable[str] = (), sids: Iterable[str] = ()) -> "StaticPrincipal":
        return cls(
            name=name,
            roles=frozenset(roles),
            sids=frozenset(SecurityIdentifier.parse(s).value for s in sids),
        )

    def _role_names(self) -> FrozenSet[str]:
        # well-known SIDs are also matched by their display name
        implicit = [WELL_KNOWN[s] for s in IMPLICIT_SIDS]
        return _fold([self.name, *self.roles, *implicit])

    def is_in_role(self, role: Union[str, SecurityIdentifier]) -> bool:
        if isinstance(role, SecurityIdentifier):
            return role.value in self.sids or role.value in IMPLICIT_SIDS
        return role.strip().casefold() in self._role_names()


@dataclass(frozen=True)
class PosixPrincipal:
    """The user running this process, with all of its unix groups."""
    name: str
    uid: int
    groups: FrozenSet[str] = field(default_factory=frozenset)
    gids: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def current(cls) -> "PosixPrincipal":
        import grp
        import pwd
        uid = os.getuid()
        gids = set(os.getgroups()) | {os.getgid()}
        names = set()
        for gid in gids:
            try:
                names.add(grp.getgrgid(gid).gr_name)
            except KeyError:
                names.add(unix_group_sid(gid).value)
        try:
            name = pwd.getpwuid(uid).pw_name
        except KeyError:
            name = unix_user_sid(uid).value
        return cls(name=name, uid=uid, groups=frozenset(names), gids=frozenset(gids))

    def _sids(self) -> FrozenSet[str]:
        own = {unix_user_sid(self.uid).value}
        own |= {unix_group_sid(g).value for g in self.gids}
        return frozenset(own) | IMPLICIT_SIDS

    def is_in_role(self, role: Union[str, SecurityIdentifier]) -> bool:
        if isinstance(role, SecurityIdentifier):
            return role.value in self._sids()
        # unix names are case-sensitive
        return role == self.name or role in self.groups or role == WELL_KNOWN[EVERYONE]
