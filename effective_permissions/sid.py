from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, Tuple

# S-1-<identifier authority>-<sub authority>...
_SID_RE = re.compile(r"^S-1-(?P<authority>\d+)(?P<subs>(?:-\d+)*)$", re.IGNORECASE)

MAX_SUB_AUTHORITIES = 15
_MAX_AUTHORITY = 2 ** 48 - 1
_MAX_SUB_AUTHORITY = 2 ** 32 - 1

EVERYONE = "S-1-1-0"
CREATOR_OWNER = "S-1-3-0"
AUTHENTICATED_USERS = "S-1-5-11"
LOCAL_SYSTEM = "S-1-5-18"
BUILTIN_ADMINISTRATORS = "S-1-5-32-544"
BUILTIN_USERS = "S-1-5-32-545"

WELL_KNOWN: Dict[str, str] = {
    EVERYONE: "Everyone",
    CREATOR_OWNER: "CREATOR OWNER",
    AUTHENTICATED_USERS: "NT AUTHORITY\\Authenticated Users",
    LOCAL_SYSTEM: "NT AUTHORITY\\SYSTEM",
    BUILTIN_ADMINISTRATORS: "BUILTIN\\Administrators",
    BUILTIN_USERS: "BUILTIN\\Users",
}

# Samba's mapping of unix accounts onto SIDs.
UNIX_USER_PREFIX = "S-1-22-1-"
UNIX_GROUP_PREFIX = "S-1-22-2-"


def _parts(text: str) -> Tuple[int, Tuple[int, ...]] | None:
    m = _SID_RE.match(text.strip())
    if not m:
        return None
    authority = int(m.group("authority"))
    subs = tuple(int(s) for s in m.group("subs").split("-") if s)
    if authority > _MAX_AUTHORITY or len(subs) > MAX_SUB_AUTHORITIES:
        return None
    if any(s > _MAX_SUB_AUTHORITY for s in subs):
        return None
    return authority, subs


def is_sid_string(text: str) -> bool:
    """True when `text` is a well-formed textual SID. Never raises."""
    return _parts(text or "") is not None


@dataclass(frozen=True)
class SecurityIdentifier:
    authority: int
    sub_authorities: Tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> "SecurityIdentifier":
        parts = _parts(text or "")
        if parts is None:
            raise ValueError(f"Not a security identifier: {text!r}")
        return cls(authority=parts[0], sub_authorities=parts[1])

    @property
    def value(self) -> str:
        return "-".join(["S-1", str(self.authority), *(str(s) for s in self.sub_authorities)])

    @property
    def well_known_name(self) -> str | None:
        return WELL_KNOWN.get(self.value)

    def __str__(self) -> str:
        return self.value


def unix_user_sid(uid: int) -> SecurityIdentifier:
    return SecurityIdentifier.parse(f"{UNIX_USER_PREFIX}{uid}")


def unix_group_sid(gid: int) -> SecurityIdentifier:
    return SecurityIdentifier.parse(f"{UNIX_GROUP_PREFIX}{gid}")
