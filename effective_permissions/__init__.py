from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Protocol, Union

from .rights import FileSystemRights
from .sid import SecurityIdentifier

__version__ = "0.3.0"

Effect = Literal["ALLOW", "DENY"]
FailureKind = Literal["NOT_FOUND", "QUERY_FAILURE"]


class Principal(Protocol):
    """Anything that can answer 'am I a member of this role?'."""

    def is_in_role(self, role: Union[str, SecurityIdentifier]) -> bool: ...


@dataclass(frozen=True)
class AccessControlEntry:
    identity: str
    rights: FileSystemRights
    effect: Effect = "ALLOW"
    inherited: bool = False


@dataclass(frozen=True)
class ResolutionFailure:
    kind: FailureKind
    message: str
    error_type: str = ""


@dataclass(frozen=True)
class Stats:
    targets: int = 0
    readable: int = 0
    writable: int = 0
    executable: int = 0
    not_found: int = 0
    query_failures: int = 0
