from __future__ import annotations
from typing import Iterable, List, Tuple

from . import AccessControlEntry, Principal
from .sid import SecurityIdentifier, is_sid_string


def is_applicable(entry: AccessControlEntry, principal: Principal) -> bool:
    """
    Membership test for one entry:
      - the identity as written (account or group name)
      - failing that, the identity as a SID, when it is one; entries that
        could not be translated to a name in this environment show up this way
    """
    if principal.is_in_role(entry.identity):
        return True
    if is_sid_string(entry.identity):
        return principal.is_in_role(SecurityIdentifier.parse(entry.identity))
    return False


def classify(
    entries: Iterable[AccessControlEntry], principal: Principal
) -> Tuple[List[AccessControlEntry], List[AccessControlEntry]]:
    """Split entries into (applicable, irrelevant), both in input order."""
    applicable: List[AccessControlEntry] = []
    irrelevant: List[AccessControlEntry] = []
    for entry in entries:
        (applicable if is_applicable(entry, principal) else irrelevant).append(entry)
    return applicable, irrelevant
