from __future__ import annotations
from dataclasses import dataclass
from os import PathLike, fspath
from typing import List, Optional, Tuple, Union

from . import AccessControlEntry, Principal, ResolutionFailure
from .aggregator import aggregate, allow_entries, deny_entries
from .classifier import classify
from .log import get_logger
from .rights import FileSystemRights, format_rights, has_all
from .sources import LocalFileSystem, SecurityDescriptorSource

logger = get_logger("effective_permissions.resolver")


@dataclass(frozen=True)
class AccessRights:
    """
    Effective rights of one principal on one target.

    `applicable_entries` and `irrelevant_entries` together are exactly the
    entries the source returned, in the same order. When `failure` is set the
    rights are 0 and must not be relied on.
    """
    target: str
    applicable_entries: Tuple[AccessControlEntry, ...] = ()
    irrelevant_entries: Tuple[AccessControlEntry, ...] = ()
    effective_rights: FileSystemRights = FileSystemRights.NONE
    failure: Optional[ResolutionFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def can_read(self) -> bool:
        return has_all(self.effective_rights, FileSystemRights.READ)

    @property
    def can_write(self) -> bool:
        return has_all(self.effective_rights, FileSystemRights.WRITE)

    @property
    def can_execute(self) -> bool:
        return has_all(self.effective_rights, FileSystemRights.READ_AND_EXECUTE)

    @property
    def applicable_allow_entries(self) -> List[AccessControlEntry]:
        return allow_entries(self.applicable_entries)

    @property
    def applicable_deny_entries(self) -> List[AccessControlEntry]:
        """Often empty; deny entries mostly show up in larger org structures."""
        return deny_entries(self.applicable_entries)

    def __str__(self) -> str:
        from .report import render_report
        return render_report(self)


def resolve(
    target: Union[str, PathLike],
    principal: Principal,
    source: Optional[SecurityDescriptorSource] = None,
) -> AccessRights:
    """
    Compute effective rights of `principal` on `target`.
    Never raises for a missing target or an unreadable ACL; both come back
    as `AccessRights.failure`.
    """
    source = source if source is not None else LocalFileSystem()
    path = fspath(target)

    if not source.exists(path):
        logger.warning("target not found", target=path)
        return AccessRights(
            target=path,
            failure=ResolutionFailure(kind="NOT_FOUND", message=f"No such file or directory: {path}"),
        )

    try:
        entries = list(source.query(path))
        applicable, irrelevant = classify(entries, principal)
        rights = aggregate(applicable)
    except Exception as e:
        # e.g. PermissionError reading the ACL, or a membership lookup that failed
        logger.warning("resolution failed", target=path, error=str(e), error_type=type(e).__name__)
        return AccessRights(
            target=path,
            failure=ResolutionFailure(kind="QUERY_FAILURE", message=str(e), error_type=type(e).__name__),
        )

    logger.debug(
        "resolved",
        target=path,
        applicable=len(applicable),
        irrelevant=len(irrelevant),
        rights=format_rights(rights),
    )
    return AccessRights(
        target=path,
        applicable_entries=tuple(applicable),
        irrelevant_entries=tuple(irrelevant),
        effective_rights=rights,
    )
