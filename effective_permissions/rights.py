from __future__ import annotations
from enum import IntFlag
from typing import List, Tuple


class FileSystemRights(IntFlag):
    """File-system rights mask, bit-compatible with the Windows access mask."""
    NONE = 0
    READ_DATA = 0x1
    WRITE_DATA = 0x2
    APPEND_DATA = 0x4
    READ_EXTENDED_ATTRIBUTES = 0x8
    WRITE_EXTENDED_ATTRIBUTES = 0x10
    EXECUTE_FILE = 0x20
    DELETE_SUBDIRECTORIES_AND_FILES = 0x40
    READ_ATTRIBUTES = 0x80
    WRITE_ATTRIBUTES = 0x100
    DELETE = 0x10000
    READ_PERMISSIONS = 0x20000
    CHANGE_PERMISSIONS = 0x40000
    TAKE_OWNERSHIP = 0x80000
    SYNCHRONIZE = 0x100000

    # directory spellings of the same bits
    LIST_DIRECTORY = 0x1
    CREATE_FILES = 0x2
    CREATE_DIRECTORIES = 0x4
    TRAVERSE = 0x20

    READ = READ_DATA | READ_EXTENDED_ATTRIBUTES | READ_ATTRIBUTES | READ_PERMISSIONS
    WRITE = WRITE_DATA | APPEND_DATA | WRITE_EXTENDED_ATTRIBUTES | WRITE_ATTRIBUTES
    READ_AND_EXECUTE = READ | EXECUTE_FILE
    MODIFY = READ_AND_EXECUTE | WRITE | DELETE
    FULL_CONTROL = (
        MODIFY | DELETE_SUBDIRECTORIES_AND_FILES | CHANGE_PERMISSIONS
        | TAKE_OWNERSHIP | SYNCHRONIZE
    )


# Largest groups first; format_rights consumes bits greedily in this order.
_DISPLAY_ORDER: List[Tuple[str, int]] = sorted(
    (
        (name, int(FileSystemRights[name]))
        for name in (
            "FULL_CONTROL", "MODIFY", "READ_AND_EXECUTE", "READ", "WRITE",
            "SYNCHRONIZE", "TAKE_OWNERSHIP", "CHANGE_PERMISSIONS", "READ_PERMISSIONS",
            "DELETE", "WRITE_ATTRIBUTES", "READ_ATTRIBUTES",
            "DELETE_SUBDIRECTORIES_AND_FILES", "EXECUTE_FILE",
            "WRITE_EXTENDED_ATTRIBUTES", "READ_EXTENDED_ATTRIBUTES",
            "APPEND_DATA", "WRITE_DATA", "READ_DATA",
        )
    ),
    key=lambda item: item[1],
    reverse=True,
)


def has_all(mask: int, wanted: int) -> bool:
    return (int(mask) & int(wanted)) == int(wanted)


def format_rights(mask: int) -> str:
    """
    Render a mask the way flag enums print: largest named groups that fit,
    listed smallest first, then any leftover bits as hex. The empty mask
    renders as '0'.
    """
    remaining = int(mask)
    if remaining == 0:
        return "0"
    parts: List[str] = []
    for name, value in _DISPLAY_ORDER:
        if remaining & value == value:
            parts.append(name)
            remaining &= ~value
    parts.reverse()
    if remaining:
        parts.append(hex(remaining))
    return ", ".join(parts)
