from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from . import AccessControlEntry
from .rights import FileSystemRights as R

# icacls rights codes, simple and specific.
SIMPLE_RIGHTS: Dict[str, int] = {
    "N": 0,
    "F": R.FULL_CONTROL,
    "M": R.MODIFY | R.SYNCHRONIZE,
    "RX": R.READ_AND_EXECUTE | R.SYNCHRONIZE,
    "R": R.READ | R.SYNCHRONIZE,
    "W": R.WRITE | R.READ_PERMISSIONS | R.SYNCHRONIZE,
    "D": R.DELETE,
}
SPECIFIC_RIGHTS: Dict[str, int] = {
    "DE": R.DELETE,
    "RC": R.READ_PERMISSIONS,
    "WDAC": R.CHANGE_PERMISSIONS,
    "WO": R.TAKE_OWNERSHIP,
    "S": R.SYNCHRONIZE,
    "AS": 0,  # access system security: not a file-system right
    "MA": 0,  # maximum allowed
    "GR": R.READ | R.SYNCHRONIZE,
    "GW": R.WRITE | R.READ_PERMISSIONS | R.SYNCHRONIZE,
    "GE": R.EXECUTE_FILE | R.READ_ATTRIBUTES | R.READ_PERMISSIONS | R.SYNCHRONIZE,
    "GA": R.FULL_CONTROL,
    "RD": R.READ_DATA,
    "WD": R.WRITE_DATA,
    "AD": R.APPEND_DATA,
    "REA": R.READ_EXTENDED_ATTRIBUTES,
    "WEA": R.WRITE_EXTENDED_ATTRIBUTES,
    "X": R.EXECUTE_FILE,
    "DC": R.DELETE_SUBDIRECTORIES_AND_FILES,
    "RA": R.READ_ATTRIBUTES,
    "WA": R.WRITE_ATTRIBUTES,
}
RIGHTS_CODES: Dict[str, int] = {**SPECIFIC_RIGHTS, **SIMPLE_RIGHTS}
INHERITANCE_FLAGS = {"OI", "CI", "IO", "NP"}
# integrity labels live in the SACL; they grant nothing
MANDATORY_LABEL = "mandatory label\\"

# <identity>:(flag)(flag)(rights)
_ACE = re.compile(r"(?P<identity>[^:()]+):(?P<groups>(?:\([^()]*\))+)\s*$")
_GROUP = re.compile(r"\(([^()]*)\)")
_SUMMARY = re.compile(r"^Successfully processed \d+ files?; Failed processing \d+ files?", re.IGNORECASE)
# identities that contain a space, so a header line cannot be split on the last blank
_SPACED_AUTHORITIES = (
    "NT AUTHORITY\\", "NT SERVICE\\", "APPLICATION PACKAGE AUTHORITY\\",
    "CREATOR OWNER", "CREATOR GROUP", "OWNER RIGHTS", "Mandatory Label\\",
)


@dataclass(frozen=True)
class _Ace:
    path: str
    identity: str
    groups: Tuple[str, ...]
    lineno: int


@dataclass
class _Scan:
    aces: List[_Ace] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)  # path -> icacls error text
    paths: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)


def _split_header(line: str, indent: Optional[int]) -> Tuple[str, str]:
    """Split '<path> <identity>:(...)' into (path, ace text)."""
    if indent and len(line) > indent and line[indent - 1] == " ":
        return line[:indent].rstrip(), line[indent:]
    for auth in _SPACED_AUTHORITIES:
        i = line.find(" " + auth)
        if i > 0:
            return line[:i], line[i + 1:]
    head, _, ace = line.rpartition(":(")
    path, _, identity = head.rpartition(" ")
    return path, f"{identity}:({ace}"


def _block_indent(lines: List[str], start: int) -> Optional[int]:
    """Indent of the first continuation line after a header, if any."""
    if start + 1 < len(lines):
        nxt = lines[start + 1]
        if nxt[:1].isspace() and nxt.strip():
            return len(nxt) - len(nxt.lstrip())
    return None


def _add_ace(out: _Scan, path: str, m: re.Match, lineno: int) -> None:
    identity = m.group("identity").strip()
    if identity.casefold().startswith(MANDATORY_LABEL):
        return
    out.aces.append(_Ace(path, identity, tuple(_GROUP.findall(m.group("groups"))), lineno))


def _scan(text: str) -> _Scan:
    out = _Scan()
    lines = (text or "").splitlines()
    current: Optional[str] = None
    for i, raw in enumerate(lines):
        lineno = i + 1
        line = raw.rstrip()
        if not line.strip() or _SUMMARY.match(line.strip()):
            continue

        if line[:1].isspace():
            m = _ACE.match(line.strip())
            if current is None:
                out.messages.append(f"Line {lineno}: entry without a preceding path.")
            elif not m:
                out.messages.append(f"Line {lineno}: cannot parse entry '{line.strip()}'.")
            else:
                _add_ace(out, current, m, lineno)
            continue

        if ":(" not in line:
            # e.g. 'C:\System Volume Information: Access is denied.'
            path, sep, msg = line.partition(": ")
            if sep and msg:
                current = None
                out.paths.append(path)
                out.errors[path] = msg.strip()
            else:
                out.messages.append(f"Line {lineno}: cannot parse '{line.strip()}'.")
            continue

        path, ace_text = _split_header(line, _block_indent(lines, i))
        m = _ACE.match(ace_text.strip())
        if not path or not m:
            current = None
            out.messages.append(f"Line {lineno}: cannot parse '{line.strip()}'.")
            continue
        current = path
        out.paths.append(path)
        _add_ace(out, path, m, lineno)
    return out


def _codes(group: str) -> List[str]:
    return [c.strip().upper() for c in group.split(",") if c.strip()]


def _to_entry(ace: _Ace) -> Tuple[AccessControlEntry, List[str]]:
    """Build an entry; second item lists unknown codes."""
    inherited = deny = False
    rights = 0
    unknown: List[str] = []
    for group in ace.groups:
        for code in _codes(group):
            if code == "I":
                inherited = True
            elif code == "DENY":
                deny = True
            elif code in INHERITANCE_FLAGS:
                continue
            elif code in RIGHTS_CODES:
                rights |= int(RIGHTS_CODES[code])
            else:
                unknown.append(code)
    entry = AccessControlEntry(
        identity=ace.identity,
        rights=R(rights),
        effect="DENY" if deny else "ALLOW",
        inherited=inherited,
    )
    return entry, unknown


def icacls_syntax_check(text: str) -> List[str]:
    """
    Validate an icacls listing. Returns list of error/warning messages.
    Never raises; callers may still proceed to parse.
    """
    scan = _scan(text)
    msgs = list(scan.messages)
    for ace in scan.aces:
        entry, unknown = _to_entry(ace)
        if unknown:
            msgs.append(
                f"Unknown rights code(s) {unknown} for '{ace.identity}' on '{ace.path}' (line {ace.lineno}). "
                f"Allowed: {', '.join(sorted(RIGHTS_CODES))}"
            )
        elif int(entry.rights) == 0:
            msgs.append(f"[low] Entry for '{ace.identity}' on '{ace.path}' grants no rights (line {ace.lineno}).")
    return msgs


def parse_icacls(text: str) -> Dict[str, List[AccessControlEntry]]:
    """
    Best-effort extraction of entries per path. Unparseable lines are skipped,
    unknown rights codes are ignored.
    """
    scan = _scan(text)
    result: Dict[str, List[AccessControlEntry]] = {p: [] for p in scan.paths if p not in scan.errors}
    for ace in scan.aces:
        result.setdefault(ace.path, []).append(_to_entry(ace)[0])
    return result


def _key(path: str) -> str:
    # Windows paths: case-insensitive, either separator
    return path.replace("/", "\\").rstrip("\\").casefold()


class IcaclsDump:
    """A SecurityDescriptorSource backed by saved `icacls` output."""

    def __init__(self, entries: Dict[str, List[AccessControlEntry]], errors: Optional[Dict[str, str]] = None):
        self.entries = entries
        self.errors = dict(errors or {})
        self._paths: Dict[str, str] = {_key(p): p for p in [*entries, *self.errors]}

    @classmethod
    def from_text(cls, text: str) -> "IcaclsDump":
        scan = _scan(text)
        return cls(parse_icacls(text), scan.errors)

    def exists(self, target: str) -> bool:
        return _key(target) in self._paths

    def query(self, target: str) -> List[AccessControlEntry]:
        path = self._paths[_key(target)]
        if path in self.errors:
            raise PermissionError(f"{path}: {self.errors[path]}")
        return list(self.entries.get(path, []))

    def walk(self, root: str) -> Iterator[str]:
        """Dump paths equal to or below `root`; listed paths first, then failed ones."""
        base = _key(root)
        for key, path in self._paths.items():
            if key == base or key.startswith(base + "\\"):
                yield path
