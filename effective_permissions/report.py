from __future__ import annotations
import os
import sys
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

from . import AccessControlEntry, Stats
from .rights import format_rights

if TYPE_CHECKING:
    from .resolver import AccessRights


class _Palette:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BRIGHT_CYAN = "\033[96m"
    GREY = "\033[90m"


def should_color(mode: str) -> bool:
    """Decide if we should emit ANSI colors."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    # auto
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def _clr(enabled: bool, text: str, *styles: str) -> str:
    if not enabled or not styles:
        return text
    return "".join(styles) + text + _Palette.RESET


def render_report(result: "AccessRights", color: bool = False) -> str:
    """
    Path  : <target>
    Rights: <effective rights>
      [ ] <irrelevant identity>
      [x] <identity>   +<allowed rights>
      [x] <identity>   -<denied rights>
    """
    H = _Palette
    lines: List[str] = [f"Path  : {result.target}"]
    if result.failure is not None:
        f = result.failure
        detail = f"{f.error_type}: {f.message}" if f.error_type else f.message
        lines.append(_clr(color, f"{f.kind}: {detail}", H.RED, H.BOLD))
        return "\n".join(lines) + "\n"

    lines.append(f"Rights: {_clr(color, format_rights(result.effective_rights), H.BOLD)}")
    for e in result.irrelevant_entries:
        lines.append(_clr(color, f"  [ ] {e.identity}", H.GREY))
    for e in result.applicable_allow_entries:
        lines.append(f"  [x] {e.identity:<40} " + _clr(color, f"+{format_rights(e.rights)}", H.GREEN))
    for e in result.applicable_deny_entries:
        lines.append(f"  [x] {e.identity:<40} " + _clr(color, f"-{format_rights(e.rights)}", H.RED))
    return "\n".join(lines) + "\n"


def _entry_to_dict(e: AccessControlEntry) -> Dict[str, Any]:
    return {
        "identity": e.identity,
        "effect": e.effect,
        "rights": int(e.rights),
        "rights_text": format_rights(e.rights),
        "inherited": e.inherited,
    }


def result_to_dict(result: "AccessRights") -> Dict[str, Any]:
    return {
        "target": result.target,
        "rights": int(result.effective_rights),
        "rights_text": format_rights(result.effective_rights),
        "can_read": result.can_read,
        "can_write": result.can_write,
        "can_execute": result.can_execute,
        "applicable": [_entry_to_dict(e) for e in result.applicable_entries],
        "irrelevant": [_entry_to_dict(e) for e in result.irrelevant_entries],
        "failure": result.failure.__dict__ if result.failure else None,
    }


def aggregate_stats(results: Iterable["AccessRights"]) -> Stats:
    targets = readable = writable = executable = not_found = query_failures = 0
    for r in results:
        targets += 1
        if r.failure is not None:
            if r.failure.kind == "NOT_FOUND":
                not_found += 1
            else:
                query_failures += 1
            continue
        readable += r.can_read
        writable += r.can_write
        executable += r.can_execute
    return Stats(
        targets=targets, readable=readable, writable=writable, executable=executable,
        not_found=not_found, query_failures=query_failures,
    )
