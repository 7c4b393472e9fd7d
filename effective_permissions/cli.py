from __future__ import annotations
import argparse
import json
import os
from pathlib import Path
from typing import List, Optional, Tuple

import colorama
from pydantic import ValidationError

from . import Principal
from .config import get_settings
from .icacls import IcaclsDump, icacls_syntax_check
from .log import configure_logging, get_logger
from .principals import PosixPrincipal, StaticPrincipal
from .report import _Palette, _clr, aggregate_stats, render_report, result_to_dict, should_color
from .resolver import AccessRights, resolve
from .sources import LocalFileSystem, SecurityDescriptorSource

logger = get_logger("effective_permissions.cli")

RULE = "-" * 80


def _build_principal(args: argparse.Namespace) -> Tuple[Optional[Principal], str, str]:
    """Return (principal, display name, error message)."""
    if args.user:
        try:
            return StaticPrincipal.of(args.user, roles=args.role, sids=args.sid), args.user, ""
        except ValueError as e:
            return None, "", str(e)
    if args.icacls:
        return None, "", "--user is required with --icacls (the dump carries no identity)."
    if os.name != "posix":
        return None, "", "--user is required on this platform."
    me = PosixPrincipal.current()
    return me, me.name, ""


def _build_source(args: argparse.Namespace) -> Tuple[SecurityDescriptorSource, List[str]]:
    if not args.icacls:
        return LocalFileSystem(), []
    text = args.icacls.read_text(encoding="utf-8", errors="replace")
    return IcaclsDump.from_text(text), icacls_syntax_check(text)


def _stats_lines(results: List[AccessRights], color: bool) -> List[str]:
    H = _Palette
    out = [_clr(color, "Statistics", H.BRIGHT_CYAN, H.BOLD)]
    for k, v in aggregate_stats(results).__dict__.items():
        out.append(f"{_clr(color, f'- {k}:', H.GREY)} {_clr(color, str(v), H.BOLD)}")
    return out


def _write_output(output: Path, text: str) -> bool:
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        print(f"error: cannot write {output}: {e}")
        return False
    return True


def main(argv: List[str] | None = None) -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"error: invalid EFFPERM_* settings: {e}")
        return 2
    ap = argparse.ArgumentParser(description="Effective file-system permissions of a user, per file")
    ap.add_argument("path", nargs="?", default=os.getcwd(), help="File or directory (default: current directory)")
    ap.add_argument("--icacls", type=Path, help="Resolve against saved 'icacls' output instead of the local disk")
    ap.add_argument("--user", default="", help="Resolve for this account instead of the current user")
    ap.add_argument("--role", action="append", default=[], help="Group/role the --user belongs to (repeatable)")
    ap.add_argument("--sid", action="append", default=[], help="SID the --user holds (repeatable)")
    ap.add_argument("--no-recursive", action="store_true", help="Only resolve the given path")
    ap.add_argument("--json", action="store_true", help="Emit JSON instead of human-readable")
    ap.add_argument("--output", default=settings.output, help="Also write the report to this file")
    ap.add_argument("--force", action="store_true", help="Overwrite --output if it already exists")
    ap.add_argument("--color", choices=["auto", "always", "never"], default=settings.color,
                    help="Colorize output (default: auto)")
    ap.add_argument("--log-level", default=settings.log_level, help="Log level for diagnostics on stderr")
    args = ap.parse_args(argv)

    configure_logging(args.log_level, json=settings.log_json)
    color_enabled = should_color(args.color) and not args.json
    if color_enabled:
        colorama.just_fix_windows_console()

    principal, user_name, err = _build_principal(args)
    if principal is None:
        print(f"error: {err}")
        return 2

    output = Path(args.output) if args.output else None
    if output and output.exists() and not args.force:
        print(f"error: {output} already exists (use --force to overwrite).")
        return 2

    try:
        source, syntax = _build_source(args)
    except OSError as e:
        print(f"error: cannot read {args.icacls}: {e}")
        return 2

    recursive = settings.recursive and not args.no_recursive
    targets = list(source.walk(args.path)) if recursive else []
    results = [resolve(t, principal, source) for t in (targets or [args.path])]
    logger.info("resolution finished", targets=len(results), user=user_name)
    status = 2 if any(not r.ok for r in results) else 0

    if args.json:
        payload = {
            "user": user_name,
            "path": args.path,
            "stats": aggregate_stats(results).__dict__,
            "syntax": syntax,
            "results": [result_to_dict(r) for r in results],
        }
        text = json.dumps(payload, indent=2)
        print(text)
        if output and not _write_output(output, text + "\n"):
            return 2
        return status

    header = [
        f"User     : {user_name}",
        f"Directory: {args.path}",
        f"Log File : {output if output else '-'}",
    ]
    header += [f"Syntax   : {m}" for m in syntax]
    print("\n".join(header))
    print(RULE)
    for r in results:
        print(render_report(r, color=color_enabled))
    print(RULE)
    print("\n".join(_stats_lines(results, color_enabled)))

    if output:
        plain = header + [RULE] + [render_report(r) for r in results] + [RULE] + _stats_lines(results, False)
        if not _write_output(output, "\n".join(plain) + "\n"):
            return 2
        print(f"Output written to: {output}")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
