# tests/conftest.py
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from effective_permissions.principals import StaticPrincipal  # noqa: E402


def icacls_block(path, aces):
    """Lay out one path the way icacls prints it (entries aligned under the first)."""
    pad = " " * (len(path) + 1)
    lines = [f"{path} {aces[0]}"] + [pad + a for a in aces[1:]]
    return "\n".join(lines) + "\n"


@pytest.fixture
def icacls_text():
    return (
        icacls_block("C:\\data", [
            "BUILTIN\\Administrators:(OI)(CI)(F)",
            "NT AUTHORITY\\SYSTEM:(OI)(CI)(F)",
            "BUILTIN\\Users:(OI)(CI)(RX)",
            "CORP\\contractors:(OI)(CI)(DENY)(WD,AD)",
            "S-1-5-21-1004336348-1177238915-682003330-1001:(OI)(CI)(M)",
        ])
        + "\n"
        + icacls_block("C:\\data\\report.txt", [
            "BUILTIN\\Administrators:(I)(F)",
            "BUILTIN\\Users:(I)(RX)",
            "CORP\\contractors:(I)(DENY)(WD,AD)",
        ])
        + "\n"
        + "C:\\data\\System Volume Information: Access is denied.\n"
        + "Successfully processed 2 files; Failed processing 1 files\n"
    )


@pytest.fixture
def alice():
    return StaticPrincipal.of("CORP\\alice", roles=["BUILTIN\\Users", "CORP\\contractors"])
