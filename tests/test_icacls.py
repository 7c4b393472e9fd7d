from __future__ import annotations

from effective_permissions.icacls import IcaclsDump, icacls_syntax_check, parse_icacls
from effective_permissions.principals import StaticPrincipal
from effective_permissions.resolver import resolve
from effective_permissions.rights import FileSystemRights as R

ALICE_SID = "S-1-5-21-1004336348-1177238915-682003330-1001"


def test_parse_groups_entries_by_path(icacls_text):
    acls = parse_icacls(icacls_text)
    assert list(acls) == ["C:\\data", "C:\\data\\report.txt"]
    assert [e.identity for e in acls["C:\\data"]] == [
        "BUILTIN\\Administrators", "NT AUTHORITY\\SYSTEM", "BUILTIN\\Users", "CORP\\contractors", ALICE_SID,
    ]
    report = acls["C:\\data\\report.txt"]
    assert all(e.inherited for e in report)
    assert report[1].rights == R.READ_AND_EXECUTE | R.SYNCHRONIZE
    assert report[2].effect == "DENY"
    assert report[2].rights == R.WRITE_DATA | R.APPEND_DATA
    assert acls["C:\\data"][0].rights == R.FULL_CONTROL


def test_clean_listing_has_no_messages(icacls_text):
    assert icacls_syntax_check(icacls_text) == []


def test_unknown_code_and_empty_rights_are_reported():
    text = (
        "C:\\x.txt BUILTIN\\Users:(I)(ZZ)\n"
        "         Everyone:(N)\n"
        "         not an entry\n"
    )
    msgs = icacls_syntax_check(text)
    assert any("Unknown rights code" in m and "ZZ" in m for m in msgs)
    assert any(m.startswith("[low]") and "Everyone" in m for m in msgs)
    assert any("cannot parse entry" in m for m in msgs)
    # best-effort parse still keeps both entries
    assert [e.identity for e in parse_icacls(text)["C:\\x.txt"]] == ["BUILTIN\\Users", "Everyone"]


def test_entry_before_any_path_is_flagged():
    msgs = icacls_syntax_check("   BUILTIN\\Users:(R)\n")
    assert msgs == ["Line 1: entry without a preceding path."]


def test_single_line_header_with_spaces():
    text = (
        "C:\\Program Files\\app.exe NT AUTHORITY\\SYSTEM:(F)\n"
        "\n"
        "C:\\tmp\\a.txt Everyone:(R)\n"
    )
    acls = parse_icacls(text)
    assert acls["C:\\Program Files\\app.exe"][0].identity == "NT AUTHORITY\\SYSTEM"
    assert acls["C:\\tmp\\a.txt"][0].identity == "Everyone"


def test_resolve_against_dump(icacls_text, alice):
    dump = IcaclsDump.from_text(icacls_text)
    result = resolve("C:\\data\\report.txt", alice, dump)
    assert result.ok
    assert [e.identity for e in result.irrelevant_entries] == ["BUILTIN\\Administrators"]
    assert [e.identity for e in result.applicable_entries] == ["BUILTIN\\Users", "CORP\\contractors"]
    assert result.can_read and result.can_execute and not result.can_write


def test_sid_entry_in_dump_applies_to_holder(icacls_text):
    who = StaticPrincipal.of("CORP\\alice", sids=[ALICE_SID])
    result = resolve("C:\\data", who, IcaclsDump.from_text(icacls_text))
    assert [e.identity for e in result.applicable_entries] == [ALICE_SID]
    assert result.effective_rights == R.MODIFY | R.SYNCHRONIZE


def test_dump_lookup_and_walk(icacls_text, alice):
    dump = IcaclsDump.from_text(icacls_text)
    assert dump.exists("c:/DATA/Report.txt")
    assert not dump.exists("C:\\data\\other.txt")
    assert list(dump.walk("C:\\data")) == [
        "C:\\data", "C:\\data\\report.txt", "C:\\data\\System Volume Information",
    ]
    assert list(dump.walk("C:\\data\\report.txt")) == ["C:\\data\\report.txt"]
    assert not resolve("C:\\nope", alice, dump).ok


def test_access_denied_line_becomes_query_failure(icacls_text, alice):
    result = resolve("C:\\data\\System Volume Information", alice, IcaclsDump.from_text(icacls_text))
    assert result.failure.kind == "QUERY_FAILURE"
    assert result.failure.error_type == "PermissionError"
    assert "Access is denied." in result.failure.message


def test_integrity_label_lines_are_not_entries():
    text = (
        "C:\\Users\\alice\\secret.txt BUILTIN\\Administrators:(F)\n"
        "                          Mandatory Label\\High Mandatory Level:(NW)\n"
        "\n"
        "C:\\tmp\\b.txt Mandatory Label\\Low Mandatory Level:(NW,NR,NX)\n"
    )
    assert icacls_syntax_check(text) == []
    acls = parse_icacls(text)
    assert [e.identity for e in acls["C:\\Users\\alice\\secret.txt"]] == ["BUILTIN\\Administrators"]
    assert acls["C:\\tmp\\b.txt"] == []
