from __future__ import annotations
import os
from typing import List

import streamlit as st

from effective_permissions import Stats
from effective_permissions.icacls import IcaclsDump, icacls_syntax_check
from effective_permissions.principals import PosixPrincipal, StaticPrincipal
from effective_permissions.report import aggregate_stats
from effective_permissions.resolver import AccessRights, resolve
from effective_permissions.rights import format_rights
from effective_permissions.sources import LocalFileSystem

st.set_page_config(page_title="Effective Permissions", layout="wide", initial_sidebar_state="expanded")


def _split_list(text: str) -> List[str]:
    return [t.strip() for t in (text or "").replace(",", "\n").splitlines() if t.strip()]


def _render_stats(stats: Stats) -> None:
    st.sidebar.markdown("### Statistics")
    st.sidebar.write(f"- Targets: {stats.targets}")
    st.sidebar.write(f"- Readable: {stats.readable}")
    st.sidebar.write(f"- Writable: {stats.writable}")
    st.sidebar.write(f"- Executable: {stats.executable}")
    st.sidebar.write(f"- Not found: {stats.not_found}")
    st.sidebar.write(f"- ACL query failures: {stats.query_failures}")


def _render_result(r: AccessRights) -> None:
    with st.expander(r.target, expanded=not r.ok):
        if r.failure is not None:
            st.error(f"{r.failure.kind}: {r.failure.error_type} {r.failure.message}".strip())
            return
        st.write(f"Rights: **{format_rights(r.effective_rights)}**")
        c1, c2, c3 = st.columns(3)
        c1.metric("Read", "yes" if r.can_read else "no")
        c2.metric("Write", "yes" if r.can_write else "no")
        c3.metric("Execute", "yes" if r.can_execute else "no")
        for e in r.irrelevant_entries:
            st.write(f"- [ ] `{e.identity}`")
        for e in r.applicable_allow_entries:
            st.write(f"- [x] `{e.identity}` → +{format_rights(e.rights)}")
        for e in r.applicable_deny_entries:
            st.error(f"[x] `{e.identity}` → -{format_rights(e.rights)}")


# ---------------- sidebar ----------------

st.sidebar.title("Effective Permissions")
mode = st.sidebar.radio("Source", ["Local disk", "icacls output"], index=0)
recursive = st.sidebar.checkbox("Recurse into directories", value=True)
st.sidebar.markdown("---")
st.sidebar.text("Principal (leave user empty for the current user)")
user = st.sidebar.text_input("User", value=st.session_state.get("user", ""))
st.session_state["user"] = user
roles = st.sidebar.text_area("Roles / groups", value=st.session_state.get("roles", ""), height=80)
st.session_state["roles"] = roles
sids = st.sidebar.text_area("SIDs", value=st.session_state.get("sids", ""), height=80)
st.session_state["sids"] = sids
st.sidebar.markdown("---")

if "stats" not in st.session_state:
    st.session_state["stats"] = Stats()
_render_stats(st.session_state["stats"])

# ---------------- main page ----------------

st.header("Effective Permissions per File")

target = st.text_input("Path", value=st.session_state.get("target", os.getcwd()))
st.session_state["target"] = target

dump_text = ""
if mode == "icacls output":
    uploaded = st.file_uploader("Upload saved icacls output", type=["txt", "log"])
    if uploaded:
        st.session_state["dump_text"] = uploaded.read().decode("utf-8", errors="replace")
    dump_text = st.text_area(
        "icacls output (paste or edit here)",
        value=st.session_state.get("dump_text", ""),
        height=280,
        placeholder="C:\\data\\report.txt BUILTIN\\Users:(I)(RX)",
    )

if st.button("Resolve", type="primary"):
    try:
        if user:
            principal = StaticPrincipal.of(user, roles=_split_list(roles), sids=_split_list(sids))
        else:
            principal = PosixPrincipal.current()
    except (ValueError, ImportError, AttributeError) as e:
        # bad SID, or no local identity on this platform
        st.error(f"Cannot build principal: {e}")
        st.stop()

    if mode == "icacls output":
        for msg in icacls_syntax_check(dump_text):
            (st.warning if msg.startswith("[low]") else st.error)(msg)
        source = IcaclsDump.from_text(dump_text)
    else:
        source = LocalFileSystem()

    targets = list(source.walk(target)) if recursive else []
    results = [resolve(t, principal, source) for t in (targets or [target])]
    stats = aggregate_stats(results)
    st.session_state["stats"] = stats
    _render_stats(stats)

    st.subheader("Results")
    for r in results:
        _render_result(r)
else:
    st.info("Pick a source and a path, then click **Resolve**.")
