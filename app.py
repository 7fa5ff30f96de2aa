import os
from datetime import datetime

import streamlit as st
import streamlit.components.v1 as components

from infrastructure.observability import setup_observability
setup_observability()

import ui
from infrastructure import observability
from use_cases import bootstrap
from utils import session_manager
from views import (
    admin_view, bonuses_view, dashboard_view, gate_view,
    genealogy_view, login_view, reports_view, upload_view,
)

# --- PAGE SETTINGS ---
st.set_page_config(page_title="Commission Desk", layout="wide", initial_sidebar_state="expanded")

FORCE_HTTPS = os.getenv("FORCE_HTTPS", "False").lower() == "true"

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "uptime": datetime.utcnow().isoformat()})
    st.stop()

# The bearer credential travels through this page; refuse plain HTTP when demanded.
if FORCE_HTTPS:
    proto = st.context.headers.get("x-forwarded-proto", "http").lower()
    if proto != "https":
        st.error("🚨 Insecure connection. Please use HTTPS.")
        st.stop()

components.html(
    """
    <script>
    var meta1 = document.createElement('meta');
    meta1.httpEquiv = "X-Content-Type-Options";
    meta1.content = "nosniff";
    document.getElementsByTagName('head')[0].appendChild(meta1);

    var meta2 = document.createElement('meta');
    meta2.name = "referrer";
    meta2.content = "no-referrer";
    document.getElementsByTagName('head')[0].appendChild(meta2);
    </script>
    """,
    height=0,
)

ui.setup_style()

# --- STARTUP ORCHESTRATION ---
startup_result = bootstrap.run_startup()
if startup_result.status == "STOP":
    st.stop()
session_manager.apply_redirects()

# page -> (sidebar label, renderer, admin only)
PAGES = {
    "dashboard": ("📊 Dashboard", dashboard_view.render_dashboard, False),
    "admin": ("⚙️ Admin", admin_view.render_admin_overview, True),
    "reports": ("📑 Reports", reports_view.render_reports, True),
    "upload": ("📤 Excel Upload", upload_view.render_upload, True),
    "genealogy": ("🌳 Genealogy", genealogy_view.render_genealogy, True),
    "bonuses": ("🏅 Bonuses", bonuses_view.render_bonuses, True),
}

store = session_manager.get_store()
page = st.session_state.page

# --- SIDEBAR ---
if store.is_authenticated:
    identity = store.identity
    observability.tag_user(identity.id, identity.role)
    with st.sidebar:
        st.markdown(f"**{identity.full_name}**")
        st.caption(f"{identity.email} · {identity.role}")
        st.divider()
        for name, (label, _, admin_only) in PAGES.items():
            if admin_only and not store.is_admin:
                continue
            if name == "dashboard" and store.is_admin:
                continue
            if st.button(label, key=f"nav_{name}", use_container_width=True,
                         type="primary" if name == page else "secondary"):
                session_manager.navigate(name)
                st.rerun()
        st.divider()
        if st.button("Logout", key="logout_btn", type="secondary", use_container_width=True):
            session_manager.logout()

# --- ROUTING ---
if page == "login" or page not in PAGES:
    if store.is_authenticated and page != "login":
        session_manager.navigate("admin" if store.is_admin else "dashboard")
        st.rerun()
    login_view.render_auth_screen()
else:
    _, render, admin_only = PAGES[page]
    if gate_view.guard(admin_required=admin_only):
        render()

# A 401 during rendering logs the session out; follow it to the login page.
if session_manager.apply_redirects():
    st.rerun()
