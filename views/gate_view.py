import streamlit as st

import ui
from use_cases import auth_flow
from utils import session_manager


def guard(admin_required: bool = False) -> bool:
    """Render the gate fallback when needed; True means the page may render."""
    result = auth_flow.ensure_authorized(session_manager.get_store(), admin_required=admin_required)

    if result.state == "LOADING":
        st.info("Loading...")
        return False

    if result.state == "UNAUTHENTICATED":
        if ui.render_gate_fallback("Access Denied", "Please log in to access this page.", "Go to Login"):
            session_manager.navigate(result.fallback_page)
            st.rerun()
        return False

    if result.state == "FORBIDDEN":
        if ui.render_gate_fallback(
            "Admin Access Required",
            "You don't have permission to access this page.",
            "Go to Dashboard",
        ):
            session_manager.navigate(result.fallback_page)
            st.rerun()
        return False

    return True
