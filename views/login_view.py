import requests
import streamlit as st

from use_cases.errors import AuthenticationError, ValidationError
from use_cases.report_flow import describe_failure
from utils import session_manager


def render_auth_screen():
    st.title("🔐 Commission Desk")
    st.caption("Sign in to view earnings and manage commissions.")

    with st.form("login_form", clear_on_submit=False):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if not submitted:
        return

    store = session_manager.get_store()
    try:
        with st.spinner("Signing in..."):
            store.login(email, password)
    except (ValidationError, AuthenticationError) as e:
        st.error(str(e))
        return
    except requests.RequestException as e:
        st.error(describe_failure(e))
        return

    session_manager.apply_redirects()
    st.rerun()
