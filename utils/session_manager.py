import logging

import streamlit as st

from services.earnings_service import SortState
from use_cases.client_context import ClientContext, build_client_context
from use_cases.report_flow import ViewLoadState
from use_cases.session_store import LOGIN_PAGE, SessionStore

log = logging.getLogger(__name__)

"""
SESSION STATE CONTRACT

This module owns the Streamlit session state of one browser tab.

st.session_state keys:

client_ctx: ClientContext | None
    event bus, API client, credential and session store of this tab
    default: None (built lazily by get_context)
    owner: session_manager

page: str
    current page: login | dashboard | admin | reports | genealogy | bonuses | upload
    default: "login"
    owner: session_manager / router

view_states: dict[str, ViewLoadState]
    load state per view, keyed "<page>:<name>"
    default: {}
    owner: views (created through get_view_state)

sort_state: SortState
    column and direction of the reports table
    default: SortState() (total earnings, descending)
    owner: reports view

selected_month: str | None
    YYYYMM period picked in the month selector
    default: None
    owner: dashboard / reports views

flash: str | None
    one-shot success message shown on the next rerun
    default: None
    owner: views

last_upload_result: UploadResult | None
    outcome of the latest Excel upload, shown until logout
    default: absent
    owner: upload view

genealogy_form_open, genealogy_editing, genealogy_level, genealogy_rate: bool, str, str, float
    state of the add/edit assignment form (widget keys for level and rate)
    default: absent; dropped when the form closes
    owner: genealogy view

genealogy_confirm_delete: bool
    widget key of the delete confirmation checkbox
    default: absent
    owner: genealogy view

All keys from last_upload_result on are dropped by logout().
"""

GENEALOGY_FORM_KEYS = ("genealogy_form_open", "genealogy_editing", "genealogy_level", "genealogy_rate")
VIEW_SCRATCH_KEYS = ("last_upload_result", "genealogy_confirm_delete") + GENEALOGY_FORM_KEYS


def init_session_state():
    if "client_ctx" not in st.session_state:
        st.session_state.client_ctx = None
    if "page" not in st.session_state:
        st.session_state.page = LOGIN_PAGE
    if "view_states" not in st.session_state:
        st.session_state.view_states = {}
    if "sort_state" not in st.session_state:
        st.session_state.sort_state = SortState()
    if "selected_month" not in st.session_state:
        st.session_state.selected_month = None
    if "flash" not in st.session_state:
        st.session_state.flash = None


def get_context() -> ClientContext:
    init_session_state()
    if st.session_state.client_ctx is None:
        st.session_state.client_ctx = build_client_context()
    return st.session_state.client_ctx


def get_store() -> SessionStore:
    return get_context().store


def get_api():
    return get_context().api


def get_view_state(key: str) -> ViewLoadState:
    states = st.session_state.view_states
    state = states.get(key)
    if state is None or not state.active:
        state = ViewLoadState()
        states[key] = state
    return state


def navigate(page: str) -> None:
    """Switch page; views of the page being left are torn down."""
    init_session_state()
    current = st.session_state.page
    if current != page:
        for key in [k for k in st.session_state.view_states if not k.startswith(f"{page}:")]:
            st.session_state.view_states.pop(key).teardown()
        log.debug(f"Navigate {current} -> {page}")
    st.session_state.page = page


def apply_redirects():
    """Perform the navigation requested by the session store (login/logout/401)."""
    target = get_store().take_redirect()
    if target:
        navigate(target)
    return target


def set_flash(message: str) -> None:
    st.session_state.flash = message


def pop_flash():
    message = st.session_state.get("flash")
    st.session_state.flash = None
    return message


def logout():
    get_store().logout()
    apply_redirects()
    st.session_state.selected_month = None
    for key in VIEW_SCRATCH_KEYS:
        st.session_state.pop(key, None)
    st.rerun()
