import logging

import pandas as pd
import requests
import streamlit as st

import ui
from services import forms_service
from use_cases.domain_models import LEVEL_DEFAULT_RATES
from use_cases.errors import CommissionClientError
from use_cases.report_flow import describe_failure, load_into
from utils import session_manager

logger = logging.getLogger(__name__)

VIEW_KEY = "genealogy:assignments"
LEVEL_LABELS = {level: f"Level {level} ({rate:g}%)" for level, rate in LEVEL_DEFAULT_RATES.items()}


def _reload(state, api):
    load_into(state, api.genealogy.get_all, key="all")


def _assignments_frame(assignments):
    return pd.DataFrame(
        [
            {
                "Live Manager": a.manager.name or a.manager.id,
                "Team Manager": a.parent_manager.name or a.parent_manager.id,
                "Level": f"Level {a.level}",
                "Commission Rate": f"{a.commission_rate:g}%" + (" *" if a.has_custom_rate else ""),
                "Created": ui.format_datetime(a.created_at),
            }
            for a in assignments
        ]
    )


def _on_level_change():
    # Picking a level resets the rate to that level's default.
    st.session_state.genealogy_rate = forms_service.default_rate(st.session_state.genealogy_level)


def render_form(api, state, editing=None):
    if "genealogy_level" not in st.session_state:
        st.session_state.genealogy_level = editing.level if editing else "A"
        st.session_state.genealogy_rate = editing.commission_rate if editing else forms_service.default_rate("A")

    st.subheader("Edit Assignment" if editing else "Add New Assignment")
    c1, c2 = st.columns(2)
    manager_id = c1.text_input("Live Manager ID *", value=editing.manager.id if editing else "", placeholder="Live Manager UUID")
    parent_id = c2.text_input(
        "Team Manager ID *", value=editing.parent_manager.id if editing else "", placeholder="Team Manager UUID"
    )
    c3, c4 = st.columns(2)
    level = c3.selectbox(
        "Level", list(LEVEL_LABELS), format_func=LEVEL_LABELS.get, key="genealogy_level", on_change=_on_level_change
    )
    rate = c4.number_input("Commission Rate (%)", min_value=0.0, max_value=100.0, step=0.1, key="genealogy_rate")

    b1, b2 = st.columns(2)
    if b1.button("Cancel", use_container_width=True):
        _close_form()
        st.rerun()
    if not b2.button("Update" if editing else "Create", type="primary", use_container_width=True):
        return

    try:
        form = forms_service.validate_genealogy_form(manager_id, parent_id, level, rate)
        if editing:
            api.genealogy.update(
                editing.id,
                {
                    "managerId": form.manager_id,
                    "parentManagerId": form.parent_manager_id,
                    "level": form.level,
                    "commissionRate": form.commission_rate,
                },
            )
            session_manager.set_flash("Genealogy assignment updated successfully")
        else:
            api.genealogy.create(form.manager_id, form.parent_manager_id, form.level, form.commission_rate)
            session_manager.set_flash("Genealogy assignment created successfully")
    except (CommissionClientError, requests.RequestException) as e:
        st.error(describe_failure(e))
        return

    _close_form()
    _reload(state, api)
    st.rerun()


def _close_form():
    for key in session_manager.GENEALOGY_FORM_KEYS:
        st.session_state.pop(key, None)


def render_genealogy():
    api = session_manager.get_api()
    state = session_manager.get_view_state(VIEW_KEY)

    head_l, head_r = st.columns([4, 1])
    head_l.title("🌳 Genealogy Management")
    head_l.caption("Manage Team-Manager downline assignments")
    if head_r.button("➕ Add Assignment", use_container_width=True):
        _close_form()
        st.session_state.genealogy_form_open = True

    if state.requested_key is None:
        with st.spinner("Loading genealogy data..."):
            _reload(state, api)

    flash = session_manager.pop_flash()
    if flash:
        st.success(flash)
    ui.render_load_error(state, VIEW_KEY)

    assignments = state.data or []
    by_id = {a.id: a for a in assignments}

    if st.session_state.get("genealogy_form_open"):
        with st.container(border=True):
            render_form(api, state, editing=by_id.get(st.session_state.get("genealogy_editing")))

    st.subheader("Current Assignments")
    if st.button("🔄 Refresh", disabled=state.loading):
        _reload(state, api)
    if not assignments:
        st.info("No Assignments Found. Create your first genealogy assignment to get started.")
        return

    st.dataframe(_assignments_frame(assignments), use_container_width=True, hide_index=True)
    st.caption("* rate differs from the level default")

    choice = st.selectbox(
        "Select an assignment",
        [a.id for a in assignments],
        format_func=lambda i: f"{by_id[i].manager.name or i} → {by_id[i].parent_manager.name or by_id[i].parent_manager.id}",
    )
    e_col, d_col = st.columns(2)
    if e_col.button("✏️ Edit", use_container_width=True):
        _close_form()
        st.session_state.genealogy_form_open = True
        st.session_state.genealogy_editing = choice
        st.rerun()

    confirm = d_col.checkbox("Confirm deletion", key="genealogy_confirm_delete")
    if d_col.button("🗑 Delete", use_container_width=True, disabled=not confirm):
        try:
            api.genealogy.delete(choice)
        except (CommissionClientError, requests.RequestException) as e:
            st.error(describe_failure(e))
            return
        logger.info(f"Genealogy assignment {choice} deleted")
        session_manager.set_flash("Genealogy assignment deleted successfully")
        _reload(state, api)
        st.rerun()
