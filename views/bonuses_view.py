import logging

import requests
import streamlit as st

import ui
from services import forms_service
from use_cases.domain_models import RECRUITMENT_BONUS_AMOUNTS
from use_cases.errors import CommissionClientError
from use_cases.report_flow import describe_failure, format_period, generate_month_options
from utils import session_manager

logger = logging.getLogger(__name__)


def render_bonuses():
    api = session_manager.get_api()

    st.title("🏅 Recruitment Bonuses")
    st.caption("Award one-off bonuses to managers who recruited new creators")

    flash = session_manager.pop_flash()
    if flash:
        st.success(flash)

    options = generate_month_options()
    labels = {o.value: o.label for o in options}

    with st.form("bonus_form", clear_on_submit=False):
        manager_id = st.text_input("Manager ID *", placeholder="Manager UUID")
        c1, c2 = st.columns(2)
        period = c1.selectbox("Period *", [o.value for o in options], format_func=lambda v: labels.get(v, v))
        manager_type = c2.radio(
            "Manager Type *",
            list(RECRUITMENT_BONUS_AMOUNTS),
            format_func=lambda t: f"{t.upper()} ({ui.format_currency(forms_service.bonus_amount(t))})",
            horizontal=True,
        )
        description = st.text_input("Description", placeholder="Recruitment bonus for ... manager")
        submitted = st.form_submit_button("Award Bonus", type="primary", use_container_width=True)

    st.info(
        "Bonus amounts: "
        + ", ".join(f"{t.upper()} manager {ui.format_currency(v)}" for t, v in RECRUITMENT_BONUS_AMOUNTS.items())
    )

    if not submitted:
        return

    try:
        form = forms_service.validate_bonus_form(manager_id, period, manager_type, description)
        api.managers.award_recruitment_bonus(form.manager_id, form.period, form.manager_type, form.description)
    except (CommissionClientError, requests.RequestException) as e:
        st.error(describe_failure(e))
        return

    amount = forms_service.bonus_amount(form.manager_type)
    logger.info(f"Recruitment bonus awarded to {form.manager_id} for {form.period}")
    session_manager.set_flash(
        f"Bonus of {ui.format_currency(amount)} awarded for {format_period(form.period)}"
    )
    st.rerun()
