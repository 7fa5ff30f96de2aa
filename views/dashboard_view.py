import logging

import pandas as pd
import plotly.express as px
import requests
import streamlit as st

import ui
from services import earnings_service, forms_service
from use_cases.errors import CommissionClientError
from use_cases.report_flow import describe_failure, format_period, load_into
from utils import session_manager

logger = logging.getLogger(__name__)

VIEW_KEY = "dashboard:earnings"


def render_summary_cards(record):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("💶 Total Earnings", ui.format_currency(record.total_earnings))
    c2.metric("📈 Base Commission", ui.format_currency(record.base_commission))
    c3.metric("👥 Creators", record.creator_count)
    c4.metric("🏅 Bonuses", ui.format_currency(earnings_service.bonus_total(record)))


def render_breakdown_chart(record):
    items = earnings_service.breakdown_items(record)
    if not items:
        st.info("No earnings components for this period.")
        return
    chart_df = pd.DataFrame(items, columns=["Component", "Amount"])
    fig = px.bar(
        chart_df,
        x="Component",
        y="Amount",
        color="Component",
        color_discrete_map=ui.BREAKDOWN_COLORS,
        title="Earnings Breakdown",
    )
    fig.update_traces(hovertemplate="%{x}: %{y:,.2f} €<extra></extra>")
    st.plotly_chart(ui.update_chart_layout(fig), use_container_width=True)


def render_milestones(record):
    m = record.milestone_breakdown
    rows = [
        ("Half-Milestone", m.half_milestone),
        ("Milestone 1", m.milestone1),
        ("Milestone 2", m.milestone2),
        ("Retention", m.retention),
        ("Milestone Total", m.total),
        ("Graduation Bonus", record.graduation_bonus),
        ("Diamond Bonus", record.diamond_bonus),
        ("Recruitment Bonus", record.recruitment_bonus),
    ]
    if record.is_team:
        rows.append(("Downline Earnings", record.downline_earnings))
    st.dataframe(
        pd.DataFrame([(label, ui.format_currency(value)) for label, value in rows], columns=["Component", "Amount"]),
        use_container_width=True,
        hide_index=True,
    )


def _request_payout(api, record):
    try:
        amount = forms_service.validate_payout(record)
        payout = api.managers.request_payout(record.manager_id, record.period, amount)
    except (CommissionClientError, requests.RequestException) as e:
        st.error(describe_failure(e))
        return
    logger.info(f"Payout {payout.id} requested for {record.period}")
    st.success(f"Payout of {ui.format_currency(amount)} requested for {format_period(record.period)}.")


def render_dashboard():
    store = session_manager.get_store()
    api = session_manager.get_api()
    identity = store.identity

    head_l, head_r = st.columns([4, 1])
    head_l.title(f"📊 Welcome, {identity.first_name or identity.full_name}")
    head_l.caption("Select a month to view your detailed earnings breakdown")

    if not identity.manager_id:
        st.warning("No manager profile is linked to this account.")
        return

    month = ui.render_month_select()
    state = session_manager.get_view_state(VIEW_KEY)

    def fetch():
        return api.managers.get_earnings(identity.manager_id, month)

    refresh = head_r.button("🔄 Refresh", disabled=state.loading, use_container_width=True)
    if refresh or state.requested_key != month:
        with st.spinner("Loading earnings data..."):
            load_into(state, fetch, key=month)

    ui.render_load_error(state, VIEW_KEY)

    record = state.data
    if record is None:
        if not state.error:
            st.info("No earnings data for this period yet.")
        return
    if record.period != month:
        st.caption(f"Showing {format_period(record.period)} until {format_period(month)} loads.")

    st.subheader(f"{format_period(record.period)} • Earnings")
    st.markdown(ui.type_badge(record.manager_type), unsafe_allow_html=True)
    st.caption(f"Revenue generated: {ui.format_currency(record.total_revenue)}")
    render_summary_cards(record)

    col_chart, col_table = st.columns([3, 2])
    with col_chart:
        render_breakdown_chart(record)
    with col_table:
        render_milestones(record)

    st.divider()
    can_request = record.total_earnings > 0 and record.period == month
    if st.button("💸 Request Payout", type="primary", disabled=not can_request):
        with st.spinner("Submitting payout request..."):
            _request_payout(api, record)
