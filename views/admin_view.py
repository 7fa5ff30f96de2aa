import logging

import streamlit as st

import ui
from services import earnings_service
from use_cases.report_flow import describe_failure, format_period, generate_month_options
from utils import session_manager

logger = logging.getLogger(__name__)

VIEW_KEY = "admin:overview"

QUICK_LINKS = [
    ("📑 Reports", "reports"),
    ("📤 Excel Upload", "upload"),
    ("🌳 Genealogy", "genealogy"),
    ("🏅 Bonuses", "bonuses"),
]


def _load_overview(state, month):
    """Fetch the three independent overview resources in parallel."""
    ctx = session_manager.get_context()
    api = ctx.api
    ticket = state.begin(month)
    outcomes = ctx.client.fetch_all({
        "batches": api.uploads.get_batches,
        "genealogy": api.genealogy.get_all,
        "earnings": lambda: api.managers.get_all_earnings(month),
    })

    failures = [o.error for o in outcomes.values() if not o.ok]
    for err in failures:
        logger.warning(f"Overview fetch failed: {err.__class__.__name__}: {err}")
    if len(failures) == len(outcomes):
        state.fail(ticket, failures[0])
        return

    merged = dict(state.data or {})
    merged.update({name: o.value for name, o in outcomes.items() if o.ok})
    if state.resolve(ticket, merged) and failures:
        state.error = describe_failure(failures[0])


def render_admin_overview():
    head_l, head_r = st.columns([4, 1])
    head_l.title("⚙️ Admin Dashboard")
    head_l.caption("Upload data, manage the genealogy and review earnings")

    month = generate_month_options()[0].value
    state = session_manager.get_view_state(VIEW_KEY)
    refresh = head_r.button("🔄 Refresh", disabled=state.loading, use_container_width=True)
    if refresh or state.requested_key != month:
        with st.spinner("Loading overview..."):
            _load_overview(state, month)

    ui.render_load_error(state, VIEW_KEY)

    data = state.data or {}
    batches = data.get("batches")
    assignments = data.get("genealogy")
    earnings = data.get("earnings")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("📤 Uploads", len(batches) if batches is not None else "–")
    c2.metric("🌳 Assignments", len(assignments) if assignments is not None else "–")
    if earnings is not None:
        summary = earnings_service.aggregate(earnings)
        c3.metric(f"👥 Managers ({format_period(month)})", summary.manager_count)
        c4.metric("💶 Earnings this month", ui.format_currency(summary.total_earnings))
    else:
        c3.metric("👥 Managers", "–")
        c4.metric("💶 Earnings this month", "–")

    st.divider()
    cols = st.columns(len(QUICK_LINKS))
    for col, (label, page) in zip(cols, QUICK_LINKS):
        if col.button(label, use_container_width=True, key=f"quick_{page}"):
            session_manager.navigate(page)
            st.rerun()

    if batches:
        st.markdown("#### Latest upload")
        latest = batches[0]
        st.write(
            f"**{format_period(latest.period)}** · {latest.file_name or 'file'} · "
            f"{latest.processed_rows} processed, {latest.skipped_rows} skipped · "
            f"{ui.format_datetime(latest.created_at)}"
        )
        if latest.warnings:
            st.warning(f"{len(latest.warnings)} warnings in the latest upload")
