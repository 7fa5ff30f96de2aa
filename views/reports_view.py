import logging

import streamlit as st

import ui
from services import earnings_service
from services.earnings_service import SortDirection, SortField
from use_cases.report_flow import format_period, load_into
from utils import session_manager

logger = logging.getLogger(__name__)

VIEW_KEY = "reports:earnings"


def render_summary(summary):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("💶 Total Earnings", ui.format_currency(summary.total_earnings))
    c2.metric("📈 Total Revenue", ui.format_currency(summary.total_revenue))
    c3.metric("👥 Total Creators", summary.total_creators)
    c4.metric("🏅 Active Managers", summary.manager_count)


def render_sort_controls():
    """One button per sortable column; clicking the active one flips direction."""
    sort_state = st.session_state.sort_state
    cols = st.columns(len(SortField))
    for col, field in zip(cols, SortField):
        label = field.label
        if field is sort_state.field:
            label += " ▲" if sort_state.direction is SortDirection.ASC else " ▼"
        if col.button(label, key=f"sort_{field.key}", use_container_width=True):
            st.session_state.sort_state = sort_state.toggle(field)
            st.rerun()


def render_export_buttons(sorted_records, month):
    c1, c2 = st.columns(2)
    c1.download_button(
        label="⬇️ Export CSV",
        data=earnings_service.export_csv(sorted_records),
        file_name=earnings_service.export_filename(month),
        mime="text/csv",
        use_container_width=True,
    )
    excel_data = earnings_service.export_excel(sorted_records)
    if excel_data:
        c2.download_button(
            label="📊 Export Excel",
            data=excel_data,
            file_name=earnings_service.export_filename(month, "xlsx"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            use_container_width=True,
        )
    else:
        c2.error("Excel export failed")


def render_reports():
    api = session_manager.get_api()

    head_l, head_r = st.columns([4, 1])
    head_l.title("📑 Manager Reports")
    head_l.caption("View and analyze all manager earnings")

    month = ui.render_month_select()
    state = session_manager.get_view_state(VIEW_KEY)

    refresh = head_r.button("🔄 Refresh", disabled=state.loading, use_container_width=True)
    if refresh or state.requested_key != month:
        with st.spinner("Loading earnings data..."):
            load_into(state, lambda: api.managers.get_all_earnings(month), key=month)

    st.subheader(format_period(month))
    st.caption("Comprehensive earnings report for all managers")

    ui.render_load_error(state, VIEW_KEY)

    records = state.data
    if records is None:
        return
    if not records:
        st.info("No earnings found for this period.")
        return

    render_summary(earnings_service.aggregate(records))
    st.divider()

    st.markdown("#### Manager Earnings Details")
    render_sort_controls()
    sorted_records = earnings_service.sort_records(records, st.session_state.sort_state)

    table = earnings_service.to_dataframe(sorted_records)
    st.dataframe(table, use_container_width=True, hide_index=True)

    render_export_buttons(sorted_records, records[0].period or month)
