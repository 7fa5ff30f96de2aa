import logging

import pandas as pd
import requests
import streamlit as st

import ui
from services import forms_service
from use_cases.errors import CommissionClientError
from use_cases.report_flow import describe_failure, format_period, load_into
from utils import session_manager

logger = logging.getLogger(__name__)

VIEW_KEY = "upload:batches"
DETAIL_KEY = "upload:batch_detail"
HISTORY_LIMIT = 5


def render_result(result):
    if not result.success:
        st.error(result.message or "Upload failed")
        return
    st.success(result.message or "File processed successfully")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Processed Rows", result.processed_rows)
    c2.metric("New Creators", result.new_creators_count)
    c3.metric("New Managers", result.new_managers_count)
    c4.metric("Transactions", result.transactions_created)
    if result.warnings:
        with st.expander(f"⚠️ {len(result.warnings)} warnings"):
            for w in result.warnings:
                st.write(f"- {w}")


def render_batch_details(api, batches):
    detail = session_manager.get_view_state(DETAIL_KEY)
    by_id = {b.id: b for b in batches}
    pick_col, btn_col = st.columns([4, 1])
    choice = pick_col.selectbox(
        "Batch",
        list(by_id),
        format_func=lambda i: f"{format_period(by_id[i].period)} · {by_id[i].file_name or i}",
    )
    if btn_col.button("🔍 Details", disabled=detail.loading, use_container_width=True):
        load_into(detail, lambda: api.uploads.get_batch(choice), key=choice)

    ui.render_load_error(detail, DETAIL_KEY)
    batch = detail.data
    if batch is None or detail.requested_key != choice:
        return
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Rows", batch.total_rows)
    c2.metric("Processed", batch.processed_rows)
    c3.metric("Skipped", batch.skipped_rows)
    c4, c5, c6 = st.columns(3)
    c4.metric("New Creators", batch.new_creators_count)
    c5.metric("New Managers", batch.new_managers_count)
    c6.metric("Transactions", batch.transactions_created)
    if batch.warnings:
        with st.expander(f"⚠️ {len(batch.warnings)} warnings"):
            for w in batch.warnings:
                st.write(f"- {w}")


def _history_frame(batches):
    return pd.DataFrame(
        [
            {
                "Period": format_period(b.period),
                "File": b.file_name,
                "Rows": b.total_rows,
                "Processed": b.processed_rows,
                "Skipped": b.skipped_rows,
                "Warnings": len(b.warnings),
                "Uploaded": ui.format_datetime(b.created_at),
            }
            for b in batches[:HISTORY_LIMIT]
        ]
    )


def render_upload():
    api = session_manager.get_api()
    history = session_manager.get_view_state(VIEW_KEY)

    st.title("📤 Excel Upload")
    st.caption("Upload the monthly creator revenue export")

    uploaded = st.file_uploader("Excel file", type=["xlsx", "xls"])
    if st.button("Upload", type="primary", disabled=uploaded is None):
        try:
            name = forms_service.validate_upload(uploaded.name, uploaded.size)
            with st.spinner("Processing file..."):
                result = api.uploads.upload_excel(name, uploaded.getvalue())
        except (CommissionClientError, requests.RequestException) as e:
            st.error(describe_failure(e))
        else:
            logger.info(f"Upload of {name} finished: {result.processed_rows} rows")
            st.session_state.last_upload_result = result
            load_into(history, api.uploads.get_batches, key="all")

    result = st.session_state.get("last_upload_result")
    if result is not None:
        render_result(result)

    st.divider()
    head_l, head_r = st.columns([4, 1])
    head_l.subheader("Recent Uploads")
    if head_r.button("🔄 Refresh", disabled=history.loading, use_container_width=True) or history.requested_key is None:
        load_into(history, api.uploads.get_batches, key="all")

    ui.render_load_error(history, VIEW_KEY)
    batches = history.data or []
    if not batches:
        st.info("No uploads yet.")
        return
    ui.render_aggrid(_history_frame(batches), height=220, sortable=False)
    render_batch_details(api, batches[:HISTORY_LIMIT])
