from datetime import datetime

import pandas as pd
import streamlit as st
from st_aggrid import AgGrid, GridOptionsBuilder, GridUpdateMode

from use_cases.report_flow import generate_month_options

BRAND_COLOR = "#ED0C81"

# Colors of the earnings breakdown chart, keyed by component name.
BREAKDOWN_COLORS = {
    "Base Commission": "#ED0C81",
    "Half-Milestone": "#f472b6",
    "Milestone 1": "#ec4899",
    "Milestone 2": "#db2777",
    "Retention": "#be185d",
    "Graduation": "#9d174d",
    "Diamond": "#831843",
    "Recruitment": "#500724",
    "Downline": "#22c55e",
}


def setup_style():
    st.markdown("""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Manrope:wght@400;600;700;800&display=swap');

        html, body, .stApp {
            font-family: 'Manrope', sans-serif;
        }

        [data-testid="stMetric"] {
            background: #ffffff;
            border: 1px solid #e5e7eb;
            border-radius: 14px;
            padding: 1rem 1.2rem;
            box-shadow: 0 4px 14px rgba(17, 24, 39, 0.06);
        }

        [data-testid="stMetricLabel"] {
            color: #6b7280;
        }

        .cd-badge {
            display: inline-block;
            padding: 0.1rem 0.55rem;
            border-radius: 999px;
            font-size: 0.75rem;
            font-weight: 700;
        }
        .cd-badge-live { background: #dbeafe; color: #1e40af; }
        .cd-badge-team { background: #dcfce7; color: #166534; }

        .cd-fallback {
            text-align: center;
            margin-top: 12vh;
        }

        [data-testid="stAlert"] {
            border-radius: 14px !important;
        }
    </style>
    """, unsafe_allow_html=True)


def format_currency(amount: float) -> str:
    """German EUR formatting: 1234.5 -> '1.234,50 €'."""
    text = f"{amount:,.2f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".") + " €"


def format_datetime(value: str) -> str:
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%d.%m.%Y %H:%M")


def type_badge(manager_type: str) -> str:
    css = "cd-badge-team" if manager_type == "team" else "cd-badge-live"
    return f'<span class="cd-badge {css}">{manager_type.upper()}</span>'


def update_chart_layout(fig):
    fig.update_layout(
        font=dict(family="Manrope, sans-serif", size=13),
        margin=dict(l=20, r=20, t=50, b=20),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        showlegend=False,
        xaxis=dict(showgrid=False, zeroline=False),
        yaxis=dict(showgrid=True, gridcolor="rgba(0,0,0,0.08)", zeroline=False),
    )
    return fig


def render_aggrid(df, height=400, sortable=True):
    if df.empty:
        st.info("No data to display")
        return

    gb = GridOptionsBuilder.from_dataframe(df)
    gb.configure_default_column(filterable=sortable, sortable=sortable, resizable=True, wrapText=True, autoHeight=True)

    for col in df.columns:
        is_num = pd.api.types.is_numeric_dtype(df[col])
        gb.configure_column(col, minWidth=90 if is_num else 150, flex=1 if is_num else 2)

    AgGrid(
        df,
        gridOptions=gb.build(),
        height=height,
        theme="balham",
        update_mode=GridUpdateMode.NO_UPDATE,
    )


def render_gate_fallback(title: str, message: str, action_label: str):
    """Static fallback page; returns True when the action button was pressed."""
    st.markdown(
        f'<div class="cd-fallback"><h2>{title}</h2><p>{message}</p></div>',
        unsafe_allow_html=True,
    )
    _, mid, _ = st.columns([2, 1, 2])
    return mid.button(action_label, type="primary", use_container_width=True)


def render_month_select(label="Month"):
    """Month picker over the last 12 periods; remembers the pick across pages."""
    options = generate_month_options()
    values = [o.value for o in options]
    labels = {o.value: o.label for o in options}
    current = st.session_state.get("selected_month") or values[0]
    index = values.index(current) if current in values else 0
    month = st.selectbox(label, values, index=index, format_func=lambda v: labels.get(v, v))
    st.session_state.selected_month = month
    return month


def render_load_error(state, key):
    """Inline load error with a dismiss control; data already shown stays put."""
    if not state.error:
        return
    msg_col, btn_col = st.columns([8, 1])
    msg_col.error(state.error)
    if btn_col.button("✕ Dismiss", key=f"dismiss_{key}", use_container_width=True):
        state.dismiss_error()
        st.rerun()
