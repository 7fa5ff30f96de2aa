from unittest.mock import MagicMock, patch

import pandas as pd

import ui
from use_cases.errors import ApiError
from use_cases.report_flow import ViewLoadState


def _failed_state():
    state = ViewLoadState(data=["kept"])
    state.fail(state.begin("202610"), ApiError(503, "Service unavailable"))
    return state


def test_format_currency():
    assert ui.format_currency(1234.5) == "1.234,50 €"
    assert ui.format_currency(0) == "0,00 €"


@patch("ui.st")
def test_load_error_not_drawn_without_error(mock_st):
    ui.render_load_error(ViewLoadState(), "reports:earnings")
    mock_st.columns.assert_not_called()


@patch("ui.st")
def test_load_error_shown_with_dismiss_control(mock_st):
    msg_col, btn_col = MagicMock(), MagicMock()
    btn_col.button.return_value = False
    mock_st.columns.return_value = (msg_col, btn_col)
    state = _failed_state()

    ui.render_load_error(state, "reports:earnings")

    msg_col.error.assert_called_once_with("Service unavailable")
    assert btn_col.button.call_args.kwargs["key"] == "dismiss_reports:earnings"
    assert state.error == "Service unavailable"
    mock_st.rerun.assert_not_called()


@patch("ui.st")
def test_dismissing_load_error_keeps_data(mock_st):
    msg_col, btn_col = MagicMock(), MagicMock()
    btn_col.button.return_value = True
    mock_st.columns.return_value = (msg_col, btn_col)
    state = _failed_state()

    ui.render_load_error(state, "reports:earnings")

    assert state.error is None
    assert state.data == ["kept"]
    mock_st.rerun.assert_called_once()


@patch("ui.AgGrid")
@patch("ui.st")
def test_render_aggrid_passes_height(mock_st, mock_grid):
    df = pd.DataFrame([{"Manager": "Ada", "Total": 15.0}])

    ui.render_aggrid(df, height=220, sortable=False)

    mock_grid.assert_called_once()
    assert mock_grid.call_args.kwargs["height"] == 220
    assert "allow_unsafe_jscode" not in mock_grid.call_args.kwargs
    mock_st.info.assert_not_called()


@patch("ui.AgGrid")
@patch("ui.st")
def test_render_aggrid_empty_frame_shows_info(mock_st, mock_grid):
    ui.render_aggrid(pd.DataFrame())
    mock_st.info.assert_called_once_with("No data to display")
    mock_grid.assert_not_called()
