from unittest.mock import MagicMock, patch

from use_cases import bootstrap
from use_cases.client_context import build_client_context


def _response(body):
    resp = MagicMock()
    resp.status_code = 200
    resp.content = b"x"
    resp.json.return_value = body
    return resp


def _fresh_state(ctx=None):
    state = bootstrap.session_manager.st.session_state
    state.clear()
    if ctx is not None:
        state.client_ctx = ctx
    return state


@patch("use_cases.bootstrap.observability.setup_observability")
def test_run_startup_without_credential_stays_on_login(mock_setup) -> None:
    ctx = build_client_context(base_url="http://api.test", timeout=1, session=MagicMock())
    state = _fresh_state(ctx)

    result = bootstrap.run_startup()

    assert result.status == "CONTINUE"
    assert result.planned_steps == (
        "setup_observability",
        "init_session_state",
        "build_client_context",
        "check_session",
    )
    mock_setup.assert_called_once()
    assert state.page == "login"
    assert not ctx.store.loading
    ctx.client._session.request.assert_not_called()


@patch("use_cases.bootstrap.observability.setup_observability")
def test_run_startup_restores_session_and_redirects_to_landing(_mock_setup) -> None:
    session = MagicMock()
    session.request.return_value = _response(
        {"id": "u1", "email": "a@x.io", "firstName": "A", "lastName": "B", "role": "admin"}
    )
    ctx = build_client_context(base_url="http://api.test", timeout=1, token="tok", session=session)
    state = _fresh_state(ctx)

    result = bootstrap.run_startup()

    assert "redirect_to_landing" in result.planned_steps
    assert state.page == "admin"
    assert ctx.store.is_admin


@patch("use_cases.bootstrap.observability.setup_observability")
def test_run_startup_checks_session_only_once(_mock_setup) -> None:
    ctx = build_client_context(base_url="http://api.test", timeout=1, session=MagicMock())
    _fresh_state(ctx)

    bootstrap.run_startup()
    second = bootstrap.run_startup()

    assert "check_session" not in second.planned_steps


@patch("use_cases.bootstrap.observability.setup_observability")
def test_init_happens_before_session_check(_mock_setup) -> None:
    order = []
    ctx = build_client_context(base_url="http://api.test", timeout=1, session=MagicMock())
    _fresh_state(ctx)
    real_init = bootstrap.session_manager.init_session_state

    def track_init():
        order.append("init_session_state")
        real_init()

    with patch("use_cases.bootstrap.session_manager.init_session_state", side_effect=track_init), patch.object(
        ctx.store, "ensure_checked", side_effect=lambda: order.append("check_session")
    ):
        bootstrap.run_startup()

    assert order[0] == "init_session_state"
    assert order.index("init_session_state") < order.index("check_session")
    assert order.count("check_session") == 1
