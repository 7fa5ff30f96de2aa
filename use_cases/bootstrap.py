"""Startup orchestration for one browser session."""

from dataclasses import dataclass
from typing import Literal, Tuple

from infrastructure import observability
from utils import session_manager

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


def run_startup() -> StartupResult:
    """Configure logging, wire the session objects and resolve the session once."""
    executed_steps = []

    observability.setup_observability()
    executed_steps.append("setup_observability")

    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    store = session_manager.get_store()
    executed_steps.append("build_client_context")

    if store.loading:
        store.ensure_checked()
        executed_steps.append("check_session")
        if store.is_authenticated and session_manager.st.session_state.page == "login":
            session_manager.navigate("admin" if store.is_admin else "dashboard")
            executed_steps.append("redirect_to_landing")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
