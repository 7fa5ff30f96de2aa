"""Authorization gate shared by every protected page."""

from dataclasses import dataclass
from typing import Literal, Optional

from use_cases.session_store import SessionStore

GateState = Literal["LOADING", "UNAUTHENTICATED", "FORBIDDEN", "AUTHORIZED"]


@dataclass(frozen=True)
class GateResult:
    """Result contract for the gate: what to render and where the fallback points."""

    state: GateState
    reason: str
    fallback_page: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def authorized(self) -> bool:
        return self.state == "AUTHORIZED"


def evaluate_gate(store: SessionStore, admin_required: bool = False) -> GateResult:
    """Pure read of store state; the gate keeps nothing of its own."""
    if store.loading:
        return GateResult(state="LOADING", reason="session_check_pending")

    identity = store.identity
    if identity is None:
        return GateResult(state="UNAUTHENTICATED", reason="auth_required", fallback_page="login")

    if admin_required and identity.role != "admin":
        return GateResult(
            state="FORBIDDEN",
            reason="admin_required",
            fallback_page="dashboard",
            user_id=identity.id,
        )

    return GateResult(state="AUTHORIZED", reason="authenticated", user_id=identity.id)


def ensure_authorized(store: SessionStore, admin_required: bool = False) -> GateResult:
    """Resolve the session once per store lifetime, then evaluate the gate."""
    store.ensure_checked()
    return evaluate_gate(store, admin_required=admin_required)
