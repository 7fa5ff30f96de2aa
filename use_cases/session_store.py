"""Single source of truth for the logged-in identity and its bearer credential."""

import logging
import threading
from typing import Optional

from infrastructure.commission_api import CommissionApi
from infrastructure.events import UNAUTHORIZED, EventBus
from use_cases.errors import ApiError, AuthenticationError, ValidationError
from use_cases.session_models import Identity, is_admin, is_manager

log = logging.getLogger(__name__)

LOGIN_PAGE = "login"
LANDING_PAGES = {"admin": "admin", "manager": "dashboard"}


class SessionStore:
    """Owns identity + credential and keeps them paired.

    The credential itself lives in the client's ``CredentialHolder`` so the
    HTTP boundary reads the same value the store writes. Identity and
    credential are only ever written together under ``_lock``.
    """

    def __init__(self, api: CommissionApi, events: EventBus):
        self._api = api
        self._credentials = api.client.credentials
        self._identity: Optional[Identity] = None
        self._loading = True
        self._checked = False
        self._redirect: Optional[str] = None
        self._lock = threading.RLock()
        self._unsubscribe = events.subscribe(UNAUTHORIZED, self._on_unauthorized)

    # --- derived state ----------------------------------------------------

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def is_admin(self) -> bool:
        return is_admin(self._identity)

    @property
    def is_manager(self) -> bool:
        return is_manager(self._identity)

    @property
    def credential(self) -> Optional[str]:
        return self._credentials.token

    # --- writes -----------------------------------------------------------

    def _set_session(self, token: Optional[str], identity: Optional[Identity]) -> None:
        with self._lock:
            if token and identity is not None:
                self._credentials.set(token)
                self._identity = identity
            else:
                self._credentials.clear()
                self._identity = None

    def check_session(self) -> Optional[Identity]:
        """Resolve the identity behind the held credential. Never raises."""
        identity = None
        token = self._credentials.token
        if token is not None:
            try:
                identity = self._api.auth.me()
            except Exception as exc:
                log.info(f"Session check failed ({exc.__class__.__name__}), continuing unauthenticated")
        with self._lock:
            self._set_session(token if identity is not None else None, identity)
            self._loading = False
            self._checked = True
        return identity

    def ensure_checked(self) -> None:
        if not self._checked:
            self.check_session()

    def login(self, email: str, password: str) -> Identity:
        email = (email or "").strip()
        if not email:
            raise ValidationError("email", "Email is required.")
        if not password:
            raise ValidationError("password", "Password is required.")

        try:
            token, identity = self._api.auth.login(email, password)
        except AuthenticationError:
            log.info("Login rejected")
            raise
        except ApiError as exc:
            raise AuthenticationError(str(exc) or "Login failed") from exc
        except (KeyError, ValueError, TypeError) as exc:
            raise AuthenticationError("Login failed: unexpected response from server") from exc
        if not token:
            raise AuthenticationError("Login failed: no access token returned")

        with self._lock:
            self._set_session(token, identity)
            self._loading = False
            self._checked = True
            self._redirect = LANDING_PAGES[identity.role]
        log.info(f"✅ Logged in as {identity.role} (user {identity.id})")
        return identity

    def refresh(self) -> Identity:
        """Swap in a fresh token; failures propagate (a 401 ends the session)."""
        try:
            token, identity = self._api.auth.refresh()
        except (KeyError, ValueError, TypeError) as exc:
            raise ApiError(200, "Unexpected refresh response", path="/auth/refresh") from exc
        self._set_session(token, identity)
        return identity

    def logout(self) -> None:
        with self._lock:
            was_authenticated = self._identity is not None
            self._set_session(None, None)
            self._redirect = LOGIN_PAGE
        if was_authenticated:
            log.info("Logged out")

    def _on_unauthorized(self, **_payload) -> None:
        log.warning("Session expired on the server, logging out")
        self.logout()

    # --- navigation side effect ---------------------------------------------

    def take_redirect(self) -> Optional[str]:
        """Pop the page the router should switch to, if any."""
        with self._lock:
            target, self._redirect = self._redirect, None
        return target

    def teardown(self) -> None:
        self._unsubscribe()
