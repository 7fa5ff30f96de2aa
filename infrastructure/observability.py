"""
Centralized Observability Infrastructure.
Provides structured logging setup and Sentry SDK initialization
governed by environment variables / Streamlit secrets.
"""

import logging
import re
from typing import Any, Dict

import sentry_sdk

import config

log = logging.getLogger(__name__)

# Patterns to scrub in Sentry events
BEARER_PATTERN = re.compile(r"(Bearer\s+)[^\s'\"]+", re.IGNORECASE)
SENSITIVE_PATTERNS = [
    re.compile(r"([a-zA-Z0-9_\-]{10,}\.[a-zA-Z0-9_\-]{10,}\.[a-zA-Z0-9_\-]{10,})"),  # JWT-looking strings
    re.compile(r"([a-zA-Z0-9_\-]{40,})"),
]
SENSITIVE_KEYS = {"password", "access_token", "token", "authorization", "credential"}

_configured = False


def _mask_string(val: str) -> str:
    val = BEARER_PATTERN.sub(r"\1[REDACTED]", val)
    for pattern in SENSITIVE_PATTERNS:
        val = pattern.sub("[REDACTED]", val)
    return val


def _recursive_scrub(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: "[REDACTED]" if str(k).lower() in SENSITIVE_KEYS else _recursive_scrub(v)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_recursive_scrub(i) for i in obj]
    if isinstance(obj, str):
        return _mask_string(obj)
    return obj


def _scrub_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sentry before_send hook. Scrubs bearer tokens and passwords from
    stack frame locals, request headers and breadcrumbs before they leave the process.
    """
    if "exception" in event and "values" in event["exception"]:
        for exc in event["exception"]["values"]:
            for frame in exc.get("stacktrace", {}).get("frames", []):
                if "vars" in frame:
                    frame["vars"] = _recursive_scrub(frame["vars"])
    if "request" in event:
        event["request"] = _recursive_scrub(event["request"])
    if "breadcrumbs" in event:
        event["breadcrumbs"] = _recursive_scrub(event["breadcrumbs"])
    return event


def setup_observability() -> None:
    """
    Initializes global logging and Sentry (if a DSN is configured).
    Safe to call on every Streamlit rerun; only the first call does work.
    """
    global _configured
    if _configured:
        return

    log_level_str = str(config.get_secret("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    sentry_dsn = config.get_secret("SENTRY_DSN")
    if sentry_dsn:
        sentry_env = config.get_secret("SENTRY_ENV", "development")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=sentry_env,
            traces_sample_rate=1.0,
            send_default_pii=False,
            before_send=_scrub_sensitive_data
        )
        log.info(f"Sentry SDK initialized (env: {sentry_env})")
    else:
        log.info("SENTRY_DSN not provided. Running without Sentry.")

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    _configured = True


def tag_user(user_id: str, role: str) -> None:
    """Attach the current user to Sentry events (no-op without a client)."""
    if sentry_sdk.get_client().is_active():
        sentry_sdk.set_user({"id": user_id, "role": role})
