import os
import logging

import streamlit as st
import toml

log = logging.getLogger(__name__)

SECRETS_FILE = ".streamlit/secrets.toml"
DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_API_TIMEOUT = 10.0

_file_secrets = None


def _load_file_secrets():
    # Scripts and tests run outside `streamlit run`, where st.secrets is empty.
    global _file_secrets
    if _file_secrets is None:
        try:
            _file_secrets = toml.load(SECRETS_FILE)
        except (FileNotFoundError, toml.TomlDecodeError):
            _file_secrets = {}
    return _file_secrets


def get_secret(key, default=None):
    try:
        value = st.secrets.get(key)
    except FileNotFoundError:
        value = None
    if value is None:
        value = os.getenv(key)
    if value is None:
        value = _load_file_secrets().get(key)
    return value if value is not None else default


def get_api_base_url() -> str:
    return str(get_secret("COMMISSION_API_URL", DEFAULT_API_URL)).rstrip("/")


def get_api_timeout() -> float:
    raw = get_secret("COMMISSION_API_TIMEOUT")
    if raw is None:
        return DEFAULT_API_TIMEOUT
    try:
        return float(raw)
    except (TypeError, ValueError):
        log.warning(f"Invalid COMMISSION_API_TIMEOUT={raw!r}, using {DEFAULT_API_TIMEOUT}s")
        return DEFAULT_API_TIMEOUT
