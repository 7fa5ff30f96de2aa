"""Wiring of the per-browser-session objects."""

from dataclasses import dataclass
from typing import Optional

import requests

import config
from infrastructure.commission_api import CommissionApi
from infrastructure.events import EventBus
from infrastructure.http_client import ApiClient, CredentialHolder
from use_cases.session_store import SessionStore


@dataclass(frozen=True)
class ClientContext:
    events: EventBus
    client: ApiClient
    api: CommissionApi
    store: SessionStore


def build_client_context(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    token: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> ClientContext:
    """One event bus, one credential, one client, one store; all passed by reference."""
    events = EventBus()
    client = ApiClient(
        base_url or config.get_api_base_url(),
        events,
        credentials=CredentialHolder(token),
        timeout=timeout if timeout is not None else config.get_api_timeout(),
        session=session,
    )
    api = CommissionApi(client)
    store = SessionStore(api, events)
    return ClientContext(events=events, client=client, api=api, store=store)
