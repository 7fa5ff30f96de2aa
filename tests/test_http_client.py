import threading
from unittest.mock import MagicMock

import pytest
import requests

from infrastructure.events import UNAUTHORIZED, EventBus
from infrastructure.http_client import ApiClient, CredentialHolder, FetchOutcome
from use_cases.client_context import build_client_context
from use_cases.errors import ApiError, AuthenticationError, AuthorizationExpiredError
from use_cases.session_models import Identity


def _response(status=200, body=None, content=b"{}"):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content if body is None else b"x"
    resp.json.return_value = body if body is not None else {}
    return resp


def _client(token="tok-1", responses=None):
    session = MagicMock()
    if responses is not None:
        session.request.side_effect = responses
    events = EventBus()
    client = ApiClient("http://api.test/", events, credentials=CredentialHolder(token), session=session)
    return client, session, events


def test_bearer_header_attached_when_credential_held():
    client, session, _ = _client(responses=[_response(body={"ok": True})])

    assert client.get("/auth/me") == {"ok": True}

    _, kwargs = session.request.call_args
    assert session.request.call_args.args[:2] == ("GET", "http://api.test/auth/me")
    assert kwargs["headers"]["Authorization"] == "Bearer tok-1"
    assert kwargs["timeout"] == 10.0


def test_no_authorization_header_without_credential():
    client, session, _ = _client(token=None, responses=[_response()])
    client.get("/health")
    assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_empty_and_no_content_responses_decode_to_none():
    client, _, _ = _client(responses=[_response(status=204, content=b""), _response(content=b"")])
    assert client.delete("/genealogy/1") is None
    assert client.get("/nothing") is None


def test_401_clears_credential_and_notifies_once_before_raising():
    client, _, events = _client(responses=[_response(status=401, body={"message": "Unauthorized"})])
    seen = []
    events.subscribe(UNAUTHORIZED, lambda **payload: seen.append((payload, client.has_credential)))

    with pytest.raises(AuthorizationExpiredError):
        client.get("/managers/earnings")

    # Subscriber already observed the cleared credential.
    assert seen == [({"path": "/managers/earnings"}, False)]
    assert client.credentials.token is None


def test_each_401_is_its_own_notification():
    client, _, events = _client(responses=[_response(status=401), _response(status=401)])
    seen = []
    events.subscribe(UNAUTHORIZED, lambda **payload: seen.append(payload["path"]))

    for path in ("/a", "/b"):
        with pytest.raises(AuthorizationExpiredError):
            client.get(path)

    assert seen == ["/a", "/b"]


def test_login_401_is_bad_credentials_not_expiry():
    client, _, events = _client(responses=[_response(status=401, body={"message": "Invalid credentials"})])
    seen = []
    events.subscribe(UNAUTHORIZED, lambda **payload: seen.append(payload))

    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        client.post("/auth/login", json={}, expect_auth_failure=True)

    assert seen == []
    assert client.credentials.token == "tok-1"


def test_other_failures_raise_api_error_and_keep_credential():
    client, _, _ = _client(responses=[_response(status=500, body={"message": ["bad", "worse"]})])

    with pytest.raises(ApiError) as excinfo:
        client.get("/managers/earnings")

    assert excinfo.value.status_code == 500
    assert excinfo.value.path == "/managers/earnings"
    assert str(excinfo.value) == "bad; worse"
    assert client.has_credential


def test_api_error_message_falls_back_when_body_is_not_json():
    resp = _response(status=502)
    resp.json.side_effect = ValueError("no json")
    client, _, _ = _client(responses=[resp])

    with pytest.raises(ApiError, match="HTTP 502"):
        client.get("/x")


def test_network_errors_propagate_unchanged():
    client, _, _ = _client(responses=requests.ConnectionError("down"))

    with pytest.raises(requests.ConnectionError):
        client.get("/x")
    assert client.has_credential


def test_fetch_all_isolates_failures():
    client, _, _ = _client()

    def boom():
        raise ApiError(500, "nope")

    outcomes = client.fetch_all({"a": lambda: 1, "b": boom})

    assert outcomes["a"] == FetchOutcome(value=1)
    assert not outcomes["b"].ok
    assert isinstance(outcomes["b"].error, ApiError)
    assert client.fetch_all({}) == {}


def test_401_while_three_calls_in_flight():
    ctx = build_client_context(base_url="http://api.test", timeout=5, session=MagicMock())
    ctx.store._set_session("tok-1", Identity("u1", "a@x.io", "Ada", "Admin", "admin"))
    release = threading.Event()
    sent_headers = []
    lock = threading.Lock()

    def fake_request(method, url, **kwargs):
        with lock:
            sent_headers.append((url, dict(kwargs["headers"])))
        if url.endswith("/expired"):
            return _response(status=401)
        release.wait(timeout=5)
        return _response(body={"url": url})

    ctx.client._session.request.side_effect = fake_request
    notifications = []
    ctx.events.subscribe(UNAUTHORIZED, lambda **payload: (notifications.append(payload), release.set()))

    api = ctx.client
    outcomes = api.fetch_all({
        "one": lambda: api.get("/one"),
        "two": lambda: api.get("/two"),
        "three": lambda: api.get("/three"),
        "expired": lambda: api.get("/expired"),
    })

    assert len(notifications) == 1
    assert isinstance(outcomes["expired"].error, AuthorizationExpiredError)
    for name in ("one", "two", "three"):
        assert outcomes[name].ok
        assert outcomes[name].value == {"url": f"http://api.test/{name}"}

    assert not ctx.store.is_authenticated
    assert ctx.store.take_redirect() == "login"

    api.get("/after")
    assert sent_headers[-1][0] == "http://api.test/after"
    assert "Authorization" not in sent_headers[-1][1]
