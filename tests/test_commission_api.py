from unittest.mock import MagicMock

import requests

import pytest

from infrastructure.commission_api import EXCEL_MIME, CommissionApi
from infrastructure.events import EventBus
from infrastructure.http_client import ApiClient, CredentialHolder
from use_cases.report_flow import ViewLoadState, load_into


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def api(client):
    return CommissionApi(client)


def test_login_posts_credentials_and_marks_auth_failure(api, client):
    client.post.return_value = {
        "access_token": "tok",
        "user": {"id": "u1", "email": "a@x.io", "firstName": "A", "lastName": "B", "role": "admin"},
    }

    token, identity = api.auth.login("a@x.io", "pw")

    client.post.assert_called_once_with(
        "/auth/login", json={"email": "a@x.io", "password": "pw"}, expect_auth_failure=True
    )
    assert token == "tok"
    assert identity.role == "admin"


def test_earnings_requests_carry_month(api, client):
    client.get.return_value = []
    assert api.managers.get_all_earnings("202610") == []
    client.get.assert_called_once_with("/managers/earnings", params={"month": "202610"})

    client.get.return_value = {"managerId": "m-1", "managerName": "Max", "period": "202610", "totalEarnings": 0}
    record = api.managers.get_earnings("m-1", "202610")
    client.get.assert_called_with("/managers/m-1/earnings", params={"month": "202610"})
    assert record.manager_id == "m-1"


def test_recruitment_bonus_default_description(api, client):
    api.managers.award_recruitment_bonus("m-1", "202610", "live")
    client.post.assert_called_once_with(
        "/managers/recruitment-bonus",
        json={
            "managerId": "m-1",
            "period": "202610",
            "managerType": "live",
            "description": "Recruitment bonus for live manager",
        },
    )


def test_payout_amount_is_rounded(api, client):
    client.post.return_value = {"id": "p-1", "managerId": "m-1", "period": "202610", "amount": 80.5}
    payout = api.managers.request_payout("m-1", "202610", 80.499999)
    assert client.post.call_args.kwargs["json"]["amount"] == 80.5
    assert payout.status == "pending"


def test_upload_excel_sends_multipart_file(api, client):
    client.post.return_value = {"success": True, "processedRows": 3}
    result = api.uploads.upload_excel("okt.xlsx", b"data")
    client.post.assert_called_once_with("/uploads/excel", files={"file": ("okt.xlsx", b"data", EXCEL_MIME)})
    assert result.processed_rows == 3


def test_genealogy_crud_paths(api, client):
    client.post.return_value = {"id": "g-1", "level": "A", "commissionRate": 10}
    client.put.return_value = {"id": "g-1", "level": "B", "commissionRate": 7.5}

    api.genealogy.create("l-1", "t-1", "A", 10.0)
    updated = api.genealogy.update("g-1", {"level": "B"})
    api.genealogy.delete("g-1")

    assert client.post.call_args.kwargs["json"]["parentManagerId"] == "t-1"
    client.put.assert_called_once_with("/genealogy/g-1", json={"level": "B"})
    client.delete.assert_called_once_with("/genealogy/g-1")
    assert updated.level == "B"


def test_missing_earnings_for_month_is_none(api, client):
    client.get.return_value = None
    assert api.managers.get_earnings("m-1", "202610") is None


def test_empty_earnings_response_leaves_view_idle():
    session = MagicMock(spec=requests.Session)
    resp = MagicMock()
    resp.status_code = 204
    resp.content = b""
    session.request.return_value = resp
    api = CommissionApi(ApiClient("http://api.test", EventBus(), credentials=CredentialHolder("tok"), session=session))
    state = ViewLoadState(data="previous")

    assert load_into(state, lambda: api.managers.get_earnings("m-1", "202610"), key="202610") is True
    assert state.data is None
    assert state.loading is False
    assert state.error is None


def test_batch_paths(api, client):
    client.get.return_value = [{"id": "b-1", "dataMonth": "202610", "originalFileName": "okt.xlsx"}]
    batches = api.uploads.get_batches()
    client.get.assert_called_once_with("/uploads/batches")
    assert batches[0].file_name == "okt.xlsx"

    client.get.return_value = {"id": "b-1", "dataMonth": "202610", "warnings": ["row 4: unknown manager"]}
    batch = api.uploads.get_batch("b-1")
    client.get.assert_called_with("/uploads/batches/b-1")
    assert batch.warnings == ("row 4: unknown manager",)
    assert batch.period == "202610"
