import logging
from typing import Any, Dict, List, Optional, Tuple

from infrastructure.http_client import ApiClient
from use_cases.domain_models import (
    EarningsRecord,
    GenealogyAssignment,
    PayoutRequest,
    UploadBatch,
    UploadResult,
)
from use_cases.session_models import Identity

log = logging.getLogger(__name__)

EXCEL_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class AuthApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, email: str, password: str) -> Tuple[str, Identity]:
        data = self.client.post(
            "/auth/login",
            json={"email": email, "password": password},
            expect_auth_failure=True,
        )
        return data["access_token"], Identity.from_api(data["user"])

    def me(self) -> Identity:
        return Identity.from_api(self.client.get("/auth/me"))

    def refresh(self) -> Tuple[str, Identity]:
        data = self.client.post("/auth/refresh")
        return data["access_token"], Identity.from_api(data["user"])


class ManagersApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_earnings(self, manager_id: str, month: str) -> Optional[EarningsRecord]:
        data = self.client.get(f"/managers/{manager_id}/earnings", params={"month": month})
        # No earnings for the month comes back as an empty body.
        return EarningsRecord.from_api(data) if data else None

    def get_all_earnings(self, month: str) -> List[EarningsRecord]:
        data = self.client.get("/managers/earnings", params={"month": month}) or []
        return [EarningsRecord.from_api(item) for item in data]

    def award_recruitment_bonus(
        self, manager_id: str, period: str, manager_type: str, description: Optional[str] = None
    ) -> Any:
        payload = {
            "managerId": manager_id,
            "period": period,
            "managerType": manager_type,
            "description": description or f"Recruitment bonus for {manager_type} manager",
        }
        return self.client.post("/managers/recruitment-bonus", json=payload)

    def request_payout(self, manager_id: str, period: str, amount: float) -> PayoutRequest:
        data = self.client.post(
            "/payouts",
            json={"managerId": manager_id, "period": period, "amount": round(amount, 2)},
        )
        return PayoutRequest.from_api(data)


class UploadsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def upload_excel(self, file_name: str, content: bytes, mime: str = EXCEL_MIME) -> UploadResult:
        log.info(f"Uploading {file_name} ({len(content)} bytes)")
        data = self.client.post("/uploads/excel", files={"file": (file_name, content, mime)})
        return UploadResult.from_api(data)

    def get_batches(self) -> List[UploadBatch]:
        data = self.client.get("/uploads/batches") or []
        return [UploadBatch.from_api(item) for item in data]

    def get_batch(self, batch_id: str) -> UploadBatch:
        return UploadBatch.from_api(self.client.get(f"/uploads/batches/{batch_id}"))


class GenealogyApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_all(self) -> List[GenealogyAssignment]:
        data = self.client.get("/genealogy") or []
        return [GenealogyAssignment.from_api(item) for item in data]

    def create(self, manager_id: str, parent_manager_id: str, level: str, commission_rate: float) -> GenealogyAssignment:
        data = self.client.post(
            "/genealogy",
            json={
                "managerId": manager_id,
                "parentManagerId": parent_manager_id,
                "level": level,
                "commissionRate": commission_rate,
            },
        )
        return GenealogyAssignment.from_api(data)

    def update(self, assignment_id: str, changes: Dict[str, Any]) -> GenealogyAssignment:
        return GenealogyAssignment.from_api(self.client.put(f"/genealogy/{assignment_id}", json=changes))

    def delete(self, assignment_id: str) -> None:
        self.client.delete(f"/genealogy/{assignment_id}")


class CommissionApi:
    """All endpoint groups bound to one client (and therefore one credential)."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.auth = AuthApi(client)
        self.managers = ManagersApi(client)
        self.uploads = UploadsApi(client)
        self.genealogy = GenealogyApi(client)
