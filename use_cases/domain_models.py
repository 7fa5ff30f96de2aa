import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple

log = logging.getLogger(__name__)

ManagerType = Literal["live", "team"]
GenealogyLevel = Literal["A", "B", "C"]
PayoutStatus = Literal["pending", "approved", "paid", "cancelled"]

LEVEL_DEFAULT_RATES: Dict[str, float] = {"A": 10.0, "B": 7.5, "C": 5.0}
RECRUITMENT_BONUS_AMOUNTS: Dict[str, float] = {"live": 50.0, "team": 60.0}

# Totals are server-computed; anything beyond a rounding cent is worth a warning.
TOTAL_TOLERANCE = 0.005


def _num(payload: Dict[str, Any], key: str) -> float:
    value = payload.get(key)
    return float(value) if value is not None else 0.0


@dataclass(frozen=True)
class MilestoneBreakdown:
    half_milestone: float = 0.0
    milestone1: float = 0.0
    milestone2: float = 0.0
    retention: float = 0.0
    total: float = 0.0

    @classmethod
    def from_api(cls, payload: Optional[Dict[str, Any]]) -> "MilestoneBreakdown":
        payload = payload or {}
        return cls(
            half_milestone=_num(payload, "halfMilestone"),
            milestone1=_num(payload, "milestone1"),
            milestone2=_num(payload, "milestone2"),
            retention=_num(payload, "retention"),
            total=_num(payload, "total"),
        )


@dataclass(frozen=True)
class EarningsRecord:
    """One manager's earnings for one period, exactly as the server computed them."""

    manager_id: str
    manager_name: str
    manager_type: ManagerType
    period: str
    base_commission: float = 0.0
    milestone_breakdown: MilestoneBreakdown = field(default_factory=MilestoneBreakdown)
    graduation_bonus: float = 0.0
    diamond_bonus: float = 0.0
    recruitment_bonus: float = 0.0
    downline_earnings: float = 0.0
    total_earnings: float = 0.0
    creator_count: int = 0
    total_revenue: float = 0.0

    @property
    def is_team(self) -> bool:
        return self.manager_type == "team"

    def expected_total(self) -> float:
        downline = self.downline_earnings if self.is_team else 0.0
        return (
            self.base_commission
            + self.milestone_breakdown.total
            + self.graduation_bonus
            + self.diamond_bonus
            + self.recruitment_bonus
            + downline
        )

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "EarningsRecord":
        milestones = payload.get("milestoneEarnings")
        if milestones is None:
            milestones = payload.get("milestoneBreakdown")
        record = cls(
            manager_id=str(payload.get("managerId", "")),
            manager_name=str(payload.get("managerName") or ""),
            manager_type=str(payload.get("managerType") or "live").lower(),
            period=str(payload.get("period") or ""),
            base_commission=_num(payload, "baseCommission"),
            milestone_breakdown=MilestoneBreakdown.from_api(milestones),
            graduation_bonus=_num(payload, "graduationBonus"),
            diamond_bonus=_num(payload, "diamondBonus"),
            recruitment_bonus=_num(payload, "recruitmentBonus"),
            downline_earnings=_num(payload, "downlineEarnings"),
            total_earnings=_num(payload, "totalEarnings"),
            creator_count=int(payload.get("creatorCount") or 0),
            total_revenue=_num(payload, "totalRevenue"),
        )
        if abs(record.expected_total() - record.total_earnings) > TOTAL_TOLERANCE:
            log.warning(
                f"Server total for manager {record.manager_id} ({record.period}) is "
                f"{record.total_earnings:.2f}, components add up to {record.expected_total():.2f}"
            )
        return record


@dataclass(frozen=True)
class ManagerRef:
    id: str
    name: str = ""
    type: str = ""

    @classmethod
    def from_api(cls, payload: Optional[Dict[str, Any]]) -> "ManagerRef":
        payload = payload or {}
        return cls(id=str(payload.get("id", "")), name=str(payload.get("name") or ""), type=str(payload.get("type") or ""))


@dataclass(frozen=True)
class GenealogyAssignment:
    id: str
    manager: ManagerRef
    parent_manager: ManagerRef
    level: GenealogyLevel
    commission_rate: float
    created_at: str = ""

    @property
    def default_rate(self) -> float:
        return LEVEL_DEFAULT_RATES[self.level]

    @property
    def has_custom_rate(self) -> bool:
        return self.commission_rate != self.default_rate

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "GenealogyAssignment":
        level = str(payload.get("level") or "A").upper()
        rate = payload.get("commissionRate")
        return cls(
            id=str(payload.get("id", "")),
            manager=ManagerRef.from_api(payload.get("manager")),
            parent_manager=ManagerRef.from_api(payload.get("parentManager")),
            level=level,
            commission_rate=float(rate) if rate is not None else LEVEL_DEFAULT_RATES.get(level, 0.0),
            created_at=str(payload.get("createdAt") or ""),
        )


@dataclass(frozen=True)
class UploadBatch:
    id: str
    period: str
    file_name: str = ""
    total_rows: int = 0
    processed_rows: int = 0
    skipped_rows: int = 0
    warnings: Tuple[str, ...] = ()
    new_creators_count: int = 0
    new_managers_count: int = 0
    transactions_created: int = 0
    created_at: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "UploadBatch":
        return cls(
            id=str(payload.get("id", "")),
            period=str(payload.get("dataMonth") or payload.get("period") or ""),
            file_name=str(payload.get("originalFileName") or payload.get("fileName") or ""),
            total_rows=int(payload.get("totalRows") or 0),
            processed_rows=int(payload.get("processedRows") or 0),
            skipped_rows=int(payload.get("skippedRows") or 0),
            warnings=tuple(str(w) for w in payload.get("warnings") or ()),
            new_creators_count=int(payload.get("newCreatorsCount") or 0),
            new_managers_count=int(payload.get("newManagersCount") or 0),
            transactions_created=int(payload.get("transactionsCreated") or 0),
            created_at=str(payload.get("createdAt") or ""),
        )


@dataclass(frozen=True)
class UploadResult:
    success: bool
    message: str = ""
    processed_rows: int = 0
    new_creators_count: int = 0
    new_managers_count: int = 0
    transactions_created: int = 0
    warnings: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, payload: Optional[Dict[str, Any]]) -> "UploadResult":
        payload = payload or {}
        return cls(
            success=bool(payload.get("success", True)),
            message=str(payload.get("message") or ""),
            processed_rows=int(payload.get("processedRows") or 0),
            new_creators_count=int(payload.get("newCreatorsCount") or 0),
            new_managers_count=int(payload.get("newManagersCount") or 0),
            transactions_created=int(payload.get("transactionsCreated") or 0),
            warnings=tuple(str(w) for w in payload.get("warnings") or ()),
        )


@dataclass(frozen=True)
class PayoutRequest:
    id: str
    manager_id: str
    period: str
    amount: float
    status: PayoutStatus = "pending"
    requested_at: str = ""

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "PayoutRequest":
        return cls(
            id=str(payload.get("id", "")),
            manager_id=str(payload.get("managerId", "")),
            period=str(payload.get("period") or ""),
            amount=_num(payload, "amount"),
            status=str(payload.get("status") or "pending"),
            requested_at=str(payload.get("requestedAt") or ""),
        )
