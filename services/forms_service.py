"""Client-side checks that run before any form is submitted."""

import os
from dataclasses import dataclass
from typing import Optional

from use_cases.domain_models import LEVEL_DEFAULT_RATES, RECRUITMENT_BONUS_AMOUNTS, EarningsRecord
from use_cases.errors import ValidationError
from use_cases.report_flow import is_valid_period

ALLOWED_UPLOAD_EXTENSIONS = (".xlsx", ".xls")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class BonusForm:
    manager_id: str
    period: str
    manager_type: str
    description: str = ""


@dataclass(frozen=True)
class GenealogyForm:
    manager_id: str
    parent_manager_id: str
    level: str
    commission_rate: float


def bonus_amount(manager_type: str) -> float:
    return RECRUITMENT_BONUS_AMOUNTS.get(manager_type, RECRUITMENT_BONUS_AMOUNTS["live"])


def default_rate(level: str) -> float:
    return LEVEL_DEFAULT_RATES[level]


def validate_bonus_form(
    manager_id: str, period: str, manager_type: str, description: Optional[str] = None
) -> BonusForm:
    manager_id = (manager_id or "").strip()
    if not manager_id or not period:
        raise ValidationError("manager_id" if not manager_id else "period", "Please fill in all required fields")
    if not is_valid_period(period):
        raise ValidationError("period", f"Invalid period: {period}")
    if manager_type not in RECRUITMENT_BONUS_AMOUNTS:
        raise ValidationError("manager_type", f"Unknown manager type: {manager_type}")
    description = (description or "").strip() or f"Recruitment bonus for {manager_type} manager"
    return BonusForm(manager_id=manager_id, period=period, manager_type=manager_type, description=description)


def validate_genealogy_form(
    manager_id: str, parent_manager_id: str, level: str, commission_rate: Optional[float]
) -> GenealogyForm:
    manager_id = (manager_id or "").strip()
    parent_manager_id = (parent_manager_id or "").strip()
    if not manager_id:
        raise ValidationError("manager_id", "Live manager ID is required")
    if not parent_manager_id:
        raise ValidationError("parent_manager_id", "Team manager ID is required")
    if manager_id == parent_manager_id:
        raise ValidationError("parent_manager_id", "A manager cannot be assigned to itself")
    if level not in LEVEL_DEFAULT_RATES:
        raise ValidationError("level", f"Unknown level: {level}")
    if commission_rate is None:
        raise ValidationError("commission_rate", "Commission rate is required")
    rate = float(commission_rate)
    if not 0 <= rate <= 100:
        raise ValidationError("commission_rate", "Commission rate must be between 0 and 100")
    return GenealogyForm(
        manager_id=manager_id,
        parent_manager_id=parent_manager_id,
        level=level,
        commission_rate=rate,
    )


def validate_payout(record: Optional[EarningsRecord]) -> float:
    if record is None:
        raise ValidationError("earnings", "No earnings loaded for this period")
    if record.total_earnings <= 0:
        raise ValidationError("amount", "Nothing to pay out for this period")
    return round(record.total_earnings, 2)


def validate_upload(file_name: Optional[str], size: int) -> str:
    if not file_name:
        raise ValidationError("file", "Please choose a file to upload")
    ext = os.path.splitext(file_name)[1].lower()
    if ext not in ALLOWED_UPLOAD_EXTENSIONS:
        raise ValidationError("file", "Only Excel files (.xlsx, .xls) can be uploaded")
    if size <= 0:
        raise ValidationError("file", "The selected file is empty")
    if size > MAX_UPLOAD_BYTES:
        raise ValidationError("file", "The selected file is larger than 10 MB")
    return file_name
