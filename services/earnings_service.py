import locale
import logging
import unicodedata
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Any, Callable, List, Optional, Sequence, Tuple

import pandas as pd

from use_cases.domain_models import EarningsRecord

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Manager Name",
    "Type",
    "Total Earnings",
    "Base Commission",
    "Milestone Total",
    "Graduation Bonus",
    "Diamond Bonus",
    "Recruitment Bonus",
    "Downline Earnings",
    "Creator Count",
    "Total Revenue",
]


@dataclass(frozen=True)
class EarningsSummary:
    total_earnings: float = 0.0
    total_revenue: float = 0.0
    total_creators: int = 0
    manager_count: int = 0


def aggregate(records: Sequence[EarningsRecord]) -> EarningsSummary:
    total_earnings = 0.0
    total_revenue = 0.0
    total_creators = 0
    for record in records:
        total_earnings += record.total_earnings
        total_revenue += record.total_revenue
        total_creators += record.creator_count
    return EarningsSummary(
        total_earnings=total_earnings,
        total_revenue=total_revenue,
        total_creators=total_creators,
        manager_count=len(records),
    )


# --- SORTING ---

def collation_key(value: str) -> str:
    """Case- and accent-insensitive key, ordered by the process locale."""
    folded = unicodedata.normalize("NFKD", value.casefold())
    stripped = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return locale.strxfrm(stripped)


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class SortField(Enum):
    MANAGER_NAME = ("managerName", "Manager", True, lambda r: r.manager_name)
    MANAGER_TYPE = ("managerType", "Type", True, lambda r: r.manager_type)
    TOTAL_EARNINGS = ("totalEarnings", "Total Earnings", False, lambda r: r.total_earnings)
    BASE_COMMISSION = ("baseCommission", "Base Commission", False, lambda r: r.base_commission)
    CREATOR_COUNT = ("creatorCount", "Creators", False, lambda r: r.creator_count)
    TOTAL_REVENUE = ("totalRevenue", "Revenue", False, lambda r: r.total_revenue)

    def __init__(self, key: str, label: str, is_text: bool, extract: Callable[[EarningsRecord], Any]):
        self.key = key
        self.label = label
        self.is_text = is_text
        self.extract = extract

    def sort_key(self, record: EarningsRecord) -> Any:
        value = self.extract(record)
        return collation_key(value) if self.is_text else value

    @classmethod
    def from_key(cls, key: str) -> "SortField":
        for member in cls:
            if member.key == key:
                return member
        raise ValueError(f"Not a sortable field: {key!r}")


@dataclass(frozen=True)
class SortState:
    field: SortField = SortField.TOTAL_EARNINGS
    direction: SortDirection = SortDirection.DESC

    def toggle(self, field: SortField) -> "SortState":
        if field is self.field:
            return SortState(field=field, direction=self.direction.flipped())
        return SortState(field=field, direction=SortDirection.DESC)


def sort_records(records: Sequence[EarningsRecord], state: SortState) -> List[EarningsRecord]:
    """Stable sort of the received list; equal keys keep their received order."""
    # `reverse=True` keeps equal elements in their original order as well.
    return sorted(
        records,
        key=state.field.sort_key,
        reverse=state.direction is SortDirection.DESC,
    )


# --- BREAKDOWN ---

def bonus_total(record: EarningsRecord) -> float:
    return (
        record.milestone_breakdown.total
        + record.graduation_bonus
        + record.diamond_bonus
        + record.recruitment_bonus
    )


def breakdown_items(record: EarningsRecord) -> List[Tuple[str, float]]:
    """Chart components of one record; zeros dropped, downline only for team managers."""
    milestones = record.milestone_breakdown
    items = [
        ("Base Commission", record.base_commission),
        ("Half-Milestone", milestones.half_milestone),
        ("Milestone 1", milestones.milestone1),
        ("Milestone 2", milestones.milestone2),
        ("Retention", milestones.retention),
        ("Graduation", record.graduation_bonus),
        ("Diamond", record.diamond_bonus),
        ("Recruitment", record.recruitment_bonus),
    ]
    if record.is_team and record.downline_earnings > 0:
        items.append(("Downline", record.downline_earnings))
    return [(name, value) for name, value in items if value > 0]


# --- EXPORT ---

def _money(value: float) -> str:
    return f"{value:.2f}"


def export_rows(records: Sequence[EarningsRecord]) -> List[List[str]]:
    return [
        [
            r.manager_name,
            r.manager_type.upper(),
            _money(r.total_earnings),
            _money(r.base_commission),
            _money(r.milestone_breakdown.total),
            _money(r.graduation_bonus),
            _money(r.diamond_bonus),
            _money(r.recruitment_bonus),
            _money(r.downline_earnings),
            str(r.creator_count),
            _money(r.total_revenue),
        ]
        for r in records
    ]


def to_dataframe(records: Sequence[EarningsRecord]) -> pd.DataFrame:
    """Export table in on-screen order; every cell already formatted as text."""
    return pd.DataFrame(export_rows(records), columns=EXPORT_COLUMNS, dtype=str)


def export_csv(records: Sequence[EarningsRecord]) -> str:
    """CSV of the records in the order given; pass the sorted view, not the raw list."""
    return to_dataframe(records).to_csv(index=False, lineterminator="\n")


def export_filename(period: str, extension: str = "csv") -> str:
    return f"manager-earnings-{period}.{extension}"


def export_excel(records: Sequence[EarningsRecord]) -> Optional[bytes]:
    output = BytesIO()
    try:
        numeric = pd.DataFrame(
            [
                {
                    "Manager Name": r.manager_name,
                    "Type": r.manager_type.upper(),
                    "Total Earnings": round(r.total_earnings, 2),
                    "Base Commission": round(r.base_commission, 2),
                    "Milestone Total": round(r.milestone_breakdown.total, 2),
                    "Graduation Bonus": round(r.graduation_bonus, 2),
                    "Diamond Bonus": round(r.diamond_bonus, 2),
                    "Recruitment Bonus": round(r.recruitment_bonus, 2),
                    "Downline Earnings": round(r.downline_earnings, 2),
                    "Creator Count": r.creator_count,
                    "Total Revenue": round(r.total_revenue, 2),
                }
                for r in records
            ],
            columns=EXPORT_COLUMNS,
        )
        with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
            numeric.to_excel(writer, index=False, sheet_name="Earnings")
            workbook = writer.book
            worksheet = writer.sheets["Earnings"]

            fmt_header = workbook.add_format({"bold": True, "bg_color": "#D3D3D3", "border": 1, "align": "center"})
            fmt_money = workbook.add_format({"num_format": "#,##0.00 €"})
            fmt_int = workbook.add_format({"num_format": "0"})

            for col_num, value in enumerate(numeric.columns.values):
                worksheet.write(0, col_num, value, fmt_header)
            for i, col in enumerate(numeric.columns):
                if col == "Manager Name":
                    worksheet.set_column(i, i, 32)
                elif col == "Type":
                    worksheet.set_column(i, i, 8)
                elif col == "Creator Count":
                    worksheet.set_column(i, i, 12, fmt_int)
                else:
                    worksheet.set_column(i, i, 16, fmt_money)
    except Exception as e:
        logger.exception("Excel export failed: %s", e)
        return None
    return output.getvalue()
