"""Application layer contracts shared by views, services and infrastructure.

Only dependency-free modules are re-exported here; the session store, gate and
bootstrap are imported from their own modules since they pull in the HTTP layer.
"""

from .domain_models import EarningsRecord, GenealogyAssignment, MilestoneBreakdown, PayoutRequest, UploadBatch, UploadResult
from .errors import ApiError, AuthenticationError, AuthorizationExpiredError, CommissionClientError, ValidationError
from .report_flow import MonthOption, ViewLoadState, format_period, generate_month_options, load_into
from .session_models import Identity, Role, is_admin, is_manager

__all__ = [
    "ApiError",
    "AuthenticationError",
    "AuthorizationExpiredError",
    "CommissionClientError",
    "EarningsRecord",
    "GenealogyAssignment",
    "Identity",
    "MilestoneBreakdown",
    "MonthOption",
    "PayoutRequest",
    "Role",
    "UploadBatch",
    "UploadResult",
    "ValidationError",
    "ViewLoadState",
    "format_period",
    "generate_month_options",
    "is_admin",
    "is_manager",
    "load_into",
]
