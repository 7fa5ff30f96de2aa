"""Client-side error taxonomy.

Network and timeout failures are not wrapped: they surface as the original
``requests.RequestException`` so callers can decide whether to retry.
"""

from typing import Optional


class CommissionClientError(Exception):
    pass


class AuthenticationError(CommissionClientError):
    """Login rejected (bad credentials). Shown inline, no session change."""


class AuthorizationExpiredError(CommissionClientError):
    """A request came back 401. The credential has already been dropped."""


class ValidationError(CommissionClientError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class ApiError(CommissionClientError):
    def __init__(self, status_code: int, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.path = path
