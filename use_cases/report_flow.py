"""Period selection and per-view load bookkeeping for report pages."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, List, Optional, TypeVar

import requests

from use_cases.errors import AuthorizationExpiredError, CommissionClientError

log = logging.getLogger(__name__)

T = TypeVar("T")

PERIOD_PATTERN = re.compile(r"^\d{4}(0[1-9]|1[0-2])$")
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
MONTH_OPTIONS_COUNT = 12


@dataclass(frozen=True)
class MonthOption:
    value: str
    label: str


def is_valid_period(period: Any) -> bool:
    return isinstance(period, str) and bool(PERIOD_PATTERN.match(period))


def format_period(period: str) -> str:
    """YYYYMM -> 'October 2026'; anything else is returned untouched."""
    if not is_valid_period(period):
        return period
    return f"{MONTH_NAMES[int(period[4:6]) - 1]} {period[:4]}"


def generate_month_options(now: Optional[datetime] = None, count: int = MONTH_OPTIONS_COUNT) -> List[MonthOption]:
    """The current month and the ones before it, newest first."""
    reference = now or datetime.now()
    year, month = reference.year, reference.month
    options = []
    for _ in range(count):
        period = f"{year:04d}{month:02d}"
        options.append(MonthOption(value=period, label=format_period(period)))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return options


def describe_failure(exc: BaseException) -> str:
    if isinstance(exc, AuthorizationExpiredError):
        return "Your session has expired. Please log in again."
    if isinstance(exc, CommissionClientError):
        return str(exc) or "Request failed."
    if isinstance(exc, requests.Timeout):
        return "The server did not respond in time. Please try again."
    if isinstance(exc, requests.RequestException):
        return "Could not reach the server. Check your connection and retry."
    return str(exc) or exc.__class__.__name__


class ViewLoadState(Generic[T]):
    """Data, loading flag and error of one view.

    Each load takes a ticket; only the newest ticket of a live view may write
    back, so a superseded or torn-down fetch never touches the view. Failures
    keep whatever data was already displayed.
    """

    def __init__(self, data: Optional[T] = None):
        self.data = data
        self.loading = False
        self.error: Optional[str] = None
        self.active = True
        self.requested_key: Any = None
        self._ticket = 0

    def begin(self, key: Any = None) -> int:
        self._ticket += 1
        self.requested_key = key
        self.loading = True
        self.error = None
        return self._ticket

    def _accepts(self, ticket: int) -> bool:
        if not self.active or ticket != self._ticket:
            log.debug(f"Discarding result of stale load #{ticket}")
            return False
        return True

    def resolve(self, ticket: int, data: T) -> bool:
        if not self._accepts(ticket):
            return False
        self.data = data
        self.loading = False
        return True

    def fail(self, ticket: int, exc: BaseException) -> bool:
        if not self._accepts(ticket):
            return False
        self.error = describe_failure(exc)
        self.loading = False
        return True

    def settle(self, ticket: int) -> None:
        """Clear the loading flag of the current load whatever its outcome."""
        if ticket == self._ticket:
            self.loading = False

    def dismiss_error(self) -> None:
        self.error = None

    def teardown(self) -> None:
        self.active = False
        self.loading = False


def load_into(state: ViewLoadState, fetch: Callable[[], Any], key: Any = None) -> bool:
    """Run ``fetch`` for ``state``; returns True when fresh data was applied.

    ``key`` records what was asked for (e.g. the period) so views can tell a
    new selection from a rerun without retrying failed loads on their own.
    """
    ticket = state.begin(key)
    try:
        data = fetch()
    except (CommissionClientError, requests.RequestException) as exc:
        log.warning(f"View load failed: {exc.__class__.__name__}: {exc}")
        state.fail(ticket, exc)
        return False
    finally:
        state.settle(ticket)
    return state.resolve(ticket, data)
