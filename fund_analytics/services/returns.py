"""Trailing-period return calculation.

Algorithm:
    return_pct = (current_nav - past_nav) / past_nav * 100

Each lookback window is measured in calendar days back from the fund's own
latest NAV date, not from today, so data lag and market closures do not
shift the windows. The historical NAV is the latest observation on or before
that cutoff, and it must not be older than the cutoff by more than
max(lookback_days, STALENESS_FLOOR_DAYS). Since-inception uses the earliest
observation on record.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from fund_analytics.config import STALENESS_FLOOR_DAYS
from fund_analytics.models.fund import FundNav, FundProfile
from fund_analytics.services.errors import DataIntegrityError
from fund_analytics.services.fund_store import FundStore, gather_reads
from fund_analytics.services.timeseries import latest_on_or_before, lookback_cutoff

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = "insufficient data"
SINCE_INCEPTION = "inception"

_CENT = Decimal("0.01")


class ReturnStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    DATA_ERROR = "data_error"


@dataclass(frozen=True)
class ReturnWindow:
    label: str
    lookback_days: int

    @property
    def max_staleness_days(self) -> int:
        return max(self.lookback_days, STALENESS_FLOOR_DAYS)


RETURN_WINDOWS: tuple[ReturnWindow, ...] = (
    ReturnWindow("1w", 7),
    ReturnWindow("1m", 30),
    ReturnWindow("3m", 90),
    ReturnWindow("6m", 180),
    ReturnWindow("1y", 365),
)
ONE_YEAR = RETURN_WINDOWS[-1]


@dataclass(frozen=True)
class WindowReturn:
    """Outcome for one window. ``value`` is set only when status is OK."""

    label: str
    lookback_days: int | None  # None for since-inception
    status: ReturnStatus
    value: str | None = None
    base_date: date | None = None
    detail: str | None = None

    @property
    def display(self) -> str:
        if self.status is ReturnStatus.OK:
            return self.value
        if self.status is ReturnStatus.INSUFFICIENT_DATA:
            return INSUFFICIENT_DATA
        return f"error: {self.detail}"


def compute_return(current: Decimal, past: Decimal) -> str:
    """Percentage change from ``past`` to ``current``, e.g. ``"10.00%"``.

    Raises DataIntegrityError when ``past`` is zero or negative.
    """
    if past <= 0:
        raise DataIntegrityError(f"non-positive base NAV {past}")
    pct = ((current - past) / past * 100).quantize(_CENT, rounding=ROUND_HALF_UP)
    if pct.is_zero():
        pct = abs(pct)
    return f"{pct:f}%"


def _from_pair(
    label: str, lookback_days: int | None, latest: FundNav, past: FundNav
) -> WindowReturn:
    try:
        value = compute_return(latest.unit_nav, past.unit_nav)
    except DataIntegrityError as e:
        logger.error(f"Return {label} for fund {latest.fund_id} on {past.nav_date}: {e}")
        return WindowReturn(
            label, lookback_days, ReturnStatus.DATA_ERROR, base_date=past.nav_date, detail=str(e)
        )
    return WindowReturn(label, lookback_days, ReturnStatus.OK, value=value, base_date=past.nav_date)


async def window_return(
    store: FundStore, profile: FundProfile, latest: FundNav, window: ReturnWindow
) -> WindowReturn:
    cutoff = lookback_cutoff(latest.nav_date, window.lookback_days)
    if profile.nav_start_date is not None and cutoff < profile.nav_start_date:
        return WindowReturn(window.label, window.lookback_days, ReturnStatus.INSUFFICIENT_DATA)

    past = await latest_on_or_before(
        store, profile.id, cutoff, max_staleness_days=window.max_staleness_days
    )
    if past is None:
        return WindowReturn(window.label, window.lookback_days, ReturnStatus.INSUFFICIENT_DATA)
    return _from_pair(window.label, window.lookback_days, latest, past)


async def inception_return(store: FundStore, profile: FundProfile, latest: FundNav) -> WindowReturn:
    first = await store.earliest_nav(profile.id)
    if first is None:
        return WindowReturn(SINCE_INCEPTION, None, ReturnStatus.INSUFFICIENT_DATA)
    return _from_pair(SINCE_INCEPTION, None, latest, first)


async def calculate_period_returns(
    store: FundStore,
    profile: FundProfile,
    latest: FundNav | None,
    windows: tuple[ReturnWindow, ...] = RETURN_WINDOWS,
) -> list[WindowReturn]:
    """One entry per window, then since-inception. Never omits a window."""
    if latest is None:
        results = [
            WindowReturn(w.label, w.lookback_days, ReturnStatus.INSUFFICIENT_DATA) for w in windows
        ]
        results.append(WindowReturn(SINCE_INCEPTION, None, ReturnStatus.INSUFFICIENT_DATA))
        return results

    return await gather_reads(
        *(window_return(store, profile, latest, w) for w in windows),
        inception_return(store, profile, latest),
    )
