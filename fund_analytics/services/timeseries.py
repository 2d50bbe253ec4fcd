"""Point-in-time NAV resolution.

Markets are closed on weekends and holidays, so a NAV "as of" a date is the
most recent observation dated on or before it.
"""

from datetime import date, timedelta

from fund_analytics.models.fund import FundNav
from fund_analytics.services.fund_store import FundStore


def lookback_cutoff(latest_date: date, lookback_days: int) -> date:
    """Calendar-day cutoff for a window measured back from the latest NAV date."""
    return latest_date - timedelta(days=lookback_days)


async def latest_on_or_before(
    store: FundStore,
    fund_id: int,
    cutoff: date,
    max_staleness_days: int | None = None,
) -> FundNav | None:
    """Resolve the observation with the greatest date <= cutoff.

    With ``max_staleness_days`` an observation more than that many days older
    than the cutoff does not count. Returns None when nothing qualifies.
    """
    not_before = None
    if max_staleness_days is not None:
        not_before = cutoff - timedelta(days=max_staleness_days)
    return await store.latest_nav_on_or_before(fund_id, cutoff, not_before=not_before)
