"""Latest NAV, trailing returns and recent trend for one fund."""

import logging
from dataclasses import dataclass, field
from datetime import date

from fund_analytics.config import RECENT_NAV_COUNT
from fund_analytics.models.fund import FundNav, FundProfile
from fund_analytics.services.fund_store import FundStore, gather_reads
from fund_analytics.services.returns import WindowReturn, calculate_period_returns
from fund_analytics.services.timeseries import latest_on_or_before

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavReport:
    profile: FundProfile
    latest: FundNav | None
    returns: list[WindowReturn] = field(default_factory=list)
    recent: list[FundNav] = field(default_factory=list)  # newest first
    total_records: int = 0

    @property
    def has_data(self) -> bool:
        return self.latest is not None


async def get_nav_and_returns(
    store: FundStore, code: str, as_of: date | None = None
) -> NavReport | None:
    """Build the NAV report for ``code`` as of ``as_of`` (default today).

    Returns None when no fund has that code. A fund without any observation
    on or before the cutoff yields a report with ``latest`` set to None.
    """
    profile = await store.get_profile_by_code(code)
    if profile is None:
        return None

    cutoff = as_of or date.today()
    latest = await latest_on_or_before(store, profile.id, cutoff)
    if latest is None:
        logger.info(f"Fund {code} has no NAV on or before {cutoff}")
        returns = await calculate_period_returns(store, profile, None)
        return NavReport(profile=profile, latest=None, returns=returns)

    returns, recent, total = await gather_reads(
        calculate_period_returns(store, profile, latest),
        store.recent_navs(profile.id, cutoff, RECENT_NAV_COUNT),
        store.nav_record_count(profile.id),
    )
    return NavReport(
        profile=profile,
        latest=latest,
        returns=returns,
        recent=recent,
        total_records=total,
    )
