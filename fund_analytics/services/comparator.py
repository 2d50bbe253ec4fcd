"""Side-by-side comparison of several funds.

Each code is resolved independently and concurrently. A code that matches no
fund, or whose data is unusable, only affects its own entry; a store outage
fails the whole comparison.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from fund_analytics.config import COMPARE_MAX_CODES, COMPARE_MIN_CODES
from fund_analytics.services.errors import DataIntegrityError
from fund_analytics.services.fund_store import FundStore, gather_reads
from fund_analytics.services.returns import ONE_YEAR, ReturnStatus, window_return
from fund_analytics.services.timeseries import latest_on_or_before

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonEntry:
    code: str
    found: bool
    name: str | None = None
    manager: str | None = None
    risk_level: int | None = None
    latest_nav: Decimal | None = None
    nav_date: date | None = None
    year_return: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ComparisonResult:
    entries: list[ComparisonEntry]  # one per requested code, in request order

    @property
    def resolved(self) -> list[ComparisonEntry]:
        return [e for e in self.entries if e.found]

    @property
    def unresolved_codes(self) -> list[str]:
        return [e.code for e in self.entries if not e.found]


async def _compare_one(store: FundStore, code: str, cutoff: date) -> ComparisonEntry:
    try:
        profile = await store.get_profile_by_code(code)
    except DataIntegrityError as e:
        return ComparisonEntry(code=code, found=False, error=str(e))
    if profile is None:
        return ComparisonEntry(code=code, found=False)

    entry = dict(
        code=profile.code,
        found=True,
        name=profile.short_name or profile.name,
        manager=profile.manager,
        risk_level=profile.risk_level,
    )
    latest = await latest_on_or_before(store, profile.id, cutoff)
    if latest is None:
        return ComparisonEntry(**entry)

    one_year = await window_return(store, profile, latest, ONE_YEAR)
    return ComparisonEntry(
        **entry,
        latest_nav=latest.unit_nav,
        nav_date=latest.nav_date,
        year_return=one_year.value,
        error=one_year.detail if one_year.status is ReturnStatus.DATA_ERROR else None,
    )


async def compare_funds(
    store: FundStore, codes: list[str], as_of: date | None = None
) -> ComparisonResult:
    if not COMPARE_MIN_CODES <= len(codes) <= COMPARE_MAX_CODES:
        raise ValueError(
            f"compare needs {COMPARE_MIN_CODES} to {COMPARE_MAX_CODES} codes, got {len(codes)}"
        )
    cutoff = as_of or date.today()
    entries = await gather_reads(*(_compare_one(store, code, cutoff) for code in codes))
    result = ComparisonResult(entries=entries)
    logger.info(
        f"Compared {len(codes)} funds: {len(result.resolved)} resolved, "
        f"{len(result.unresolved_codes)} unresolved"
    )
    return result
