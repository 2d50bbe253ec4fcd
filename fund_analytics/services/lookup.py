"""Fund lookup by code, name fragment or manager fragment."""

import logging

from fund_analytics.config import DEFAULT_LOOKUP_LIMIT
from fund_analytics.models.fund import FundProfile
from fund_analytics.services.fund_store import FundFilter, FundStore

logger = logging.getLogger(__name__)


async def lookup_funds(
    store: FundStore,
    code: str | None = None,
    name: str | None = None,
    manager: str | None = None,
    limit: int = DEFAULT_LOOKUP_LIMIT,
) -> list[FundProfile]:
    """Return matching profiles ordered by code.

    ``code`` is matched exactly and case-sensitively. ``name`` matches either
    the full or short name, ``manager`` the manager, both as case-insensitive
    substrings. Filters combine with AND; with none given this browses the
    first ``limit`` funds. An empty list means nothing matched.
    """
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")
    filters = FundFilter(code=code, name=name, manager=manager)
    if filters.is_empty:
        logger.debug(f"No lookup filters, browsing first {limit} funds")
    return await store.query_profiles(filters, limit)
