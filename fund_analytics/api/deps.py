"""FastAPI dependencies."""

from fund_analytics.models.database import async_session_factory
from fund_analytics.services.fund_store import FundStore

_store = FundStore(async_session_factory)


def get_store() -> FundStore:
    """Store handle for routes; tests override this dependency."""
    return _store
