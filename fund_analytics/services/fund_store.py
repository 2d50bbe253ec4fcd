"""Read access to fund profiles and NAV observations.

Every read runs in its own session so independent reads of one request can be
awaited concurrently. Each read carries a timeout and is retried with
exponential backoff on connectivity failures; once the budget is spent the
failure surfaces as StoreUnavailable.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable

from sqlalchemy import func, or_, select
from sqlalchemy.exc import DBAPIError, InterfaceError, MultipleResultsFound, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fund_analytics.config import (
    STORE_QUERY_TIMEOUT,
    STORE_RETRY_ATTEMPTS,
    STORE_RETRY_BACKOFF,
    STORE_RETRY_MAX_BACKOFF,
)
from fund_analytics.models.fund import FundNav, FundProfile
from fund_analytics.services.errors import DataIntegrityError, StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FundFilter:
    """Optional lookup criteria, combined with AND. Empty strings count as absent."""

    code: str | None = None
    name: str | None = None
    manager: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.code or self.name or self.manager)

    def conditions(self) -> list[Any]:
        clauses = []
        if self.code:
            clauses.append(FundProfile.code == self.code)
        if self.name:
            clauses.append(
                or_(
                    FundProfile.name.icontains(self.name, autoescape=True),
                    FundProfile.short_name.icontains(self.name, autoescape=True),
                )
            )
        if self.manager:
            clauses.append(FundProfile.manager.icontains(self.manager, autoescape=True))
        return clauses


def _is_connectivity_error(exc: DBAPIError) -> bool:
    return isinstance(exc, (OperationalError, InterfaceError)) or exc.connection_invalidated


class FundStore:
    """Read-only handle over the fund tables."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = STORE_QUERY_TIMEOUT,
        attempts: int = STORE_RETRY_ATTEMPTS,
        backoff: float = STORE_RETRY_BACKOFF,
    ):
        self._session_factory = session_factory
        self._timeout = timeout
        self._attempts = max(1, attempts)
        self._backoff = backoff

    async def _run(self, query: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
        async with self._session_factory() as session:
            return await query(session)

    async def _read(self, op: str, query: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
        last_error: Exception | None = None
        for attempt in range(self._attempts):
            try:
                return await asyncio.wait_for(self._run(query), timeout=self._timeout)
            except MultipleResultsFound as e:
                logger.error(f"{op}: uniqueness violated: {e}")
                raise DataIntegrityError(f"{op}: expected at most one row") from e
            except DBAPIError as e:
                if not _is_connectivity_error(e):
                    raise
                last_error = e
            except asyncio.TimeoutError as e:
                last_error = e

            if attempt + 1 < self._attempts:
                delay = min(self._backoff * 2**attempt, STORE_RETRY_MAX_BACKOFF)
                logger.warning(
                    f"{op} failed (attempt {attempt + 1}/{self._attempts}): "
                    f"{last_error!r}, retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        logger.error(f"{op} failed after {self._attempts} attempts: {last_error!r}")
        raise StoreUnavailable(f"{op} failed: fund store unavailable") from last_error

    async def query_profiles(self, filters: FundFilter, limit: int) -> list[FundProfile]:
        stmt = (
            select(FundProfile)
            .where(*filters.conditions())
            .order_by(FundProfile.code)
            .limit(limit)
        )

        async def query(session: AsyncSession) -> list[FundProfile]:
            result = await session.execute(stmt)
            return list(result.scalars().all())

        return await self._read("query_profiles", query)

    async def get_profile_by_code(self, code: str) -> FundProfile | None:
        stmt = select(FundProfile).where(FundProfile.code == code)

        async def query(session: AsyncSession) -> FundProfile | None:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

        return await self._read("get_profile_by_code", query)

    async def latest_nav_on_or_before(
        self, fund_id: int, cutoff: date, not_before: date | None = None
    ) -> FundNav | None:
        """Return the observation with the greatest date <= cutoff.

        With ``not_before``, observations dated earlier than it are ignored.
        """
        stmt = select(FundNav).where(FundNav.fund_id == fund_id, FundNav.nav_date <= cutoff)
        if not_before is not None:
            stmt = stmt.where(FundNav.nav_date >= not_before)
        stmt = stmt.order_by(FundNav.nav_date.desc()).limit(1)

        async def query(session: AsyncSession) -> FundNav | None:
            result = await session.execute(stmt)
            return result.scalars().first()

        return await self._read("latest_nav_on_or_before", query)

    async def earliest_nav(self, fund_id: int) -> FundNav | None:
        stmt = (
            select(FundNav)
            .where(FundNav.fund_id == fund_id)
            .order_by(FundNav.nav_date.asc())
            .limit(1)
        )

        async def query(session: AsyncSession) -> FundNav | None:
            result = await session.execute(stmt)
            return result.scalars().first()

        return await self._read("earliest_nav", query)

    async def nav_record_count(self, fund_id: int) -> int:
        stmt = select(func.count()).select_from(FundNav).where(FundNav.fund_id == fund_id)

        async def query(session: AsyncSession) -> int:
            result = await session.execute(stmt)
            return int(result.scalar_one())

        return await self._read("nav_record_count", query)

    async def recent_navs(self, fund_id: int, cutoff: date, limit: int) -> list[FundNav]:
        """Up to ``limit`` observations on or before cutoff, newest first."""
        stmt = (
            select(FundNav)
            .where(FundNav.fund_id == fund_id, FundNav.nav_date <= cutoff)
            .order_by(FundNav.nav_date.desc())
            .limit(limit)
        )

        async def query(session: AsyncSession) -> list[FundNav]:
            result = await session.execute(stmt)
            return list(result.scalars().all())

        return await self._read("recent_navs", query)


async def gather_reads(*reads: Awaitable[Any]) -> list[Any]:
    """Await independent reads concurrently, in order.

    The first failure cancels the reads still in flight and propagates.
    """
    tasks = [asyncio.ensure_future(r) for r in reads]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
