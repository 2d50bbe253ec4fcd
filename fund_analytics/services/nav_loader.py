"""Write side of the fund store, used by ingestion jobs and fixtures."""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import FlushError

from fund_analytics.models.fund import FundNav, FundProfile
from fund_analytics.services.errors import DataIntegrityError

logger = logging.getLogger(__name__)


class NavLoader:
    """Adds fund profiles and NAV observations."""

    async def add_profile(
        self,
        session: AsyncSession,
        code: str,
        name: str,
        short_name: str | None = None,
        manager: str | None = None,
        risk_level: int | None = None,
        fund_type: str | None = None,
        nav_start_date: date | None = None,
        nav_frequency: str | None = "D",
    ) -> FundProfile:
        profile = FundProfile(
            code=code,
            name=name,
            short_name=short_name,
            manager=manager,
            risk_level=risk_level,
            fund_type=fund_type,
            nav_start_date=nav_start_date,
            nav_frequency=nav_frequency,
        )
        session.add(profile)
        await self._commit(session, f"fund profile {code}")
        return profile

    async def add_navs(
        self,
        session: AsyncSession,
        fund_id: int,
        rows: list[tuple[date, Decimal, Decimal | None]],
    ) -> int:
        """Insert (nav_date, unit_nav, accumulated_nav) rows for one fund.

        The whole batch is rejected if any (fund_id, nav_date) already exists.
        """
        for nav_date, unit_nav, accumulated_nav in rows:
            session.add(
                FundNav(
                    fund_id=fund_id,
                    nav_date=nav_date,
                    unit_nav=unit_nav,
                    accumulated_nav=accumulated_nav,
                )
            )
        await self._commit(session, f"{len(rows)} NAV rows for fund {fund_id}")
        logger.info(f"Loaded {len(rows)} NAV rows for fund {fund_id}")
        return len(rows)

    async def delete_navs(self, session: AsyncSession, fund_id: int) -> None:
        await session.execute(delete(FundNav).where(FundNav.fund_id == fund_id))
        await session.commit()

    async def _commit(self, session: AsyncSession, what: str) -> None:
        try:
            await session.commit()
        except (IntegrityError, FlushError) as e:
            await session.rollback()
            logger.error(f"Duplicate key while adding {what}: {e}")
            raise DataIntegrityError(f"duplicate key while adding {what}") from e


nav_loader = NavLoader()
