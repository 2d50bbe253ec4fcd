"""Tests for the NAV loader (write side of the store)."""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from fund_analytics.models.database import Base
from fund_analytics.models.fund import FundNav
from fund_analytics.services.errors import DataIntegrityError
from fund_analytics.services.nav_loader import NavLoader


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'funds.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def loader():
    return NavLoader()


async def _nav_count(session_factory, fund_id):
    async with session_factory() as session:
        result = await session.execute(
            select(func.count()).select_from(FundNav).where(FundNav.fund_id == fund_id)
        )
        return result.scalar_one()


@pytest.mark.asyncio
async def test_add_profile(session_factory, loader):
    async with session_factory() as session:
        profile = await loader.add_profile(
            session, "005827", "易方达蓝筹精选混合", manager="张坤", risk_level=3
        )
    assert profile.id is not None
    assert profile.code == "005827"
    assert profile.nav_frequency == "D"


@pytest.mark.asyncio
async def test_add_profile_duplicate_code(session_factory, loader):
    async with session_factory() as session:
        await loader.add_profile(session, "005827", "易方达蓝筹精选混合")
    async with session_factory() as session:
        with pytest.raises(DataIntegrityError):
            await loader.add_profile(session, "005827", "重复代码")


@pytest.mark.asyncio
async def test_add_navs(session_factory, loader):
    async with session_factory() as session:
        profile = await loader.add_profile(session, "000001", "华夏成长混合")
        added = await loader.add_navs(
            session,
            profile.id,
            [
                (date(2024, 1, 2), Decimal("1.0000"), Decimal("2.0000")),
                (date(2024, 1, 3), Decimal("1.0100"), Decimal("2.0100")),
            ],
        )
    assert added == 2
    assert await _nav_count(session_factory, profile.id) == 2


@pytest.mark.asyncio
async def test_add_navs_duplicate_date_rejected(session_factory, loader):
    async with session_factory() as session:
        profile = await loader.add_profile(session, "000001", "华夏成长混合")
        await loader.add_navs(session, profile.id, [(date(2024, 1, 2), Decimal("1.0"), None)])

    async with session_factory() as session:
        with pytest.raises(DataIntegrityError):
            await loader.add_navs(
                session,
                profile.id,
                [
                    (date(2024, 1, 3), Decimal("1.1"), None),
                    (date(2024, 1, 2), Decimal("1.2"), None),
                ],
            )
    # Whole batch rolled back
    assert await _nav_count(session_factory, profile.id) == 1


@pytest.mark.asyncio
async def test_delete_navs(session_factory, loader):
    async with session_factory() as session:
        profile = await loader.add_profile(session, "000001", "华夏成长混合")
        await loader.add_navs(session, profile.id, [(date(2024, 1, 2), Decimal("1.0"), None)])
        await loader.delete_navs(session, profile.id)
    assert await _nav_count(session_factory, profile.id) == 0
