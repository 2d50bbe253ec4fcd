"""Tests for multi-fund comparison."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from fund_analytics.models.database import Base
from fund_analytics.services.comparator import compare_funds
from fund_analytics.services.errors import StoreUnavailable
from fund_analytics.services.fund_store import FundStore
from fund_analytics.services.nav_loader import nav_loader

AS_OF = date(2024, 6, 30)


@pytest_asyncio.fixture
async def store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'funds.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        a = await nav_loader.add_profile(
            session, "000001", "华夏成长混合", short_name="华夏成长", manager="蔡向阳", risk_level=3
        )
        await nav_loader.add_navs(
            session,
            a.id,
            [
                (date(2023, 6, 1), Decimal("1.2000"), None),
                (date(2024, 6, 28), Decimal("1.5000"), None),
            ],
        )
        b = await nav_loader.add_profile(session, "161725", "招商中证白酒指数", manager="侯昊")
        await nav_loader.add_navs(session, b.id, [(date(2024, 6, 1), Decimal("1.2156"), None)])
        await nav_loader.add_profile(session, "519736", "交银新成长混合")
        z = await nav_loader.add_profile(session, "000961", "天弘沪深300ETF联接A")
        await nav_loader.add_navs(
            session,
            z.id,
            [
                (date(2023, 6, 1), Decimal("0"), None),
                (date(2024, 6, 28), Decimal("1.3456"), None),
            ],
        )
    yield FundStore(factory)
    await engine.dispose()


@pytest.mark.asyncio
async def test_compare_found_and_missing(store):
    result = await compare_funds(store, ["000001", "999999"], as_of=AS_OF)

    assert len(result.entries) == 2
    assert result.unresolved_codes == ["999999"]
    [entry] = result.resolved
    assert entry.code == "000001"
    assert entry.name == "华夏成长"
    assert entry.manager == "蔡向阳"
    assert entry.risk_level == 3
    assert entry.latest_nav == Decimal("1.5")
    assert entry.nav_date == date(2024, 6, 28)
    assert entry.year_return == "25.00%"
    assert entry.error is None


@pytest.mark.asyncio
async def test_compare_all_invalid(store):
    result = await compare_funds(store, ["888888", "999999", "777777"], as_of=AS_OF)

    assert len(result.entries) == 3
    assert result.resolved == []
    assert result.unresolved_codes == ["888888", "999999", "777777"]


@pytest.mark.asyncio
async def test_compare_insufficient_history_and_no_nav(store):
    result = await compare_funds(store, ["161725", "519736"], as_of=AS_OF)
    by_code = {e.code: e for e in result.entries}

    short = by_code["161725"]
    assert short.found
    assert short.name == "招商中证白酒指数"  # no short name
    assert short.latest_nav == Decimal("1.2156")
    assert short.year_return is None

    empty = by_code["519736"]
    assert empty.found
    assert empty.manager is None
    assert empty.latest_nav is None
    assert empty.nav_date is None
    assert empty.year_return is None


@pytest.mark.asyncio
async def test_compare_data_error_isolated(store):
    result = await compare_funds(store, ["000961", "000001"], as_of=AS_OF)
    by_code = {e.code: e for e in result.entries}

    assert by_code["000961"].found
    assert by_code["000961"].year_return is None
    assert "non-positive" in by_code["000961"].error
    assert by_code["000001"].year_return == "25.00%"


@pytest.mark.asyncio
async def test_compare_duplicate_codes_one_entry_each(store):
    result = await compare_funds(store, ["000001", "000001"], as_of=AS_OF)
    assert [e.code for e in result.entries] == ["000001", "000001"]


@pytest.mark.asyncio
@pytest.mark.parametrize("codes", [["000001"], ["1", "2", "3", "4", "5", "6"]])
async def test_compare_rejects_bad_size(store, codes):
    with pytest.raises(ValueError):
        await compare_funds(store, codes)


@pytest.mark.asyncio
async def test_compare_store_outage_fails_batch(store):
    with patch.object(
        store, "latest_nav_on_or_before", side_effect=StoreUnavailable("down")
    ):
        with pytest.raises(StoreUnavailable):
            await compare_funds(store, ["000001", "999999"], as_of=AS_OF)
