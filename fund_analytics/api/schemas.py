"""Pydantic schemas for API request/response.

Display substitutions (unknown manager, frequency labels) happen here, not in
the services.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from fund_analytics.config import COMPARE_MAX_CODES, COMPARE_MIN_CODES
from fund_analytics.models.fund import FundNav, FundProfile
from fund_analytics.services.comparator import ComparisonEntry
from fund_analytics.services.returns import WindowReturn

UNKNOWN_MANAGER = "未知"
FREQUENCY_LABELS = {"D": "日频"}


class FundProfileResponse(BaseModel):
    id: int
    code: str
    name: str
    short_name: str | None = None
    manager: str
    risk_level: int | None = None
    fund_type: str | None = None
    nav_start_date: date | None = None
    nav_frequency: str | None = None

    @classmethod
    def from_profile(cls, p: FundProfile) -> "FundProfileResponse":
        return cls(
            id=p.id,
            code=p.code,
            name=p.name,
            short_name=p.short_name,
            manager=p.manager or UNKNOWN_MANAGER,
            risk_level=p.risk_level,
            fund_type=p.fund_type,
            nav_start_date=p.nav_start_date,
            nav_frequency=FREQUENCY_LABELS.get(p.nav_frequency, p.nav_frequency),
        )


class FundLookupResponse(BaseModel):
    found: bool
    count: int = 0
    funds: list[FundProfileResponse] = []
    message: str | None = None


class FundSummary(BaseModel):
    code: str
    name: str
    short_name: str | None = None
    nav_start_date: date | None = None


class NavPointResponse(BaseModel):
    nav_date: date
    unit_nav: Decimal
    accumulated_nav: Decimal | None = None

    @classmethod
    def from_nav(cls, nav: FundNav) -> "NavPointResponse":
        return cls(nav_date=nav.nav_date, unit_nav=nav.unit_nav, accumulated_nav=nav.accumulated_nav)


class PeriodReturnResponse(BaseModel):
    label: str
    days: int | None = None  # None for since-inception
    value: str
    status: str

    @classmethod
    def from_window(cls, r: WindowReturn) -> "PeriodReturnResponse":
        return cls(label=r.label, days=r.lookback_days, value=r.display, status=r.status.value)


class NavReportResponse(BaseModel):
    found: bool = True
    fund: FundSummary
    latest_nav: NavPointResponse | None = None
    returns: list[PeriodReturnResponse] = []
    recent_navs: list[NavPointResponse] = []
    total_records: int = 0
    message: str | None = None


class CompareRequest(BaseModel):
    codes: list[str] = Field(min_length=COMPARE_MIN_CODES, max_length=COMPARE_MAX_CODES)


class ComparisonEntryResponse(BaseModel):
    code: str
    found: bool
    name: str | None = None
    manager: str | None = None
    risk_level: int | None = None
    latest_nav: Decimal | None = None
    nav_date: date | None = None
    year_return: str | None = None
    error: str | None = None

    @classmethod
    def from_entry(cls, e: ComparisonEntry) -> "ComparisonEntryResponse":
        return cls(
            code=e.code,
            found=e.found,
            name=e.name,
            manager=(e.manager or UNKNOWN_MANAGER) if e.found else None,
            risk_level=e.risk_level,
            latest_nav=e.latest_nav,
            nav_date=e.nav_date,
            year_return=e.year_return,
            error=e.error,
        )


class CompareResponse(BaseModel):
    found: bool
    comparison: list[ComparisonEntryResponse]
    not_found_codes: list[str] = []
