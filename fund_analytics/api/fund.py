"""Fund query API routes."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from fund_analytics.api.deps import get_store
from fund_analytics.api.schemas import (
    CompareRequest,
    CompareResponse,
    ComparisonEntryResponse,
    FundLookupResponse,
    FundProfileResponse,
    FundSummary,
    NavPointResponse,
    NavReportResponse,
    PeriodReturnResponse,
)
from fund_analytics.config import DEFAULT_LOOKUP_LIMIT, MAX_LOOKUP_LIMIT
from fund_analytics.services.comparator import compare_funds
from fund_analytics.services.fund_store import FundStore
from fund_analytics.services.lookup import lookup_funds
from fund_analytics.services.nav_report import get_nav_and_returns

router = APIRouter(prefix="/api/funds", tags=["funds"])


@router.get("", response_model=FundLookupResponse)
async def search_funds(
    code: str | None = None,
    name: str | None = None,
    manager: str | None = None,
    limit: int = Query(DEFAULT_LOOKUP_LIMIT, ge=1, le=MAX_LOOKUP_LIMIT),
    store: FundStore = Depends(get_store),
):
    """Look funds up by exact code, name fragment or manager fragment.

    With no filters this returns the first ``limit`` funds by code.
    """
    profiles = await lookup_funds(store, code=code, name=name, manager=manager, limit=limit)
    if not profiles:
        return FundLookupResponse(found=False, message="No matching fund found")
    return FundLookupResponse(
        found=True,
        count=len(profiles),
        funds=[FundProfileResponse.from_profile(p) for p in profiles],
    )


@router.post("/compare", response_model=CompareResponse)
async def compare(req: CompareRequest, store: FundStore = Depends(get_store)):
    result = await compare_funds(store, req.codes)
    return CompareResponse(
        found=bool(result.resolved),
        comparison=[ComparisonEntryResponse.from_entry(e) for e in result.resolved],
        not_found_codes=result.unresolved_codes,
    )


@router.get("/{code}/nav", response_model=NavReportResponse)
async def get_nav(
    code: str,
    as_of: date | None = None,
    store: FundStore = Depends(get_store),
):
    """Latest NAV, trailing returns and the five most recent observations."""
    report = await get_nav_and_returns(store, code, as_of=as_of)
    if report is None:
        raise HTTPException(status_code=404, detail="Fund not found")

    p = report.profile
    response = NavReportResponse(
        fund=FundSummary(
            code=p.code, name=p.name, short_name=p.short_name, nav_start_date=p.nav_start_date
        ),
        returns=[PeriodReturnResponse.from_window(r) for r in report.returns],
        total_records=report.total_records,
    )
    if not report.has_data:
        response.message = "No NAV data available"
        return response

    response.latest_nav = NavPointResponse.from_nav(report.latest)
    response.recent_navs = [NavPointResponse.from_nav(n) for n in report.recent]
    return response
