"""Expense REST API: monthly summaries, search, and entry CRUD."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.dependencies import get_session
from src.ft_auth.auth.session import SessionContext
from src.ft_common.database import get_db_session
from src.ft_common.datetime_utils import MONTH_PATTERN
from src.ft_common.enums import EntryKind
from src.ft_common.response import ApiResponse, success_response
from src.ft_ledger.api.entries import add_entry_routes
from src.ft_ledger.application.service import EntryApplicationService, LedgerReportService

router = APIRouter(prefix="/expenses", tags=["expenses"])

_report_service = LedgerReportService()


@router.get("/months")
async def list_months(
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    before: str | None = Query(
        None, pattern=MONTH_PATTERN, description="Load the 6 months before YYYY-MM"
    ),
) -> ApiResponse:
    items = await _report_service.month_summaries(db, session.user_id, before)
    resp = success_response([item.to_wire() for item in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/month/{month}")
async def month_details(
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    month: str = Path(..., pattern=MONTH_PATTERN, description="YYYY-MM"),
) -> ApiResponse:
    details = await _report_service.month_details(db, session.user_id, month)
    resp = success_response(details.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/search")
async def search_expenses(
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    q: str = Query("", max_length=200, description="Substring of the notes, any case"),
    category_id: int | None = Query(None, alias="categoryId", gt=0),
    date_from: date | None = Query(None, alias="dateFrom"),
    date_to: date | None = Query(None, alias="dateTo"),
) -> ApiResponse:
    items = await _report_service.search_expenses(
        db, session.user_id, q, category_id, date_from, date_to
    )
    resp = success_response([item.to_wire() for item in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# Registered after the literal sub-paths above so they win over /{entry_id}
add_entry_routes(router, EntryApplicationService(EntryKind.EXPENSE), "expense")
