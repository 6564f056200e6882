"""ft_budget REST API: monthly per-category budgets, all require a session."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.dependencies import get_session
from src.ft_auth.auth.session import SessionContext
from src.ft_budget.application.schemas import CopyBudgetsRequest, CreateBudgetRequest
from src.ft_budget.application.service import BudgetApplicationService
from src.ft_common.database import get_db_session
from src.ft_common.datetime_utils import MONTH_PATTERN
from src.ft_common.response import ApiResponse, success_response

router = APIRouter(prefix="/budgets", tags=["budgets"])

_service = BudgetApplicationService()


@router.get("")
async def list_budgets(
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    month: str | None = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM"),
) -> ApiResponse:
    items = await _service.list_budgets(db, session.user_id, month)
    resp = success_response([item.to_wire() for item in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_budget(
    body: CreateBudgetRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    item = await _service.create_budget(
        db, session.user_id, body.category_id, body.month, body.amount
    )
    resp = success_response(item.to_wire(), message="Budget created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/copy")
async def copy_budgets(
    body: CopyBudgetsRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    copied = await _service.copy_budgets(db, session.user_id, body.from_month, body.to_month)
    resp = success_response({"copied": copied}, message="Budgets copied")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/latest")
async def latest_budget_month(
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    month = await _service.latest_month(db, session.user_id)
    resp = success_response({"month": month})
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    category_id: int,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    month: str | None = Query(
        None, pattern=MONTH_PATTERN, description="YYYY-MM; all months if omitted"
    ),
) -> None:
    await _service.delete_budget(db, session.user_id, category_id, month)
