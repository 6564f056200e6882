"""Income REST API plus the derived balance, all require a session."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.dependencies import get_session
from src.ft_auth.auth.session import SessionContext
from src.ft_common.database import get_db_session
from src.ft_common.enums import EntryKind
from src.ft_common.response import ApiResponse, success_response
from src.ft_ledger.api.entries import add_entry_routes
from src.ft_ledger.application.schemas import SetBalanceRequest
from src.ft_ledger.application.service import BalanceLedgerService, EntryApplicationService

router = APIRouter(prefix="/income", tags=["income"])

_balance_service = BalanceLedgerService()


@router.get("/balance")
async def get_balance(
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _balance_service.get_balance(db, session.user_id)
    resp = success_response(data.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/balance")
async def set_balance(
    body: SetBalanceRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _balance_service.set_balance(db, session.user_id, body.amount, body.notes)
    resp = success_response(data.to_wire(), message="Balance updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# Registered after /balance so PUT /income/balance is not parsed as /{entry_id}
add_entry_routes(router, EntryApplicationService(EntryKind.INCOME), "income")
