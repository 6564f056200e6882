"""Route builder shared by /income and /expenses: same shape, different table."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.dependencies import get_session
from src.ft_auth.auth.session import SessionContext
from src.ft_common.database import get_db_session
from src.ft_common.response import ApiResponse, success_response
from src.ft_ledger.application.schemas import CreateEntryRequest, UpdateEntryRequest
from src.ft_ledger.application.service import EntryApplicationService


def add_entry_routes(router: APIRouter, service: EntryApplicationService, label: str) -> None:
    """Register create / list-by-date / update / delete on ``router``.

    Call this after any literal sub-paths (e.g. /income/balance) are
    registered, so they win over /{entry_id}.
    """

    @router.post("", status_code=status.HTTP_201_CREATED, summary=f"Create {label}")
    async def create_entry(
        body: CreateEntryRequest,
        session: Annotated[SessionContext, Depends(get_session)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
    ) -> ApiResponse:
        item = await service.create(
            db,
            session.user_id,
            body.entry_date,
            body.amount,
            body.notes,
            body.category_ids,
        )
        resp = success_response(item.to_wire(), message=f"{label.capitalize()} created")
        resp.request_id = getattr(request.state, "request_id", resp.request_id)
        return resp

    @router.get("/date/{entry_date}", summary=f"List {label} for a day")
    async def list_entries_by_date(
        entry_date: date,
        session: Annotated[SessionContext, Depends(get_session)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
    ) -> ApiResponse:
        items = await service.list_by_date(db, session.user_id, entry_date)
        resp = success_response([item.to_wire() for item in items])
        resp.request_id = getattr(request.state, "request_id", resp.request_id)
        return resp

    @router.put("/{entry_id}", summary=f"Update {label}")
    async def update_entry(
        entry_id: int,
        body: UpdateEntryRequest,
        session: Annotated[SessionContext, Depends(get_session)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
        request: Request,
    ) -> ApiResponse:
        item = await service.update(
            db,
            session.user_id,
            entry_id,
            entry_date=body.entry_date,
            amount=body.amount,
            notes=body.notes,
            category_ids=body.category_ids,
        )
        resp = success_response(item.to_wire())
        resp.request_id = getattr(request.state, "request_id", resp.request_id)
        return resp

    @router.delete(
        "/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, summary=f"Delete {label}"
    )
    async def delete_entry(
        entry_id: int,
        session: Annotated[SessionContext, Depends(get_session)],
        db: Annotated[AsyncSession, Depends(get_db_session)],
    ) -> None:
        await service.delete(db, session.user_id, entry_id)
