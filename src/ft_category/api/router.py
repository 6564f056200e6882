"""ft_category REST API: list, create, update, reorder, delete. All require a session."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.dependencies import get_session
from src.ft_auth.auth.session import SessionContext
from src.ft_category.application.schemas import (
    CreateCategoryRequest,
    ReorderCategoriesRequest,
    UpdateCategoryRequest,
)
from src.ft_category.application.service import CategoryApplicationService
from src.ft_common.database import get_db_session
from src.ft_common.enums import CategoryType
from src.ft_common.response import ApiResponse, success_response

router = APIRouter(prefix="/categories", tags=["categories"])

_service = CategoryApplicationService()


@router.get("")
async def list_categories(
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    type: CategoryType | None = Query(None, description="income or expense"),
) -> ApiResponse:
    items = await _service.list_categories(db, session.user_id, type)
    resp = success_response([item.to_wire() for item in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CreateCategoryRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    item = await _service.create_category(db, session.user_id, body.name, body.type)
    resp = success_response(item.to_wire(), message="Category created")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# Registered before /{category_id} so "sequence" is not parsed as an id
@router.put("/sequence")
async def reorder_categories(
    body: ReorderCategoriesRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    updated = await _service.reorder_categories(
        db, session.user_id, [(c.id, c.sequence) for c in body.categories]
    )
    resp = success_response({"updated": updated}, message="Categories reordered")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    body: UpdateCategoryRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    item = await _service.update_category(
        db,
        session.user_id,
        category_id,
        name=body.name,
        category_type=body.type,
        is_active=body.is_active,
        sequence=body.sequence,
    )
    resp = success_response(item.to_wire(), message="Category updated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> None:
    await _service.delete_category(db, session.user_id, category_id)
