from fastapi import APIRouter, status, Depends, Form
from app.schemas.request import (BookRequestForm, BookRequestResponse, AdminBookRequestResponse,
                                 BookRequestListResponse, AdminBookRequestListResponse)
from app.services import loans
from app.core.auth import get_current_principal
from app.core.database import get_session, AsyncSession
from app.core.permissions import Principal
from typing import Annotated

requests_router = APIRouter(prefix='/requests', tags=['requests'])

@requests_router.get('', response_model=AdminBookRequestListResponse)
async def list_all_requests(
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    requests = await loans.list_all_requests(db, principal)
    return {'requests': requests}

@requests_router.get('/mine', response_model=BookRequestListResponse)
async def list_my_requests(
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    requests = await loans.list_my_requests(db, principal)
    return {'requests': requests}

@requests_router.post('', status_code=status.HTTP_201_CREATED, response_model=BookRequestResponse)
async def create_request(
    form_data: Annotated[BookRequestForm, Form()],
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    return await loans.create_request(db, principal, form_data.book_id)

@requests_router.post('/{request_id}/approve', response_model=AdminBookRequestResponse)
async def approve_request(
    request_id: int,
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    return await loans.approve_request(db, principal, request_id)

@requests_router.post('/{request_id}/reject', response_model=AdminBookRequestResponse)
async def reject_request(
    request_id: int,
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    return await loans.reject_request(db, principal, request_id)

@requests_router.post('/{request_id}/return', response_model=AdminBookRequestResponse)
async def mark_returned(
    request_id: int,
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    return await loans.mark_returned(db, principal, request_id)
