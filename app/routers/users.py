from fastapi import APIRouter, status, Depends, Form, Request
from app.services import users
from app.core.database import get_session, AsyncSession
from typing import Annotated
from app.schemas.token import TokenResponse
from app.schemas.user import UserCreate, UserLogin, UserResponse


users_router = APIRouter(prefix='/users', tags=['users'])

@users_router.post('/sign-up', status_code=status.HTTP_201_CREATED, response_model=UserResponse)
async def create_new_user(
    request: Request,
    form_data: Annotated[UserCreate, Form()],
    db: AsyncSession=Depends(get_session)
    ):
    data = form_data.model_dump()
    request.state.actor = {'email': data['email']}
    return await users.create_user_service(db, data)

@users_router.post('/login', response_model=TokenResponse)
async def login_for_access_token(
    request: Request,
    form_data: Annotated[UserLogin, Form()],
    db: AsyncSession=Depends(get_session)
    ):
    data = form_data.model_dump()
    request.state.actor = {'email': data['email']}
    return await users.login_user_service(db, data)
