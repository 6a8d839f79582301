from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt
from jose.exceptions import JWTError, ExpiredSignatureError
from app.core.config import Settings
from datetime import datetime, timedelta, timezone
from typing import Optional
from logging import getLogger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from app import crud
from app.utils import generate_admin_id
from app.core.database import get_session
from app.core.permissions import Principal
from app.models import User
from passlib.context import CryptContext

settings = Settings()
logger = getLogger(__name__)

HASH_ALGORITHM = settings.hash_algorithm
JWT_ALGORITHM = settings.jwt_algorithm
SECRET_KEY = settings.secret_key

pwd_context = CryptContext(schemes=[HASH_ALGORITHM], deprecated='auto')

oauth2_scheme = OAuth2PasswordBearer(tokenUrl='users/login')
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl='users/login', auto_error=False)

credentials_exception = HTTPException(
        status.HTTP_401_UNAUTHORIZED,
        detail='Invalid credentials',
        headers={'WWW-Authenticate': 'Bearer'}
    )

token_expire_exception = HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail='Token has expired. Please login again',
            headers={'WWW-Authenticate': 'Bearer'}
        )

inactive_user_exception = HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail='Inactive user'
        )

def hash_password(password: str):
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str):
    return pwd_context.verify(plain_password, hashed_password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({'exp': expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, JWT_ALGORITHM)
    return encoded_jwt

def create_user_token(user: User) -> str:
    return create_access_token({
        'sub': user.email,
        'user_uid': user.user_uid,
        'roles': sorted(user.roles),
    })

def decode_token(token: str, verify_exp: bool=True):
    payload = jwt.decode(token, SECRET_KEY,
                         algorithms=[JWT_ALGORITHM], options={'verify_exp': verify_exp})
    return payload

async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await crud.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        return None
    return user

async def get_current_principal(
        token: str=Depends(oauth2_scheme),
        db: AsyncSession=Depends(get_session)
        ) -> Principal:
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise token_expire_exception
    except JWTError as e:
        logger.warning(f'JWTError: {e}')
        raise credentials_exception
    user_uid = payload.get('user_uid')
    if not user_uid:
        raise credentials_exception
    user = await crud.get_user_by_uid(db, user_uid)
    if not user:
        raise credentials_exception
    if not user.is_active:
        raise inactive_user_exception
    # roles are read from the store; token roles are informational only
    return Principal(user_id=user.user_uid, roles=user.roles)

async def get_optional_principal(
        token: Optional[str]=Depends(optional_oauth2_scheme),
        db: AsyncSession=Depends(get_session)
        ) -> Principal | None:
    if not token:
        return None
    return await get_current_principal(token, db)

async def create_superuser(
        db: AsyncSession,
        email=settings.admin_email,
        password=settings.admin_password,
        full_name=settings.admin_name
        ):
    try:
        superuser = await crud.get_user_by_email(db, email)
        if not superuser:
            data = {
                'user_uid': generate_admin_id(),
                'full_name': full_name,
                'password': hash_password(password),
                'email': email,
                'is_admin': True,
            }
            await crud.add(db, User(**data))
            logger.info(f'Superuser {email} created')
        elif not superuser.is_admin:
            superuser.is_admin = True
            await crud.commit(db)
            logger.info(f'Superuser {email} promoted to admin')
        else:
            logger.info('Superuser initialized')
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f'DataBase error initializing admin_user: {e}')
        raise
