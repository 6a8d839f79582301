from logging import getLogger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app import crud
from app.core.auth import hash_password, authenticate_user, create_user_token, credentials_exception
from app.exceptions import DuplicateUserError
from app.models import User

logger = getLogger(__name__)

async def create_user_service(db: AsyncSession, user_data: dict):
    data = dict(user_data)
    data['password'] = hash_password(data['password'])
    try:
        user = await crud.add(db, User(**data))
        logger.info(f'New user created: {user.user_uid}')
        return user
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f'Integrity error creating user: {e}')
        raise DuplicateUserError()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f'DataBase error creating user: {e}')
        raise

async def login_user_service(db: AsyncSession, credentials: dict):
    user = await authenticate_user(db, credentials['email'], credentials['password'])
    if not user or not user.is_active:
        logger.warning(f'Failed login for {credentials["email"]}')
        raise credentials_exception
    logger.info(f'User {user.user_uid} logged in')
    return {
        'access_token': create_user_token(user),
        'token_type': 'bearer',
        'user_uid': user.user_uid,
        'roles': sorted(user.roles),
    }
