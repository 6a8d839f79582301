import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.core.auth import create_superuser
from app.core.config import Settings
from app.core.database import engine, Base, AsyncSessionLocal
from app.core.middleware import RequestLoggingMiddleware
from app.exceptions import LibraryError
from app.routers import books, requests, users

settings = Settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        await create_superuser(session)
    logger.info(f'{settings.app_name} started')
    yield # app runs here
    await engine.dispose()

app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(books.books_router)
app.include_router(requests.requests_router)
app.include_router(users.users_router)

@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.detail})

@app.get('/')
async def root():
    return {'message': f'Welcome to {settings.app_name}'}
