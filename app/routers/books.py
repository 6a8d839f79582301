from fastapi import APIRouter, status, Depends, Query, Form
from app.schemas.book import BookCreate, BookResponse, BookDetailResponse, BookUpdate, BookListResponse
from app.services import catalog, loans
from app.core.auth import get_current_principal, get_optional_principal
from app.core.database import get_session, AsyncSession
from app.core.permissions import Principal
from typing import Annotated, List, Optional

books_router = APIRouter(prefix='/books', tags=['books'])

@books_router.get('', response_model=BookListResponse)
async def list_books(
    search: Annotated[Optional[str], Query()] = None,
    genre: Annotated[Optional[str], Query()] = None,
    sort: Annotated[Optional[str], Query()] = None,
    db: AsyncSession=Depends(get_session)
    ):
    books = await catalog.list_books(db, search, genre, sort)
    genres = await catalog.distinct_genres(db)
    return {'books': books, 'genres': genres, 'search': search, 'genre': genre, 'sort': sort}

@books_router.get('/genres', response_model=List[str])
async def list_genres(db: AsyncSession=Depends(get_session)):
    return await catalog.distinct_genres(db)

@books_router.get('/{book_id}', response_model=BookDetailResponse)
async def get_book(
    book_id: int,
    principal: Optional[Principal]=Depends(get_optional_principal),
    db: AsyncSession=Depends(get_session)
    ):
    book = await catalog.get_book(db, book_id)
    detail = BookDetailResponse.model_validate(book)
    if principal:
        loan = await loans.get_my_active_request(db, principal, book_id)
        detail.my_request_status = loan.status if loan else None
    return detail

@books_router.post('', status_code=status.HTTP_201_CREATED, response_model=BookResponse)
async def create_book(
    book_create: Annotated[BookCreate, Form()],
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    book_data = book_create.model_dump()
    return await catalog.create_book(db, principal, book_data)

@books_router.put('/{book_id}', response_model=BookResponse)
async def update_book(
    book_id: int,
    update_data: Annotated[BookUpdate, Form()],
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    book_update_data = update_data.model_dump(exclude_none=True)
    return await catalog.update_book(db, principal, book_id, book_update_data)

@books_router.delete('/{book_id}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: int,
    principal: Principal=Depends(get_current_principal),
    db: AsyncSession=Depends(get_session)
    ):
    await catalog.delete_book(db, principal, book_id)

