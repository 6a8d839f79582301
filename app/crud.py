from sqlalchemy import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from app.models import Book, BookRequest, User, RequestStatus, ACTIVE_STATUSES
from typing import Sequence

async def add(db: AsyncSession, instance):
    db.add(instance)
    await db.commit()
    return instance

async def commit(db: AsyncSession):
    await db.commit()

async def get_book_by_id(db: AsyncSession, book_id: int):
    book = await db.get(Book, book_id, populate_existing=True)
    return book

async def get_book_by_isbn(db: AsyncSession, isbn: str):
    stmt = select(Book).where(Book.isbn == isbn)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()

async def get_books(
        db: AsyncSession,
        search: str | None,
        genre: str | None,
        order_by: Sequence
        ):
    stmt = select(Book)
    if search:
        stmt = stmt.where(or_(
            Book.title.icontains(search, autoescape=True),
            Book.author.icontains(search, autoescape=True),
            Book.isbn.icontains(search, autoescape=True),
        ))
    if genre:
        stmt = stmt.where(Book.genre == genre)
    stmt = stmt.order_by(*order_by)
    result = await db.execute(stmt)
    return result.scalars().all()

async def get_distinct_genres(db: AsyncSession):
    stmt = select(Book.genre).distinct().order_by(Book.genre)
    result = await db.execute(stmt)
    return result.scalars().all()

async def update_book(
        db: AsyncSession,
        book: Book,
        update_data: dict,
        ):
    for key, value in update_data.items():
        setattr(book, key, value)
    await db.commit()
    return book

async def delete_book(db: AsyncSession, book: Book):
    await db.delete(book)
    await db.commit()

async def get_active_request(db: AsyncSession, user_id: str, book_id: int):
    stmt = select(BookRequest).where(
        BookRequest.user_id == user_id,
        BookRequest.book_id == book_id,
        BookRequest.status.in_(ACTIVE_STATUSES)
        )
    result = await db.execute(stmt)
    return result.scalars().first()

async def count_active_requests_for_book(db: AsyncSession, book_id: int):
    stmt = select(func.count()).select_from(BookRequest).where(
        BookRequest.book_id == book_id,
        BookRequest.status.in_(ACTIVE_STATUSES)
        )
    result = await db.execute(stmt)
    return result.scalar_one()

async def count_approved_requests_for_book(db: AsyncSession, book_id: int):
    stmt = select(func.count()).select_from(BookRequest).where(
        BookRequest.book_id == book_id,
        BookRequest.status == RequestStatus.APPROVED
        )
    result = await db.execute(stmt)
    return result.scalar_one()

async def get_request_by_id(db: AsyncSession, request_id: int):
    stmt = (
        select(BookRequest)
        .options(selectinload(BookRequest.book), selectinload(BookRequest.user))
        .where(BookRequest.id == request_id)
        .execution_options(populate_existing=True)
        )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()

async def get_user_requests(db: AsyncSession, user_id: str):
    stmt = (
        select(BookRequest)
        .options(selectinload(BookRequest.book))
        .where(BookRequest.user_id == user_id)
        .order_by(BookRequest.request_date.desc(), BookRequest.id.desc())
        )
    result = await db.execute(stmt)
    return result.scalars().all()

async def get_all_requests(db: AsyncSession):
    stmt = (
        select(BookRequest)
        .options(selectinload(BookRequest.book), selectinload(BookRequest.user))
        .order_by(BookRequest.request_date.desc(), BookRequest.id.desc())
        )
    result = await db.execute(stmt)
    return result.scalars().all()

async def get_user_by_email(db: AsyncSession, _email: str):
    stmt = select(User).where(User.email == _email)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()

async def get_user_by_uid(db: AsyncSession, user_uid: str):
    stmt = select(User).where(User.user_uid == user_uid)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()
