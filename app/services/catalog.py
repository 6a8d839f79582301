"""Catalog queries and book administration.

``list_books`` composes the free-text search, genre filter and sort order
into a single read-only query. Title and author sort case-insensitively.
Unknown sort keys fall back to ascending title, and every ordering ends with
the book id so ties come back in a stable order.
"""
from logging import getLogger
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from app import crud
from app.core.config import Settings
from app.core.permissions import Principal, require_admin
from app.exceptions import (NotFoundError, ValidationFailedError,
                            DuplicateBookError, BookInUseError,
                            ConcurrencyConflictError)
from app.models import Book
from app.utils import utcnow

settings = Settings()
logger = getLogger(__name__)

SORT_ORDERS = {
    'title_desc': (func.lower(Book.title).desc(),),
    'author': (func.lower(Book.author).asc(),),
    'author_desc': (func.lower(Book.author).desc(),),
    'year': (Book.publication_year.asc(),),
    'year_desc': (Book.publication_year.desc(),),
}
DEFAULT_SORT_ORDER = (func.lower(Book.title).asc(),)

book_not_found_message = 'Book not found'

def resolve_sort_order(sort_key: str | None):
    return SORT_ORDERS.get(sort_key or '', DEFAULT_SORT_ORDER) + (Book.id.asc(),)

async def list_books(
        db: AsyncSession,
        search: str | None = None,
        genre: str | None = None,
        sort_key: str | None = None):
    search = search.strip() if search else None
    books = await crud.get_books(db, search, genre or None, resolve_sort_order(sort_key))
    logger.debug(f'Catalog query search={search!r} genre={genre!r} sort={sort_key!r}: {len(books)} books')
    return books

async def distinct_genres(db: AsyncSession):
    return await crud.get_distinct_genres(db)

async def get_book(db: AsyncSession, book_id: int):
    book = await crud.get_book_by_id(db, book_id)
    if not book:
        logger.warning(f'Book {book_id} not found')
        raise NotFoundError(book_not_found_message)
    return book

def check_quantities(quantity: int, available_quantity: int, on_loan: int = 0):
    if quantity < 0 or available_quantity < 0:
        raise ValidationFailedError('Quantities cannot be negative')
    if available_quantity > quantity:
        raise ValidationFailedError('available_quantity cannot exceed quantity')
    if quantity - available_quantity < on_loan:
        raise ValidationFailedError(
            f'{on_loan} copies are on loan; quantity must be at least available_quantity + {on_loan}'
        )

async def check_isbn_free(db: AsyncSession, isbn: str):
    existing = await crud.get_book_by_isbn(db, isbn)
    if existing:
        logger.warning(f'ISBN {isbn} already catalogued as book {existing.id}')
        raise DuplicateBookError()

async def create_book(db: AsyncSession, principal: Principal, book_data: dict):
    require_admin(principal)
    data = dict(book_data)
    if data.get('available_quantity') is None:
        data['available_quantity'] = data.get('quantity', 1)
    check_quantities(data.get('quantity', 1), data['available_quantity'])
    await check_isbn_free(db, data['isbn'])
    now = utcnow()
    try:
        book = await crud.add(db, Book(**data, created_at=now, updated_at=now))
        logger.info(f'New book created: {book.title} ({book.isbn})')
        return book
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f'Integrity error creating book: {e}')
        raise DuplicateBookError()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f'DataBase error creating new book: {e}')
        raise

async def _check_update(db: AsyncSession, book: Book, update_data: dict):
    quantity = update_data.get('quantity', book.quantity)
    available_quantity = update_data.get('available_quantity', book.available_quantity)
    on_loan = await crud.count_approved_requests_for_book(db, book.id)
    check_quantities(quantity, available_quantity, on_loan)
    isbn = update_data.get('isbn')
    if isbn and isbn != book.isbn:
        await check_isbn_free(db, isbn)

async def update_book(db: AsyncSession, principal: Principal, book_id: int, update_data: dict):
    require_admin(principal)
    for attempt in range(1, settings.max_commit_attempts + 1):
        book = await get_book(db, book_id)
        await _check_update(db, book, update_data)
        try:
            book = await crud.update_book(db, book, {**update_data, 'updated_at': utcnow()})
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f'Integrity error updating book: {e}')
            raise DuplicateBookError()
        except StaleDataError:
            await db.rollback()
            logger.warning(f'Book {book_id} was changed concurrently (attempt {attempt})')
            continue
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f'DataBase error updating book: {e}')
            raise
        logger.info(f'Book {book.id} updated: {sorted(update_data)}')
        return book
    raise ConcurrencyConflictError()

async def delete_book(db: AsyncSession, principal: Principal, book_id: int):
    require_admin(principal)
    book = await get_book(db, book_id)
    active = await crud.count_active_requests_for_book(db, book.id)
    if active:
        logger.warning(f'Refusing to delete book {book.id}: {active} active requests')
        raise BookInUseError()
    try:
        await crud.delete_book(db, book)
        logger.info(f'Book {book_id} deleted')
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f'DataBase error deleting book: {e}')
        raise
