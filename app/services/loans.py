"""Borrow request lifecycle.

A request moves ``Pending -> Approved | Rejected`` and ``Approved -> Returned``.
Approve and return change the book's ``available_quantity`` in the same commit
as the status. Both rows are versioned, so a racing writer makes the commit
fail with ``StaleDataError``; the transition is then re-read, re-validated and
retried once before giving up.
"""
from logging import getLogger
from typing import Callable
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from app import crud
from app.core.config import Settings
from app.core.permissions import Principal, require_admin, require_role
from app.exceptions import (NotFoundError, UnavailableError, DuplicateActiveRequestError,
                            InvalidTransitionError, ConcurrencyConflictError)
from app.models import BookRequest, RequestStatus, USER_ROLE
from app.utils import utcnow, loan_due_date

settings = Settings()
logger = getLogger(__name__)

request_not_found_message = 'Request not found'

async def create_request(db: AsyncSession, principal: Principal, book_id: int):
    require_role(principal, USER_ROLE)
    book = await crud.get_book_by_id(db, book_id)
    if not book:
        logger.warning(f'{principal.user_id} requested unknown book {book_id}')
        raise NotFoundError('Book not found')
    if book.available_quantity <= 0:
        logger.warning(f'{principal.user_id} requested unavailable book {book_id}')
        raise UnavailableError()
    existing = await crud.get_active_request(db, principal.user_id, book_id)
    if existing:
        logger.warning(f'{principal.user_id} already has request {existing.id} for book {book_id}')
        raise DuplicateActiveRequestError()

    loan = BookRequest(
        book_id=book_id,
        user_id=principal.user_id,
        request_date=utcnow(),
        status=RequestStatus.PENDING,
    )
    try:
        await crud.add(db, loan)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f'DataBase error creating request: {e}')
        raise
    logger.info(f'Request {loan.id} created by {principal.user_id} for book {book_id}')
    return await crud.get_request_by_id(db, loan.id)

def _check_transition(loan: BookRequest, expected: RequestStatus, target: RequestStatus):
    if loan.status != expected:
        logger.warning(f'Request {loan.id} is {loan.status.value}, cannot become {target.value}')
        raise InvalidTransitionError(
            f'Request is {loan.status.value}; only {expected.value} requests can be {target.value.lower()}'
        )

def _approve(loan: BookRequest, now: datetime):
    _check_transition(loan, RequestStatus.PENDING, RequestStatus.APPROVED)
    if loan.book.available_quantity <= 0:
        logger.warning(f'Request {loan.id} cannot be approved: book {loan.book_id} has no copies left')
        raise UnavailableError('Book is no longer available')
    loan.status = RequestStatus.APPROVED
    loan.approved_date = now
    loan.due_date = loan_due_date(now, settings.loan_period_days)
    loan.book.available_quantity -= 1

def _reject(loan: BookRequest, now: datetime):
    _check_transition(loan, RequestStatus.PENDING, RequestStatus.REJECTED)
    loan.status = RequestStatus.REJECTED

def _mark_returned(loan: BookRequest, now: datetime):
    _check_transition(loan, RequestStatus.APPROVED, RequestStatus.RETURNED)
    loan.status = RequestStatus.RETURNED
    loan.return_date = now
    if loan.book.available_quantity >= loan.book.quantity:
        logger.warning(f'Request {loan.id} returned but book {loan.book_id} already has all copies on the shelf')
        return
    loan.book.available_quantity += 1

async def _apply_transition(
        db: AsyncSession,
        request_id: int,
        apply: Callable[[BookRequest, datetime], None],
        on_conflict: type[Exception],
        ):
    for attempt in range(1, settings.max_commit_attempts + 1):
        loan = await crud.get_request_by_id(db, request_id)
        if not loan:
            logger.warning(f'Request {request_id} not found')
            raise NotFoundError(request_not_found_message)
        apply(loan, utcnow())
        try:
            await crud.commit(db)
        except StaleDataError:
            await db.rollback()
            logger.warning(f'Concurrent update on request {request_id} (attempt {attempt})')
            continue
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f'DataBase error updating request {request_id}: {e}')
            raise
        return loan
    raise on_conflict()

async def approve_request(db: AsyncSession, principal: Principal, request_id: int):
    require_admin(principal)
    loan = await _apply_transition(db, request_id, _approve, UnavailableError)
    logger.info(f'Request {loan.id} approved by {principal.user_id}, due {loan.due_date.isoformat()}')
    return loan

async def reject_request(db: AsyncSession, principal: Principal, request_id: int):
    require_admin(principal)
    loan = await _apply_transition(db, request_id, _reject, ConcurrencyConflictError)
    logger.info(f'Request {loan.id} rejected by {principal.user_id}')
    return loan

async def mark_returned(db: AsyncSession, principal: Principal, request_id: int):
    require_admin(principal)
    loan = await _apply_transition(db, request_id, _mark_returned, ConcurrencyConflictError)
    logger.info(f'Request {loan.id} returned, book {loan.book_id} has {loan.book.available_quantity} available')
    return loan

async def list_my_requests(db: AsyncSession, principal: Principal):
    require_role(principal, USER_ROLE)
    return await crud.get_user_requests(db, principal.user_id)

async def list_all_requests(db: AsyncSession, principal: Principal):
    require_admin(principal)
    return await crud.get_all_requests(db)

async def get_my_active_request(db: AsyncSession, principal: Principal, book_id: int):
    require_role(principal, USER_ROLE)
    return await crud.get_active_request(db, principal.user_id, book_id)
