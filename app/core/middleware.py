import time
import enum
import re
from fastapi import Request
from jose.exceptions import JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable, Awaitable
from starlette.responses import Response
from app.core.auth import decode_token
from logging import getLogger

logger = getLogger(__name__)

class Event(enum.Enum):
    LIST_BOOKS = 'list_books'
    FETCH_BOOK = 'fetch_book'
    CREATE_BOOK = 'create_book'
    UPDATE_BOOK = 'update_book'
    DELETE_BOOK = 'delete_book'
    REQUEST_BOOK = 'request_book'
    LIST_MY_REQUESTS = 'list_my_requests'
    LIST_REQUESTS = 'list_requests'
    APPROVE_REQUEST = 'approve_request'
    REJECT_REQUEST = 'reject_request'
    RETURN_BOOK = 'return_book'
    CREATE_USER = 'create_user'
    LOGIN_USER = 'login_user'
    UNIDENTIFIED_EVENT = 'unidentified_event'

_REQUEST_ACTION = re.compile(r'^/requests/\d+/(approve|reject|return)$')
_BOOK_ITEM = re.compile(r'^/books/\d+$')

def actor_id(actor, claims):
    if isinstance(claims, dict) and claims.get('user_uid'):
        return claims['user_uid']
    if isinstance(actor, dict):
        return actor.get('email', 'anonymous')
    return 'anonymous'

def get_actor_claims(token: str):
    try:
        payload = decode_token(token, False)
        return {
            'email': payload.get('sub'),
            'user_uid': payload.get('user_uid'),
            'roles': payload.get('roles', []),
            }
    except JWTError as e:
        logger.debug(f'Token decode error: {e}')
        return None

def detect_event_from_request(request: Request) -> Event:
    path = request.url.path.lower().rstrip('/') or '/'
    method = request.method.upper()

    # Book-related
    if path == '/books' and method == 'GET':
        return Event.LIST_BOOKS
    if path == '/books' and method == 'POST':
        return Event.CREATE_BOOK
    if path == '/books/genres' and method == 'GET':
        return Event.LIST_BOOKS
    if _BOOK_ITEM.match(path):
        return {
            'GET': Event.FETCH_BOOK,
            'PUT': Event.UPDATE_BOOK,
            'DELETE': Event.DELETE_BOOK,
        }.get(method, Event.UNIDENTIFIED_EVENT)

    # Request-related
    if path == '/requests' and method == 'POST':
        return Event.REQUEST_BOOK
    if path == '/requests' and method == 'GET':
        return Event.LIST_REQUESTS
    if path == '/requests/mine' and method == 'GET':
        return Event.LIST_MY_REQUESTS
    match = _REQUEST_ACTION.match(path)
    if match and method == 'POST':
        return {
            'approve': Event.APPROVE_REQUEST,
            'reject': Event.REJECT_REQUEST,
            'return': Event.RETURN_BOOK,
        }[match.group(1)]

    # User-related
    if path == '/users/sign-up' and method == 'POST':
        return Event.CREATE_USER
    if path == '/users/login' and method == 'POST':
        return Event.LOGIN_USER

    return Event.UNIDENTIFIED_EVENT

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        start_time = time.time()
        claims = None
        event_type = detect_event_from_request(request)

        auth_header = request.headers.get('Authorization')
        if auth_header and auth_header.startswith('Bearer '):
            claims = get_actor_claims(auth_header[7:])

        response = await call_next(request)

        actor = getattr(request.state, 'actor', None)
        latency = round((time.time() - start_time) * 1000, 2)
        message = (f'{event_type.value} {request.method} {request.url.path} '
                   f'actor={actor_id(actor, claims)} status={response.status_code} latency={latency} ms')
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400 or event_type == Event.UNIDENTIFIED_EVENT:
            logger.warning(message)
        else:
            logger.info(message)
        return response
