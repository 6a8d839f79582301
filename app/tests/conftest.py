# ruff: noqa: E402
import pytest
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient

load_dotenv()

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.auth import hash_password, create_user_token
from app.core.database import Base, get_session
from app.core.permissions import Principal
from app.main import app
from app.models import Book, User, BookRequest, RequestStatus
from app.utils import utcnow

BASE_URL = "http://127.0.0.1:8000"
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

MOCK_ADMIN_EMAIL = "mockadmin@library.com"
MOCK_ADMIN_PASSWORD = "mockadmin123"
MOCK_USER_EMAIL = "mockuser@gmail.com"
MOCK_USER_PASSWORD = "mockuser123"

test_engine = create_async_engine(TEST_DB_URL, future=True, poolclass=StaticPool)

TestAsyncSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="function")
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture(scope="function")
async def test_session(setup_db):
    async with TestAsyncSessionLocal() as session:
        yield session


@pytest.fixture(scope="function")
async def client(test_session):
    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac
    app.dependency_overrides.clear()


async def _add_user(session, **data) -> User:
    user = User(**data)
    session.add(user)
    await session.commit()
    return user


@pytest.fixture(scope="function")
async def mock_admin(test_session) -> User:
    return await _add_user(
        test_session,
        user_uid="ADMIN-AA-00000001",
        full_name="Mock Admin",
        email=MOCK_ADMIN_EMAIL,
        password=hash_password(MOCK_ADMIN_PASSWORD),
        is_admin=True,
    )


@pytest.fixture(scope="function")
async def mock_user(test_session) -> User:
    return await _add_user(
        test_session,
        user_uid="USER-AA-00000001",
        full_name="Mock User",
        email=MOCK_USER_EMAIL,
        password=hash_password(MOCK_USER_PASSWORD),
    )


@pytest.fixture(scope="function")
async def other_user(test_session) -> User:
    return await _add_user(
        test_session,
        user_uid="USER-BB-00000002",
        full_name="Other User",
        email="otheruser@gmail.com",
        password=hash_password("otheruser123"),
    )


@pytest.fixture(scope="function")
def admin_principal(mock_admin) -> Principal:
    return Principal(user_id=mock_admin.user_uid, roles=mock_admin.roles)


@pytest.fixture(scope="function")
def user_principal(mock_user) -> Principal:
    return Principal(user_id=mock_user.user_uid, roles=mock_user.roles)


@pytest.fixture(scope="function")
def other_principal(other_user) -> Principal:
    return Principal(user_id=other_user.user_uid, roles=other_user.roles)


@pytest.fixture(scope="function")
def book_creation_data():
    return {
        "title": "The Pragmatic Programmer",
        "author": "Andrew Hunt",
        "isbn": "9780201616224",
        "genre": "Technology",
        "publication_year": 1999,
        "quantity": 1,
        "available_quantity": 1,
    }


@pytest.fixture(scope="function")
async def mock_book(test_session, book_creation_data) -> Book:
    book = Book(**book_creation_data)
    test_session.add(book)
    await test_session.commit()
    return book


@pytest.fixture(scope="function")
async def mock_catalog(test_session):
    """
    Adds a small catalog spanning three genres and returns the books in insertion order
    """
    rows = [
        ("Dune", "Frank Herbert", "9780441013593", "Science Fiction", 1965, 3),
        ("Neuromancer", "William Gibson", "9780441569595", "Science Fiction", 1984, 2),
        ("Emma", "Jane Austen", "9780141439587", "Classics", 1815, 1),
        ("Clean Code", "Robert Martin", "9780132350884", "Technology", 2008, 4),
        ("Persuasion", "Jane Austen", "9780141439686", "Classics", 1817, 0),
    ]
    books = [
        Book(title=title, author=author, isbn=isbn, genre=genre,
             publication_year=year, quantity=max(qty, 1), available_quantity=qty)
        for title, author, isbn, genre, year, qty in rows
    ]
    test_session.add_all(books)
    await test_session.commit()
    return books


@pytest.fixture(scope="function")
async def pending_request(test_session, mock_book, mock_user) -> BookRequest:
    loan = BookRequest(
        book_id=mock_book.id,
        user_id=mock_user.user_uid,
        request_date=utcnow(),
        status=RequestStatus.PENDING,
    )
    test_session.add(loan)
    await test_session.commit()
    return loan


@pytest.fixture(scope="function")
async def auth_client(client, mock_user) -> AsyncClient:
    client.headers.update({"Authorization": f"Bearer {create_user_token(mock_user)}"})
    return client


@pytest.fixture(scope="function")
async def admin_auth_client(client, mock_admin) -> AsyncClient:
    form_data = {"email": MOCK_ADMIN_EMAIL, "password": MOCK_ADMIN_PASSWORD}
    response = await client.post(f"{BASE_URL}/users/login", data=form_data)
    token = response.json().get("access_token", None)
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client


@pytest.fixture(scope="function")
def user_headers(mock_user) -> dict:
    return {"Authorization": f"Bearer {create_user_token(mock_user)}"}


@pytest.fixture(scope="function")
def other_headers(other_user) -> dict:
    return {"Authorization": f"Bearer {create_user_token(other_user)}"}


@pytest.fixture(scope="function")
def admin_headers(mock_admin) -> dict:
    return {"Authorization": f"Bearer {create_user_token(mock_admin)}"}
