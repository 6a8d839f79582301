from app.core.database import Base
from app.utils import generate_user_id, utcnow
from sqlalchemy import (Column, String, Integer, Text,
                        DateTime, Boolean, ForeignKey,
                        Enum, CheckConstraint)
from sqlalchemy.orm import relationship
import enum

ADMIN_ROLE = 'Admin'
USER_ROLE = 'User'

class RequestStatus(enum.Enum):
    PENDING = 'Pending'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'
    RETURNED = 'Returned'

ACTIVE_STATUSES = (RequestStatus.PENDING, RequestStatus.APPROVED)

class Book(Base):
    __tablename__ = 'books'
    __table_args__ = (
        CheckConstraint('available_quantity >= 0', name='ck_books_available_non_negative'),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False, index=True)
    author = Column(String(100), nullable=False)
    isbn = Column(String(20), unique=True, nullable=False)
    genre = Column(String(50), nullable=False, index=True)
    publication_year = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    available_quantity = Column(Integer, nullable=False, default=1)
    description = Column(Text)
    cover_image_url = Column(String(500))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    version_id = Column(Integer, nullable=False)

    requests = relationship('BookRequest', back_populates='book', cascade='all, delete-orphan')

    __mapper_args__ = {'version_id_col': version_id}

class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    user_uid = Column(String(50), unique=True, nullable=False, default=generate_user_id)
    full_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    is_admin = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    requests = relationship('BookRequest', back_populates='user')

    @property
    def roles(self) -> frozenset[str]:
        if self.is_admin:
            return frozenset({USER_ROLE, ADMIN_ROLE})
        return frozenset({USER_ROLE})

class BookRequest(Base):
    __tablename__ = 'book_requests'

    id = Column(Integer, primary_key=True)
    book_id = Column(Integer, ForeignKey('books.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(String(50), ForeignKey('users.user_uid'), nullable=False, index=True)
    request_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    approved_date = Column(DateTime(timezone=True))
    due_date = Column(DateTime(timezone=True))
    return_date = Column(DateTime(timezone=True))
    version_id = Column(Integer, nullable=False)

    book = relationship('Book', back_populates='requests')
    user = relationship('User', back_populates='requests')

    __mapper_args__ = {'version_id_col': version_id}

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
