"""Domain errors raised by the catalog and loan services.

Services never raise HTTP types; ``app.main`` maps every ``LibraryError``
to a JSON response using ``status_code`` and ``detail``.
"""


class LibraryError(Exception):
    """Base exception for library system errors."""
    status_code: int = 400
    detail: str = 'Library error'

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class NotFoundError(LibraryError):
    """Referenced book, request or user id does not exist."""
    status_code = 404
    detail = 'Not found'


class UnavailableError(LibraryError):
    """No copies of the book are left to lend."""
    status_code = 409
    detail = 'This book is currently unavailable'


class DuplicateActiveRequestError(LibraryError):
    """The caller already has a pending or approved request for the book."""
    status_code = 409
    detail = 'You already have an active request for this book'


class UnauthorizedError(LibraryError):
    """Caller lacks the role the operation requires."""
    status_code = 403
    detail = 'Not enough privileges'


class ValidationFailedError(LibraryError):
    status_code = 422
    detail = 'Invalid input'


class ConcurrencyConflictError(LibraryError):
    """A concurrent writer changed the record and the retry also lost."""
    status_code = 409
    detail = 'The record was changed by another request, please try again'


class InvalidTransitionError(LibraryError):
    """Request is not in the state the transition starts from."""
    status_code = 409
    detail = 'Request cannot be moved to that status'


class DuplicateBookError(LibraryError):
    status_code = 409
    detail = 'Book with this ISBN already exists'


class BookInUseError(LibraryError):
    status_code = 409
    detail = 'Book has active requests and cannot be deleted'


class DuplicateUserError(LibraryError):
    status_code = 409
    detail = 'User with this email already exists'
