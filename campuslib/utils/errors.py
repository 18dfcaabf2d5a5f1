"""
Domain error taxonomy.

Services raise these; controllers turn them into
``{"success": False, "message": ...}`` responses with ``status_code``.
"""


class LibraryError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(LibraryError):
    status_code = 400


class NotFoundError(LibraryError):
    status_code = 404


class ForbiddenError(LibraryError):
    status_code = 403


class ConflictError(LibraryError):
    status_code = 400


class UnavailableError(ConflictError):
    def __init__(self, message: str = "Book not available"):
        super().__init__(message)


class InvalidStateError(LibraryError):
    status_code = 400


class NoOpError(LibraryError):
    status_code = 400


class InternalError(LibraryError):
    status_code = 500
