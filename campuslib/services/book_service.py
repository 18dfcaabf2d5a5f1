from flask import current_app

from campuslib.models.book import Book
from campuslib.repositories.book_repo import BookRepo
from campuslib.repositories.borrow_repo import BorrowRepo
from campuslib.utils.errors import ConflictError, NotFoundError, ValidationError


def _as_int(data: dict, key: str, default: int) -> int:
    raw = data.get(key, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


class BookService:
    @staticmethod
    def list_books(search: str | None = None):
        return BookRepo.list_all((search or "").strip() or None)

    @staticmethod
    def get_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    @staticmethod
    def create_book(data: dict):
        title = str(data.get("title") or "").strip()
        author = str(data.get("author") or "").strip()
        isbn = str(data.get("isbn") or "").strip()
        if not title or not author or not isbn:
            raise ValidationError("Title, author and ISBN are required")

        quantity = _as_int(data, "quantity", 1)
        if quantity < 0:
            raise ValidationError("quantity must not be negative")
        available = _as_int(data, "available", quantity)
        available = max(0, min(available, quantity))

        book = BookRepo.create(Book(
            title=title,
            author=author,
            isbn=isbn,
            category=str(data.get("category") or "").strip(),
            quantity=quantity,
            available=available,
        ))
        current_app.logger.info(f"[books] created book={book.id} isbn={isbn}")
        return book

    @staticmethod
    def delete_book(book_id: int):
        book = BookService.get_book(book_id)

        if BorrowRepo.count_active_by_book(book_id) > 0:
            raise ConflictError("Book has active borrow records. Complete returns first.")

        BookRepo.delete(book)
        current_app.logger.info(f"[books] deleted book={book_id}")
