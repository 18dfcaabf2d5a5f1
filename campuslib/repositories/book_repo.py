from sqlalchemy import or_, update

from campuslib.models.book import Book
from campuslib.extensions import db


class BookRepo:
    @staticmethod
    def list_all(search: str | None = None):
        q = Book.query
        if search:
            # literal substring: % and _ in the query are escaped
            q = q.filter(or_(
                Book.title.icontains(search, autoescape=True),
                Book.author.icontains(search, autoescape=True),
            ))
        return q.order_by(Book.id.desc()).all()

    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def count() -> int:
        return Book.query.count()

    @staticmethod
    def count_available() -> int:
        return Book.query.filter(Book.available > 0).count()

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.commit()
        return book

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)
        db.session.commit()

    @staticmethod
    def take_copy(book_id: int) -> bool:
        """Atomic ``available -= 1`` guarded by ``available > 0``. No commit."""
        result = db.session.execute(
            update(Book)
            .where(Book.id == book_id, Book.available > 0)
            .values(available=Book.available - 1)
        )
        return result.rowcount == 1

    @staticmethod
    def put_back_copy(book_id: int) -> bool:
        """Atomic ``available += 1`` guarded by ``available < quantity``. No commit."""
        result = db.session.execute(
            update(Book)
            .where(Book.id == book_id, Book.available < Book.quantity)
            .values(available=Book.available + 1)
        )
        return result.rowcount == 1
