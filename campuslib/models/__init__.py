from campuslib.models.user import User
from campuslib.models.book import Book
from campuslib.models.library_card import LibraryCard
from campuslib.models.borrow import BorrowRecord

__all__ = ["User", "Book", "LibraryCard", "BorrowRecord"]
