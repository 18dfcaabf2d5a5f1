from datetime import datetime
from sqlalchemy import update

from campuslib.lifecycle import RETURNED
from campuslib.models.borrow import BorrowRecord, state_columns
from campuslib.extensions import db


class BorrowRepo:
    @staticmethod
    def get(borrow_id: int):
        return db.session.get(BorrowRecord, borrow_id)

    @staticmethod
    def list_by_user(user_id: int):
        return (
            BorrowRecord.query
            .filter_by(user_id=user_id)
            .order_by(BorrowRecord.created_at.desc(), BorrowRecord.id.desc())
            .all()
        )

    @staticmethod
    def list_all():
        return BorrowRecord.query.order_by(BorrowRecord.created_at.desc(), BorrowRecord.id.desc()).all()

    @staticmethod
    def list_by_status(status: str):
        return (
            BorrowRecord.query
            .filter_by(status=status)
            .order_by(BorrowRecord.created_at.asc(), BorrowRecord.id.asc())
            .all()
        )

    @staticmethod
    def rollback():
        db.session.rollback()

    @staticmethod
    def count_all() -> int:
        return BorrowRecord.query.count()

    @staticmethod
    def count_active_by_user(user_id: int) -> int:
        return BorrowRecord.query.filter(
            BorrowRecord.user_id == user_id,
            BorrowRecord.status != RETURNED,
        ).count()

    @staticmethod
    def count_overdue(now: datetime) -> int:
        return BorrowRecord.query.filter(
            BorrowRecord.returned_at.is_(None),
            BorrowRecord.due_at.isnot(None),
            BorrowRecord.due_at < now,
        ).count()

    @staticmethod
    def save_state(borrow_id: int, expected_status: str, state, **extra_where) -> bool:
        """
        Compare-and-swap: writes ``state`` only if the row is still in
        ``expected_status`` (plus any extra column equality checks). No commit.
        """
        criteria = [BorrowRecord.id == borrow_id, BorrowRecord.status == expected_status]
        for column, value in extra_where.items():
            criteria.append(getattr(BorrowRecord, column) == value)
        result = db.session.execute(
            update(BorrowRecord).where(*criteria).values(**state_columns(state))
        )
        return result.rowcount == 1

    @staticmethod
    def count_active_by_book(book_id: int) -> int:
        return BorrowRecord.query.filter(
            BorrowRecord.book_id == book_id,
            BorrowRecord.status != RETURNED,
        ).count()
