from datetime import datetime
from sqlalchemy import text

from campuslib.extensions import db
from campuslib.lifecycle import (
    BORROW_REQUESTED, HOLD_STATUSES,
    Approved, Fine, Requested, ReturnRequested, Returned,
)

_HOLD_FILTER = text("status IN ('%s')" % "', '".join(HOLD_STATUSES))


class BorrowRecord(db.Model):
    __tablename__ = "borrow_records"
    __table_args__ = (
        # one pending/approved hold per (user, book)
        db.Index(
            "uq_borrow_records_active_hold", "user_id", "book_id",
            unique=True,
            sqlite_where=_HOLD_FILTER,
            postgresql_where=_HOLD_FILTER,
            mssql_where=_HOLD_FILTER,
        ),
    )

    id = db.Column(db.Integer, primary_key=True)

    # weak references: users and books are owned elsewhere
    user_id = db.Column(db.Integer, nullable=False, index=True)
    book_id = db.Column(db.Integer, nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False, default=BORROW_REQUESTED, index=True)

    borrow_token = db.Column(db.String(32), nullable=False)
    return_token = db.Column(db.String(32), nullable=True)

    borrowed_at = db.Column(db.DateTime, nullable=True)  # set only on approval
    due_at = db.Column(db.DateTime, nullable=True)
    returned_at = db.Column(db.DateTime, nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    return_approved_at = db.Column(db.DateTime, nullable=True)

    fine_amount = db.Column(db.Integer, nullable=False, default=0)
    fine_paid = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", primaryjoin="foreign(BorrowRecord.user_id) == User.id", viewonly=True)
    book = db.relationship("Book", primaryjoin="foreign(BorrowRecord.book_id) == Book.id", viewonly=True)

    @property
    def state(self):
        """Typed view of the row for the current status."""
        fine = Fine(amount=self.fine_amount or 0, paid=bool(self.fine_paid))
        if self.status == BORROW_REQUESTED:
            return Requested(borrow_token=self.borrow_token)

        loan = dict(
            borrow_token=self.borrow_token,
            approved_at=self.approved_at,
            borrowed_at=self.borrowed_at,
            due_at=self.due_at,
            fine=fine,
        )
        if self.status == Approved.status:
            return Approved(**loan)
        if self.status == ReturnRequested.status:
            return ReturnRequested(return_token=self.return_token, **loan)
        return Returned(
            return_token=self.return_token,
            returned_at=self.returned_at,
            return_approved_at=self.return_approved_at,
            **loan,
        )

    def to_dict(self):
        def _iso(v):
            return v.isoformat() if v else None

        return {
            "id": self.id,
            "userId": self.user_id,
            "bookId": self.book_id,
            "book": self.book.summary() if self.book else None,
            "user": {"email": self.user.email, "regNo": self.user.reg_no} if self.user else None,
            "status": self.status,
            "borrowToken": self.borrow_token,
            "returnToken": self.return_token,
            "borrowedAt": _iso(self.borrowed_at),
            "dueAt": _iso(self.due_at),
            "returnedAt": _iso(self.returned_at),
            "approvedAt": _iso(self.approved_at),
            "returnApprovedAt": _iso(self.return_approved_at),
            "fineAmount": self.fine_amount,
            "finePaid": bool(self.fine_paid),
            "createdAt": _iso(self.created_at),
        }


def state_columns(state) -> dict:
    """Column values for a lifecycle variant; fields the variant lacks are cleared."""
    fine = getattr(state, "fine", None)
    values = {
        "status": state.status,
        "borrow_token": state.borrow_token,
        "fine_amount": fine.amount if fine else 0,
        "fine_paid": fine.paid if fine else False,
    }
    for attr in ("approved_at", "borrowed_at", "due_at", "return_token",
                 "returned_at", "return_approved_at"):
        values[attr] = getattr(state, attr, None)
    return values
