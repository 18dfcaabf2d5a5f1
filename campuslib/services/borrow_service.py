from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from campuslib import eligibility, lifecycle
from campuslib.extensions import db
from campuslib.models.borrow import BorrowRecord
from campuslib.repositories.book_repo import BookRepo
from campuslib.repositories.borrow_repo import BorrowRepo
from campuslib.repositories.library_card_repo import LibraryCardRepo
from campuslib.services.fine_service import FineService
from campuslib.utils.db import commit_or_raise
from campuslib.utils.errors import (
    ConflictError, ForbiddenError, InvalidStateError, NoOpError,
    NotFoundError, UnavailableError,
)

_DENY_ERRORS = {
    eligibility.UNPAID_FINE: ForbiddenError,
    eligibility.LIMIT_REACHED: ForbiddenError,
    eligibility.CARD_REQUIRED: ForbiddenError,
    eligibility.UNAVAILABLE: UnavailableError,
    eligibility.DUPLICATE: ConflictError,
}


class BorrowService:
    @staticmethod
    def _get_record(borrow_id: int) -> BorrowRecord:
        record = BorrowRepo.get(borrow_id)
        if not record:
            raise NotFoundError("Borrow record not found")
        return record

    @staticmethod
    def _get_owned_record(borrow_id: int, user_id: int) -> BorrowRecord:
        record = BorrowService._get_record(borrow_id)
        if record.user_id != user_id:
            current_app.logger.warning(
                f"[borrow] user={user_id} tried to act on borrow={borrow_id} owned by user={record.user_id}"
            )
            raise ForbiddenError("Unauthorized action")
        return record

    @staticmethod
    def request_borrow(user_id: int, book_id: int, now: datetime | None = None) -> BorrowRecord:
        now = now or datetime.utcnow()

        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found")

        # reading the history settles overdue fines first
        records = BorrowRepo.list_by_user(user_id)
        FineService.accrue(records, now)

        decision = eligibility.evaluate_for(
            records,
            LibraryCardRepo.get_by_user(user_id),
            book,
            limit=int(current_app.config.get("BORROW_LIMIT", 4)),
        )
        if not decision.allowed:
            current_app.logger.warning(
                f"[borrow] denied user={user_id} book={book_id}: {decision.code}"
            )
            raise _DENY_ERRORS[decision.code](decision.reason)

        record = BorrowRecord(
            user_id=user_id,
            book_id=book_id,
            status=lifecycle.BORROW_REQUESTED,
            borrow_token=lifecycle.make_token("BR"),
            created_at=now,
        )
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            # concurrent duplicate hold caught by the unique index
            db.session.rollback()
            raise ConflictError("You already have a pending or active borrow for this book")

        current_app.logger.info(
            f"[borrow] requested borrow={record.id} user={user_id} book={book_id} token={record.borrow_token}"
        )
        return record

    @staticmethod
    def approve_borrow(borrow_id: int, now: datetime | None = None) -> BorrowRecord:
        now = now or datetime.utcnow()
        record = BorrowService._get_record(borrow_id)

        new_state = lifecycle.approve(
            record.state, now, loan_days=int(current_app.config.get("LOAN_DAYS", 30))
        )

        if not BookRepo.get(record.book_id):
            raise NotFoundError("Book not found")

        # copy allocation and status change commit together or not at all
        if not BookRepo.take_copy(record.book_id):
            BorrowRepo.rollback()
            current_app.logger.warning(f"[borrow] approve borrow={borrow_id}: no copies left")
            raise UnavailableError()

        if not BorrowRepo.save_state(borrow_id, lifecycle.BORROW_REQUESTED, new_state):
            BorrowRepo.rollback()
            raise InvalidStateError("Borrow request was already processed")

        commit_or_raise("borrow")
        current_app.logger.info(f"[borrow] approved borrow={borrow_id} due={new_state.due_at.isoformat()}")
        return BorrowRepo.get(borrow_id)

    @staticmethod
    def request_return(borrow_id: int, user_id: int, now: datetime | None = None) -> BorrowRecord:
        record = BorrowService._get_owned_record(borrow_id, user_id)
        FineService.accrue([record], now)

        state = record.state
        new_state = lifecycle.request_return(state, lifecycle.make_token("RT"))

        if state.fine.outstanding:
            raise ForbiddenError("Please pay the fine before returning the book")

        if not BorrowRepo.save_state(borrow_id, lifecycle.BORROW_APPROVED, new_state,
                                     fine_amount=state.fine.amount):
            BorrowRepo.rollback()
            raise InvalidStateError("Borrow record changed, try again")

        commit_or_raise("borrow")
        current_app.logger.info(
            f"[borrow] return requested borrow={borrow_id} token={new_state.return_token}"
        )
        return BorrowRepo.get(borrow_id)

    @staticmethod
    def confirm_return(borrow_id: int, now: datetime | None = None) -> BorrowRecord:
        now = now or datetime.utcnow()
        record = BorrowService._get_record(borrow_id)

        new_state = lifecycle.confirm_return(record.state, now)

        if not BorrowRepo.save_state(borrow_id, lifecycle.RETURN_REQUESTED, new_state):
            BorrowRepo.rollback()
            raise InvalidStateError("Return request was already processed")

        if not BookRepo.put_back_copy(record.book_id):
            BorrowRepo.rollback()
            current_app.logger.warning(
                f"[borrow] confirm return borrow={borrow_id}: book={record.book_id} missing or inventory full"
            )
            raise ConflictError("Book inventory cannot accept the returned copy")

        commit_or_raise("borrow")
        current_app.logger.info(f"[borrow] return confirmed borrow={borrow_id}")
        return BorrowRepo.get(borrow_id)

    @staticmethod
    def pay_fine(borrow_id: int, user_id: int) -> BorrowRecord:
        record = BorrowService._get_owned_record(borrow_id, user_id)

        if not record.fine_amount or record.fine_amount <= 0:
            raise NoOpError("No fine to pay")

        paid = record.fine_amount
        new_state = lifecycle.settle_fine(record.state)
        if not BorrowRepo.save_state(borrow_id, record.status, new_state, fine_amount=paid):
            BorrowRepo.rollback()
            raise ConflictError("Borrow record changed, try again")

        commit_or_raise("fine")
        current_app.logger.info(f"[fine] paid amount={paid} borrow={borrow_id} user={user_id}")
        return BorrowRepo.get(borrow_id)

    @staticmethod
    def history(user_id: int, now: datetime | None = None):
        FineService.accrue_for_user(user_id, now)
        return BorrowRepo.list_by_user(user_id)

    @staticmethod
    def active_count(user_id: int) -> int:
        return BorrowRepo.count_active_by_user(user_id)

    @staticmethod
    def list_all():
        return BorrowRepo.list_all()

    @staticmethod
    def list_borrow_requests():
        return BorrowRepo.list_by_status(lifecycle.BORROW_REQUESTED)

    @staticmethod
    def list_return_requests():
        return BorrowRepo.list_by_status(lifecycle.RETURN_REQUESTED)
