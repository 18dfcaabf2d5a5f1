from datetime import datetime, timedelta

import pytest

from campuslib import lifecycle
from campuslib.extensions import db
from campuslib.models import Book, BorrowRecord
from campuslib.services.borrow_service import BorrowService
from campuslib.services.fine_service import FineService
from campuslib.services.stats_service import StatsService
from campuslib.utils.errors import (
    ConflictError, ForbiddenError, InvalidStateError, NoOpError,
    NotFoundError, UnavailableError,
)

LONG_AGO = datetime.utcnow() - timedelta(days=31)


@pytest.fixture
def reader(make_user):
    return make_user(card="approved")


def _available(book_id):
    return db.session.get(Book, book_id).available


def test_request_creates_pending_record_without_touching_stock(ctx, reader, make_book):
    book_id = make_book(quantity=2)

    record = BorrowService.request_borrow(reader, book_id)

    assert record.status == lifecycle.BORROW_REQUESTED
    assert record.borrow_token.startswith("BR-")
    assert record.due_at is None and record.borrowed_at is None
    assert _available(book_id) == 2


def test_request_unknown_book(ctx, reader):
    with pytest.raises(NotFoundError, match="Book not found"):
        BorrowService.request_borrow(reader, 12345)


def test_card_must_be_approved(ctx, make_user, make_book):
    pending_user = make_user(card="pending")
    no_card_user = make_user()
    book_id = make_book()

    for user_id in (pending_user, no_card_user):
        with pytest.raises(ForbiddenError, match="Approved library card required"):
            BorrowService.request_borrow(user_id, book_id)


def test_duplicate_pending_request_rejected(ctx, reader, make_book):
    book_id = make_book(quantity=3)
    BorrowService.request_borrow(reader, book_id)

    with pytest.raises(ConflictError, match="already have a pending or active borrow"):
        BorrowService.request_borrow(reader, book_id)


def test_approve_allocates_copy_and_sets_due_date(ctx, reader, make_book):
    book_id = make_book(quantity=1)
    record = BorrowService.request_borrow(reader, book_id)
    now = datetime(2026, 1, 10, 12, 0, 0)

    approved = BorrowService.approve_borrow(record.id, now=now)

    assert approved.status == lifecycle.BORROW_APPROVED
    assert approved.approved_at == approved.borrowed_at == now
    assert approved.due_at == now + timedelta(days=30)
    assert _available(book_id) == 0


def test_second_user_blocked_once_last_copy_is_approved(ctx, make_user, make_book):
    first = make_user(card="approved")
    second = make_user(card="approved")
    book_id = make_book(quantity=1)

    record = BorrowService.request_borrow(first, book_id)
    BorrowService.approve_borrow(record.id)

    with pytest.raises(UnavailableError, match="Book not available"):
        BorrowService.request_borrow(second, book_id)


def test_approval_rechecks_availability(ctx, make_user, make_book):
    first = make_user(card="approved")
    second = make_user(card="approved")
    book_id = make_book(quantity=1)

    a = BorrowService.request_borrow(first, book_id)
    b = BorrowService.request_borrow(second, book_id)
    BorrowService.approve_borrow(a.id)

    with pytest.raises(UnavailableError):
        BorrowService.approve_borrow(b.id)

    assert _available(book_id) == 0
    assert db.session.get(BorrowRecord, b.id).status == lifecycle.BORROW_REQUESTED


def test_approve_twice_is_invalid_and_decrements_once(ctx, reader, make_book):
    book_id = make_book(quantity=2)
    record = BorrowService.request_borrow(reader, book_id)
    BorrowService.approve_borrow(record.id)

    with pytest.raises(InvalidStateError):
        BorrowService.approve_borrow(record.id)
    assert _available(book_id) == 1


def test_full_cycle_restores_stock(ctx, reader, make_book):
    book_id = make_book(quantity=1)
    record = BorrowService.request_borrow(reader, book_id)
    BorrowService.approve_borrow(record.id)

    pending = BorrowService.request_return(record.id, reader)
    assert pending.status == lifecycle.RETURN_REQUESTED
    assert pending.return_token.startswith("RT-")

    done = BorrowService.confirm_return(record.id)
    assert done.status == lifecycle.RETURNED
    assert done.returned_at is not None
    assert done.returned_at == done.return_approved_at
    assert _available(book_id) == 1

    with pytest.raises(InvalidStateError):
        BorrowService.confirm_return(record.id)
    assert _available(book_id) == 1


def test_same_book_can_be_borrowed_again_after_return(ctx, reader, make_book):
    book_id = make_book(quantity=1)
    first = BorrowService.request_borrow(reader, book_id)
    BorrowService.approve_borrow(first.id)
    BorrowService.request_return(first.id, reader)
    BorrowService.confirm_return(first.id)

    again = BorrowService.request_borrow(reader, book_id)
    assert again.id != first.id


def test_invalid_transitions(ctx, reader, make_book):
    book_id = make_book(quantity=1)
    record = BorrowService.request_borrow(reader, book_id)

    with pytest.raises(InvalidStateError):
        BorrowService.request_return(record.id, reader)
    with pytest.raises(InvalidStateError):
        BorrowService.confirm_return(record.id)


def test_request_return_checks_ownership(ctx, make_user, make_book):
    owner = make_user(card="approved")
    other = make_user(card="approved")
    record = BorrowService.request_borrow(owner, make_book())
    BorrowService.approve_borrow(record.id)

    with pytest.raises(ForbiddenError):
        BorrowService.request_return(record.id, other)
    with pytest.raises(NotFoundError):
        BorrowService.request_return(9999, owner)


def test_limit_of_four_active_borrows(ctx, reader, make_book):
    books = [make_book(title=f"Book {i}", isbn=f"isbn-{i}") for i in range(5)]
    for book_id in books[:4]:
        BorrowService.approve_borrow(BorrowService.request_borrow(reader, book_id).id)

    with pytest.raises(ForbiddenError, match="Borrow limit reached"):
        BorrowService.request_borrow(reader, books[4])

    approved = BorrowRecord.query.filter_by(user_id=reader, status=lifecycle.BORROW_APPROVED).count()
    assert approved == 4
    assert BorrowService.active_count(reader) == 4


def test_overdue_history_read_applies_flat_fine(ctx, reader, make_book):
    book_id = make_book()
    record = BorrowService.request_borrow(reader, book_id)
    BorrowService.approve_borrow(record.id, now=LONG_AGO)

    history = BorrowService.history(reader)
    assert history[0].fine_amount == 10
    assert history[0].fine_paid is False

    # idempotent
    assert FineService.accrue_for_user(reader) == 0
    assert BorrowService.history(reader)[0].fine_amount == 10


def test_unpaid_fine_blocks_borrow_and_return(ctx, reader, make_book):
    overdue_book = make_book(title="Old", isbn="old")
    other_book = make_book(title="New", isbn="new")
    record = BorrowService.request_borrow(reader, overdue_book)
    BorrowService.approve_borrow(record.id, now=LONG_AGO)

    with pytest.raises(ForbiddenError, match="clear all fines"):
        BorrowService.request_borrow(reader, other_book)

    with pytest.raises(ForbiddenError, match="pay the fine"):
        BorrowService.request_return(record.id, reader)


def test_pay_fine_then_return(ctx, reader, make_book):
    book_id = make_book()
    record = BorrowService.request_borrow(reader, book_id)
    BorrowService.approve_borrow(record.id, now=LONG_AGO)
    BorrowService.history(reader)

    paid = BorrowService.pay_fine(record.id, reader)
    assert paid.fine_amount == 0
    assert paid.fine_paid is True

    # no re-fining after settlement
    assert BorrowService.history(reader)[0].fine_amount == 0

    pending = BorrowService.request_return(record.id, reader)
    assert pending.status == lifecycle.RETURN_REQUESTED
    assert pending.fine_paid is True


def test_pay_fine_without_fine(ctx, reader, make_user, make_book):
    stranger = make_user()
    record = BorrowService.request_borrow(reader, make_book())
    with pytest.raises(NoOpError, match="No fine to pay"):
        BorrowService.pay_fine(record.id, reader)
    with pytest.raises(ForbiddenError):
        BorrowService.pay_fine(record.id, stranger)


def test_admin_stats(ctx, reader, make_book):
    on_time = make_book(title="A", isbn="a")
    late = make_book(title="B", isbn="b")
    BorrowService.approve_borrow(BorrowService.request_borrow(reader, on_time).id)
    BorrowService.approve_borrow(BorrowService.request_borrow(reader, late).id, now=LONG_AGO)

    stats = StatsService.admin_stats()
    assert stats == {
        "totalBooks": 2,
        "totalUsers": 1,
        "totalBorrows": 2,
        "overdueBorrows": 1,
        "totalFine": 10,
    }
