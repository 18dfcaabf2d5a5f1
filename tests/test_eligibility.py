from campuslib import eligibility
from campuslib.eligibility import Allow, BorrowSnapshot, Deny
from campuslib.lifecycle import BORROW_APPROVED, BORROW_REQUESTED, RETURN_REQUESTED, RETURNED


def _snap(book_id, status=BORROW_APPROVED, fine=0, paid=False):
    return BorrowSnapshot(book_id=book_id, status=status, fine_amount=fine, fine_paid=paid)


def _eval(records, card=True, book_id=99, available=1):
    return eligibility.evaluate(records, card_approved=card, book_id=book_id,
                                book_available=available, limit=4)


def test_allows_clean_user():
    decision = _eval([])
    assert isinstance(decision, Allow)
    assert decision.allowed


def test_unpaid_fine_wins_over_everything():
    records = [_snap(i) for i in range(4)] + [_snap(50, fine=10)]
    decision = _eval(records, card=False, book_id=50, available=0)
    assert isinstance(decision, Deny)
    assert decision.code == eligibility.UNPAID_FINE
    assert decision.reason == "Please clear all fines before borrowing new books"


def test_paid_fine_does_not_block():
    assert _eval([_snap(1, status=RETURNED, fine=0, paid=True)]).allowed


def test_limit_checked_before_card():
    records = [_snap(i) for i in range(4)]
    decision = _eval(records, card=False)
    assert decision.code == eligibility.LIMIT_REACHED
    assert "up to 4 books" in decision.reason


def test_limit_counts_every_unreturned_record():
    records = [
        _snap(1, status=BORROW_REQUESTED),
        _snap(2, status=BORROW_APPROVED),
        _snap(3, status=RETURN_REQUESTED),
        _snap(4, status=BORROW_APPROVED),
    ]
    assert _eval(records).code == eligibility.LIMIT_REACHED


def test_returned_records_do_not_count_toward_limit():
    records = [_snap(i, status=RETURNED) for i in range(10)]
    assert _eval(records).allowed


def test_card_required_before_availability():
    decision = _eval([], card=False, available=0)
    assert decision.code == eligibility.CARD_REQUIRED
    assert decision.reason == "Approved library card required to borrow books"


def test_unavailable_before_duplicate():
    decision = _eval([_snap(99, status=BORROW_REQUESTED)], available=0)
    assert decision.code == eligibility.UNAVAILABLE
    assert decision.reason == "Book not available"


def test_duplicate_hold_denied():
    decision = _eval([_snap(99, status=BORROW_REQUESTED)])
    assert decision.code == eligibility.DUPLICATE


def test_return_requested_is_not_a_duplicate_hold():
    assert _eval([_snap(99, status=RETURN_REQUESTED)]).allowed
