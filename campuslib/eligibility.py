"""
Borrow eligibility rules.

Pure decision over a user's borrow records, their library card and the
target book. Rules are checked in a fixed order and the first failing one
is reported:

1. unpaid fine anywhere
2. active borrow limit reached
3. no approved library card
4. target book has no available copy
5. the user already holds a pending/approved request for this book
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from campuslib.lifecycle import HOLD_STATUSES, RETURNED

UNPAID_FINE = "unpaid_fine"
LIMIT_REACHED = "limit_reached"
CARD_REQUIRED = "card_required"
UNAVAILABLE = "unavailable"
DUPLICATE = "duplicate"


@dataclass(frozen=True)
class BorrowSnapshot:
    book_id: int
    status: str
    fine_amount: int = 0
    fine_paid: bool = False

    @classmethod
    def from_record(cls, record) -> "BorrowSnapshot":
        return cls(
            book_id=record.book_id,
            status=record.status,
            fine_amount=record.fine_amount or 0,
            fine_paid=bool(record.fine_paid),
        )

    @property
    def has_unpaid_fine(self) -> bool:
        return self.fine_amount > 0 and not self.fine_paid

    @property
    def is_active(self) -> bool:
        return self.status != RETURNED


@dataclass(frozen=True)
class Allow:
    allowed = True


@dataclass(frozen=True)
class Deny:
    code: str
    reason: str
    allowed = False


def evaluate(
    records: Iterable[BorrowSnapshot],
    card_approved: bool,
    book_id: int,
    book_available: int,
    limit: int = 4,
):
    records = list(records)

    if any(r.has_unpaid_fine for r in records):
        return Deny(UNPAID_FINE, "Please clear all fines before borrowing new books")

    if sum(1 for r in records if r.is_active) >= limit:
        return Deny(LIMIT_REACHED, f"Borrow limit reached. You can borrow up to {limit} books at a time.")

    if not card_approved:
        return Deny(CARD_REQUIRED, "Approved library card required to borrow books")

    if book_available <= 0:
        return Deny(UNAVAILABLE, "Book not available")

    if any(r.book_id == book_id and r.status in HOLD_STATUSES for r in records):
        return Deny(DUPLICATE, "You already have a pending or active borrow for this book")

    return Allow()


def evaluate_for(records, card, book, limit: int = 4):
    """Convenience wrapper taking ORM rows (``card`` may be ``None``)."""
    card_approved = bool(card is not None and card.is_approved)
    return evaluate(
        (BorrowSnapshot.from_record(r) for r in records),
        card_approved=card_approved,
        book_id=book.id,
        book_available=book.available or 0,
        limit=limit,
    )
