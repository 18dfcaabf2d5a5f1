"""
Borrow lifecycle as one variant per state.

    Requested --approve--> Approved --request_return--> ReturnRequested --confirm_return--> Returned

Every variant only carries the fields that exist in that state, so an
approved loan without a due date (or a return request without a return
token) cannot be built. ``Returned`` is terminal.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional, Union

from campuslib.utils.errors import InvalidStateError

BORROW_REQUESTED = "borrow_requested"
BORROW_APPROVED = "borrow_approved"
RETURN_REQUESTED = "return_requested"
RETURNED = "returned"

STATUSES = (BORROW_REQUESTED, BORROW_APPROVED, RETURN_REQUESTED, RETURNED)
HOLD_STATUSES = (BORROW_REQUESTED, BORROW_APPROVED)


def make_token(prefix: str, now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """Human-readable confirmation code, e.g. ``BR-482913-417``. Not a credential."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = str(now_ms)[-6:].rjust(6, "0")
    n = (rng or random).randint(100, 999)
    return f"{prefix}-{suffix}-{n}"


@dataclass(frozen=True)
class Fine:
    amount: int = 0
    paid: bool = False

    @property
    def outstanding(self) -> bool:
        return self.amount > 0 and not self.paid


@dataclass(frozen=True)
class Requested:
    borrow_token: str
    status = BORROW_REQUESTED


@dataclass(frozen=True)
class Approved:
    borrow_token: str
    approved_at: datetime
    borrowed_at: datetime
    due_at: datetime
    fine: Fine = Fine()
    status = BORROW_APPROVED

    def is_overdue(self, now: datetime) -> bool:
        return self.due_at < now


@dataclass(frozen=True)
class ReturnRequested:
    borrow_token: str
    approved_at: datetime
    borrowed_at: datetime
    due_at: datetime
    return_token: str
    fine: Fine = Fine()
    status = RETURN_REQUESTED

    def is_overdue(self, now: datetime) -> bool:
        return self.due_at < now


@dataclass(frozen=True)
class Returned:
    borrow_token: str
    approved_at: datetime
    borrowed_at: datetime
    due_at: datetime
    return_token: str
    returned_at: datetime
    return_approved_at: datetime
    fine: Fine = Fine()
    status = RETURNED


BorrowState = Union[Requested, Approved, ReturnRequested, Returned]


def _expect(state: BorrowState, kind: type, action: str):
    if not isinstance(state, kind):
        raise InvalidStateError(f"Cannot {action} a borrow in status '{state.status}'")


def approve(state: BorrowState, now: datetime, loan_days: int = 30) -> Approved:
    _expect(state, Requested, "approve")
    return Approved(
        borrow_token=state.borrow_token,
        approved_at=now,
        borrowed_at=now,
        due_at=now + timedelta(days=loan_days),
    )


def request_return(state: BorrowState, return_token: str) -> ReturnRequested:
    _expect(state, Approved, "request return for")
    return ReturnRequested(
        borrow_token=state.borrow_token,
        approved_at=state.approved_at,
        borrowed_at=state.borrowed_at,
        due_at=state.due_at,
        return_token=return_token,
        fine=state.fine,
    )


def confirm_return(state: BorrowState, now: datetime) -> Returned:
    _expect(state, ReturnRequested, "confirm return for")
    return Returned(
        borrow_token=state.borrow_token,
        approved_at=state.approved_at,
        borrowed_at=state.borrowed_at,
        due_at=state.due_at,
        return_token=state.return_token,
        returned_at=now,
        return_approved_at=now,
        fine=state.fine,
    )


def accrue_fine(state: BorrowState, now: datetime, amount: int = 10) -> BorrowState:
    """
    Flat fine for an overdue, unreturned, unpaid loan. Returns the same
    object when nothing changes, so callers can detect a no-op with ``is``.
    """
    if not isinstance(state, (Approved, ReturnRequested)):
        return state
    if state.fine.paid or state.fine.amount == amount or not state.is_overdue(now):
        return state
    return replace(state, fine=Fine(amount=amount, paid=False))


def settle_fine(state: BorrowState) -> BorrowState:
    return replace(state, fine=Fine(amount=0, paid=True))
