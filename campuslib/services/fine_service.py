from datetime import datetime
from flask import current_app

from campuslib.lifecycle import accrue_fine
from campuslib.repositories.borrow_repo import BorrowRepo
from campuslib.utils.db import commit_or_raise


class FineService:
    @staticmethod
    def fine_amount() -> int:
        return int(current_app.config.get("OVERDUE_FINE", 10))

    @staticmethod
    def accrue(records, now: datetime | None = None) -> int:
        """
        Flat overdue fine for every unreturned, unpaid, past-due record.
        Idempotent: a record already carrying the fine is left alone.
        Returns the number of records changed (persisted immediately).
        """
        now = now or datetime.utcnow()
        amount = FineService.fine_amount()

        changed = 0
        for r in records:
            state = r.state
            new_state = accrue_fine(state, now, amount)
            if new_state is state:
                continue
            if BorrowRepo.save_state(r.id, r.status, new_state,
                                     fine_amount=r.fine_amount, fine_paid=False):
                changed += 1

        if changed:
            commit_or_raise("fine")
            current_app.logger.info(f"[fine] accrued fine={amount} on {changed} record(s)")
        return changed

    @staticmethod
    def accrue_for_user(user_id: int, now: datetime | None = None) -> int:
        return FineService.accrue(BorrowRepo.list_by_user(user_id), now)
