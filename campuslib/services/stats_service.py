from datetime import datetime
from flask import current_app

from campuslib.repositories.book_repo import BookRepo
from campuslib.repositories.borrow_repo import BorrowRepo
from campuslib.repositories.user_repo import UserRepo
from campuslib.services.library_card_service import LibraryCardService


class StatsService:
    @staticmethod
    def admin_stats(now: datetime | None = None) -> dict:
        now = now or datetime.utcnow()
        overdue = BorrowRepo.count_overdue(now)
        return {
            "totalBooks": BookRepo.count(),
            "totalUsers": UserRepo.count(),
            "totalBorrows": BorrowRepo.count_all(),
            "overdueBorrows": overdue,
            "totalFine": overdue * int(current_app.config.get("OVERDUE_FINE", 10)),
        }

    @staticmethod
    def chatbot_context(user_id: int) -> dict:
        """Aggregate counts handed to the chatbot collaborator."""
        return {
            "totalBooks": BookRepo.count(),
            "availableBooks": BookRepo.count_available(),
            "activeBorrows": BorrowRepo.count_active_by_user(user_id),
            "cardStatus": LibraryCardService.status_for(user_id),
            "rules": {
                "borrowLimit": int(current_app.config.get("BORROW_LIMIT", 4)),
                "loanDays": int(current_app.config.get("LOAN_DAYS", 30)),
                "overdueFine": int(current_app.config.get("OVERDUE_FINE", 10)),
            },
        }
