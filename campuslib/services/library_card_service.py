from datetime import datetime
from flask import current_app
from sqlalchemy.exc import IntegrityError

from campuslib.extensions import db
from campuslib.models.library_card import LibraryCard, CARD_PENDING
from campuslib.repositories.library_card_repo import LibraryCardRepo
from campuslib.utils.db import commit_or_raise
from campuslib.utils.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError

REQUIRED_FIELDS = ("name", "department", "level", "term")


class LibraryCardService:
    @staticmethod
    def apply(user_id: int, data: dict) -> LibraryCard:
        values = {k: str(data.get(k) or "").strip() for k in REQUIRED_FIELDS}
        if not all(values.values()):
            raise ValidationError("All fields are required")

        if LibraryCardRepo.get_by_user(user_id):
            raise ConflictError("Library card already applied")

        card = LibraryCard(
            user_id=user_id,
            payment_method=(data.get("paymentMethod") or "demo"),
            payment_status="paid",  # demo payment, recorded only
            card_status=CARD_PENDING,
            **values,
        )
        db.session.add(card)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Library card already applied")

        current_app.logger.info(f"[card] user={user_id} applied card={card.id}")
        return card

    @staticmethod
    def list_pending():
        return LibraryCardRepo.list_pending()

    @staticmethod
    def approve(card_id: int, now: datetime | None = None) -> LibraryCard:
        now = now or datetime.utcnow()
        card = LibraryCardRepo.get(card_id)
        if not card:
            raise NotFoundError("Library card not found")

        if not LibraryCardRepo.mark_approved(card_id, now):
            db.session.rollback()
            raise InvalidStateError("Library card already approved")

        commit_or_raise("card")
        current_app.logger.info(f"[card] approved card={card_id} user={card.user_id}")
        return LibraryCardRepo.get(card_id)

    @staticmethod
    def status_for(user_id: int) -> str:
        card = LibraryCardRepo.get_by_user(user_id)
        return card.card_status if card else "none"
