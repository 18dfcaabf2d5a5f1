from sqlalchemy import update

from campuslib.models.library_card import LibraryCard, CARD_PENDING, CARD_APPROVED
from campuslib.extensions import db


class LibraryCardRepo:
    @staticmethod
    def get(card_id: int):
        return db.session.get(LibraryCard, card_id)

    @staticmethod
    def get_by_user(user_id: int):
        return LibraryCard.query.filter_by(user_id=user_id).first()

    @staticmethod
    def list_pending():
        return (
            LibraryCard.query
            .filter_by(card_status=CARD_PENDING)
            .order_by(LibraryCard.created_at.asc(), LibraryCard.id.asc())
            .all()
        )

    @staticmethod
    def mark_approved(card_id: int, when) -> bool:
        result = db.session.execute(
            update(LibraryCard)
            .where(LibraryCard.id == card_id, LibraryCard.card_status == CARD_PENDING)
            .values(card_status=CARD_APPROVED, approved_at=when)
        )
        return result.rowcount == 1
