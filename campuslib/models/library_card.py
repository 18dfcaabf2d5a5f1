from datetime import datetime
from campuslib.extensions import db

CARD_PENDING = "pending"
CARD_APPROVED = "approved"


class LibraryCard(db.Model):
    __tablename__ = "library_cards"

    id = db.Column(db.Integer, primary_key=True)

    # one card per user
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    department = db.Column(db.String(120), nullable=False)
    level = db.Column(db.String(20), nullable=False)
    term = db.Column(db.String(20), nullable=False)

    # payment is a recorded label only
    payment_method = db.Column(db.String(30), nullable=False, default="demo")
    payment_status = db.Column(db.String(20), nullable=False, default="paid")  # pending/paid

    card_status = db.Column(db.String(20), nullable=False, default=CARD_PENDING)  # pending/approved
    approved_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", backref=db.backref("library_card", uselist=False))

    @property
    def is_approved(self) -> bool:
        return self.card_status == CARD_APPROVED

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "user": {"email": self.user.email, "regNo": self.user.reg_no} if self.user else None,
            "name": self.name,
            "department": self.department,
            "level": self.level,
            "term": self.term,
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "cardStatus": self.card_status,
            "approvedAt": self.approved_at.isoformat() if self.approved_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
