from datetime import datetime
from campuslib.extensions import db


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(200), nullable=False, index=True)
    isbn = db.Column(db.String(32), nullable=False, index=True)
    category = db.Column(db.String(100), nullable=False, default="")

    quantity = db.Column(db.Integer, nullable=False, default=1)
    available = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def summary(self):
        return {"id": self.id, "title": self.title, "author": self.author, "isbn": self.isbn}

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "category": self.category,
            "quantity": self.quantity,
            "available": self.available,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
