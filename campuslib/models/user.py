from datetime import datetime
from campuslib.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    phone = db.Column(db.String(32), nullable=True)
    department = db.Column(db.String(120), nullable=True)
    reg_no = db.Column(db.String(32), nullable=True)

    role = db.Column(db.String(20), nullable=False, default="user")  # user/admin

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "regNo": self.reg_no,
            "role": self.role,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
