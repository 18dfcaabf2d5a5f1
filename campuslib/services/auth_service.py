from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token

from campuslib.models.user import User
from campuslib.repositories.user_repo import UserRepo
from campuslib.utils.errors import ConflictError, ValidationError, LibraryError


class AuthService:
    @staticmethod
    def register(name: str, email: str, password: str, department: str | None = None,
                 reg_no: str | None = None, phone: str | None = None, role: str = "user"):
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        if len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")

        if UserRepo.get_by_email(email):
            raise ConflictError("Email already exists", status_code=409)

        user = User(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            department=(department or "").strip() or None,
            reg_no=(reg_no or "").strip() or None,
            phone=(phone or "").strip() or None,
            role=role,
        )
        UserRepo.create(user)
        current_app.logger.info(f"[auth] registered user={user.id} role={role}")
        return user

    @staticmethod
    def login(email: str, password: str):
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password required")

        user = UserRepo.get_by_email(email)
        if not user or not check_password_hash(user.password_hash, password):
            raise LibraryError("Invalid credentials", status_code=401)

        token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "email": user.email, "name": user.name},
        )
        return token, user
