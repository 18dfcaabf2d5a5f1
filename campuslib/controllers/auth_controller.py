from flask import Blueprint
from flask_jwt_extended import jwt_required, get_jwt_identity

from campuslib.repositories.user_repo import UserRepo
from campuslib.services.auth_service import AuthService
from campuslib.utils.errors import LibraryError
from campuslib.utils.http import json_body, json_error, json_ok

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register")
def register():
    try:
        data = json_body()
        user = AuthService.register(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            department=data.get("department"),
            reg_no=data.get("regNo"),
            phone=data.get("phone"),
            role="user",  # never taken from the request
        )
        return json_ok(user.to_dict(), 201)
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@auth_bp.post("/login")
def login():
    try:
        data = json_body()
        token, user = AuthService.login(data.get("email"), data.get("password"))
        return json_ok(access_token=token, user=user.to_dict())
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@auth_bp.get("/me")
@jwt_required()
def me():
    user = UserRepo.get_by_id(int(get_jwt_identity()))
    if not user:
        return json_error("User not found", 404)
    return json_ok(user.to_dict())
