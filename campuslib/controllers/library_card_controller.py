from flask import Blueprint
from flask_jwt_extended import jwt_required, get_jwt_identity

from campuslib.services.library_card_service import LibraryCardService
from campuslib.utils.auth import role_required
from campuslib.utils.errors import LibraryError
from campuslib.utils.http import json_body, json_error, json_ok

card_bp = Blueprint("library_card", __name__)


@card_bp.post("/apply")
@jwt_required()
def apply():
    try:
        data = json_body()
        card = LibraryCardService.apply(int(get_jwt_identity()), data)
        return json_ok(card.to_dict(), 201)
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@card_bp.get("/pending")
@jwt_required()
@role_required("admin")
def pending():
    return json_ok([c.to_dict() for c in LibraryCardService.list_pending()])


@card_bp.post("/approve/<int:card_id>")
@jwt_required()
@role_required("admin")
def approve(card_id: int):
    try:
        card = LibraryCardService.approve(card_id)
        return json_ok(card.to_dict(), message="Library card approved")
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@card_bp.get("/my")
@jwt_required()
def my_card():
    return json_ok(cardStatus=LibraryCardService.status_for(int(get_jwt_identity())))
