from flask import Blueprint
from flask_jwt_extended import jwt_required, get_jwt_identity

from campuslib.services.borrow_service import BorrowService
from campuslib.utils.auth import role_required
from campuslib.utils.errors import LibraryError
from campuslib.utils.http import json_error, json_ok

borrow_bp = Blueprint("borrows", __name__)


# -----------------------------
# User
# -----------------------------
@borrow_bp.post("/<int:book_id>")
@jwt_required()
def request_borrow(book_id: int):
    try:
        record = BorrowService.request_borrow(int(get_jwt_identity()), book_id)
        return json_ok(record.to_dict(), 201, message="Borrow request submitted")
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@borrow_bp.get("/my")
@jwt_required()
def my_history():
    try:
        records = BorrowService.history(int(get_jwt_identity()))
        return json_ok([r.to_dict() for r in records])
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@borrow_bp.get("/my/count")
@jwt_required()
def my_active_count():
    return json_ok(count=BorrowService.active_count(int(get_jwt_identity())))


@borrow_bp.post("/request-return/<int:borrow_id>")
@jwt_required()
def request_return(borrow_id: int):
    try:
        record = BorrowService.request_return(borrow_id, int(get_jwt_identity()))
        return json_ok(record.to_dict(), message="Return request submitted")
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@borrow_bp.post("/pay-fine/<int:borrow_id>")
@jwt_required()
def pay_fine(borrow_id: int):
    try:
        record = BorrowService.pay_fine(borrow_id, int(get_jwt_identity()))
        return json_ok(record.to_dict(), message="Fine paid successfully")
    except LibraryError as e:
        return json_error(e.message, e.status_code)


# -----------------------------
# Admin
# -----------------------------
@borrow_bp.get("")
@jwt_required()
@role_required("admin")
def all_borrows():
    return json_ok([r.to_dict() for r in BorrowService.list_all()])


@borrow_bp.get("/admin/borrow-requests")
@jwt_required()
@role_required("admin")
def borrow_requests():
    return json_ok([r.to_dict() for r in BorrowService.list_borrow_requests()])


@borrow_bp.get("/admin/return-requests")
@jwt_required()
@role_required("admin")
def return_requests():
    return json_ok([r.to_dict() for r in BorrowService.list_return_requests()])


@borrow_bp.post("/admin/approve/<int:borrow_id>")
@jwt_required()
@role_required("admin")
def approve_borrow(borrow_id: int):
    try:
        record = BorrowService.approve_borrow(borrow_id)
        return json_ok(record.to_dict(), message="Borrow approved")
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@borrow_bp.post("/admin/confirm-return/<int:borrow_id>")
@jwt_required()
@role_required("admin")
def confirm_return(borrow_id: int):
    try:
        record = BorrowService.confirm_return(borrow_id)
        return json_ok(record.to_dict(), message="Return confirmed")
    except LibraryError as e:
        return json_error(e.message, e.status_code)
