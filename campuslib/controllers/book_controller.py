from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from campuslib.services.book_service import BookService
from campuslib.services.stats_service import StatsService
from campuslib.utils.auth import role_required
from campuslib.utils.errors import LibraryError
from campuslib.utils.http import json_body, json_error, json_ok

book_bp = Blueprint("books", __name__)


@book_bp.get("")
def list_books():
    books = BookService.list_books(request.args.get("search"))
    return json_ok([b.to_dict() for b in books])


@book_bp.get("/<int:book_id>")
def get_book(book_id: int):
    try:
        return json_ok(BookService.get_book(book_id).to_dict())
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@book_bp.post("")
@jwt_required()
@role_required("admin")
def create_book():
    try:
        data = json_body()
        book = BookService.create_book(data)
        return json_ok(book.to_dict(), 201)
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@book_bp.delete("/<int:book_id>")
@jwt_required()
@role_required("admin")
def delete_book(book_id: int):
    try:
        BookService.delete_book(book_id)
        return json_ok(message="Book deleted successfully")
    except LibraryError as e:
        return json_error(e.message, e.status_code)


@book_bp.get("/admin/stats")
@jwt_required()
@role_required("admin")
def admin_stats():
    return json_ok(StatsService.admin_stats())
