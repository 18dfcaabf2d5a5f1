from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from campuslib.extensions import db
from campuslib.utils.errors import InternalError


def commit_or_raise(tag: str):
    """Single commit point for a service operation; rolls back on failure."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception(f"[{tag}] commit failed: {e}")
        raise InternalError("Persistence failure")
