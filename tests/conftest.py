from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from campuslib import create_app
from campuslib.extensions import db
from campuslib.models import Book, LibraryCard, User


class TestingConfig:
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    LOAN_DAYS = 30
    BORROW_LIMIT = 4
    OVERDUE_FINE = 10


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """App context for calling services directly."""
    with app.app_context():
        yield app


def _add(app, obj):
    with app.app_context():
        db.session.add(obj)
        db.session.commit()
        return obj.id


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role="user", card=None, email=None):
        counter["n"] += 1
        email = email or f"user{counter['n']}@uni.test"
        user_id = _add(app, User(name=f"User {counter['n']}", email=email,
                                 password_hash="x", role=role))
        if card is not None:
            _add(app, LibraryCard(user_id=user_id, name="Card Holder", department="CSE",
                                  level="1", term="2", card_status=card))
        return user_id

    return _make


@pytest.fixture
def make_book(app):
    def _make(title="Dune", author="Frank Herbert", isbn="9780441172719", quantity=1, available=None):
        return _add(app, Book(title=title, author=author, isbn=isbn, quantity=quantity,
                              available=quantity if available is None else available))

    return _make


@pytest.fixture
def auth(app):
    def _auth(user_id, role="user"):
        with app.app_context():
            token = create_access_token(identity=str(user_id), additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}

    return _auth


@pytest.fixture
def admin_headers(make_user, auth):
    return auth(make_user(role="admin"), role="admin")


@pytest.fixture
def fetch_book(app):
    def _fetch(book_id):
        with app.app_context():
            return db.session.get(Book, book_id)

    return _fetch
