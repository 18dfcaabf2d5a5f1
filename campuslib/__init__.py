from flask import Flask
from campuslib.config import Config
from campuslib.extensions import db, migrate, jwt
from campuslib.db_objects import ensure_db_objects
from campuslib.utils.auth import register_jwt_callbacks
from campuslib.utils.http import json_error, json_ok


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) extensions first (db.engine / db.session, jwt)
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    register_jwt_callbacks(jwt)

    # 2) tables + triggers/filtered indexes
    from campuslib import models  # noqa: F401  (register models on metadata)
    ensure_db_objects(app)

    # 3) API blueprints
    from campuslib.controllers.auth_controller import auth_bp
    from campuslib.controllers.book_controller import book_bp
    from campuslib.controllers.borrow_controller import borrow_bp
    from campuslib.controllers.library_card_controller import card_bp
    from campuslib.controllers.chatbot_controller import chatbot_bp
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(book_bp, url_prefix="/api/books")
    app.register_blueprint(borrow_bp, url_prefix="/api/borrows")
    app.register_blueprint(card_bp, url_prefix="/api/library-card")
    app.register_blueprint(chatbot_bp, url_prefix="/api/chatbot")

    from campuslib.commands import register_commands
    register_commands(app)

    @app.get("/health")
    def health():
        return json_ok()

    @app.errorhandler(404)
    def not_found(_e):
        return json_error("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return json_error("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(e):
        original = getattr(e, "original_exception", None)
        app.logger.exception(f"[app] unhandled error: {original or e}")
        db.session.rollback()
        return json_error("Internal server error", 500)

    return app
