from flask import Flask, jsonify

from wevote.config import Config
from wevote.errors import register_error_handlers
from wevote.extensions import db, login_manager, migrate
from wevote.models import User
from wevote.routes import register_routes


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    # Exported results are re-hashed by clients; key order must survive.
    app.json.sort_keys = False

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"ok": False, "error": "unauthenticated", "message": "Sign in required"}), 401

    register_error_handlers(app)
    register_routes(app)
    return app


__all__ = ["create_app", "db", "migrate"]
