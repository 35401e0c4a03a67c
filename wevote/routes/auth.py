from flask import current_app, request
from flask_login import login_required, login_user, logout_user
from werkzeug.security import check_password_hash, generate_password_hash

from wevote.errors import FailedPrecondition, InvalidArgument
from wevote.extensions import db
from wevote.models import User


def register_auth_routes(app):
    @app.route("/api/signup", methods=["POST"])
    def signup():
        data = request.get_json(silent=True) or {}
        username = (data.get("username") or "").strip()
        email = (data.get("email") or "").strip().lower()
        password = data.get("password") or ""

        if not username or not email or len(password) < 8:
            raise InvalidArgument("username, email and a password of 8+ characters are required")
        if User.query.filter(
            (User.username == username) | (User.email == email)
        ).first():
            raise FailedPrecondition("Username or email already registered")

        user = User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password, method="pbkdf2:sha256"),
        )
        db.session.add(user)
        db.session.commit()
        return {"ok": True, "uid": user.uid}, 201

    @app.route("/api/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password") or ""

        user = User.query.filter_by(username=username).first()
        if not user or not check_password_hash(user.password_hash, password):
            current_app.logger.warning("Failed login for username: %s", username)
            return {"ok": False, "error": "unauthenticated", "message": "Invalid username or password."}, 401

        login_user(user, remember=bool(data.get("remember")))
        return {"ok": True, "uid": user.uid}

    @app.route("/api/logout", methods=["POST"])
    @login_required
    def logout():
        logout_user()
        return {"ok": True}
