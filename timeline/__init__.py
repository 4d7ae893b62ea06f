# timeline/__init__.py

from flask import Flask, jsonify, request
from flask_session import Session
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException
from dotenv import load_dotenv
import logging
import os

# ======================================================
# Load environment first
# ======================================================
load_dotenv()

db = SQLAlchemy()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://"
)


def create_app(test_config=None):
    app = Flask(__name__)
    os.makedirs(app.instance_path, exist_ok=True)

    # ==================================================
    # Security / Keys
    # ==================================================
    app.secret_key = os.getenv("SECRET_KEY", "dev-timeline-key")
    app.config["TIMELINE_PASSWORD"] = os.getenv("TIMELINE_PASSWORD")
    app.config["TIMELINE_PASSWORD_HASH"] = os.getenv("TIMELINE_PASSWORD_HASH")
    app.config["CORS_ORIGIN"] = os.getenv("CORS_ORIGIN", "http://localhost:3000")

    # ==================================================
    # Database
    # ==================================================
    default_db = "sqlite:///" + os.path.join(app.instance_path, "events.db")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", default_db)
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # ==================================================
    # Session Persistence
    # ==================================================
    app.config["SESSION_TYPE"] = os.getenv("SESSION_TYPE", "filesystem") or None
    app.config["SESSION_FILE_DIR"] = os.path.join(app.instance_path, "sessions")
    app.config["SESSION_PERMANENT"] = False
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"

    # ==================================================
    # File uploads (message images)
    # ==================================================
    app.config["UPLOAD_FOLDER"] = os.getenv(
        "UPLOAD_FOLDER", os.path.join(app.instance_path, "uploads")
    )
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024

    # ==================================================
    # CSRF + Rate Limiting
    # ==================================================
    app.config["WTF_CSRF_ENABLED"] = True
    app.config["WTF_CSRF_CHECK_DEFAULT"] = False
    app.config["RATELIMIT_DEFAULT"] = os.getenv("RATELIMIT_DEFAULT", "1000 per hour")

    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    # ==================================================
    # Edge rewrite / dev proxy in front of /api
    # ==================================================
    app.config["EDGE_MODE"] = os.getenv("TIMELINE_EDGE_MODE")
    app.config["EDGE_STRIP_PREFIX"] = os.getenv("TIMELINE_EDGE_STRIP_PREFIX", "false").lower() == "true"

    if test_config:
        app.config.update(test_config)

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if not uri.startswith("sqlite"):
        app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        })

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    if app.config.get("SESSION_TYPE"):
        os.makedirs(app.config["SESSION_FILE_DIR"], exist_ok=True)
        Session(app)
    csrf.init_app(app)
    limiter.init_app(app)
    db.init_app(app)

    # ==================================================
    # Blueprints
    # ==================================================
    from timeline.auth import auth_bp, login_manager, gate_enabled
    from timeline.routes.events import events_bp
    from timeline.routes.messages import messages_bp
    from timeline.pages import pages_bp
    from timeline.commands import register_commands

    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(messages_bp)
    app.register_blueprint(pages_bp)

    register_commands(app)

    if not gate_enabled(app):
        app.logger.warning(
            "No TIMELINE_PASSWORD or TIMELINE_PASSWORD_HASH set; the timeline is open to anyone."
        )

    # ==================================================
    # Database Initialization (tables)
    # ==================================================
    with app.app_context():
        from timeline import models  # noqa: F401
        db.create_all()

    # ==================================================
    # JSON errors for the API surface
    # ==================================================
    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        if request.path.startswith(("/api", "/auth")) and request.accept_mimetypes.best != "text/html":
            return jsonify({"error": exc.description or exc.name}), exc.code
        return exc

    # ==================================================
    # Security Headers + CORS
    # ==================================================
    @app.after_request
    def apply_security_headers(response):
        csp = (
            "default-src 'self'; "
            "img-src 'self' data: blob:; "
            "script-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "connect-src 'self';"
        )
        response.headers["Content-Security-Policy"] = csp
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        origin = app.config.get("CORS_ORIGIN")
        if origin and request.path.startswith("/api"):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type, X-CSRFToken"
            response.headers["Vary"] = "Origin"
        return response

    from timeline.edge import wrap
    app.wsgi_app = wrap(app.wsgi_app, app.config.get("EDGE_MODE"),
                        strip_prefix=app.config.get("EDGE_STRIP_PREFIX", False))

    @app.route("/status")
    def status():
        return jsonify({"status": "ok"})

    return app
