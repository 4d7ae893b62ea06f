# timeline/auth.py
# Shared-password gate. The timeline routes never look at identity; they only
# get a before_request guard from here.
from flask import (
    Blueprint, request, redirect, url_for, render_template,
    flash, jsonify, current_app, abort
)
from flask_login import (
    LoginManager, UserMixin, login_user,
    logout_user, current_user
)
from flask_wtf.csrf import generate_csrf, validate_csrf
from wtforms.validators import ValidationError
from werkzeug.security import check_password_hash
import hmac

from timeline import limiter
from timeline.forms import LoginForm

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")
login_manager = LoginManager()
login_manager.login_view = "auth.login"


class Partner(UserMixin):
    """The single identity behind the shared password."""
    id = "partner"

    def get_id(self):
        return self.id


@login_manager.user_loader
def load_user(user_id):
    if user_id == Partner.id:
        return Partner()
    return None


def gate_enabled(app=None) -> bool:
    app = app or current_app
    return bool(app.config.get("TIMELINE_PASSWORD") or app.config.get("TIMELINE_PASSWORD_HASH"))


def check_shared_password(candidate: str) -> bool:
    hashed = current_app.config.get("TIMELINE_PASSWORD_HASH")
    if hashed:
        return check_password_hash(hashed, candidate or "")
    plain = current_app.config.get("TIMELINE_PASSWORD") or ""
    return hmac.compare_digest(plain.encode("utf-8"), (candidate or "").encode("utf-8"))


# ------------------------------------------------------
# Guards
# ------------------------------------------------------
UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def _require_csrf():
    if not current_app.config.get("WTF_CSRF_ENABLED", True):
        return
    token = request.headers.get("X-CSRFToken") or request.form.get("csrf_token")
    if not token:
        abort(400, description="Missing CSRF token.")
    try:
        validate_csrf(token)
    except ValidationError as exc:
        abort(400, description=f"Invalid CSRF token: {exc}")


def api_guard():
    if request.method == "OPTIONS":
        return None
    if gate_enabled() and not current_user.is_authenticated:
        return jsonify({"error": "Authentication required"}), 401
    if request.method in UNSAFE_METHODS:
        _require_csrf()
    return None


def page_guard():
    if gate_enabled() and not current_user.is_authenticated:
        return redirect(url_for("auth.login", next=request.path))
    return None


def _safe_next(target):
    # only local paths
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("pages.timeline")


# ------------------------------------------------------
# LOGIN
# ------------------------------------------------------
@auth_bp.route("/login", methods=["GET", "POST"])
@limiter.limit("10/minute", methods=["POST"])
def login():
    wants_json = request.is_json
    if wants_json and request.method == "POST":
        # script callers send the token from /auth/csrf as a header
        _require_csrf()
        form = LoginForm(meta={"csrf": False})
    else:
        form = LoginForm()

    if request.method == "POST":
        if not gate_enabled():
            if wants_json:
                return jsonify({"authenticated": True, "required": False})
            return redirect(_safe_next(request.args.get("next")))

        if not form.validate_on_submit():
            if wants_json:
                return jsonify({"error": "Password required"}), 400
            if "csrf_token" in form.errors:
                flash("The form expired, please try again.", "danger")
            else:
                flash("Please enter the password.", "danger")
            return render_template("login.html", form=form), 400

        if not check_shared_password(form.password.data):
            current_app.logger.info("Rejected login from %s", request.remote_addr)
            if wants_json:
                return jsonify({"error": "Wrong password"}), 401
            flash("Wrong password.", "danger")
            return render_template("login.html", form=form), 401

        login_user(Partner())
        current_app.logger.info("Login from %s", request.remote_addr)
        if wants_json:
            return jsonify({"authenticated": True, "required": True})
        return redirect(_safe_next(request.args.get("next")))

    return render_template("login.html", form=form)


# ------------------------------------------------------
# LOGOUT
# ------------------------------------------------------
@auth_bp.route("/logout", methods=["POST"])
def logout():
    _require_csrf()
    logout_user()
    if request.is_json:
        return jsonify({"authenticated": False})
    flash("Logged out.", "info")
    return redirect(url_for("auth.login"))


@auth_bp.route("/status")
def status():
    return jsonify({
        "authenticated": bool(current_user.is_authenticated) or not gate_enabled(),
        "required": gate_enabled(),
    })


@auth_bp.route("/csrf")
def csrf_token():
    return jsonify({"csrf_token": generate_csrf()})
