# timeline/pages.py

from flask import Blueprint, render_template, redirect, url_for, abort
from timeline import db
from timeline.auth import page_guard, gate_enabled
from timeline.models.event import Event

pages_bp = Blueprint("pages", __name__)
pages_bp.before_request(page_guard)


@pages_bp.route("/")
def home():
    return redirect(url_for("pages.timeline"))


@pages_bp.route("/timeline")
def timeline():
    """Alternating card layout; the script talks to /api/events for edits."""
    events = db.session.execute(db.select(Event).order_by(Event.id.asc())).scalars().all()
    return render_template(
        "timeline.html",
        events=events,
        show_logout=gate_enabled(),
    )


@pages_bp.route("/timeline/<int:event_id>/message")
def message(event_id):
    event = db.session.get(Event, event_id)
    if event is None:
        abort(404)
    return render_template(
        "message.html",
        event=event,
        message=event.message,
    )
