# timeline/routes/events.py

from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from timeline import db
from timeline.auth import api_guard
from timeline.dates import format_event_date
from timeline.models.event import Event
from timeline.models.event_log import log_event
from timeline.uploads import remove_upload

events_bp = Blueprint("events", __name__, url_prefix="/api/events")
events_bp.before_request(api_guard)


def _payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text(data, key):
    value = data.get(key)
    if value is None:
        return ""
    return str(value)


def _store_error(exc: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.exception("Event store error")
    return jsonify({"error": str(exc)}), 500


@events_bp.route("", methods=["GET"])
def list_events():
    try:
        events = db.session.execute(db.select(Event).order_by(Event.id.asc())).scalars().all()
    except SQLAlchemyError as exc:
        return _store_error(exc)
    return jsonify([e.to_dict() for e in events])


@events_bp.route("", methods=["POST"])
def create_event():
    data = _payload()
    date, title = _text(data, "date"), _text(data, "title")
    if not date.strip() or not title.strip():
        return jsonify({"error": "date and title required"}), 400

    try:
        event = Event.build(date, title, _text(data, "description"))
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError as exc:
        return _store_error(exc)

    current_app.logger.info("Created event %s (%s)", event.id, event.side)
    log_event(f"created event {event.id}: {event.title}")
    return jsonify(event.to_dict()), 201


@events_bp.route("/<int:event_id>", methods=["PUT"])
def update_event(event_id):
    data = _payload()
    date, title = _text(data, "date"), _text(data, "title")
    if not date.strip() or not title.strip():
        return jsonify({"error": "date and title required"}), 400

    try:
        event = db.session.get(Event, event_id)
        if event is None:
            return jsonify({"error": "Event not found"}), 404
        event.date = format_event_date(date)
        event.title = title
        event.description = _text(data, "description")
        db.session.commit()
    except SQLAlchemyError as exc:
        return _store_error(exc)

    log_event(f"updated event {event.id}: {event.title}")
    return jsonify(event.to_dict())


@events_bp.route("/<int:event_id>", methods=["DELETE"])
def delete_event(event_id):
    try:
        event = db.session.get(Event, event_id)
        if event is None:
            return jsonify({"error": "Event not found"}), 404
        image = event.message.image_filename if event.message else None
        db.session.delete(event)
        db.session.commit()
    except SQLAlchemyError as exc:
        return _store_error(exc)

    if image:
        remove_upload(image)
    log_event(f"deleted event {event_id}")
    return jsonify({"success": True})
