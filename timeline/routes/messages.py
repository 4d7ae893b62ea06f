# timeline/routes/messages.py

from flask import Blueprint, jsonify, request, current_app, send_from_directory, abort
from sqlalchemy.exc import SQLAlchemyError

from timeline import db
from timeline.auth import api_guard
from timeline.models.event import Event
from timeline.models.message import EventMessage
from timeline.models.event_log import log_event
from timeline.uploads import allowed_file, save_upload, remove_upload

messages_bp = Blueprint("messages", __name__)
messages_bp.before_request(api_guard)


def _event_or_404(event_id):
    event = db.session.get(Event, event_id)
    if event is None:
        abort(404, description="Event not found")
    return event


def _message_for(event):
    if event.message is None:
        event.message = EventMessage(body="")
    return event.message


def _empty(event_id):
    return {"event_id": event_id, "message": "", "image_url": None, "updated_at": None}


@messages_bp.route("/api/events/<int:event_id>/message", methods=["GET"])
def get_message(event_id):
    event = _event_or_404(event_id)
    if event.message is None:
        return jsonify(_empty(event_id))
    return jsonify(event.message.to_dict())


@messages_bp.route("/api/events/<int:event_id>/message", methods=["PUT"])
def save_message(event_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("message", ""), str):
        return jsonify({"error": "message must be a string"}), 400

    try:
        event = _event_or_404(event_id)
        message = _message_for(event)
        message.body = data.get("message", "")
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Could not save message for event %s", event_id)
        return jsonify({"error": str(exc)}), 500

    log_event(f"saved message for event {event_id}")
    return jsonify(message.to_dict())


@messages_bp.route("/api/events/<int:event_id>/image", methods=["POST"])
def upload_image(event_id):
    event = _event_or_404(event_id)

    if "image" not in request.files:
        return jsonify({"error": "No file uploaded."}), 400
    file = request.files["image"]
    if not file.filename:
        return jsonify({"error": "No file selected."}), 400
    if not allowed_file(file.filename):
        return jsonify({"error": "Invalid file type. Allowed: png, jpg, jpeg, gif, webp."}), 400

    filename = save_upload(file)
    message = _message_for(event)
    previous = message.image_filename
    message.image_filename = filename
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        remove_upload(filename)
        current_app.logger.exception("Could not attach image to event %s", event_id)
        return jsonify({"error": str(exc)}), 500

    if previous:
        remove_upload(previous)
    log_event(f"attached image to event {event_id}")
    return jsonify(message.to_dict())


@messages_bp.route("/api/events/<int:event_id>/image", methods=["DELETE"])
def delete_image(event_id):
    event = _event_or_404(event_id)
    if event.message is None or not event.message.image_filename:
        return jsonify({"error": "Image not found"}), 404

    previous = event.message.image_filename
    event.message.image_filename = None
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Could not detach image from event %s", event_id)
        return jsonify({"error": str(exc)}), 500

    remove_upload(previous)
    log_event(f"removed image from event {event_id}")
    return jsonify(event.message.to_dict())


@messages_bp.route("/uploads/<path:filename>")
def uploaded_image(filename):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
