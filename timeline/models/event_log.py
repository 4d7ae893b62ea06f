# timeline/models/event_log.py

from datetime import datetime
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from timeline import db


class EventLog(db.Model):
    __tablename__ = "event_logs"

    id = db.Column(db.Integer, primary_key=True)
    message = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<EventLog {self.category or 'info'} {self.message}>"


def log_event(message: str, category: str = "timeline"):
    """Write an audit row; a failure here never fails the caller."""
    try:
        db.session.add(EventLog(message=message[:255], category=category[:64]))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not write audit entry: %s", message)
