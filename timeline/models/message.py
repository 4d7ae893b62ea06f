# timeline/models/message.py

from datetime import datetime
from flask import url_for
from timeline import db


class EventMessage(db.Model):
    __tablename__ = "event_messages"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(
        db.Integer,
        db.ForeignKey("events.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    body = db.Column(db.Text, nullable=False, default="")
    image_filename = db.Column(db.String(255), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    event = db.relationship("Event", back_populates="message")

    def image_url(self):
        if not self.image_filename:
            return None
        return url_for("messages.uploaded_image", filename=self.image_filename)

    def to_dict(self):
        return {
            "event_id": self.event_id,
            "message": self.body or "",
            "image_url": self.image_url(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<EventMessage event={self.event_id}>"
