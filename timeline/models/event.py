# timeline/models/event.py

from timeline import db
from timeline.dates import format_event_date

DEFAULT_DESCRIPTION = "A new chapter in our story, written with love."


class Event(db.Model):
    __tablename__ = "events"
    # AUTOINCREMENT keeps ids from being reused after a delete
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    date = db.Column(db.Text, nullable=False)
    title = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=False)
    side = db.Column(db.Text, nullable=False)

    message = db.relationship(
        "EventMessage",
        uselist=False,
        cascade="all, delete-orphan",
        back_populates="event",
    )

    @staticmethod
    def next_side() -> str:
        """
        Side for the next insert: the opposite of the newest row's side.
        An empty table counts as "right", so the first event lands on the left.

        Read-then-write, not atomic: callers add the new row in the same
        session and commit once.
        """
        last = db.session.execute(
            db.select(Event.side).order_by(Event.id.desc()).limit(1)
        ).scalar()
        last_side = last or "right"
        return "right" if last_side == "left" else "left"

    @classmethod
    def build(cls, date: str, title: str, description: str = ""):
        """New, unsaved event with its display date and side filled in."""
        return cls(
            date=format_event_date(date),
            title=title,
            description=description or DEFAULT_DESCRIPTION,
            side=cls.next_side(),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date,
            "title": self.title,
            "description": self.description,
            "side": self.side,
        }

    def __repr__(self):
        return f"<Event {self.id} {self.side} {self.title}>"
