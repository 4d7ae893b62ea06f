# timeline/commands.py
import click
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

from timeline import db
from timeline.models.event import Event

console = Console()


def display_events(events):
    table = Table(title="Our Timeline")
    for c in ["#", "Date", "Title", "Side", "Description"]:
        table.add_column(c)
    for e in events:
        table.add_row(str(e.id), e.date, e.title, e.side, e.description)
    console.print(table)


def register_commands(app):

    @app.cli.command("init-db")
    def init_db():
        """Create the timeline tables."""
        db.create_all()
        console.print("[bold cyan]Database ready.[/bold cyan]")

    @app.cli.command("list-events")
    def list_events():
        """Print every event in timeline order."""
        events = db.session.execute(db.select(Event).order_by(Event.id.asc())).scalars().all()
        if not events:
            console.print("[yellow]No events yet.[/yellow]")
            return
        display_events(events)

    @app.cli.command("add-event")
    @click.argument("date")
    @click.argument("title")
    @click.option("--description", default="", help="Defaults to the usual placeholder.")
    def add_event(date, title, description):
        """Add an event the same way POST /api/events does."""
        if not date.strip() or not title.strip():
            raise click.UsageError("date and title required")
        try:
            event = Event.build(date.strip(), title.strip(), description.strip())
            db.session.add(event)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise click.ClickException(str(exc))
        display_events([event])

    @app.cli.command("hash-password")
    @click.argument("password")
    def hash_password(password):
        """Print a value for TIMELINE_PASSWORD_HASH."""
        click.echo(generate_password_hash(password))
