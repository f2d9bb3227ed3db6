# bidtracker/models/base.py

from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp, matching what SQLite and Postgres store for DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_or_none(value):
    return value.isoformat() if value else None
