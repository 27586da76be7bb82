from datetime import datetime, timezone
from flask_login import UserMixin
from .extensions import db

PASS_ID_MAX_LENGTH = 64

def utcnow():
    return datetime.now(timezone.utc)

class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    role = db.Column(db.String(50), nullable=False, default="student")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

class Pass(db.Model):
    __tablename__ = "ticket_passes"

    pass_id = db.Column("pass", db.String(PASS_ID_MAX_LENGTH), primary_key=True)

    user_id = db.Column(db.Integer, nullable=False, index=True)
    event_id = db.Column(db.Integer, nullable=False, index=True)

    valid = db.Column(db.Boolean, nullable=False, default=True)

    issued_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    used_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        # one live pass per (user, event)
        db.Index(
            "uq_ticket_passes_live",
            "user_id",
            "event_id",
            unique=True,
            sqlite_where=db.text("valid"),
            postgresql_where=db.text("valid"),
        ),
    )
