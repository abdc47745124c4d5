# utils.py - session/message store
import datetime
import uuid
from contextlib import contextmanager

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from config import db, logger
from models import Session, Message


class StorageError(Exception):
    """A read or write against the session/message store failed."""


@contextmanager
def store_operation(action, commit=True):
    """Run a store operation; any database error rolls back and becomes StorageError."""
    try:
        yield
        if commit:
            db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("❌ Failed to %s:", action)
        raise StorageError(f"Failed to {action}") from e


def _new_id(model, prefix):
    with store_operation("generate id", commit=False):
        while True:
            candidate = f"{prefix}-{uuid.uuid4().hex}"
            if model.query.filter_by(id=candidate).first() is None:
                return candidate


def new_session_id():
    return _new_id(Session, "sess")


def new_message_id():
    return _new_id(Message, "msg")


def create_session(session_id=None):
    """Insert a new session row and return its id."""
    session_id = session_id or new_session_id()
    now = datetime.datetime.utcnow()
    with store_operation("create session"):
        db.session.add(Session(id=session_id, created_at=now, last_activity=now))
    return session_id


def list_sessions():
    """All sessions with their message count, most recently active first."""
    with store_operation("fetch sessions", commit=False):
        rows = (
            db.session.query(Session, func.count(Message.id))
            .outerjoin(Message, Message.session_id == Session.id)
            .group_by(Session.id)
            .order_by(Session.last_activity.desc(), Session.created_at.desc())
            .all()
        )
    return [(s, count) for s, count in rows]


def delete_session(session_id):
    """Delete a session and its messages. Returns False if no row matched."""
    with store_operation("delete session"):
        s = db.session.get(Session, session_id)
        if s is None:
            return False
        db.session.delete(s)
    return True


def touch_session(session_id):
    """Bump last_activity. Returns False when the session does not exist."""
    with store_operation("touch session"):
        updated = (
            Session.query.filter_by(id=session_id)
            .update({"last_activity": datetime.datetime.utcnow()}, synchronize_session=False)
        )
    return updated > 0


def list_messages(session_id):
    with store_operation("fetch messages", commit=False):
        return (
            Message.query.filter_by(session_id=session_id)
            .order_by(Message.created_at.asc(), Message.seq.asc())
            .all()
        )


def append_message(message_id, session_id, content, is_user, html_content=None):
    msg = Message(
        id=message_id,
        session_id=session_id,
        content=content,
        is_user=is_user,
        html_content=html_content,
        created_at=datetime.datetime.utcnow(),
    )
    with store_operation("save message"):
        db.session.add(msg)
    return msg
