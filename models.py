# models.py
import datetime
from config import db


class Session(db.Model):
    __tablename__ = "sessions"
    id = db.Column(db.String(64), primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)
    last_activity = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False, index=True)

    messages = db.relationship(
        "Message",
        backref="session",
        cascade="all, delete-orphan",
        order_by="Message.seq",
    )

    def to_dict(self, message_count=0):
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
            "message_count": message_count,
        }


class Message(db.Model):
    __tablename__ = "messages"
    # insertion order; breaks created_at ties
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(64), unique=True, nullable=False)
    session_id = db.Column(
        db.String(64),
        db.ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = db.Column(db.Text, nullable=False)
    is_user = db.Column(db.Boolean, nullable=False)
    html_content = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "session_id": self.session_id,
            "content": self.content,
            "is_user": self.is_user,
            "html_content": self.html_content,
            "created_at": self.created_at.isoformat(),
        }
