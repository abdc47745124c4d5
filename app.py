# app.py - chat session API (Flask application factory)
import atexit
import sqlite3

from flask import Flask
from flask_cors import CORS
from sqlalchemy import event
from sqlalchemy.engine import Engine

import config
from config import db, limiter, logger
from responder import WebhookResponder
from routes import api_bp


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_app(overrides=None, responder=None):
    app = Flask(__name__)
    app.config.update(config.default_settings())
    if overrides:
        app.config.update(overrides)

    CORS(app, resources={r"/api/*": {"origins": app.config["ALLOWED_ORIGIN"]}})
    db.init_app(app)
    limiter.init_app(app)

    if responder is None:
        responder = WebhookResponder(
            app.config["RESPONDER_URL"],
            timeout=app.config["RESPONDER_TIMEOUT"],
            retries=app.config["RESPONDER_RETRIES"],
        )
    app.extensions["responder"] = responder

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.after_request
    def security_headers(response):
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response

    # create tables
    with app.app_context():
        db.create_all()
    logger.info("✅ Database tables initialized")
    return app


def close_store(app):
    """Release the responder's HTTP pool and the database engine."""
    app.extensions["responder"].close()
    with app.app_context():
        db.engine.dispose()
    logger.info("Database connection closed.")


# ---------- Run ----------
if __name__ == "__main__":
    # For local testing only; in production use gunicorn: `gunicorn "app:create_app()" --bind 0.0.0.0:$PORT --workers 2`
    app = create_app()
    atexit.register(close_store, app)
    app.run(host="0.0.0.0", port=config.PORT)
