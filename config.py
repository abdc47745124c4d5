# config.py - configuration and shared extensions

import os
import logging
from flask_sqlalchemy import SQLAlchemy
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ==== LOGGING ====
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("chat_api")

# ==== SERVER ====
PORT = int(os.getenv("PORT", 3001))
ALLOWED_ORIGIN = os.getenv("ALLOWED_ORIGIN", "*")

# ==== DATABASE ====
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///chat.db")
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# ==== EXTERNAL RESPONDER ====
RESPONDER_URL = os.getenv("RESPONDER_URL", "http://localhost:5678/webhook/chat")
RESPONDER_TIMEOUT = float(os.getenv("RESPONDER_TIMEOUT", 60))
RESPONDER_RETRIES = int(os.getenv("RESPONDER_RETRIES", 1))

# ==== RATE LIMITS ====
CHAT_RATE_LIMIT = os.getenv("CHAT_RATE_LIMIT", "60 per minute")
SESSION_RATE_LIMIT = os.getenv("SESSION_RATE_LIMIT", "30 per minute")

# ==== CONSTANTS ====
FALLBACK_REPLY = os.getenv("FALLBACK_REPLY", "ขออภัย ฉันไม่สามารถตอบคำถามนี้ได้ในขณะนี้")
ERROR_REPLY = os.getenv("ERROR_REPLY", "เกิดข้อผิดพลาดในการเชื่อมต่อ กรุณาลองใหม่อีกครั้ง")

# ==== EXTENSIONS (bound in create_app) ====
db = SQLAlchemy()
limiter = Limiter(key_func=get_remote_address)


def default_settings():
    """Settings copied into app.config by the factory."""
    return {
        "SQLALCHEMY_DATABASE_URI": DATABASE_URL,
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "ALLOWED_ORIGIN": ALLOWED_ORIGIN,
        "RESPONDER_URL": RESPONDER_URL,
        "RESPONDER_TIMEOUT": RESPONDER_TIMEOUT,
        "RESPONDER_RETRIES": RESPONDER_RETRIES,
        "CHAT_RATE_LIMIT": CHAT_RATE_LIMIT,
        "SESSION_RATE_LIMIT": SESSION_RATE_LIMIT,
        "FALLBACK_REPLY": FALLBACK_REPLY,
        "ERROR_REPLY": ERROR_REPLY,
    }
