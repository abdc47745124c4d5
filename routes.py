# routes.py
from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from config import limiter, logger
from responder import UpstreamError, normalize_reply
from utils import (
    StorageError,
    append_message,
    create_session,
    delete_session,
    list_messages,
    list_sessions,
    new_message_id,
    touch_session,
)

api_bp = Blueprint("api", __name__)


def _chat_limit():
    return current_app.config["CHAT_RATE_LIMIT"]


def _session_limit():
    return current_app.config["SESSION_RATE_LIMIT"]


@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "OK", "message": "Chat API is running"})


@api_bp.route("/sessions", methods=["GET"])
def get_sessions():
    try:
        return jsonify([s.to_dict(message_count=count) for s, count in list_sessions()])
    except StorageError:
        return jsonify({"error": "Failed to fetch sessions"}), 500


@api_bp.route("/sessions/<session_id>/messages", methods=["GET"])
def get_messages(session_id):
    try:
        return jsonify([m.to_dict() for m in list_messages(session_id)])
    except StorageError:
        return jsonify({"error": "Failed to fetch messages"}), 500


@api_bp.route("/sessions", methods=["POST"])
@limiter.limit(_session_limit)
def post_session():
    try:
        session_id = create_session()
    except StorageError:
        return jsonify({"error": "Failed to create session"}), 500
    logger.info("Created session %s", session_id)
    return jsonify({"sessionId": session_id, "message": "Session created successfully"})


@api_bp.route("/sessions/<session_id>", methods=["DELETE"])
def remove_session(session_id):
    try:
        deleted = delete_session(session_id)
    except StorageError:
        return jsonify({"error": "Failed to delete session"}), 500
    if not deleted:
        return jsonify({"error": "Session not found"}), 404
    logger.info("Deleted session %s", session_id)
    return jsonify({"message": "Session deleted successfully"})


def _mark_active(session_id):
    # best-effort: a failure here never fails the turn
    try:
        if not touch_session(session_id):
            create_session(session_id)
    except StorageError:
        logger.warning("Could not mark session %s active", session_id)


@api_bp.route("/chat", methods=["POST"])
@limiter.limit(_chat_limit)
def chat():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    chat_input = data.get("chatInput")
    session_id = data.get("sessionId")

    if not isinstance(chat_input, str) or not chat_input.strip() \
            or not isinstance(session_id, str) or not session_id.strip():
        return jsonify({"error": "chatInput and sessionId are required"}), 400

    cfg = current_app.config
    _mark_active(session_id)

    try:
        append_message(new_message_id(), session_id, chat_input, True)
    except StorageError:
        return jsonify({"error": "Failed to save message", "output": cfg["ERROR_REPLY"]}), 500

    responder = current_app.extensions["responder"]
    try:
        payload = responder.ask(chat_input, session_id)
    except UpstreamError:
        logger.exception("❌ Error processing chat for %s:", session_id)
        try:
            append_message(new_message_id(), session_id, cfg["ERROR_REPLY"], False)
        except StorageError:
            pass  # already logged by the store
        return jsonify({"error": "Internal server error", "output": cfg["ERROR_REPLY"]}), 500

    reply = normalize_reply(payload, cfg["FALLBACK_REPLY"])

    try:
        bot_message_id = new_message_id()
        append_message(bot_message_id, session_id, reply.text, False, reply.html)
    except StorageError:
        return jsonify({"error": "Failed to save message", "output": cfg["ERROR_REPLY"]}), 500

    return jsonify({"output": reply.text, "html_code": reply.html, "messageId": bot_message_id})


@api_bp.app_errorhandler(Exception)
def handle_error(e):
    if isinstance(e, HTTPException):
        if e.code == 429:
            return jsonify({"error": "rate_limited"}), 429
        if request.path.startswith("/api/"):
            return jsonify({"error": e.name.lower().replace(" ", "_")}), e.code
        return e
    logger.exception("❌ Unexpected error on %s:", request.path)
    return jsonify({"error": "server_error"}), 500
