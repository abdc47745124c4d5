# responder.py - external responder webhook client and reply normalization
import json
from collections import namedtuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config import logger

Reply = namedtuple("Reply", ["text", "html"])

# reply shapes accepted from the webhook
STRING = "string"
OBJECT = "object"  # {"output": ..., "html_code": ...}
WRAPPED = "wrapped"  # {"output": ...} or [{"output": ...}, ...]
EMPTY = "empty"


class UpstreamError(Exception):
    """The external responder could not produce a JSON reply."""


class WebhookResponder:
    """POSTs {chatInput, sessionId} to the webhook and returns the decoded JSON."""

    def __init__(self, url, timeout=60, retries=1):
        self.url = url
        self.timeout = timeout
        self.http = requests.Session()
        # connection failures only; the POST itself is not idempotent
        retry = Retry(total=retries, connect=retries, read=0, status=0, other=0, allowed_methods=None)
        adapter = HTTPAdapter(max_retries=retry)
        self.http.mount("http://", adapter)
        self.http.mount("https://", adapter)

    def ask(self, chat_input, session_id):
        try:
            r = self.http.post(
                self.url,
                json={"chatInput": chat_input, "sessionId": session_id},
                timeout=self.timeout,
            )
            r.raise_for_status()
            payload = r.json()
        except (requests.RequestException, ValueError) as e:
            raise UpstreamError(str(e)) from e
        logger.debug("Responder reply for %s: %r", session_id, payload)
        return payload

    def close(self):
        self.http.close()


def _is_object(value):
    return isinstance(value, (dict, list))


def reply_shape(payload):
    if isinstance(payload, str):
        return STRING
    if isinstance(payload, list):
        if payload and isinstance(payload[0], dict) and payload[0].get("output"):
            return WRAPPED
        return EMPTY
    if isinstance(payload, dict):
        if "output" in payload and "html_code" in payload:
            return OBJECT
        if "output" in payload:
            return WRAPPED
    return EMPTY


def _unwrap(output, fallback):
    """Resolve the value of an "output" field that may be text or a nested object."""
    if isinstance(output, dict):
        return output.get("output") or fallback, output.get("html_code")
    if isinstance(output, list):
        return fallback, None
    if isinstance(output, str):
        return output, None
    return "", None


def normalize_reply(payload, fallback):
    """Reduce any accepted webhook payload to a Reply(text, html)."""
    shape = reply_shape(payload)
    if shape == STRING:
        text, html = payload, None
    elif shape == OBJECT:
        text, html = payload["output"], payload["html_code"]
    elif shape == WRAPPED:
        item = payload[0] if isinstance(payload, list) else payload
        text, html = _unwrap(item["output"], fallback)
    else:
        text, html = "", None

    if _is_object(text):
        text = json.dumps(text, indent=2, ensure_ascii=False)
    elif text is None or text == "":
        text = fallback
    elif not isinstance(text, str):
        text = json.dumps(text)

    if not isinstance(html, str) or not html:
        html = None
    return Reply(text, html)
