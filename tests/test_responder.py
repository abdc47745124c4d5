import pytest
import requests

from responder import (
    EMPTY,
    OBJECT,
    STRING,
    WRAPPED,
    UpstreamError,
    WebhookResponder,
    normalize_reply,
    reply_shape,
)

FALLBACK = "no answer"


@pytest.mark.parametrize("payload, shape", [
    ("hi", STRING),
    ({"output": "hi", "html_code": "<b>x</b>"}, OBJECT),
    ({"output": "hi"}, WRAPPED),
    ([{"output": "hi"}], WRAPPED),
    ([{"output": ""}], EMPTY),
    (["wrapped"], EMPTY),
    ([], EMPTY),
    ({}, EMPTY),
    (None, EMPTY),
    (42, EMPTY),
])
def test_reply_shape(payload, shape):
    assert reply_shape(payload) == shape


def test_object_with_html():
    reply = normalize_reply({"output": "hi", "html_code": "<b>x</b>"}, FALLBACK)
    assert reply.text == "hi"
    assert reply.html == "<b>x</b>"


def test_array_wrapped_nested_object():
    reply = normalize_reply([{"output": {"output": "hi"}}], FALLBACK)
    assert reply == ("hi", None)


def test_array_wrapped_nested_object_with_html():
    payload = [{"output": {"output": "chart", "html_code": "<div>1</div>"}}, {"output": "ignored"}]
    assert normalize_reply(payload, FALLBACK) == ("chart", "<div>1</div>")


def test_array_wrapped_string():
    assert normalize_reply([{"output": "hi"}], FALLBACK) == ("hi", None)


def test_nested_object_without_output_uses_fallback():
    reply = normalize_reply({"output": {"html_code": "<p>only html</p>"}}, FALLBACK)
    assert reply == (FALLBACK, "<p>only html</p>")


def test_output_only_string():
    assert normalize_reply({"output": "hi"}, FALLBACK) == ("hi", None)


def test_bare_string():
    assert normalize_reply("hi", FALLBACK) == ("hi", None)


@pytest.mark.parametrize("payload", [{}, None, [], ["wrapped"], 3.5, {"output": None}, {"output": ""}])
def test_unusable_payloads_fall_back(payload):
    assert normalize_reply(payload, FALLBACK) == (FALLBACK, None)


def test_object_reply_text_is_pretty_printed():
    reply = normalize_reply({"output": {"a": 1}, "html_code": None}, FALLBACK)
    assert reply.text == '{\n  "a": 1\n}'
    assert reply.html is None


def test_null_output_with_html_key_falls_back():
    reply = normalize_reply({"output": None, "html_code": "<i>x</i>"}, FALLBACK)
    assert reply == (FALLBACK, "<i>x</i>")


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


def test_ask_posts_chat_input_and_session(monkeypatch):
    client = WebhookResponder("http://hook.test/chat", timeout=5, retries=1)
    seen = {}

    def fake_post(url, json=None, timeout=None):
        seen.update(url=url, json=json, timeout=timeout)
        return FakeResponse(payload=[{"output": "ok"}])

    monkeypatch.setattr(client.http, "post", fake_post)
    assert client.ask("hello", "sess-1") == [{"output": "ok"}]
    assert seen == {
        "url": "http://hook.test/chat",
        "json": {"chatInput": "hello", "sessionId": "sess-1"},
        "timeout": 5,
    }


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=502, payload={"output": "gateway"}),
    FakeResponse(bad_json=True),
])
def test_ask_raises_upstream_error_on_bad_reply(monkeypatch, response):
    client = WebhookResponder("http://hook.test/chat")
    monkeypatch.setattr(client.http, "post", lambda *a, **kw: response)
    with pytest.raises(UpstreamError):
        client.ask("hello", "sess-1")


def test_ask_raises_upstream_error_on_transport_failure(monkeypatch):
    client = WebhookResponder("http://hook.test/chat")

    def boom(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(client.http, "post", boom)
    with pytest.raises(UpstreamError):
        client.ask("hello", "sess-1")


def test_retry_policy_covers_connection_failures_only():
    client = WebhookResponder("http://hook.test/chat", retries=2)
    retry = client.http.get_adapter("https://hook.test/chat").max_retries
    assert retry.connect == 2
    assert retry.read == 0
    assert retry.status == 0


@pytest.mark.parametrize("output, text", [(True, "true"), (False, "false"), (7, "7"), (2.5, "2.5")])
def test_scalar_output_is_json_encoded(output, text):
    assert normalize_reply({"output": output, "html_code": None}, FALLBACK) == (text, None)
