import json

import pytest
import requests

from completion_cli.llm.client import CompletionClient
from completion_cli.llm.types import (
    APIError,
    ResponseParseError,
    TransportError,
    build_request,
)


class DummyResponse:
    def __init__(self, status_code=200, payload=None, content=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        if content is None:
            content = json.dumps(payload or {}).encode()
        self.content = content


class DummySession:
    def __init__(self, response=None, exc=None):
        self.headers = {}
        self.calls = []
        self._response = response
        self._exc = exc

    def post(self, url, data, timeout):
        self.calls.append({"url": url, "data": data, "timeout": timeout, "headers": dict(self.headers)})
        if self._exc is not None:
            raise self._exc
        return self._response


def _client(session):
    return CompletionClient(
        api_key="sk-test",
        endpoint="https://api.example.test/v1/completions",
        model="gpt-3.5-turbo",
        timeout_seconds=5,
        session=session,
    )


def test_post_sends_json_body_with_bearer_header_and_timeout():
    session = DummySession(
        DummyResponse(payload={"choices": [{"text": "ok", "index": 0, "logprobs": None, "finish_reason": "stop"}]})
    )
    client = _client(session)

    response = client.create_completion(build_request("Hello\n", model=client.model, preamble="P:"))

    assert response.first_text() == "ok"
    call = session.calls[0]
    assert call["url"] == "https://api.example.test/v1/completions"
    assert call["timeout"] == 5
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["headers"]["Content-Type"] == "application/json"
    assert json.loads(call["data"]) == {"model": "gpt-3.5-turbo", "prompt": "P: Hello\n", "max_tokens": 100}


def test_auth_header_is_composed_once_and_reused():
    payload = {"choices": [{"text": "ok", "index": 0, "logprobs": None, "finish_reason": "stop"}]}
    session = DummySession(DummyResponse(payload=payload))
    client = _client(session)

    for _ in range(3):
        client.create_completion(build_request("x\n", model=client.model, preamble="P:"))

    assert {c["headers"]["Authorization"] for c in session.calls} == {"Bearer sk-test"}
    assert len(session.calls) == 3


@pytest.mark.parametrize("status_code,reason", [(401, "Unauthorized"), (429, "Too Many Requests"), (503, "Service Unavailable")])
def test_error_statuses_raise_api_error(status_code, reason):
    session = DummySession(
        DummyResponse(status_code=status_code, reason=reason, payload={"error": {"message": "nope"}})
    )

    with pytest.raises(APIError) as info:
        _client(session).create_completion(build_request("x\n", model="m", preamble="P:"))

    assert info.value.status_code == status_code
    assert info.value.status_line == f"{status_code} {reason}"
    assert info.value.message == "nope"


def test_timeout_becomes_transport_error():
    session = DummySession(exc=requests.Timeout("read timed out"))

    with pytest.raises(TransportError):
        _client(session).create_completion(build_request("x\n", model="m", preamble="P:"))


def test_connection_error_becomes_transport_error():
    session = DummySession(exc=requests.ConnectionError("connection refused"))

    with pytest.raises(TransportError, match="connection refused"):
        _client(session).create_completion(build_request("x\n", model="m", preamble="P:"))


def test_malformed_success_body_raises_parse_error():
    session = DummySession(DummyResponse(status_code=200, content=b"<html>oops</html>"))

    with pytest.raises(ResponseParseError):
        _client(session).create_completion(build_request("x\n", model="m", preamble="P:"))


def test_from_settings_reads_llm_section():
    settings = {
        "llm": {
            "endpoint": "https://api.example.test/v1/completions",
            "model": "text-davinci-003",
            "timeout_seconds": 12,
        }
    }
    client = CompletionClient.from_settings(settings, api_key="sk-abc")

    assert client.model == "text-davinci-003"
    assert client.timeout_seconds == 12.0
    assert client.endpoint == "https://api.example.test/v1/completions"


def test_body_is_utf8_encoded_bytes_for_non_ascii_prompts():
    payload = {"choices": [{"text": "ok", "index": 0, "logprobs": None, "finish_reason": "stop"}]}
    session = DummySession(DummyResponse(payload=payload))

    _client(session).create_completion(build_request("你好\n", model="m", preamble="P:"))

    data = session.calls[0]["data"]
    assert isinstance(data, bytes)
    assert json.loads(data.decode("utf-8"))["prompt"] == "P: 你好\n"
