from chat_relay.api.service import ChatRelayService
from chat_relay.config.settings import load_settings
from chat_relay.domain.errors import TransportFailure
from chat_relay.domain.models import RawResponse
from chat_relay.domain.result import Err, Ok


class StubTransport:
    name = "stub"
    endpoint = "http://stub:1234"

    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    def attempt_call(self, request, timeout):
        self.calls.append((request, timeout))
        if self.exc is not None:
            raise self.exc
        return self.result


def _ok(body, latency_ms=42):
    return Ok(RawResponse(status_code=200, body=body, latency_ms=latency_ms))


def _service(transport, **overrides):
    options = {"mistral_api_url": "http://stub:1234", "mistral_timeout": 30000, **overrides}
    settings = load_settings(**options)
    return ChatRelayService(settings, transport)


def test_end_to_end_hello():
    transport = StubTransport(
        _ok(
            {
                "choices": [{"message": {"content": " Hi there! "}}],
                "model": "mistral-7b",
                "usage": {"total_tokens": 12},
            }
        )
    )
    status, payload = _service(transport).handle_chat({"message": "Hello", "history": []})
    assert status == 200
    assert payload == {
        "response": "Hi there!",
        "model": "mistral-7b",
        "usage": {"total_tokens": 12},
        "responseTime": 42,
    }
    request, timeout = transport.calls[0]
    assert timeout == 30.0
    assert request.to_payload()["messages"] == [{"role": "user", "content": "Hello"}]


def test_validation_failure_makes_no_upstream_call():
    transport = StubTransport(_ok({}))
    service = _service(transport)
    for body, category in (
        ({}, "InvalidMessageType"),
        ({"message": 123}, "InvalidMessageType"),
        (None, "InvalidMessageType"),
        ({"message": "   "}, "EmptyMessage"),
        ({"message": "a" * 10001}, "MessageTooLong"),
    ):
        status, payload = service.handle_chat(body)
        assert status == 400
        assert payload["category"] == category
        assert payload["error"] == "Invalid request"
    assert transport.calls == []


def test_history_is_windowed_before_sending():
    transport = StubTransport(_ok({"choices": [{"message": {"content": "ok"}}]}))
    history = [{"role": "assistant" if i % 2 else "user", "content": f"m{i}"} for i in range(30)]
    history.append({"role": "bogus", "content": "last"})
    history.append({"content": "dropped"})
    status, _ = _service(transport).handle_chat({"message": "now", "history": history})
    assert status == 200
    messages = transport.calls[0][0].to_payload()["messages"]
    assert len(messages) == 11
    assert [m["content"] for m in messages] == [f"m{i}" for i in range(21, 30)] + ["last", "now"]
    assert {m["role"] for m in messages} <= {"user", "assistant"}
    assert messages[-2]["role"] == "user"


def test_connection_refused_returns_503():
    transport = StubTransport(Err(TransportFailure(kind="CONNECTION_REFUSED", message="refused")))
    status, payload = _service(transport).handle_chat({"message": "Hello"})
    assert status == 503
    assert payload["error"] == "Service Unavailable"
    assert payload["category"] == "BackendUnreachable"


def test_timeout_returns_504_with_timeout():
    transport = StubTransport(Err(TransportFailure(kind="TIMEOUT", message="timeout")))
    status, payload = _service(transport, mistral_timeout=1500).handle_chat({"message": "Hello"})
    assert status == 504
    assert payload["timeout"] == 1500
    assert transport.calls[0][1] == 1.5


def test_backend_400_message_surfaced():
    transport = StubTransport(
        Err(TransportFailure(kind="HTTP_ERROR", message="400", status_code=400, body={"error": {"message": "bad request"}}))
    )
    status, payload = _service(transport).handle_chat({"message": "Hello"})
    assert status == 400
    assert payload["message"] == "bad request"


def test_empty_choices_returns_500():
    transport = StubTransport(_ok({"choices": []}))
    status, payload = _service(transport, expose_error_details=True).handle_chat({"message": "Hello"})
    assert status == 500
    assert payload["category"] == "NoChoicesReturned"
    assert payload["details"] == "No response choices received from Mistral API"


def test_empty_completion_detail_hidden_by_default():
    transport = StubTransport(_ok({"choices": [{"message": {"content": "  "}}]}))
    status, payload = _service(transport, relay_env="development").handle_chat({"message": "Hello"})
    assert status == 500
    assert payload["category"] == "EmptyCompletion"
    assert "details" not in payload


def test_unexpected_transport_exception_is_classified():
    transport = StubTransport(exc=RuntimeError("kaboom"))
    status, payload = _service(transport).handle_chat({"message": "Hello"})
    assert status == 500
    assert payload["error"] == "Internal Server Error"
    assert payload["category"] == "InternalError"
    assert "details" not in payload


def test_relay_returns_result_values():
    transport = StubTransport(_ok({"choices": [{"message": {"content": "ok"}}]}, latency_ms=7))
    service = _service(transport)
    success = service.relay("hi")
    assert success.text == "ok"
    assert success.model == "mistral"
    assert success.latency_ms == 7
    failure = service.relay("")
    assert failure.category == "EmptyMessage"


def test_probe_success():
    transport = StubTransport(_ok({"choices": [{"message": {"content": "Hello!"}}]}, latency_ms=5))
    status, payload = _service(transport).probe_backend()
    assert status == 200
    assert payload == {
        "status": "success",
        "message": "Mistral API is accessible",
        "endpoint": "http://stub:1234",
        "responseTime": 5,
        "testResponse": "Hello!",
    }
    request = transport.calls[0][0]
    assert request.max_tokens == 50
    assert request.temperature == 0.1
    assert request.messages[0].content == "Hello, this is a test message."


def test_probe_without_content():
    transport = StubTransport(_ok({"choices": []}))
    status, payload = _service(transport).probe_backend()
    assert status == 200
    assert payload["testResponse"] == "No content received"


def test_probe_failure():
    transport = StubTransport(Err(TransportFailure(kind="CONNECTION_REFUSED", message="Connection refused")))
    status, payload = _service(transport).probe_backend()
    assert status == 503
    assert payload == {
        "status": "error",
        "message": "Cannot connect to Mistral API",
        "endpoint": "http://stub:1234",
        "error": "Connection refused",
        "code": "CONNECTION_REFUSED",
    }


def test_describe_config():
    service = _service(StubTransport())
    assert service.describe_config() == {
        "mistralEndpoint": "http://stub:1234",
        "timeout": 30000,
        "maxMessageLength": 10000,
        "historyLimit": 10,
        "status": "active",
    }
