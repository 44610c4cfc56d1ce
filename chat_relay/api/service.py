"""中继服务入口。

把管道各阶段串成一条显式的线性流程，并提供给 HTTP 层调用的三个入口：

- handle_chat: POST /chat
- probe_backend: GET /chat/test
- describe_config: GET /chat/config

所有入口都返回 (HTTP 状态码, 响应体)，不会向上抛出异常。
"""

from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple

from chat_relay.config.settings import RelaySettings
from chat_relay.domain.models import CompletionResult, CompletionSuccess, RelayFailure
from chat_relay.domain.result import Err
from chat_relay.infrastructure.logging.logger import logger, preview
from chat_relay.pipeline import (
    build_completion_request,
    classify_transport_failure,
    classify_unexpected,
    extract_completion,
    render_failure,
    validate_message,
    window_history,
)
from chat_relay.providers import create_transport
from chat_relay.providers.base import CompletionTransport
from chat_relay.providers.registry import CHAT_PROFILE, PROBE_PROFILE


PROBE_MESSAGE = "Hello, this is a test message."

HttpReply = Tuple[int, Dict[str, Any]]


class ChatRelayService:
    """无状态的聊天中继。

    settings 与 transport 在构造后只读，可被多个并发请求共享。
    """

    def __init__(self, settings: RelaySettings, transport: Optional[CompletionTransport] = None):
        self._settings = settings
        self._transport = transport or create_transport(settings)

    @property
    def settings(self) -> RelaySettings:
        return self._settings

    def relay(self, message: Any, history: Any = None) -> CompletionResult:
        """执行一次完整的中继管道，返回 CompletionSuccess 或 RelayFailure。"""

        validated = validate_message(message, self._settings.max_message_length)
        if isinstance(validated, Err):
            return validated.error

        window = window_history(history, self._settings.history_limit)
        request = build_completion_request(validated.value, window, self._settings.mistral_model, CHAT_PROFILE)

        logger.info(
            f"Sending request to Mistral API at {self._transport.endpoint}",
            extra={"extra": {"messages": len(request.messages), "transport": self._transport.name}},
        )
        called = self._transport.attempt_call(request, self._settings.timeout_seconds)
        if isinstance(called, Err):
            return classify_transport_failure(called.error, self._settings)

        raw = called.value
        logger.info(f"Received response from Mistral in {raw.latency_ms}ms")
        extracted = extract_completion(raw.body, self._settings.mistral_model)
        if isinstance(extracted, Err):
            return extracted.error

        completion = extracted.value
        return CompletionSuccess(
            text=completion.text,
            model=completion.model,
            usage=completion.usage,
            latency_ms=raw.latency_ms,
        )

    def handle_chat(self, body: Any) -> HttpReply:
        """处理 POST /chat 的请求体 ``{message, history?}``。"""

        data = body if isinstance(body, Mapping) else {}
        message = data.get("message")
        if isinstance(message, str):
            logger.info(f'Received chat request: "{preview(message)}"')
        try:
            result = self.relay(message, data.get("history"))
        except Exception as exc:
            logger.exception("Chat pipeline failed unexpectedly")
            result = classify_unexpected(exc)

        if isinstance(result, RelayFailure):
            logger.error(
                f"Chat error: {result.detail or result.message}",
                extra={"extra": {"category": result.category, "status": result.http_status}},
            )
            return render_failure(result, expose_detail=self._settings.expose_error_details)

        logger.info(f'Sending response: "{preview(result.text)}"')
        return 200, result.to_payload()

    def probe_backend(self) -> HttpReply:
        """用固定的短请求检测后端是否可用（GET /chat/test）。"""

        endpoint = self._settings.mistral_api_url
        logger.info(f"Testing connection to Mistral API at {endpoint}")
        request = build_completion_request(PROBE_MESSAGE, [], self._settings.mistral_model, PROBE_PROFILE)
        try:
            called = self._transport.attempt_call(request, self._settings.timeout_seconds)
        except Exception as exc:
            logger.exception("Mistral API test failed unexpectedly")
            return 503, self._probe_failure(str(exc), "INTERNAL_ERROR")

        if isinstance(called, Err):
            failure = called.error
            logger.error(f"Mistral API test failed: {failure.message}", extra={"extra": {"code": failure.kind}})
            return 503, self._probe_failure(failure.message, failure.kind)

        raw = called.value
        return 200, {
            "status": "success",
            "message": "Mistral API is accessible",
            "endpoint": endpoint,
            "responseTime": raw.latency_ms,
            "testResponse": _first_content(raw.body) or "No content received",
        }

    def describe_config(self) -> Dict[str, Any]:
        """当前运行配置（GET /chat/config），不访问后端。"""

        return {
            "mistralEndpoint": self._settings.mistral_api_url,
            "timeout": self._settings.mistral_timeout,
            "maxMessageLength": self._settings.max_message_length,
            "historyLimit": self._settings.history_limit,
            "status": "active",
        }

    def _probe_failure(self, error: str, code: str) -> Dict[str, Any]:
        return {
            "status": "error",
            "message": "Cannot connect to Mistral API",
            "endpoint": self._settings.mistral_api_url,
            "error": error,
            "code": code,
        }


def _first_content(body: Any) -> Optional[str]:
    if not isinstance(body, Mapping):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], Mapping):
        return None
    message = choices[0].get("message")
    if not isinstance(message, Mapping):
        return None
    content = message.get("content")
    return content if isinstance(content, str) and content else None
