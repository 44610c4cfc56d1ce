"""错误分类器。

把校验、传输、解析各阶段的失败统一映射为 ``{http_status, error, message}``，
保证调用方无论失败来自哪里都拿到同一种响应结构：

    {"error": <label>, "message": <text>, "category": <category>, ...context}

本模块中的函数都不会抛出异常。
"""

from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple

from chat_relay.config.settings import RelaySettings
from chat_relay.domain.errors import ErrorCategory, TransportFailure
from chat_relay.domain.models import RelayFailure


INTERNAL_ERROR_LABEL = "Internal Server Error"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred while processing your request."
UNREACHABLE_LABEL = "Service Unavailable"
APPLICATION_ERROR_LABEL = "Mistral API Error"

# category -> (默认 HTTP 状态码, error 标签, 默认提示)
FAILURE_TABLE: Mapping[str, Tuple[int, str, str]] = {
    ErrorCategory.INVALID_MESSAGE_TYPE: (400, "Invalid request", "Message is required and must be a string"),
    ErrorCategory.EMPTY_MESSAGE: (400, "Invalid request", "Message cannot be empty"),
    ErrorCategory.MESSAGE_TOO_LONG: (400, "Invalid request", "Message is too long"),
    ErrorCategory.BACKEND_UNREACHABLE: (
        503,
        UNREACHABLE_LABEL,
        "Cannot connect to Mistral API. Please ensure it is running and accessible.",
    ),
    ErrorCategory.BACKEND_TIMEOUT: (504, "Gateway Timeout", "Mistral API request timed out. Please try again."),
    ErrorCategory.BACKEND_APPLICATION_ERROR: (500, APPLICATION_ERROR_LABEL, "Unknown error from Mistral API"),
    ErrorCategory.NO_CHOICES_RETURNED: (500, INTERNAL_ERROR_LABEL, INTERNAL_ERROR_MESSAGE),
    ErrorCategory.EMPTY_COMPLETION: (500, INTERNAL_ERROR_LABEL, INTERNAL_ERROR_MESSAGE),
    ErrorCategory.INTERNAL_ERROR: (500, INTERNAL_ERROR_LABEL, INTERNAL_ERROR_MESSAGE),
}


def classify(
    category: str,
    *,
    message: Optional[str] = None,
    http_status: Optional[int] = None,
    detail: Optional[str] = None,
    **extra: Any,
) -> RelayFailure:
    """按 FAILURE_TABLE 构造 RelayFailure，未知类别按内部错误处理。"""

    status, label, default_message = FAILURE_TABLE.get(category, FAILURE_TABLE[ErrorCategory.INTERNAL_ERROR])
    return RelayFailure(
        category=category,
        http_status=http_status or status,
        label=label,
        message=message or default_message,
        detail=detail,
        extra=extra,
    )


def _backend_error_message(body: Any) -> Optional[str]:
    """按 error.message -> message 的顺序取后端自带的错误信息。"""

    if not isinstance(body, Mapping):
        return None
    error = body.get("error")
    if isinstance(error, Mapping) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    if isinstance(body.get("message"), str) and body["message"]:
        return body["message"]
    return None


def classify_transport_failure(failure: TransportFailure, settings: RelaySettings) -> RelayFailure:
    """把 Upstream Client 的 TransportFailure 映射为 RelayFailure。"""

    endpoint = settings.mistral_api_url
    if failure.kind == "CONNECTION_REFUSED":
        return classify(
            ErrorCategory.BACKEND_UNREACHABLE,
            detail=failure.message,
            details=f"Attempted to connect to: {endpoint}",
        )
    if failure.kind == "DNS_FAILURE":
        return classify(
            ErrorCategory.BACKEND_UNREACHABLE,
            message="Mistral API endpoint not found. Please check the configuration.",
            detail=failure.message,
            details=f"Endpoint: {endpoint}",
        )
    if failure.kind == "TIMEOUT":
        return classify(
            ErrorCategory.BACKEND_TIMEOUT,
            detail=failure.message,
            timeout=settings.mistral_timeout,
        )
    if failure.kind == "HTTP_ERROR":
        status = failure.status_code or 500
        return classify(
            ErrorCategory.BACKEND_APPLICATION_ERROR,
            message=_backend_error_message(failure.body),
            http_status=status if 400 <= status < 500 else 500,
            detail=failure.message,
            status=status,
        )
    return classify(
        ErrorCategory.BACKEND_UNREACHABLE,
        message="Error communicating with Mistral API. Please ensure it is running and accessible.",
        detail=failure.message,
        details=f"Endpoint: {endpoint}",
    )


def classify_unexpected(exc: BaseException) -> RelayFailure:
    """兜底：任何未预期的异常都归为内部错误。"""

    return classify(ErrorCategory.INTERNAL_ERROR, detail=f"{type(exc).__name__}: {exc}")


def render_failure(failure: RelayFailure, expose_detail: bool = False) -> Tuple[int, Dict[str, Any]]:
    """渲染为 (HTTP 状态码, 响应体)。

    detail 只在 expose_detail=True（显式开启诊断细节）且响应体未自带 details 时输出。
    """

    payload: Dict[str, Any] = {
        "error": failure.label,
        "message": failure.message,
        "category": failure.category,
    }
    payload.update(failure.extra)
    if expose_detail and failure.detail and "details" not in payload:
        payload["details"] = failure.detail
    return failure.http_status, payload
