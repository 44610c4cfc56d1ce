"""失败分类相关的常量与传输层失败模型。

ErrorCategory 为客户端可见的失败类别；TransportFailure 是 Upstream Client
在拿到可用响应体之前产生的失败，由错误分类器映射为 RelayFailure。
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional


class ErrorCategory:
    """客户端可见的失败类别（响应体中的 ``category`` 字段）。"""

    INVALID_MESSAGE_TYPE = "InvalidMessageType"
    EMPTY_MESSAGE = "EmptyMessage"
    MESSAGE_TOO_LONG = "MessageTooLong"
    BACKEND_UNREACHABLE = "BackendUnreachable"
    BACKEND_TIMEOUT = "BackendTimeout"
    BACKEND_APPLICATION_ERROR = "BackendApplicationError"
    NO_CHOICES_RETURNED = "NoChoicesReturned"
    EMPTY_COMPLETION = "EmptyCompletion"
    INTERNAL_ERROR = "InternalError"


# 传输层失败种类
TransportFailureKind = Literal[
    "CONNECTION_REFUSED",
    "DNS_FAILURE",
    "TIMEOUT",
    "TRANSPORT_ERROR",
    "HTTP_ERROR",
]


@dataclass(frozen=True)
class TransportFailure:
    """一次后端调用的传输层失败。

    - kind: 失败种类。
    - message: 底层异常或响应的简要描述，用于日志与连通性测试。
    - status_code: 仅 HTTP_ERROR 时有值，为后端返回的状态码。
    - body: 仅 HTTP_ERROR 时有值，为后端返回的错误响应体（尽量解析为 JSON）。
    """

    kind: TransportFailureKind
    message: str
    status_code: Optional[int] = None
    body: Any = None
