"""中继内部统一的数据模型。

本模块定义了请求在管道中流转时使用的标准数据结构：

- ChatMessage: 一条对话消息（user/assistant）。
- CompletionRequest: 发给补全后端的完整请求。
- RawResponse: 传输层成功时拿到的原始响应体与耗时。
- CompletionText: 从响应体中提取出的回答文本。
- CompletionSuccess / RelayFailure: 一次调用的最终结果，二者只会出现一个。

所有对象的生命周期都不超过单次请求，不存在跨请求共享的可变状态。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union


# 发往后端的消息角色（OpenAI 兼容格式）
Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息。

    - role: user 或 assistant。
    - content: 已去除首尾空白的非空文本。
    """

    role: Role
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class CompletionRequest:
    """一次补全请求，由 RequestBuilder 生成后交给 Upstream Client。"""

    model: str
    messages: List[ChatMessage]
    max_tokens: int
    temperature: float
    stream: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """转换为 /v1/chat/completions 所需的 JSON 请求体。"""

        return {
            "model": self.model,
            "messages": [m.to_payload() for m in self.messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": self.stream,
        }


@dataclass(frozen=True)
class RawResponse:
    """传输成功时的原始结果。

    body 保持后端返回的 JSON 原样（无法解析为 JSON 时为 None），
    由 Response Extractor 负责解读。
    """

    status_code: int
    body: Any
    latency_ms: int


@dataclass(frozen=True)
class CompletionText:
    """Response Extractor 的输出。"""

    text: str
    model: str
    usage: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class CompletionSuccess:
    """调用成功：回答文本、模型、token 统计与耗时。"""

    text: str
    model: str
    usage: Optional[Dict[str, Any]]
    latency_ms: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "response": self.text,
            "model": self.model,
            "usage": self.usage,
            "responseTime": self.latency_ms,
        }


@dataclass(frozen=True)
class RelayFailure:
    """已分类的失败，可直接渲染给调用方。

    Attributes:
        category: 失败类别（见 domain.errors.ErrorCategory）。
        http_status: 返回给客户端的 HTTP 状态码。
        label: 响应体里的 ``error`` 字段。
        message: 用户可读错误信息。
        detail: 内部细节，仅在开启 expose_error_details 时对外暴露。
        extra: 其他上下文字段（timeout、status、details 等），原样并入响应体。
    """

    category: str
    http_status: int
    label: str
    message: str
    detail: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


CompletionResult = Union[CompletionSuccess, RelayFailure]
