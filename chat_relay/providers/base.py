"""Upstream Client 抽象接口。

服务层不直接依赖具体的 HTTP 库，而是依赖此协议：

- attempt_call(request, timeout): 执行一次后端调用，不重试。
- 成功返回 Ok(RawResponse)，失败返回 Err(TransportFailure)。

任何 HTTP 客户端实现（httpx、测试桩等）只要满足该协议即可接入。
"""

from typing import Protocol

from chat_relay.domain.errors import TransportFailure
from chat_relay.domain.models import CompletionRequest, RawResponse
from chat_relay.domain.result import Result


class CompletionTransport(Protocol):
    """补全后端传输协议。

    - name: 实现名称，用于日志。
    - endpoint: 后端基础地址，用于日志与连通性测试响应。
    """

    name: str
    endpoint: str

    def attempt_call(self, request: CompletionRequest, timeout: float) -> Result[RawResponse, TransportFailure]:
        """timeout 单位为秒。"""

        ...
