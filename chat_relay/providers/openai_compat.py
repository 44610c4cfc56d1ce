"""OpenAI 兼容补全后端的 httpx 适配器。

本模块负责：

1. 接收统一的 CompletionRequest。
2. 以 ``POST {base_url}/v1/chat/completions`` 发送给后端。
3. 测量调用耗时，并把网络异常、非 2xx 响应分类为 TransportFailure。
4. 成功时原样返回解析后的 JSON 响应体，不做任何解读。
"""

import json
import socket
import time
from typing import Any, Optional

import httpx

from chat_relay.domain.errors import TransportFailure, TransportFailureKind
from chat_relay.domain.models import CompletionRequest, RawResponse
from chat_relay.domain.result import Err, Ok, Result


COMPLETIONS_PATH = "/v1/chat/completions"

_REFUSED_MARKERS = ("connection refused", "errno 111", "errno 61", "actively refused")
_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


def _exception_chain(exc: BaseException):
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_connect_error(exc: BaseException) -> TransportFailureKind:
    """区分连接被拒绝、域名解析失败与其他连接错误。

    优先检查异常链中的 OSError 子类型，再退回到错误信息匹配
    （不同平台/后端的 httpcore 对底层异常的包装方式不一致）。
    """

    chain = list(_exception_chain(exc))
    for err in chain:
        if isinstance(err, socket.gaierror):
            return "DNS_FAILURE"
        if isinstance(err, ConnectionRefusedError):
            return "CONNECTION_REFUSED"
    text = " ".join(str(err) for err in chain).lower()
    if any(marker in text for marker in _DNS_MARKERS):
        return "DNS_FAILURE"
    if any(marker in text for marker in _REFUSED_MARKERS):
        return "CONNECTION_REFUSED"
    return "TRANSPORT_ERROR"


def _parse_body(content: bytes) -> Any:
    if not content:
        return None
    try:
        return json.loads(content)
    except ValueError:
        return None


def _elapsed_ms(start: float) -> int:
    return max(0, int(round((time.perf_counter() - start) * 1000)))


class HttpxCompletionClient:
    """基于 httpx 的 CompletionTransport 实现。

    - name: 实现名称（供日志/调试使用）。
    - attempt_call: 对外统一调用入口，返回 Result。
    """

    name = "openai-compat"

    def __init__(self, base_url: str):
        self.endpoint = base_url.rstrip("/")

    def attempt_call(self, request: CompletionRequest, timeout: float) -> Result[RawResponse, TransportFailure]:
        """执行一次非流式补全调用，不重试。

        步骤：
        1. 构造 HTTP 请求 payload。
        2. 发送请求并分块读取响应体；timeout（秒）是整个调用的总时限，
           httpx 自身的超时只约束单次连接/读取。
        3. 网络异常 -> CONNECTION_REFUSED / DNS_FAILURE / TIMEOUT / TRANSPORT_ERROR。
        4. 非 2xx -> HTTP_ERROR（携带状态码与错误响应体）。
        """

        payload = request.to_payload()
        start = time.perf_counter()
        deadline = start + timeout
        try:
            with httpx.Client(timeout=timeout, trust_env=False) as client:
                with client.stream(
                    "POST",
                    f"{self.endpoint}{COMPLETIONS_PATH}",
                    json=payload,
                    headers={"Content-Type": "application/json"},
                ) as resp:
                    status_code = resp.status_code
                    chunks = []
                    for chunk in resp.iter_bytes():
                        chunks.append(chunk)
                        if time.perf_counter() > deadline:
                            break
                    if time.perf_counter() > deadline:
                        return Err(_deadline_exceeded(timeout))
        except httpx.TimeoutException as e:
            return Err(TransportFailure(kind="TIMEOUT", message=str(e) or "timeout"))
        except httpx.ConnectError as e:
            return Err(TransportFailure(kind=classify_connect_error(e), message=str(e)))
        except httpx.RequestError as e:
            # 其他网络错误：连接中断、协议错误等
            return Err(TransportFailure(kind="TRANSPORT_ERROR", message=str(e)))
        latency_ms = _elapsed_ms(start)
        body = _parse_body(b"".join(chunks))
        # 不跟随重定向，3xx 与 4xx/5xx 一样视为后端错误
        if not 200 <= status_code < 300:
            return Err(
                TransportFailure(
                    kind="HTTP_ERROR",
                    message=f"Request failed with status code {status_code}",
                    status_code=status_code,
                    body=body,
                )
            )
        return Ok(RawResponse(status_code=status_code, body=body, latency_ms=latency_ms))


def _deadline_exceeded(timeout: float) -> TransportFailure:
    return TransportFailure(kind="TIMEOUT", message=f"Response not completed within {timeout:g}s")
