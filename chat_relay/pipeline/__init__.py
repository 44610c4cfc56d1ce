"""中继管道的各个阶段。

Validator -> Windower -> Request Builder -> (Upstream Client) -> Response Extractor，
任一阶段失败都交给 classifier 生成最终响应。
"""

from chat_relay.pipeline.classifier import classify_transport_failure, classify_unexpected, render_failure
from chat_relay.pipeline.extractor import extract_completion
from chat_relay.pipeline.history import window_history
from chat_relay.pipeline.request_builder import build_completion_request
from chat_relay.pipeline.validation import validate_message

__all__ = [
    "build_completion_request",
    "classify_transport_failure",
    "classify_unexpected",
    "extract_completion",
    "render_failure",
    "validate_message",
    "window_history",
]
