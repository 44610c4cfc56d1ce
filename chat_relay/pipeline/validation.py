"""入站消息校验。"""

from typing import Any

from chat_relay.domain.errors import ErrorCategory
from chat_relay.domain.models import RelayFailure
from chat_relay.domain.result import Err, Ok, Result
from chat_relay.pipeline.classifier import classify


def validate_message(value: Any, max_length: int) -> Result[str, RelayFailure]:
    """校验当前用户消息，成功时返回去除首尾空白后的文本。

    检查顺序：类型 -> 是否为空 -> 长度。长度按原始（未 trim）文本计算，
    恰好等于 max_length 时通过。
    """

    if not isinstance(value, str):
        return Err(classify(ErrorCategory.INVALID_MESSAGE_TYPE))
    trimmed = value.strip()
    if not trimmed:
        return Err(classify(ErrorCategory.EMPTY_MESSAGE))
    if len(value) > max_length:
        return Err(
            classify(
                ErrorCategory.MESSAGE_TOO_LONG,
                message=f"Message is too long (max {max_length} characters)",
            )
        )
    return Ok(trimmed)
