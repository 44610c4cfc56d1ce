"""从后端响应体中提取回答文本。"""

from collections.abc import Mapping
from typing import Any

from chat_relay.domain.errors import ErrorCategory
from chat_relay.domain.models import CompletionText, RelayFailure
from chat_relay.domain.result import Err, Ok, Result
from chat_relay.pipeline.classifier import classify


def _unusable(category: str, detail: str) -> Err[RelayFailure]:
    return Err(classify(category, detail=detail))


def extract_completion(body: Any, default_model: str) -> Result[CompletionText, RelayFailure]:
    """解析 ``{choices: [{message: {content}}], model?, usage?}``。

    - choices 缺失或为空 -> NoChoicesReturned
    - 第一个 choice 的 content 缺失或 trim 后为空 -> EmptyCompletion
    - usage 缺失不算错误
    """

    data = body if isinstance(body, Mapping) else {}
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return _unusable(ErrorCategory.NO_CHOICES_RETURNED, "No response choices received from Mistral API")

    first = choices[0] if isinstance(choices[0], Mapping) else {}
    message = first.get("message")
    content = message.get("content") if isinstance(message, Mapping) else None
    if not isinstance(content, str) or not content.strip():
        return _unusable(ErrorCategory.EMPTY_COMPLETION, "Empty response received from Mistral API")

    model = data.get("model")
    usage = data.get("usage")
    return Ok(
        CompletionText(
            text=content.strip(),
            model=model if isinstance(model, str) and model else default_model,
            usage=dict(usage) if isinstance(usage, Mapping) else None,
        )
    )
