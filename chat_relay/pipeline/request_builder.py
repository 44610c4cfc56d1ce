"""组装发往后端的 CompletionRequest。"""

from typing import List

from chat_relay.domain.models import ChatMessage, CompletionRequest
from chat_relay.providers.registry import CHAT_PROFILE, GenerationProfile


def build_completion_request(
    message: str,
    window: List[ChatMessage],
    model: str,
    profile: GenerationProfile = CHAT_PROFILE,
) -> CompletionRequest:
    """把当前消息追加到历史窗口末尾，并套上固定的生成参数。"""

    messages = [*window, ChatMessage(role="user", content=message)]
    return CompletionRequest(
        model=model,
        messages=messages,
        max_tokens=profile.max_tokens,
        temperature=profile.temperature,
        stream=False,
    )
