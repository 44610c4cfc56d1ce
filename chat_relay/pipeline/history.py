"""历史消息窗口化。

调用方每轮都会重发完整历史，这里把它整理成有界、格式正确的消息序列：

1. 丢弃不是映射、缺少 role 或 content、content 非字符串或 trim 后为空的元素。
2. 只保留最后 limit 条（按原始时间顺序）。
3. role 归一化：只有 "assistant" 保留为 assistant，其余一律视为 user。
4. content 去除首尾空白。

这是尽力而为的清洗，不会让请求失败。
"""

from collections.abc import Mapping
from typing import Any, List, Optional

from chat_relay.domain.models import ChatMessage


def _as_mapping(turn: Any) -> Optional[Mapping]:
    if isinstance(turn, ChatMessage):
        return turn.to_payload()
    if isinstance(turn, Mapping):
        return turn
    return None


def _usable(turn: Optional[Mapping]) -> bool:
    if turn is None:
        return False
    content = turn.get("content")
    return bool(turn.get("role")) and isinstance(content, str) and bool(content.strip())


def window_history(history: Any, limit: int) -> List[ChatMessage]:
    """把调用方提供的历史整理为 ConversationWindow（不含当前消息）。"""

    if not isinstance(history, (list, tuple)) or limit <= 0:
        return []
    turns = [t for t in (_as_mapping(h) for h in history) if _usable(t)]
    return [
        ChatMessage(
            role="assistant" if t["role"] == "assistant" else "user",
            content=t["content"].strip(),
        )
        for t in turns[-limit:]
    ]
