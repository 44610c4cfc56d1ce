"""Chat Relay 顶层包。

该包提供聊天客户端与 OpenAI 兼容补全后端之间的无状态中继，
包括配置加载、消息校验、历史窗口化、后端调用、
响应提取与错误分类，以及对外的 HTTP 接口。
"""

__version__ = "1.0.0"

from chat_relay.api.service import ChatRelayService
from chat_relay.config.settings import RelaySettings, load_settings

__all__ = ["ChatRelayService", "RelaySettings", "load_settings", "__version__"]
