"""补全后端集成层。

该包下的模块负责：
- 定义传输抽象接口 (base)。
- 维护固定的生成参数 (registry)。
- 提供 OpenAI 兼容后端的 httpx 实现 (openai_compat)。
"""

from chat_relay.config.settings import RelaySettings
from chat_relay.providers.base import CompletionTransport
from chat_relay.providers.openai_compat import HttpxCompletionClient


def create_transport(settings: RelaySettings) -> CompletionTransport:
    """根据配置创建默认的传输实现。"""

    return HttpxCompletionClient(settings.mistral_api_url)
