"""生成参数配置。

本模块把“用途”与“生成参数”解耦：

- chat: 正常对话使用的参数。
- probe: /chat/test 连通性测试使用的参数（短回答、低温度）。

模型标识来自运行配置（RelaySettings.mistral_model），这里只维护固定的生成参数。"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationProfile:
    """一组固定的生成参数。"""

    name: str
    max_tokens: int
    temperature: float


CHAT_PROFILE = GenerationProfile(name="chat", max_tokens=2000, temperature=0.7)

PROBE_PROFILE = GenerationProfile(name="probe", max_tokens=50, temperature=0.1)
