"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。配置在进程启动时
通过 load_settings() 构造一次，此后只读，并显式传入服务入口。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_relay.domain.exceptions import ConfigError


DEFAULT_API_URL = "http://127.0.0.1:1234"
DEFAULT_TIMEOUT_MS = 30000


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("CHAT_RELAY_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class RelaySettings(BaseSettings):
    """中继配置（只读）。"""

    # ---- 补全后端 ----
    mistral_api_url: str = Field(default=DEFAULT_API_URL, description="补全后端基础URL")
    mistral_timeout: int = Field(default=DEFAULT_TIMEOUT_MS, description="后端请求超时（毫秒）")
    mistral_model: str = Field(default="mistral", description="发送给后端的模型标识")

    # ---- 请求限制 ----
    max_message_length: int = Field(default=10000, ge=1, description="单条消息最大字符数")
    history_limit: int = Field(default=10, ge=0, le=100, description="携带的历史消息条数上限")

    # ---- 运行环境 ----
    relay_env: str = Field(default="development", description="运行环境名称，仅用于展示")
    host: str = Field(default="0.0.0.0", description="HTTP 监听地址")
    port: int = Field(default=3001, ge=0, le=65535, description="HTTP 监听端口")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")
    expose_error_details: bool = Field(default=False, description="是否在错误响应中附带内部诊断细节")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("mistral_api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("MISTRAL_API_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("mistral_timeout", mode="before")
    @classmethod
    def validate_timeout(cls, v: Any) -> int:
        # 无法解析或非正数时回退到默认值
        try:
            timeout = int(v)
        except (TypeError, ValueError):
            return DEFAULT_TIMEOUT_MS
        return timeout if timeout > 0 else DEFAULT_TIMEOUT_MS

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )

    @property
    def timeout_seconds(self) -> float:
        return self.mistral_timeout / 1000.0


def load_settings(**overrides: Any) -> RelaySettings:
    """构造进程级配置；校验失败时抛出 ConfigError。"""
    try:
        return RelaySettings(**overrides)
    except ValidationError as exc:
        raise ConfigError(code="INVALID_CONFIG", message=str(exc)) from exc
