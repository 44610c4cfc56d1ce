import pydantic
import pytest

from chat_relay.config.settings import RelaySettings, load_settings
from chat_relay.domain.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("MISTRAL_API_URL", "MISTRAL_TIMEOUT", "MISTRAL_MODEL", "RELAY_ENV", "EXPOSE_ERROR_DETAILS", "CHAT_RELAY_CONFIG_FILE"):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    s = load_settings()
    assert s.mistral_api_url == "http://127.0.0.1:1234"
    assert s.mistral_timeout == 30000
    assert s.timeout_seconds == 30.0
    assert s.max_message_length == 10000
    assert s.history_limit == 10
    assert s.mistral_model == "mistral"
    assert s.relay_env == "development"
    assert not s.expose_error_details


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MISTRAL_API_URL", "http://gpu-box:8080/")
    monkeypatch.setenv("MISTRAL_TIMEOUT", "1500")
    monkeypatch.setenv("RELAY_ENV", "production")
    monkeypatch.setenv("EXPOSE_ERROR_DETAILS", "true")
    s = load_settings()
    assert s.mistral_api_url == "http://gpu-box:8080"
    assert s.mistral_timeout == 1500
    assert s.relay_env == "production"
    assert s.expose_error_details


@pytest.mark.parametrize("raw", ["abc", "0", "-5", ""])
def test_invalid_timeout_falls_back_to_default(monkeypatch, raw):
    monkeypatch.setenv("MISTRAL_TIMEOUT", raw)
    assert load_settings().mistral_timeout == 30000


def test_yaml_config_file(monkeypatch, tmp_path):
    cfg = tmp_path / "relay.yaml"
    cfg.write_text("mistral_model: mistral-7b-instruct\nhistory_limit: 4\n", encoding="utf-8")
    monkeypatch.setenv("CHAT_RELAY_CONFIG_FILE", str(cfg))
    s = load_settings()
    assert s.mistral_model == "mistral-7b-instruct"
    assert s.history_limit == 4


def test_env_beats_yaml(monkeypatch, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("mistral_model: from-yaml\n", encoding="utf-8")
    monkeypatch.setenv("MISTRAL_MODEL", "from-env")
    assert load_settings().mistral_model == "from-env"


def test_invalid_url_raises_config_error():
    with pytest.raises(ConfigError) as excinfo:
        load_settings(mistral_api_url="ftp://nope")
    assert excinfo.value.code == "INVALID_CONFIG"


def test_settings_are_frozen():
    s = load_settings()
    with pytest.raises(pydantic.ValidationError):
        s.mistral_timeout = 1
    assert isinstance(s, RelaySettings)
