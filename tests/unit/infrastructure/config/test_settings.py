import pytest

from apishield.infrastructure.config import settings
from apishield.infrastructure.config.settings import (
    DEFAULT_BASE_URL,
    get_api_base_url,
    get_api_token,
    get_config,
    load_configuration,
    load_retry_config,
    reset_configuration,
    set_config_for_testing,
)


@pytest.fixture
def fresh_config():
    reset_configuration()
    yield
    reset_configuration()


def test_defaults_when_nothing_is_configured():
    assert get_api_base_url() == DEFAULT_BASE_URL
    assert get_api_token() is None
    config = load_retry_config()
    assert config.max_retries == 3
    assert config.retryable_status_codes == frozenset({500, 502, 503, 504, 408, 429})


def test_environment_variables_are_prefixed_and_coerced(monkeypatch):
    monkeypatch.setenv("APISHIELD_RETRY_MAX_RETRIES", "5")
    monkeypatch.setenv("APISHIELD_RETRY_BASE_DELAY_S", "0.5")
    config = load_retry_config()
    assert config.max_retries == 5
    assert config.base_delay_s == 0.5


def test_test_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("APISHIELD_API_BASE_URL", "https://env.example.com")
    set_config_for_testing({"api.base_url": "https://test.example.com"})
    assert get_api_base_url() == "https://test.example.com"


def test_yaml_file_is_flattened(tmp_path, fresh_config):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "api:\n"
        "  base_url: https://yaml.example.com/api/v1\n"
        "  token: yaml-token\n"
        "retry:\n"
        "  max_retries: 4\n"
        "  retryable_status_codes: [503, 504]\n"
    )
    load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")

    assert get_config("api.base_url") == "https://yaml.example.com/api/v1"
    assert get_api_token() == "yaml-token"
    config = load_retry_config()
    assert config.max_retries == 4
    assert config.retryable_status_codes == frozenset({503, 504})


def test_environment_beats_yaml(tmp_path, fresh_config, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("retry:\n  max_retries: 4\n")
    load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")
    monkeypatch.setenv("APISHIELD_RETRY_MAX_RETRIES", "2")

    assert load_retry_config().max_retries == 2


def test_dotenv_file_is_loaded(tmp_path, fresh_config, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("APISHIELD_API_TOKEN=from-dotenv\n")
    # registered with monkeypatch so the variable load_dotenv sets is removed afterwards
    monkeypatch.setenv("APISHIELD_API_TOKEN", "placeholder")
    monkeypatch.delenv("APISHIELD_API_TOKEN")
    load_configuration(config_file=tmp_path / "missing.yaml", env_file=env_file)

    assert get_api_token() == "from-dotenv"


def test_status_codes_from_comma_separated_string():
    set_config_for_testing({"retry.retryable_status_codes": "502, 503"})
    assert load_retry_config().retryable_status_codes == frozenset({502, 503})


def test_out_of_range_values_raise():
    set_config_for_testing({"retry.max_retries": 0})
    with pytest.raises(ValueError):
        load_retry_config()


def test_malformed_yaml_is_logged_not_raised(tmp_path, fresh_config, caplog):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("retry: [unclosed\n")
    load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")

    assert settings._loaded is True
    assert "Failed to load or parse YAML config" in caplog.text
