"""Unit tests for config.py"""

import pytest

from ivpub.config import load_config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test without a config.yaml or IVPUB_* env vars."""
    monkeypatch.chdir(tmp_path)
    for name in ("OUTPUT_DIR", "PARSER_CONFIG", "MECHANICS_FENCE", "QUERY_FENCE", "LOG_LEVEL"):
        monkeypatch.delenv(f"IVPUB_{name}", raising=False)


def test_load_config_defaults():
    """Settings defaults apply when nothing else is configured."""
    settings = load_config()
    assert settings.output_dir == "dist"
    assert settings.parser_config == "gfm-like"
    assert settings.mechanics_fence == "iron-vault-mechanics"
    assert settings.query_fence == "dataview"
    assert settings.log_level == "WARNING"


def test_load_config_uses_env_output_dir(monkeypatch):
    """IVPUB_OUTPUT_DIR env var is picked up by load_config."""
    monkeypatch.setenv("IVPUB_OUTPUT_DIR", "site")
    assert load_config().output_dir == "site"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """IVPUB_QUERY_FENCE takes precedence over config.yaml."""
    (tmp_path / "config.yaml").write_text("query_fence: project\nmechanics_fence: mech\n")
    monkeypatch.setenv("IVPUB_QUERY_FENCE", "env")
    settings = load_config()
    assert settings.query_fence == "env"
    assert settings.mechanics_fence == "mech"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are skipped."""
    monkeypatch.setenv("IVPUB_OUTPUT_DIR", "env")
    settings = load_config(overrides={"output_dir": "cli", "parser_config": None})
    assert settings.output_dir == "cli"
    assert settings.parser_config == "gfm-like"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_invalid_log_level(monkeypatch):
    monkeypatch.setenv("IVPUB_LOG_LEVEL", "LOUD")
    with pytest.raises(ValueError, match="Invalid settings"):
        load_config()
