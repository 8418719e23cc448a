"""Tests for signer configuration."""

import pytest

from did_signer import Provider, SignerConfig, load_config
from did_signer.core.errors import ConfigurationError


def test_defaults_from_empty_env():
    config = SignerConfig.from_env({})

    assert config.name == "did-signer"
    assert config.version == "1.0.0"
    assert config.log_level == "INFO"
    assert config.default_provider is None


def test_from_env_values():
    config = SignerConfig.from_env(
        {
            "NAME": "my-signer",
            "VERSION": "2.3.4",
            "DID_SIGNER_LOG_LEVEL": "debug",
            "DID_SIGNER_PROVIDER": "evm",
        }
    )

    assert config.name == "my-signer"
    assert config.version == "2.3.4"
    assert config.log_level == "DEBUG"
    assert config.default_provider is Provider.EVM


@pytest.mark.parametrize(
    "environ",
    [
        {"VERSION": "1.0"},
        {"DID_SIGNER_LOG_LEVEL": "chatty"},
        {"DID_SIGNER_PROVIDER": "bitcoin"},
    ],
)
def test_invalid_env_raises(environ):
    with pytest.raises(ConfigurationError):
        SignerConfig.from_env(environ)


def test_yaml_round_trip(tmp_path):
    """Saved configuration loads back unchanged."""
    config = SignerConfig(name="yaml-signer", version="0.2.0", default_provider=Provider.SOLANA)
    path = tmp_path / "signer.yaml"

    config.save(path)
    loaded = load_config(path)

    assert loaded == config


def test_from_config_errors(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        SignerConfig.from_config(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        SignerConfig.from_config(bad)

    invalid = tmp_path / "invalid.yaml"
    invalid.write_text("version: not-semver\n")
    with pytest.raises(ConfigurationError):
        SignerConfig.from_config(invalid)


def test_load_config_prefers_env_without_path(monkeypatch):
    monkeypatch.setenv("NAME", "env-signer")
    monkeypatch.delenv("VERSION", raising=False)
    monkeypatch.delenv("DID_SIGNER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("DID_SIGNER_PROVIDER", raising=False)

    assert load_config().name == "env-signer"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
