import pytest
from pydantic import ValidationError

from tokend.config import TokendSettings


def test_defaults():
    settings = TokendSettings(_env_file=None)

    assert settings.service.port == 4500
    assert settings.service.storage_timeout_ms == 500
    assert settings.vault.address == "https://127.0.0.1:8200"
    assert settings.vault.token_renew_increment == 3600
    assert settings.warden.address == "http://127.0.0.1:3000"
    assert settings.warden.path == "/v1/authenticate"
    assert settings.metadata.host == "http://169.254.169.254"
    assert settings.kms.region is None
    assert settings.log.json_format is False


def test_nested_environment_overrides(monkeypatch):
    monkeypatch.setenv("TOKEND_VAULT__PORT", "9200")
    monkeypatch.setenv("TOKEND_VAULT__TLS", "false")
    monkeypatch.setenv("TOKEND_VAULT__TOKEN_RENEW_INCREMENT", "30m")
    monkeypatch.setenv("TOKEND_SERVICE__STORAGE_TIMEOUT_MS", "250")
    monkeypatch.setenv("TOKEND_KMS__REGION", "eu-central-1")

    settings = TokendSettings(_env_file=None)

    assert settings.vault.address == "http://127.0.0.1:9200"
    assert settings.vault.token_renew_increment == 1800
    assert settings.service.storage_timeout_ms == 250
    assert settings.kms.region == "eu-central-1"


def test_unknown_duration_unit_is_rejected():
    with pytest.raises(ValidationError):
        TokendSettings(_env_file=None, vault={"token_renew_increment": "3w"})


def test_storage_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        TokendSettings(_env_file=None, service={"storage_timeout_ms": 0})
