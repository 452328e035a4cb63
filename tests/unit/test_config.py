"""Test issuing configuration."""

from pathlib import Path

import pytest

from velocity_issuing.config import ConfigError, IssuingConfig


def test_defaults():
    config = IssuingConfig(
        revocation_contract_address="0x1", metadata_registry_contract_address="0x2"
    )
    assert config.revocation_list_size == 10240
    assert config.metadata_list_size == 10000
    assert config.list_index_origin == 0
    assert config.credential_subject_context is False
    assert config.credential_extensions_context_url is None
    assert config.credential_id_content_hash_suffix is False


def test_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ISSUING_REVOCATION_CONTRACT_ADDRESS", "0xrev")
    monkeypatch.setenv("ISSUING_METADATA_REGISTRY_CONTRACT_ADDRESS", "0xmeta")
    monkeypatch.setenv("ISSUING_CREDENTIAL_SUBJECT_CONTEXT", "true")

    config = IssuingConfig()  # type: ignore
    assert config.revocation_contract_address == "0xrev"
    assert config.metadata_registry_contract_address == "0xmeta"
    assert config.credential_subject_context is True


def test_from_config_file(tmp_path: Path):
    path = tmp_path / "issuing.toml"
    path.write_text(
        'revocation_contract_address = "0xrev"\n'
        'metadata_registry_contract_address = "0xmeta"\n'
        "metadata_list_size = 5\n"
    )

    config = IssuingConfig.from_config_file(str(path))
    assert config.revocation_contract_address == "0xrev"
    assert config.metadata_list_size == 5


def test_list_sizes_must_be_positive():
    with pytest.raises(ConfigError):
        IssuingConfig(
            revocation_contract_address="0x1",
            metadata_registry_contract_address="0x2",
            revocation_list_size=0,
        )


def test_config_file_falls_back_to_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ISSUING_REVOCATION_CONTRACT_ADDRESS", "0xenv")
    monkeypatch.setenv("ISSUING_METADATA_REGISTRY_CONTRACT_ADDRESS", "0xmeta")
    path = tmp_path / "issuing.toml"
    path.write_text('revocation_contract_address = "0xrev"\n')

    config = IssuingConfig.from_config_file(path)
    assert config.revocation_contract_address == "0xrev"
    assert config.metadata_registry_contract_address == "0xmeta"
