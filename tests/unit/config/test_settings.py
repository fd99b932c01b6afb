"""
Unit tests for configuration loading.

Usage:
    pytest tests/unit/config/test_settings.py
"""

import os

import pytest
from pydantic import ValidationError
from solders.pubkey import Pubkey  # type: ignore

from sequestre.config import SequestreConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's SEQUESTRE_* variables out of these tests."""
    for name in list(os.environ):
        if name.startswith("SEQUESTRE_") or name == "ENV":
            monkeypatch.delenv(name)


class TestSequestreConfig:
    """Tests for SequestreConfig defaults and validators."""

    def test_defaults(self):
        """Defaults target a local validator with the example trade."""
        config = SequestreConfig()

        assert config.rpc_url == "http://localhost:8899"
        assert config.commitment == "confirmed"
        assert config.trade.deposit_amount == 5_000_000
        assert config.trade.counter_amount == 10_000_000
        assert config.trade.decimals == 6
        assert config.confirmation.timeout == 30.0
        assert config.escrow_program == Pubkey.from_string(
            "FZoqAsnuaq832FezFs7bNeuNtHHg7c8QsnJqmKM9JpCm"
        )

    def test_normalizes_case(self):
        """Enumerated strings are lower-cased."""
        config = SequestreConfig(network="DevNet", commitment="FINALIZED")

        assert config.network == "devnet"
        assert config.commitment == "finalized"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("network", "moonnet"),
            ("commitment", "recent"),
            ("log_level", "loud"),
            ("escrow_program_id", "not-a-key"),
        ],
    )
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValidationError):
            SequestreConfig(**{field: value})

    def test_rejects_invalid_polling(self):
        """Polling bounds are range checked."""
        with pytest.raises(ValidationError):
            SequestreConfig(confirmation={"timeout": 0})

    def test_env_overrides(self, monkeypatch):
        """SEQUESTRE_ variables, including nested ones, are read."""
        monkeypatch.setenv("SEQUESTRE_RPC_URL", "http://validator:8899")
        monkeypatch.setenv("SEQUESTRE_TRADE__DEPOSIT_AMOUNT", "7000000")

        config = SequestreConfig()

        assert config.rpc_url == "http://validator:8899"
        assert config.trade.deposit_amount == 7_000_000


class TestLoadConfig:
    """Tests for YAML loading and precedence."""

    def test_yaml_overrides_defaults(self, tmp_path):
        """YAML values win over defaults; nested sections merge."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "rpc_url: http://yaml:8899\n"
            "trade:\n"
            "  counter_amount: 20000000\n"
        )

        config = load_config(str(config_file))

        assert config.rpc_url == "http://yaml:8899"
        assert config.trade.counter_amount == 20_000_000
        assert config.trade.deposit_amount == 5_000_000

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Environment variables win over YAML."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("rpc_url: http://yaml:8899\n")
        monkeypatch.setenv("SEQUESTRE_RPC_URL", "http://env:8899")

        config = load_config(str(config_file))

        assert config.rpc_url == "http://env:8899"

    def test_nested_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Nested variables replace only their own YAML key."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "trade:\n"
            "  deposit_amount: 1000000\n"
            "  counter_amount: 2000000\n"
        )
        monkeypatch.setenv("SEQUESTRE_TRADE__DEPOSIT_AMOUNT", "3000000")

        config = load_config(str(config_file))

        assert config.trade.deposit_amount == 3_000_000
        assert config.trade.counter_amount == 2_000_000

    def test_config_from_env_variable(self, tmp_path, monkeypatch):
        """SEQUESTRE_CONFIG names the file when none is given."""
        config_file = tmp_path / "from-env.yaml"
        config_file.write_text("network: testnet\n")
        monkeypatch.setenv("SEQUESTRE_CONFIG", str(config_file))

        assert load_config().network == "testnet"

    def test_missing_file_uses_defaults(self, tmp_path):
        """Absent file falls back to default.yaml and defaults."""
        config = load_config(str(tmp_path / "absent.yaml"))

        assert config.commitment == "confirmed"
        assert config.trade.deposit_mint == "usdc"
