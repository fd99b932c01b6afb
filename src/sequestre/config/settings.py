"""
Sequestre configuration with hybrid YAML + ENV support.

Every flow receives a SequestreConfig instance explicitly; only the CLI
loads it from disk.

Priority: Environment variables > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from solders.pubkey import Pubkey  # type: ignore

DEFAULT_ESCROW_PROGRAM_ID = "FZoqAsnuaq832FezFs7bNeuNtHHg7c8QsnJqmKM9JpCm"
DEFAULT_TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ENV_PREFIX = "SEQUESTRE_"


class ConfirmationConfig(BaseModel):
    """Bounded polling used to wait for a submitted transaction."""

    timeout: float = Field(default=30.0, ge=1.0, le=300.0)
    poll_interval: float = Field(default=0.5, ge=0.05, le=10.0)
    max_poll_interval: float = Field(default=4.0, ge=0.05, le=30.0)
    backoff_factor: float = Field(default=1.5, ge=1.0, le=10.0)


class TradeConfig(BaseModel):
    """
    Amounts used by the escrow flows, in token base units.

    deposit_amount is what the initiator locks in the temp token account
    and therefore what the counterparty expects to receive. counter_amount
    is what the initiator expects in return.
    """

    decimals: int = Field(default=6, ge=0, le=18)
    deposit_amount: int = Field(default=5_000_000, ge=0)
    counter_amount: int = Field(default=10_000_000, ge=0)
    airdrop_sol: int = Field(default=100, ge=0, le=1000)
    mint_amount: int = Field(default=1000, ge=0)
    deposit_mint: str = Field(default="usdc")
    counter_mint: str = Field(default="usdt")


class SequestreConfig(BaseSettings):
    """Sequestre configuration schema."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="allow",
    )

    # Cluster
    rpc_url: str = Field(default="http://localhost:8899")
    network: str = Field(default="localnet")
    commitment: str = Field(default="confirmed")

    # Programs
    escrow_program_id: str = Field(default=DEFAULT_ESCROW_PROGRAM_ID)
    token_program_id: str = Field(default=DEFAULT_TOKEN_PROGRAM_ID)

    # Key/address store
    keys_dir: str = Field(default="keys")

    # Logging
    log_level: str = Field(default="info")
    log_dir: Optional[str] = Field(default=None)

    confirmation: ConfirmationConfig = Field(default_factory=ConfirmationConfig)
    trade: TradeConfig = Field(default_factory=TradeConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("network")
    @classmethod
    def validate_network(cls, v: str) -> str:
        """Validate Solana network."""
        allowed = ["localnet", "devnet", "testnet", "mainnet-beta"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid network. Must be one of: {allowed}")
        return v_lower

    @field_validator("commitment")
    @classmethod
    def validate_commitment(cls, v: str) -> str:
        """Validate commitment level."""
        allowed = ["processed", "confirmed", "finalized"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid commitment. Must be one of: {allowed}")
        return v_lower

    @field_validator("escrow_program_id", "token_program_id")
    @classmethod
    def validate_program_id(cls, v: str) -> str:
        """Reject program ids that are not base58 public keys."""
        try:
            Pubkey.from_string(v)
        except Exception as e:
            raise ValueError(f"Invalid program id {v!r}: {e}")
        return v

    @field_validator("keys_dir")
    @classmethod
    def expand_keys_dir(cls, v: str) -> str:
        """Expand home directory in keys path."""
        return os.path.expanduser(v)

    @property
    def escrow_program(self) -> Pubkey:
        """Escrow program id as a Pubkey."""
        return Pubkey.from_string(self.escrow_program_id)

    @property
    def token_program(self) -> Pubkey:
        """Token program id as a Pubkey."""
        return Pubkey.from_string(self.token_program_id)


CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"

ENV_CONFIG_FILES = {
    "production": "production.yaml",
    "development": "development.yaml",
    "test": "test.yaml",
}


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _drop_key(config: dict, path: list) -> None:
    """Remove the YAML value at path so the environment variable applies."""
    for key in path[:-1]:
        config = config.get(key)
        if not isinstance(config, dict):
            return
    config.pop(path[-1], None)


def _resolve_config_file(config_file: Optional[str]) -> Path:
    if config_file is None:
        config_file = os.getenv("SEQUESTRE_CONFIG") or ENV_CONFIG_FILES.get(
            os.getenv("ENV", "development"), "development.yaml"
        )

    path = Path(config_file).expanduser()
    return path if path.is_absolute() else CONFIG_DIR / path


def load_config(config_file: Optional[str] = None) -> SequestreConfig:
    """
    Load configuration from YAML files.

    Priority: Environment variables > environment-specific YAML > default YAML

    Args:
        config_file: YAML filename (relative to config/) or path. Falls back
            to $SEQUESTRE_CONFIG, then to the file mapped from $ENV.

    Returns:
        SequestreConfig instance
    """
    values = _merge(
        _read_yaml(CONFIG_DIR / "default.yaml"),
        _read_yaml(_resolve_config_file(config_file)),
    )

    # Environment variables win over YAML values
    for env_name in os.environ:
        if env_name.upper().startswith(ENV_PREFIX):
            _drop_key(values, env_name[len(ENV_PREFIX) :].lower().split("__"))

    return SequestreConfig(**values)
