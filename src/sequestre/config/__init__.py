"""Sequestre configuration."""

from sequestre.config.settings import (
    ConfirmationConfig,
    SequestreConfig,
    TradeConfig,
    load_config,
)

__all__ = [
    "SequestreConfig",
    "ConfirmationConfig",
    "TradeConfig",
    "load_config",
]
