"""Tracked-asset table loaded from triggers.yaml.

Supports:
- Built-in table: no YAML file = TITAN_ASSETS
- Custom table: an ``assets:`` list replacing the built-in one

Example:
    assets:
      - symbol: BTC
        exchange_id: XBT
        family: macro_trend
        interval: 1w
"""

import logging
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, model_validator

from core.models.config import AssetTriggerConfig, TITAN_ASSETS

logger = logging.getLogger(__name__)


class TriggerConfig(BaseModel):
    """Top-level triggers.yaml configuration."""

    assets: list[AssetTriggerConfig] = []

    @model_validator(mode="after")
    def _validate(self):
        seen: set[str] = set()
        for asset in self.assets:
            if asset.symbol in seen:
                raise ValueError(f"duplicate asset symbol '{asset.symbol}'")
            seen.add(asset.symbol)
        return self

    def get_assets(self) -> list[AssetTriggerConfig]:
        """Resolve to the configured assets, or the built-in table if none."""
        if self.assets:
            return list(self.assets)
        return list(TITAN_ASSETS)


_DEFAULT_PATH = Path(__file__).parent.parent / "triggers.yaml"


def load_trigger_config(path: Path | None = None) -> TriggerConfig:
    """Load the asset table from a YAML file.

    Falls back to the built-in table if the file doesn't exist.
    """
    config_path = path or _DEFAULT_PATH

    env_path = config_path.parent / ".env"
    load_dotenv(env_path, override=False)

    if not config_path.exists():
        logger.info("No %s found, using built-in asset table", config_path.name)
        return TriggerConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    config = TriggerConfig(**raw)
    logger.info(
        "Loaded %s: %d assets",
        config_path.name,
        len(config.get_assets()),
    )
    return config
