"""
Configuration management
Defaults the API falls back to when a request omits a parameter.
"""
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Project settings
    PROJECT_NAME: str = "Spread Arbitrage Analytics API"
    VERSION: str = "1.0.0"

    # API settings
    API_PREFIX: str = "/api"
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Series settings
    NATIVE_INTERVAL_MS: int = Field(
        default=60_000,
        description="Resolution of the live feed; aggregating to it is a no-op"
    )
    FORECAST_STEP_MS: int = Field(
        default=60_000,
        description="Time between consecutive forecast points"
    )

    # Forecast settings
    FORECAST_HORIZON: int = 5
    SMA_PERIODS: int = 5
    EMA_ALPHA: float = Field(default=0.3, gt=0, le=1)

    # Signal / strategy settings (percent units)
    SIGNAL_THRESHOLD: float = Field(
        default=0.5,
        description="Spread percentage beyond which BUY/SELL is signalled"
    )
    INITIAL_CAPITAL: float = 100_000.0
    SIMPLE_BUY_THRESHOLD: float = Field(default=0.5, description="Long-only backtest entry spread")
    SIMPLE_SELL_THRESHOLD: float = Field(default=0.1, description="Long-only backtest exit spread")
    COMMISSION_PCT: float = Field(default=0.05, description="Commission per side, percent of notional")
    SLIPPAGE_PCT: float = Field(default=0.02, description="Slippage per side, percent of notional")

    # Position calculator
    FEE_RATE_PCT: float = 0.05
    MARGIN_RATE: float = 0.2

    # Arbitrage detector
    ARBITRAGE_THRESHOLD_PCT: float = 0.5
    TREND_MAX_SYMBOLS: int = Field(default=100, ge=1, description="Symbols kept by the spread trend tracker")

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "./logs/app.log"


def load_config_yaml(config_path: str = "config.yaml") -> dict:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config.yaml file

    Returns:
        Dictionary with configuration values
    """
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
            return config or {}
    return {}


_yaml_config = load_config_yaml()

# Only keys that exist on Settings may override
_filtered_yaml = {k: v for k, v in _yaml_config.items() if k in Settings.model_fields}

settings = Settings(**_filtered_yaml)
