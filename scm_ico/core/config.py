"""Configuration management for sale parameters.

Loads settings from environment variables, a .env file, or a YAML file.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from .arithmetic import UINT256_MAX
from .exceptions import ConfigurationError, ValidationError
from .types import WEI_PER_ETHER
from .units import parse_amount

logger = logging.getLogger(__name__)

ENV_PREFIX = "SCM_"
DEFAULT_STATE_FILE = "scm_ico_state.json"


class IcoSettings(BaseModel):
    """Construction parameters for a crowdsale and its token."""

    # Payment asset the sale aims to raise, in wei
    target: int = Field(default=10 * WEI_PER_ETHER, gt=0)

    # SCM units per unit of payment asset
    rate: int = Field(default=10, gt=0)

    # Seconds between closing and claims opening
    hold_duration: int = Field(default=2 * 60, gt=0)

    token_name: str = "Scam"
    token_symbol: str = "SCM"
    decimals: int = Field(default=18, ge=0, le=77)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_supply_fits(self) -> "IcoSettings":
        if self.target * self.rate > UINT256_MAX:
            raise ValueError(f"target * rate exceeds 2**256 - 1 ({self.target} * {self.rate})")
        return self

    @property
    def total_supply(self) -> int:
        """Number of SCM units minted to the sale."""
        return self.target * self.rate

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "IcoSettings":
        """
        Build settings from a plain mapping, accepting amount strings.

        Raises:
            ConfigurationError: If any value is invalid
        """
        data = dict(values)
        if isinstance(data.get("target"), str):
            try:
                data["target"] = parse_amount(data["target"])
            except ValidationError as e:
                raise ConfigurationError("target", e.reason) from e

        try:
            return cls(**data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            key = ".".join(str(part) for part in first["loc"]) or "settings"
            raise ConfigurationError(key, first["msg"]) from e

    @classmethod
    def from_env(cls) -> "IcoSettings":
        """Load settings from SCM_* environment variables."""
        names = {
            "target": "TARGET",
            "rate": "RATE",
            "hold_duration": "HOLD_DURATION",
            "token_name": "TOKEN_NAME",
            "token_symbol": "TOKEN_SYMBOL",
            "decimals": "DECIMALS",
        }
        values: dict[str, Any] = {}
        for field_name, env_name in names.items():
            value = os.getenv(ENV_PREFIX + env_name)
            if value is not None:
                values[field_name] = value
        return cls.from_mapping(values)

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> "IcoSettings":
        """
        Load settings from a .env file and environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                      looks for .env in the current directory.

        Returns:
            IcoSettings instance with loaded values
        """
        env_path = env_file or Path.cwd() / ".env"
        if env_path.exists():
            logger.debug(f"Loading environment from {env_path}")
            load_dotenv(env_path)
        return cls.from_env()

    @classmethod
    def from_yaml(cls, path: Path | str) -> "IcoSettings":
        """Load settings from a YAML mapping."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(str(path), "config file not found")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(str(path), "config file must contain a mapping")

        logger.debug(f"Loaded sale config from {path}")
        return cls.from_mapping(data)


def state_file_path(override: Optional[Path] = None) -> Path:
    """Resolve where the CLI keeps the persisted sale."""
    if override is not None:
        return override
    return Path(os.getenv(ENV_PREFIX + "STATE_FILE", DEFAULT_STATE_FILE))


# Global settings instance (lazy loaded)
_settings: Optional[IcoSettings] = None


def get_settings() -> IcoSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = IcoSettings.load()
    return _settings


def reload_settings(env_file: Optional[Path] = None) -> IcoSettings:
    """Reload settings from environment."""
    global _settings
    _settings = IcoSettings.load(env_file)
    return _settings
