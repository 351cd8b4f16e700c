"""
Library configuration

Settings are plain pydantic models. A YAML file can supply overrides; there is
no environment lookup.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class JWSConfig(BaseModel):
    """Top-level configuration model. Instances are frozen and hashable."""

    model_config = ConfigDict(frozen=True)

    allow_unsecured: bool = Field(False, description="Register the 'none' algorithm")
    hmac_min_key_length: int = Field(32, ge=0, description="Minimum HMAC secret length in bytes")
    ensure_ascii: bool = Field(False, description="Escape non-ASCII characters in emitted JSON text")


def load_config(path: Optional[str] = None) -> JWSConfig:
    """Load configuration from a YAML file.

    Args:
        path: Optional path to a config file. Defaults are used when the path
            is omitted or does not exist.
    """

    if path and os.path.exists(path):
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        logger.debug("Loaded JWS config from %s", path)
        return JWSConfig(**data)
    return JWSConfig()


_config_instance: Optional[JWSConfig] = None


def get_config() -> JWSConfig:
    """Get or create the process-wide default config."""
    global _config_instance
    if _config_instance is None:
        _config_instance = JWSConfig()
    return _config_instance


def set_config(config: Optional[JWSConfig]) -> None:
    """Replace the process-wide default config; None restores the defaults."""
    global _config_instance
    _config_instance = config
