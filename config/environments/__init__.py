"""
Per-environment ChatFS configuration.

Development and production apply their own overrides on top of AppConfig;
any other environment name gets the base configuration.
"""

import os
from typing import Optional

from config.app_config import AppConfig


def get_environment_config(environment: Optional[str] = None) -> AppConfig:
    """
    Build the configuration for an environment

    Args:
        environment: Environment name, defaults to APP_ENV (then "development")
    """
    env = (environment or os.getenv("APP_ENV", "development")).lower()

    if env == "production":
        from .production import get_production_config
        return get_production_config()
    elif env in ("development", "dev"):
        from .development import get_development_config
        return get_development_config()

    return AppConfig.load()
