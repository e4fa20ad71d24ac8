"""Configuration classes for the Campus Attendance service, keyed by environment."""
import os
from typing import Type

from .base import BaseConfig
from .development import DevelopmentConfig
from .production import ProductionConfig
from .testing import TestingConfig

CONFIGS = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}
DEFAULT_CONFIG = 'development'


def get_config(config_name: str = None) -> Type[BaseConfig]:
    """Resolve a config class from a name or ``FLASK_ENV``; unknown names raise."""
    name = (config_name or os.getenv('FLASK_ENV') or DEFAULT_CONFIG).strip().lower()
    try:
        return CONFIGS[name]
    except KeyError:
        raise ValueError(f"Unknown configuration '{name}', expected one of: {', '.join(CONFIGS)}")
