"""Configuration module for the issuer data-quality scorecard."""

from .settings import settings, Settings, DatasetConfig, LoggingConfig

__all__ = ['settings', 'Settings', 'DatasetConfig', 'LoggingConfig']
