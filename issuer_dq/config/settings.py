"""
Configuration settings for the issuer data-quality scorecard.
Loads environment variables and provides centralized configuration.
"""

import os
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class DatasetConfig:
    """Where the issuers dataset is read from."""
    source_type: str = 'file'
    name: str = 'issuers'
    file_path: Optional[str] = None
    database_url: Optional[str] = None
    table_name: str = 'issuers'
    schema: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = 'INFO'
    to_file: bool = True
    to_console: bool = True


class Settings:
    """Central settings class that loads all configurations."""

    def __init__(self):
        # Paths
        self.base_path = Path(__file__).parent.parent.parent
        self.data_path = Path(os.getenv('DQ_DATA_PATH', str(self.base_path / 'data')))
        self.logs_path = Path(os.getenv('DQ_LOGS_PATH', str(self.base_path / 'logs')))

        self.dataset = DatasetConfig(
            source_type=os.getenv('DQ_SOURCE_TYPE', 'file'),
            name=os.getenv('DQ_DATASET_NAME', 'issuers'),
            file_path=os.getenv(
                'DQ_DATASET_PATH',
                str(self.data_path / 'sample' / 'issuers_dirty.csv')
            ),
            database_url=os.getenv('DQ_DATABASE_URL'),
            table_name=os.getenv('DQ_TABLE_NAME', 'issuers_dirty'),
            schema=os.getenv('DQ_SCHEMA') or None
        )

        self.logging = LoggingConfig(
            level=os.getenv('DQ_LOG_LEVEL', 'INFO'),
            to_file=_env_bool('DQ_LOG_TO_FILE', True),
            to_console=_env_bool('DQ_LOG_TO_CONSOLE', True)
        )

    def validate(self) -> bool:
        """Validate the dataset configuration."""
        source_type = self.dataset.source_type
        if source_type == 'file':
            if not self.dataset.file_path:
                raise ValueError("DQ_DATASET_PATH is required for a file dataset")
        elif source_type == 'warehouse':
            if not self.dataset.database_url:
                raise ValueError("DQ_DATABASE_URL is required for a warehouse dataset")
        else:
            raise ValueError(f"Unknown DQ_SOURCE_TYPE: {source_type}")
        return True


# Global settings instance
settings = Settings()
