"""Data-quality scorecard for the issuers reference table."""

from .ingestion import DataSourceError, FileDataset, InMemoryDataset, WarehouseDataset, create_dataset
from .quality import RuleRegistry, Scorecard, RuleResult, default_registry, evaluate

__version__ = "0.1.0"

__all__ = [
    'DataSourceError', 'FileDataset', 'InMemoryDataset', 'WarehouseDataset', 'create_dataset',
    'RuleRegistry', 'Scorecard', 'RuleResult', 'default_registry', 'evaluate'
]
