"""
Ingestion Module
Dataset accessors for the issuers table
"""

from .dataset_accessor import (
    ISSUER_COLUMNS,
    DataSourceError,
    IssuerDataset,
    InMemoryDataset,
    FileDataset,
    WarehouseDataset,
    create_dataset
)

__all__ = [
    'ISSUER_COLUMNS',
    'DataSourceError',
    'IssuerDataset',
    'InMemoryDataset',
    'FileDataset',
    'WarehouseDataset',
    'create_dataset'
]
