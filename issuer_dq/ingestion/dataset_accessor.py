"""
Dataset accessors for the issuers reference table.
Reads the table from a flat file, a SQL table or memory and hands it
to the rule engine as a DataFrame with the canonical issuer columns.
"""

import json
import pandas as pd
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from sqlalchemy import create_engine, literal_column, select, table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from issuer_dq.config import settings, DatasetConfig
from issuer_dq.utils.logging_utils import logger


ISSUER_COLUMNS: List[str] = [
    'issuer_id',
    'issuer_code',
    'issuer_name',
    'country',
    'industry',
    'status',
    'created_date',
    'annual_revenue',
]

# Read as text so codes like "007" or "NA" survive untouched
STRING_COLUMNS: List[str] = [
    'issuer_code',
    'issuer_name',
    'country',
    'industry',
    'status',
    'created_date',
]


class DataSourceError(Exception):
    """Raised when the issuers dataset cannot be read or has the wrong columns."""


def to_frame(rows: Union[pd.DataFrame, Iterable[Mapping[str, Any]]]) -> pd.DataFrame:
    """
    Turn the rows handed to the engine into a DataFrame.

    Args:
        rows: A DataFrame, or any iterable of row mappings

    Returns:
        DataFrame (the input itself when it already is one)
    """
    if isinstance(rows, pd.DataFrame):
        return rows

    records = list(rows)
    if not records:
        return pd.DataFrame(columns=ISSUER_COLUMNS)
    return pd.DataFrame.from_records(records)


def conform_columns(df: pd.DataFrame, source: str) -> pd.DataFrame:
    """
    Check the issuer column set and return the columns in canonical order.

    Args:
        df: Raw frame as read from the source
        source: Source description for error messages

    Returns:
        New DataFrame holding exactly ISSUER_COLUMNS

    Raises:
        DataSourceError: If any issuer column is missing
    """
    missing = [c for c in ISSUER_COLUMNS if c not in df.columns]
    if missing:
        raise DataSourceError(
            f"Dataset {source} is missing columns: {missing} "
            f"(found: {list(df.columns)})"
        )

    extra = [c for c in df.columns if c not in ISSUER_COLUMNS]
    if extra:
        logger.warning(f"Dropping unexpected columns from {source}: {extra}")

    return df[ISSUER_COLUMNS].reset_index(drop=True)


class IssuerDataset:
    """Base class for issuer dataset accessors."""

    def __init__(self, name: str = 'issuers'):
        self.name = name

    def describe(self) -> str:
        return self.name

    def _read(self) -> pd.DataFrame:
        raise NotImplementedError

    def load(self) -> pd.DataFrame:
        """
        Read the dataset. Every call goes back to the source.

        Returns:
            DataFrame with the issuer columns in canonical order

        Raises:
            DataSourceError: If the source is unreachable or malformed
        """
        df = self._read()
        frame = conform_columns(df, self.describe())
        logger.info(f"Loaded {len(frame)} issuer rows from {self.describe()}")
        return frame


class InMemoryDataset(IssuerDataset):
    """Dataset backed by rows that are already in memory."""

    def __init__(
        self,
        rows: Union[pd.DataFrame, Iterable[Mapping[str, Any]]],
        name: str = 'issuers'
    ):
        super().__init__(name)
        self._frame = to_frame(rows)

    def describe(self) -> str:
        return f"memory:{self.name}"

    def _read(self) -> pd.DataFrame:
        return self._frame.copy()


class FileDataset(IssuerDataset):
    """Dataset backed by a CSV, JSON, JSON Lines or Parquet file."""

    FORMATS = {
        '.csv': 'csv',
        '.json': 'json',
        '.jsonl': 'jsonl',
        '.parquet': 'parquet',
        '.pq': 'parquet',
    }

    def __init__(
        self,
        file_path: Union[str, Path],
        file_format: Optional[str] = None,
        base_path: Optional[Path] = None,
        name: Optional[str] = None
    ):
        self.base_path = base_path or settings.data_path
        self.path = self._resolve_path(file_path)
        self.file_format = file_format or self._infer_format(self.path)
        super().__init__(name or self.path.stem)

    def _resolve_path(self, file_path: Union[str, Path]) -> Path:
        """Resolve file path relative to base path."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self.base_path / path
        return path

    def _infer_format(self, path: Path) -> str:
        file_format = self.FORMATS.get(path.suffix.lower())
        if file_format is None:
            raise ValueError(f"Unsupported dataset file type: {path.suffix or path.name}")
        return file_format

    def describe(self) -> str:
        return f"file:{self.path}"

    def _read_csv(self) -> pd.DataFrame:
        return pd.read_csv(
            self.path,
            dtype={col: str for col in STRING_COLUMNS},
            keep_default_na=False,
            na_values=['']
        )

    def _read_json(self) -> pd.DataFrame:
        with open(self.path, 'r') as f:
            data = json.load(f)

        if isinstance(data, dict) and 'data' in data:
            data = data['data']
        if not isinstance(data, list):
            raise DataSourceError(f"Expected a list of records in {self.path}")
        if not data:
            return pd.DataFrame(columns=ISSUER_COLUMNS)
        return pd.DataFrame(data)

    def _read_jsonl(self) -> pd.DataFrame:
        return pd.read_json(self.path, lines=True, dtype=False, convert_dates=False)

    def _read(self) -> pd.DataFrame:
        if not self.path.exists():
            raise DataSourceError(f"Dataset file not found: {self.path}")

        logger.info(f"Reading {self.file_format} dataset: {self.path}")

        readers = {
            'csv': self._read_csv,
            'json': self._read_json,
            'jsonl': self._read_jsonl,
            'parquet': lambda: pd.read_parquet(self.path),
        }
        reader = readers.get(self.file_format)
        if reader is None:
            raise ValueError(f"Unknown file format: {self.file_format}")

        try:
            return reader()
        except (OSError, ValueError) as e:
            raise DataSourceError(f"Could not read dataset file {self.path}: {e}") from e


class WarehouseDataset(IssuerDataset):
    """Dataset backed by a SQL table reachable through SQLAlchemy."""

    def __init__(
        self,
        table_name: str,
        database_url: Optional[str] = None,
        schema: Optional[str] = None,
        engine: Optional[Engine] = None,
        name: Optional[str] = None
    ):
        if engine is None and not database_url:
            raise ValueError("Either database_url or engine is required")
        super().__init__(name or table_name)
        self.table_name = table_name
        self.schema = schema
        self.database_url = database_url
        self._engine = engine
        self._owns_engine = engine is None

    @property
    def engine(self) -> Engine:
        """Get or create SQLAlchemy engine."""
        if self._engine is None:
            self._engine = create_engine(self.database_url, pool_pre_ping=True)
        return self._engine

    def describe(self) -> str:
        schema_prefix = f"{self.schema}." if self.schema else ""
        return f"table:{schema_prefix}{self.table_name}"

    def _read(self) -> pd.DataFrame:
        query = select(literal_column("*")).select_from(table(self.table_name, schema=self.schema))
        logger.info(f"Querying dataset {self.describe()}")

        try:
            with self.engine.connect() as conn:
                return pd.read_sql(query, conn)
        except (SQLAlchemyError, pd.errors.DatabaseError) as e:
            raise DataSourceError(f"Could not query {self.describe()}: {e}") from e

    def close(self):
        """Dispose of the engine if this dataset created it."""
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None


def create_dataset(config: Optional[DatasetConfig] = None) -> IssuerDataset:
    """
    Build the dataset accessor described by configuration.

    Args:
        config: Dataset configuration (defaults to settings.dataset)

    Returns:
        FileDataset or WarehouseDataset
    """
    config = config or settings.dataset

    if config.source_type == 'file':
        if not config.file_path:
            raise ValueError("A file dataset needs a file_path")
        return FileDataset(config.file_path, name=config.name)

    if config.source_type == 'warehouse':
        return WarehouseDataset(
            table_name=config.table_name,
            database_url=config.database_url,
            schema=config.schema,
            name=config.name
        )

    raise ValueError(f"Unknown dataset source type: {config.source_type}")


__all__ = [
    'ISSUER_COLUMNS', 'STRING_COLUMNS', 'DataSourceError',
    'IssuerDataset', 'InMemoryDataset', 'FileDataset', 'WarehouseDataset',
    'to_frame', 'conform_columns', 'create_dataset'
]
