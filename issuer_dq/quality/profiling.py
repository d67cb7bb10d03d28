"""
Issuer Profiling
One-shot profiling queries over the issuers table: completeness,
uniqueness, accuracy, validity and summary metrics.
"""

import json
import pandas as pd
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from issuer_dq.ingestion.dataset_accessor import ISSUER_COLUMNS
from issuer_dq.quality.rules import (
    count_duplicate_extras,
    country_invalid_mask,
    key_series,
    revenue_invalid_mask,
)
from issuer_dq.quality.scorecard import safe_divide
from issuer_dq.utils.logging_utils import get_logger

logger = get_logger(__name__)


def _missing_mask(series: pd.Series) -> pd.Series:
    blank = series.map(lambda v: isinstance(v, str) and not v.strip()).astype(bool)
    return series.isna() | blank


def _clean(value: Any) -> Any:
    # numpy scalars and NaN are not JSON friendly
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if hasattr(value, 'item'):
        return value.item()
    return value


@dataclass
class ProfileReport:
    """Profiling output for one dataset snapshot"""
    dataset_name: str
    completeness: pd.DataFrame
    duplicate_issuers: pd.DataFrame
    country_frequency: pd.DataFrame
    revenue_summary: Dict[str, Any]
    summary: Dict[str, Any]
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        def records(df: pd.DataFrame) -> List[Dict[str, Any]]:
            return [{k: _clean(v) for k, v in row.items()} for row in df.to_dict('records')]

        return {
            'dataset_name': self.dataset_name,
            'completeness': records(self.completeness),
            'duplicate_issuers': records(self.duplicate_issuers),
            'country_frequency': records(self.country_frequency),
            'revenue_summary': self.revenue_summary,
            'summary': self.summary,
            'timestamp': self.timestamp
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, indent=2)


class IssuerProfiler:
    """
    Profiles an issuers DataFrame.

    Each method is an independent read-only aggregation; none of them
    modify the frame.
    """

    def __init__(self, df: pd.DataFrame, dataset_name: str = "issuers"):
        self.df = df
        self.dataset_name = dataset_name

    # ==================== Completeness ====================

    def completeness(self, columns: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Missing values per column. Blank strings count as missing.

        Returns:
            DataFrame with column_name, missing_count, total_rows, pct_missing
        """
        columns = columns or [c for c in ISSUER_COLUMNS if c in self.df.columns]
        total = len(self.df)

        rows = []
        for column in columns:
            missing = int(_missing_mask(self.df[column]).sum())
            rows.append({
                'column_name': column,
                'missing_count': missing,
                'total_rows': total,
                'pct_missing': safe_divide(missing, total)
            })
        return pd.DataFrame(rows, columns=['column_name', 'missing_count', 'total_rows', 'pct_missing'])

    # ==================== Uniqueness ====================

    def duplicate_issuers(self) -> pd.DataFrame:
        """
        Rows whose issuer_code occurs more than once, annotated with
        ``duplicate_count`` and ordered by issuer_code then issuer_id.
        """
        keys = key_series(self.df, 'issuer_code')
        counts = keys.map(keys.value_counts())

        detail = self.df.assign(duplicate_count=counts)
        detail = detail[detail['duplicate_count'] > 1].sort_values(
            ['issuer_code', 'issuer_id'], na_position='last', kind='mergesort'
        )
        return detail.astype({'duplicate_count': int}).reset_index(drop=True)

    def distinct_issuer_codes(self) -> int:
        return int(self.df['issuer_code'].nunique(dropna=True))

    # ==================== Accuracy ====================

    def revenue_summary(self) -> Dict[str, Any]:
        """Statistics of annual_revenue over the values that parse as numbers."""
        raw = self.df['annual_revenue']
        numeric = pd.to_numeric(raw, errors='coerce')
        valid = numeric.dropna()

        return {
            'numeric_count': int(len(valid)),
            'missing_count': int(raw.isna().sum()),
            'non_numeric_count': int((raw.notna() & numeric.isna()).sum()),
            'non_positive_count': int((valid <= 0).sum()),
            'min': float(valid.min()) if len(valid) > 0 else None,
            'max': float(valid.max()) if len(valid) > 0 else None,
            'mean': float(valid.mean()) if len(valid) > 0 else None,
        }

    # ==================== Validity ====================

    def country_frequency(self) -> pd.DataFrame:
        """
        Row count per country value, most frequent first; ties ordered
        by country. Missing countries form their own bucket, listed last
        among equal counts.
        """
        counts = self.df['country'].value_counts(dropna=False)
        freq = pd.DataFrame({
            'country': counts.index.astype(object),
            'row_count': counts.values.astype(int)
        })
        freq['is_valid'] = ~country_invalid_mask(freq)
        # Malformed values such as integers sort by their text
        freq = freq.sort_values(
            ['row_count', 'country'], ascending=[False, True],
            na_position='last', kind='mergesort',
            key=lambda s: s.map(lambda v: v if pd.isna(v) else str(v)) if s.name == 'country' else s
        )
        freq = freq.reset_index(drop=True)
        freq['country'] = [None if pd.isna(v) else v for v in freq['country']]
        return freq

    # ==================== Summary Metrics ====================

    def summary(self) -> Dict[str, Any]:
        total = len(self.df)
        completeness = self.completeness()
        return {
            'total_rows': total,
            'distinct_issuer_codes': self.distinct_issuer_codes(),
            'duplicate_extra_rows': count_duplicate_extras(self.df, 'issuer_code'),
            'invalid_country_rows': int(country_invalid_mask(self.df).sum()),
            'invalid_revenue_rows': int(revenue_invalid_mask(self.df).sum()),
            'columns_with_missing': completeness.loc[
                completeness['missing_count'] > 0, 'column_name'
            ].tolist(),
        }

    def profile(self) -> ProfileReport:
        """Run every profiling query and bundle the results"""
        report = ProfileReport(
            dataset_name=self.dataset_name,
            completeness=self.completeness(),
            duplicate_issuers=self.duplicate_issuers(),
            country_frequency=self.country_frequency(),
            revenue_summary=self.revenue_summary(),
            summary=self.summary()
        )
        logger.info(f"Profiled '{self.dataset_name}': {report.summary}")
        return report
