"""
Scorecard Engine
Evaluates a rule registry against an issuer dataset
"""

import pandas as pd
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union

from issuer_dq.ingestion.dataset_accessor import DataSourceError, to_frame
from issuer_dq.quality.rules import QualityRule, RuleRegistry, default_registry
from issuer_dq.quality.scorecard import RuleResult, Scorecard
from issuer_dq.utils.logging_utils import get_logger

logger = get_logger(__name__)

Rows = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]
Rules = Union[RuleRegistry, Iterable[QualityRule]]


class ScorecardEngine:
    """
    Runs every rule of a registry over a dataset snapshot.

    The engine holds no dataset state; each ``evaluate`` call receives
    the rows explicitly and builds a fresh Scorecard.
    """

    def __init__(self, rules: Optional[Rules] = None):
        """
        Args:
            rules: Registry or iterable of rules (default issuer rules if None)
        """
        if rules is None:
            rules = default_registry()
        elif not isinstance(rules, RuleRegistry):
            rules = RuleRegistry(rules)
        self.registry = rules

    def _check_columns(self, df: pd.DataFrame) -> None:
        missing = [c for c in self.registry.required_columns if c not in df.columns]
        if missing:
            raise DataSourceError(f"Rows are missing columns required by the rules: {missing}")

    def _evaluate_rule(self, rule: QualityRule, df: pd.DataFrame, total_rows: int) -> RuleResult:
        result = RuleResult.from_counts(rule.name, rule.count_failures(df), total_rows)
        level = "DEBUG" if result.passed else "WARNING"
        logger.log(
            level,
            f"Rule '{rule.name}': {result.failed_rows}/{result.total_rows} rows failed "
            f"({result.pct_failed:.2%})"
        )
        return result

    def evaluate(self, rows: Rows, dataset_name: str = "issuers") -> Scorecard:
        """
        Evaluate all rules against the rows.

        Args:
            rows: DataFrame or iterable of row mappings
            dataset_name: Name used in the scorecard

        Returns:
            Scorecard with one result per rule in registration order

        Raises:
            DataSourceError: If a column read by a rule is absent
        """
        start_time = datetime.now()
        df = to_frame(rows)
        self._check_columns(df)

        total_rows = len(df)
        results = [self._evaluate_rule(rule, df, total_rows) for rule in self.registry]

        execution_time = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Evaluated {len(results)} rules over {total_rows} rows of '{dataset_name}' "
            f"in {execution_time:.3f}s"
        )
        return Scorecard(
            dataset_name=dataset_name,
            results=results,
            execution_time_seconds=execution_time
        )


def evaluate(rows: Rows, rules: Optional[Rules] = None,
             dataset_name: str = "issuers") -> Scorecard:
    """Evaluate ``rules`` (the issuer rules by default) against ``rows``."""
    return ScorecardEngine(rules).evaluate(rows, dataset_name=dataset_name)
