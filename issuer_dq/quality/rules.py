"""
Data Quality Rules
Declarative rules evaluated by the scorecard engine, and the registry
that holds them in evaluation order.
"""

import pandas as pd
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from issuer_dq.utils.logging_utils import get_logger

logger = get_logger(__name__)

# Stands in for a missing key so that missing values group together
NULL_KEY = '\x00null'


class QualityCheckType(Enum):
    """Types of quality checks"""
    COMPLETENESS = "completeness"
    UNIQUENESS = "uniqueness"
    VALIDITY = "validity"
    ACCURACY = "accuracy"


class QualityRule:
    """
    A named check over issuer rows.

    Subclasses implement ``count_failures``, returning how many rows of
    the frame fail the rule.
    """

    def __init__(self, name: str, columns: Sequence[str],
                 check_type: QualityCheckType = QualityCheckType.VALIDITY,
                 description: str = ""):
        if not name:
            raise ValueError("A rule needs a name")
        self.name = name
        self.columns = tuple(columns)
        self.check_type = check_type
        self.description = description

    def count_failures(self, df: pd.DataFrame) -> int:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, columns={list(self.columns)})"


class PredicateRule(QualityRule):
    """
    Rule defined by a predicate marking failing rows.

    The predicate takes the whole frame and returns a boolean Series
    aligned with it; missing entries in the mask count as passing.
    """

    def __init__(self, name: str, predicate: Callable[[pd.DataFrame], pd.Series],
                 columns: Sequence[str],
                 check_type: QualityCheckType = QualityCheckType.VALIDITY,
                 description: str = ""):
        super().__init__(name, columns, check_type, description)
        self.predicate = predicate

    def failing_mask(self, df: pd.DataFrame) -> pd.Series:
        mask = self.predicate(df)
        return mask.fillna(False).astype(bool)

    def count_failures(self, df: pd.DataFrame) -> int:
        return int(self.failing_mask(df).sum())


class AggregateRule(QualityRule):
    """Rule whose aggregator computes the failed-row count directly."""

    def __init__(self, name: str, aggregator: Callable[[pd.DataFrame], int],
                 columns: Sequence[str],
                 check_type: QualityCheckType = QualityCheckType.VALIDITY,
                 description: str = ""):
        super().__init__(name, columns, check_type, description)
        self.aggregator = aggregator

    def count_failures(self, df: pd.DataFrame) -> int:
        return int(self.aggregator(df))


def row_rule(name: str, func: Callable[[pd.Series], bool], columns: Sequence[str],
             check_type: QualityCheckType = QualityCheckType.VALIDITY,
             description: str = "") -> PredicateRule:
    """
    Build a PredicateRule from a plain per-row function.

    Args:
        name: Rule name
        func: Called with each row, returns True when the row fails
        columns: Columns the function reads
        check_type: Check category
        description: Human readable description
    """
    def predicate(df: pd.DataFrame) -> pd.Series:
        if df.empty:
            return pd.Series([], index=df.index, dtype=bool)
        return df.apply(lambda row: bool(func(row)), axis=1)

    return PredicateRule(name, predicate, columns, check_type, description)


# ==================== Issuer Rule Logic ====================

def key_series(df: pd.DataFrame, column: str) -> pd.Series:
    """Column values with missing entries replaced by a shared NULL_KEY."""
    values = df[column].astype(object)
    return values.where(values.notna(), NULL_KEY)


def count_duplicate_extras(df: pd.DataFrame, column: str) -> int:
    """
    Count rows beyond the first occurrence of every repeated key.

    A key seen ``n`` times contributes ``n - 1``; missing keys form one
    group of their own.
    """
    if df.empty:
        return 0
    counts = key_series(df, column).value_counts()
    return int((counts[counts > 1] - 1).sum())


def country_invalid_mask(df: pd.DataFrame) -> pd.Series:
    """Country missing, not a string, or not exactly two characters long."""
    country = df['country']
    return country.map(lambda v: not isinstance(v, str) or len(v) != 2).astype(bool)


def revenue_invalid_mask(df: pd.DataFrame) -> pd.Series:
    """
    Revenue zero or negative, or present but not a number.

    A missing revenue passes here; completeness profiling reports it.
    """
    raw = df['annual_revenue']
    numeric = pd.to_numeric(raw, errors='coerce')
    malformed = raw.notna() & numeric.isna()
    return (numeric <= 0) | malformed


# ==================== Registry ====================

class RuleRegistry:
    """
    Ordered collection of uniquely named rules.

    Iteration yields rules in registration order.
    """

    def __init__(self, rules: Optional[Iterable[QualityRule]] = None):
        self._rules: Dict[str, QualityRule] = {}
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: QualityRule) -> QualityRule:
        if rule.name in self._rules:
            raise ValueError(f"Rule '{rule.name}' is already registered")
        self._rules[rule.name] = rule
        logger.debug(f"Registered rule '{rule.name}'")
        return rule

    def predicate(self, name: str, columns: Sequence[str],
                  check_type: QualityCheckType = QualityCheckType.VALIDITY,
                  description: str = "") -> Callable:
        """
        Decorator registering a frame predicate as a PredicateRule.

        Example:
            @registry.predicate('status_missing', columns=['status'])
            def status_missing(df):
                return df['status'].isna()
        """
        def decorator(func: Callable[[pd.DataFrame], pd.Series]) -> Callable:
            self.register(PredicateRule(
                name, func, columns, check_type, description or (func.__doc__ or "").strip()
            ))
            return func
        return decorator

    def get(self, name: str) -> QualityRule:
        try:
            return self._rules[name]
        except KeyError:
            raise KeyError(f"No rule named '{name}'") from None

    @property
    def names(self) -> List[str]:
        return list(self._rules)

    @property
    def required_columns(self) -> List[str]:
        """Columns read by any rule, first-seen order."""
        seen: Dict[str, Any] = {}
        for rule in self._rules.values():
            for column in rule.columns:
                seen.setdefault(column, None)
        return list(seen)

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[QualityRule]:
        return iter(list(self._rules.values()))

    def __len__(self) -> int:
        return len(self._rules)


# Factory for the issuer scorecard rules
def default_registry() -> RuleRegistry:
    """Create the issuer scorecard registry: duplicates, country, revenue."""
    return RuleRegistry([
        AggregateRule(
            'issuer_code_duplicates',
            lambda df: count_duplicate_extras(df, 'issuer_code'),
            columns=['issuer_code'],
            check_type=QualityCheckType.UNIQUENESS,
            description="Rows beyond the first for each repeated issuer_code"
        ),
        PredicateRule(
            'country_invalid',
            country_invalid_mask,
            columns=['country'],
            check_type=QualityCheckType.VALIDITY,
            description="Country missing or not a 2-letter code"
        ),
        PredicateRule(
            'revenue_invalid',
            revenue_invalid_mask,
            columns=['annual_revenue'],
            check_type=QualityCheckType.ACCURACY,
            description="Annual revenue zero, negative or non-numeric"
        ),
    ])


DEFAULT_RULE_NAMES = ['issuer_code_duplicates', 'country_invalid', 'revenue_invalid']
