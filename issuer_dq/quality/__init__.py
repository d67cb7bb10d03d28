"""
Data Quality Module
Scorecard rules, engine and profiling for the issuers table
"""

from .rules import (
    QualityCheckType,
    QualityRule,
    PredicateRule,
    AggregateRule,
    RuleRegistry,
    row_rule,
    default_registry,
    DEFAULT_RULE_NAMES
)
from .scorecard import RuleResult, Scorecard
from .engine import ScorecardEngine, evaluate
from .profiling import IssuerProfiler, ProfileReport

__all__ = [
    'QualityCheckType',
    'QualityRule',
    'PredicateRule',
    'AggregateRule',
    'RuleRegistry',
    'row_rule',
    'default_registry',
    'DEFAULT_RULE_NAMES',
    'RuleResult',
    'Scorecard',
    'ScorecardEngine',
    'evaluate',
    'IssuerProfiler',
    'ProfileReport'
]
