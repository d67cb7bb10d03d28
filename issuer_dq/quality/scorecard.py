"""
Scorecard Results
Per-rule results and the ordered scorecard built from them
"""

import json
import pandas as pd
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List

SCORECARD_COLUMNS = ['rule_name', 'failed_rows', 'total_rows', 'pct_failed']


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 when the denominator is zero."""
    if not denominator:
        return 0.0
    return numerator / denominator


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one rule over one dataset snapshot"""
    rule_name: str
    failed_rows: int
    total_rows: int
    pct_failed: float

    def __post_init__(self):
        if self.total_rows < 0:
            raise ValueError(f"total_rows must be >= 0, got {self.total_rows}")
        if not 0 <= self.failed_rows <= self.total_rows:
            raise ValueError(
                f"Rule '{self.rule_name}': failed_rows={self.failed_rows} "
                f"outside [0, {self.total_rows}]"
            )

    @classmethod
    def from_counts(cls, rule_name: str, failed_rows: int, total_rows: int) -> 'RuleResult':
        return cls(
            rule_name=rule_name,
            failed_rows=int(failed_rows),
            total_rows=int(total_rows),
            pct_failed=safe_divide(failed_rows, total_rows)
        )

    @property
    def passed(self) -> bool:
        return self.failed_rows == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class Scorecard:
    """Scorecard for a dataset: one result per rule, in rule order"""
    dataset_name: str
    results: List[RuleResult]
    execution_time_seconds: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def __iter__(self) -> Iterator[RuleResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def get(self, rule_name: str) -> RuleResult:
        for result in self.results:
            if result.rule_name == rule_name:
                return result
        raise KeyError(f"No result for rule '{rule_name}'")

    @property
    def rule_names(self) -> List[str]:
        return [r.rule_name for r in self.results]

    @property
    def total_rows(self) -> int:
        return self.results[0].total_rows if self.results else 0

    @property
    def failing_rules(self) -> List[RuleResult]:
        return [r for r in self.results if not r.passed]

    def to_records(self) -> List[Dict[str, Any]]:
        """Scorecard rows as plain dicts, ready for any sink"""
        return [r.to_dict() for r in self.results]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_records(), columns=SCORECARD_COLUMNS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dataset_name': self.dataset_name,
            'results': self.to_records(),
            'execution_time_seconds': self.execution_time_seconds,
            'timestamp': self.timestamp
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, indent=2)

    def emit(self, sink: Callable[[List[Dict[str, Any]]], Any]) -> Any:
        """Hand the scorecard rows to a sink callable and return its result"""
        return sink(self.to_records())

    def get_summary(self) -> str:
        """Get a human-readable summary"""
        lines = [
            f"Scorecard: {self.dataset_name}",
            '=' * 50,
            f"Total Records: {self.total_rows:,}",
            f"Rules Failing: {len(self.failing_rules)}/{len(self.results)}",
        ]
        for r in self.results:
            lines.append(
                f"  {r.rule_name:<28} {r.failed_rows:>8,} / {r.total_rows:<8,} ({r.pct_failed:.2%})"
            )
        lines.append(f"Execution Time: {self.execution_time_seconds:.2f}s")
        lines.append(f"Timestamp: {self.timestamp}")
        return "\n".join(lines)
