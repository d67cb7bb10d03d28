#!/usr/bin/env python3
"""
Issuer Scorecard Runner
Loads the configured issuers dataset once, evaluates the scorecard
rules, profiles the data and logs the outcome.
"""

import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

from issuer_dq.config import settings
from issuer_dq.ingestion.dataset_accessor import DataSourceError, IssuerDataset, create_dataset
from issuer_dq.quality.engine import Rules, ScorecardEngine
from issuer_dq.quality.profiling import IssuerProfiler, ProfileReport
from issuer_dq.quality.scorecard import Scorecard
from issuer_dq.utils.logging_utils import RunLogger, log_execution_time

Sink = Callable[[List[Dict[str, Any]]], Any]


@log_execution_time
def run_issuer_checks(
    dataset: Optional[IssuerDataset] = None,
    rules: Optional[Rules] = None,
    sink: Optional[Sink] = None
) -> Tuple[Scorecard, ProfileReport]:
    """
    Run the scorecard and the profiling queries over one dataset load.

    Args:
        dataset: Dataset accessor (built from settings if None)
        rules: Rules to evaluate (issuer rules if None)
        sink: Optional callable receiving the scorecard rows

    Returns:
        Tuple of (scorecard, profile report)

    Raises:
        DataSourceError: If the dataset cannot be loaded
    """
    dataset = dataset or create_dataset()
    run_logger = RunLogger(dataset.name)

    run_logger.info(f"Loading dataset {dataset.describe()}")
    df = dataset.load()

    scorecard = ScorecardEngine(rules).evaluate(df, dataset_name=dataset.name)
    profile = IssuerProfiler(df, dataset_name=dataset.name).profile()

    run_logger.info(scorecard.get_summary())
    run_logger.log_metrics({
        'total_rows': scorecard.total_rows,
        'rules': len(scorecard),
        'failing_rules': len(scorecard.failing_rules)
    })
    for result in scorecard.failing_rules:
        run_logger.warning(
            f"{result.rule_name}: {result.failed_rows} of {result.total_rows} rows failed"
        )

    if sink is not None:
        scorecard.emit(sink)
        run_logger.info(f"Emitted {len(scorecard)} scorecard rows")

    return scorecard, profile


def main() -> int:
    try:
        settings.validate()
        run_issuer_checks()
    except (DataSourceError, ValueError) as e:
        RunLogger(settings.dataset.name).error(f"Scorecard run aborted: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
