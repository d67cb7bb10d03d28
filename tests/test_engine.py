"""
Tests for the Scorecard Engine and Scorecard results
"""

import json
import unittest
import pandas as pd
import numpy as np
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from issuer_dq.ingestion.dataset_accessor import ISSUER_COLUMNS, DataSourceError
from issuer_dq.quality.engine import ScorecardEngine, evaluate
from issuer_dq.quality.rules import AggregateRule, PredicateRule, RuleRegistry, DEFAULT_RULE_NAMES
from issuer_dq.quality.scorecard import RuleResult, Scorecard, safe_divide


def make_issuers(**overrides) -> pd.DataFrame:
    """Build an issuers frame of len(any override) rows, with clean defaults."""
    n = len(next(iter(overrides.values()))) if overrides else 3
    data = {
        'issuer_id': list(range(1, n + 1)),
        'issuer_code': [f"ISS{i:03d}" for i in range(1, n + 1)],
        'issuer_name': [f"Issuer {i}" for i in range(1, n + 1)],
        'country': ['US'] * n,
        'industry': ['Financials'] * n,
        'status': ['active'] * n,
        'created_date': ['2020-01-01'] * n,
        'annual_revenue': [1000.0] * n,
    }
    data.update(overrides)
    return pd.DataFrame(data, columns=ISSUER_COLUMNS)


class TestRuleResult(unittest.TestCase):
    """Test cases for RuleResult"""

    def test_from_counts(self):
        result = RuleResult.from_counts('country_invalid', 3, 5)

        self.assertEqual(result.failed_rows, 3)
        self.assertEqual(result.total_rows, 5)
        self.assertAlmostEqual(result.pct_failed, 0.6)
        self.assertFalse(result.passed)

    def test_zero_total_rows(self):
        result = RuleResult.from_counts('country_invalid', 0, 0)

        self.assertEqual(result.pct_failed, 0.0)
        self.assertTrue(result.passed)

    def test_failed_above_total_rejected(self):
        with self.assertRaises(ValueError):
            RuleResult.from_counts('broken', 6, 5)

    def test_negative_failed_rejected(self):
        with self.assertRaises(ValueError):
            RuleResult.from_counts('broken', -1, 5)

    def test_to_dict(self):
        result = RuleResult.from_counts('revenue_invalid', 1, 4)

        self.assertEqual(
            result.to_dict(),
            {'rule_name': 'revenue_invalid', 'failed_rows': 1, 'total_rows': 4, 'pct_failed': 0.25}
        )

    def test_safe_divide(self):
        self.assertEqual(safe_divide(1, 0), 0.0)
        self.assertEqual(safe_divide(1, 4), 0.25)


class TestScorecardEngine(unittest.TestCase):
    """Test cases for evaluating the issuer rules"""

    def test_duplicates_example(self):
        df = make_issuers(issuer_code=['A', 'A', 'B', 'C', 'C', 'C'])

        result = evaluate(df).get('issuer_code_duplicates')

        self.assertEqual(result.failed_rows, 3)
        self.assertEqual(result.total_rows, 6)
        self.assertAlmostEqual(result.pct_failed, 0.5)

    def test_country_example(self):
        df = make_issuers(country=['US', '', None, 'USA', 'FR'])

        result = evaluate(df).get('country_invalid')

        self.assertEqual(result.failed_rows, 3)
        self.assertEqual(result.total_rows, 5)

    def test_non_string_country_counts_as_invalid(self):
        df = make_issuers(country=['US', 12, None, 'US'])

        result = evaluate(df).get('country_invalid')

        self.assertEqual(result.failed_rows, 2)

    def test_revenue_example(self):
        df = make_issuers(annual_revenue=[100, 0, -50, 200])

        result = evaluate(df).get('revenue_invalid')

        self.assertEqual(result.failed_rows, 2)
        self.assertEqual(result.total_rows, 4)

    def test_results_in_registration_order(self):
        scorecard = evaluate(make_issuers())

        self.assertEqual(scorecard.rule_names, DEFAULT_RULE_NAMES)

    def test_clean_dataset_passes(self):
        scorecard = evaluate(make_issuers())

        self.assertEqual(scorecard.failing_rules, [])
        for result in scorecard:
            self.assertEqual(result.failed_rows, 0)
            self.assertEqual(result.total_rows, 3)

    def test_empty_dataset(self):
        """No rows: every rule reports zero without raising"""
        empty = pd.DataFrame(columns=ISSUER_COLUMNS)

        scorecard = evaluate(empty)

        self.assertEqual(len(scorecard), 3)
        for result in scorecard:
            self.assertEqual(result.failed_rows, 0)
            self.assertEqual(result.total_rows, 0)
            self.assertEqual(result.pct_failed, 0.0)

    def test_empty_row_list(self):
        scorecard = evaluate([])

        self.assertEqual(scorecard.total_rows, 0)
        self.assertEqual(len(scorecard), 3)

    def test_rows_as_mappings(self):
        rows = [
            {'issuer_code': 'A', 'country': 'US', 'annual_revenue': 10},
            {'issuer_code': 'A', 'country': 'GBR', 'annual_revenue': -1},
        ]

        scorecard = evaluate(rows)

        self.assertEqual(
            [r.failed_rows for r in scorecard],
            [1, 1, 1]
        )

    def test_idempotent(self):
        df = make_issuers(
            issuer_code=['A', 'A', 'B', 'B'],
            country=['US', None, 'XYZ', 'FR'],
            annual_revenue=[1, 0, 'bad', np.nan]
        )
        engine = ScorecardEngine()

        first = engine.evaluate(df)
        second = engine.evaluate(df)

        self.assertEqual(first.to_records(), second.to_records())

    def test_input_not_modified(self):
        df = make_issuers(country=['US', None, 'USA'])
        before = df.copy()

        evaluate(df)

        pd.testing.assert_frame_equal(df, before)

    def test_failed_rows_bounded(self):
        df = make_issuers(
            issuer_code=['A'] * 5,
            country=[None] * 5,
            annual_revenue=[-1, 0, 'x', -3, 0]
        )

        scorecard = evaluate(df)

        self.assertLessEqual(
            sum(r.failed_rows for r in scorecard),
            scorecard.total_rows * len(scorecard)
        )
        for result in scorecard:
            self.assertLessEqual(result.failed_rows, result.total_rows)
        self.assertEqual(scorecard.get('issuer_code_duplicates').failed_rows, 4)
        self.assertEqual(scorecard.get('revenue_invalid').failed_rows, 5)

    def test_missing_rule_column(self):
        df = make_issuers().drop(columns=['country'])

        with self.assertRaises(DataSourceError):
            evaluate(df)

    def test_custom_rules(self):
        registry = RuleRegistry([
            PredicateRule('status_missing', lambda df: df['status'].isna(), ['status']),
            AggregateRule('nothing', lambda df: 0, ['issuer_id']),
        ])
        df = make_issuers(status=['active', None, None])

        scorecard = evaluate(df, rules=registry, dataset_name='custom')

        self.assertEqual(scorecard.dataset_name, 'custom')
        self.assertEqual(scorecard.rule_names, ['status_missing', 'nothing'])
        self.assertEqual(scorecard.get('status_missing').failed_rows, 2)

    def test_rule_list_with_duplicate_names(self):
        rules = [
            AggregateRule('same', lambda df: 0, ['status']),
            AggregateRule('same', lambda df: 0, ['status']),
        ]

        with self.assertRaises(ValueError):
            ScorecardEngine(rules)

    def test_overcounting_rule_rejected(self):
        rules = [AggregateRule('too_many', lambda df: len(df) + 1, ['status'])]

        with self.assertRaises(ValueError):
            evaluate(make_issuers(), rules=rules)


class TestScorecard(unittest.TestCase):
    """Test cases for Scorecard outputs"""

    def setUp(self):
        df = make_issuers(
            issuer_code=['A', 'A', 'B', 'C'],
            country=['US', 'US', 'USA', 'FR'],
            annual_revenue=[10, 10, 10, 0]
        )
        self.scorecard = evaluate(df, dataset_name='issuers_dirty')

    def test_to_dataframe(self):
        frame = self.scorecard.to_dataframe()

        self.assertIsInstance(frame, pd.DataFrame)
        self.assertEqual(list(frame.columns), ['rule_name', 'failed_rows', 'total_rows', 'pct_failed'])
        self.assertEqual(frame['rule_name'].tolist(), DEFAULT_RULE_NAMES)
        self.assertEqual(frame['failed_rows'].tolist(), [1, 1, 1])

    def test_to_json(self):
        payload = json.loads(self.scorecard.to_json())

        self.assertEqual(payload['dataset_name'], 'issuers_dirty')
        self.assertEqual(len(payload['results']), 3)
        self.assertEqual(payload['results'][0]['pct_failed'], 0.25)

    def test_emit(self):
        received = []

        self.scorecard.emit(received.extend)

        self.assertEqual([r['rule_name'] for r in received], DEFAULT_RULE_NAMES)

    def test_summary(self):
        summary = self.scorecard.get_summary()

        self.assertIn('issuers_dirty', summary)
        self.assertIn('country_invalid', summary)
        self.assertIn('Rules Failing: 3/3', summary)

    def test_get_unknown_rule(self):
        with self.assertRaises(KeyError):
            self.scorecard.get('unknown')

    def test_empty_scorecard(self):
        scorecard = Scorecard(dataset_name='none', results=[])

        self.assertEqual(scorecard.total_rows, 0)
        self.assertEqual(scorecard.to_dataframe().shape, (0, 4))


if __name__ == '__main__':
    unittest.main(verbosity=2)
