"""
Test Suite for the Issuer Data-Quality Scorecard
================================================

- Rule tests: rule predicates, aggregators and the registry
- Engine tests: scorecard evaluation and its invariants
- Accessor tests: file, SQL and in-memory datasets
- Profiling, runner, settings and logging tests

Running Tests:
    # Run all tests
    pytest tests/ -v

    # Run with coverage
    pytest tests/ -v --cov=issuer_dq --cov-report=html
"""

import os
import sys

# Keep test runs from writing log files
os.environ.setdefault('DQ_LOG_TO_FILE', 'false')

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)
