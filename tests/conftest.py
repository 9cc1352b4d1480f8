"""
Pytest configuration: repository root on sys.path and offline-friendly settings.

Settings are read at import time, so environment defaults must be set here
before any nexatel module is imported.
"""

import os
import random
import sys
from datetime import date
from pathlib import Path

import pytest


def _ensure_repo_root_on_sys_path() -> None:
    repo_root = str(Path(__file__).resolve().parents[1])
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_ensure_repo_root_on_sys_path()

os.environ.setdefault("ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
# no roster file at startup; API tests load their own
os.environ.setdefault("ROSTER_PATH", "tests/does-not-exist.csv")

FIXED_DAY = date(2024, 3, 15)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return lambda: FIXED_DAY


@pytest.fixture
def make_customer():
    """Factory with sensible defaults; override any field by keyword."""
    from nexatel.schemas import Customer

    def _make(**overrides):
        fields = dict(
            id="CUST-1000",
            tenure=12,
            monthly_charges=70.0,
            total_charges=840.0,
            churn=False,
            contract="Month-to-month",
            usage_gb=120,
            last_activity_date=FIXED_DAY,
            clv=336.0,
            rfm_score=3,
            segment="Loyal Customers",
        )
        fields.update(overrides)
        return Customer(**fields)

    return _make
