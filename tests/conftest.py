"""Shared fixtures for the STAI test suite."""

from typing import Dict, Optional

import pytest

from scoring.norms import NormBand, NormTable, get_norm_table
from utils import session
from utils.registry import load_survey


def make_answers(value: Optional[int] = 0, **overrides) -> Dict[int, Optional[int]]:
    """All 40 items set to value; overrides as item_<n>=v."""
    answers = {i: value for i in range(1, 41)}
    for k, v in overrides.items():
        answers[int(k.split("_")[1])] = v
    return answers


def flat_partition(percentile: int = 50, decatype: int = 5):
    """Single band covering 0–60."""
    return [NormBand(0, 60, percentile, decatype)]


@pytest.fixture
def table() -> NormTable:
    """The shipped normative table (norms/stai.yaml)."""
    return get_norm_table("stai")


@pytest.fixture
def meta():
    """The shipped survey metadata (surveys/stai.json)."""
    return load_survey("stai")


@pytest.fixture
def state() -> dict:
    """A fresh answer sheet, adult male profile."""
    s: dict = {}
    session.init_state(s, age_group="ADULT", gender="MALE")
    return s
