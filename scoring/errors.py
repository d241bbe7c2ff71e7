# scoring/errors.py: STAI scoring / normative lookup errors
from __future__ import annotations
from typing import Iterable, List


class MissingItemsError(ValueError):
    """Scoring attempted with absent or invalid items. Carries every missing index, sorted."""

    def __init__(self, missing: Iterable[int]):
        self.missing: List[int] = sorted(missing)
        super().__init__(
            "Faltan ítems por responder: " + ", ".join(str(i) for i in self.missing)
        )


class NoMatchingBandError(LookupError):
    """The normative table has no band covering the raw score (data defect, not user error)."""

    def __init__(self, raw_score, age_group, gender, scale):
        self.raw_score = raw_score
        self.age_group = age_group
        self.gender = gender
        self.scale = scale
        super().__init__(
            f"No normative band for raw={raw_score!r} "
            f"scale={_name(scale)} age_group={_name(age_group)} gender={_name(gender)}"
        )


class NormTableError(ValueError):
    """Normative table failed load-time validation."""


def _name(v) -> str:
    return getattr(v, "value", v)
