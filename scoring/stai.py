# scoring/stai.py: STAI (State-Trait Anxiety Inventory), Spanish adaptation
# - 40 items scored 0–3: A/E (state) 1–20, A/R (trait) 21–40
# - Reversed items contribute 3 - v
# - Raw score → percentile/decatype via scoring.norms (profile = age group + gender)
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Dict, Any, Mapping, Optional, FrozenSet
import logging

from scoring.errors import MissingItemsError
from scoring.models import Scale, AgeGroup, Gender, RawScores, StaiResult
from scoring.norms import NormTable, lookup_norm

logger = logging.getLogger(__name__)

ITEM_VALUES = (0, 1, 2, 3)
MAX_ITEM_VALUE = 3
N_ITEMS = 40


@dataclass(frozen=True)
class Subscale:
    scale: Scale
    first: int
    last: int
    reversed_items: FrozenSet[int]

    @property
    def items(self) -> range:
        return range(self.first, self.last + 1)

    def contribution(self, index: int, value: int) -> int:
        return MAX_ITEM_VALUE - value if index in self.reversed_items else value


STATE = Subscale(Scale.STATE, 1, 20, frozenset({1, 2, 5, 8, 10, 11, 15, 16, 19, 20}))
TRAIT = Subscale(Scale.TRAIT, 21, 40, frozenset({21, 26, 27, 30, 33, 36, 39}))
SUBSCALES = (STATE, TRAIT)

REVERSED_STATE = STATE.reversed_items
REVERSED_TRAIT = TRAIT.reversed_items

Answers = Mapping[int, Optional[int]]


def subscale_of(index: int) -> Subscale:
    for sub in SUBSCALES:
        if sub.first <= index <= sub.last:
            return sub
    raise ValueError(f"STAI item index out of range: {index} (1–{N_ITEMS})")


def is_reversed(index: int) -> bool:
    return index in subscale_of(index).reversed_items


def is_valid_value(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v in ITEM_VALUES


def score_items(answers: Answers) -> RawScores:
    """
    Raw A/E and A/R totals.

    Every index 1–40 must hold a value in {0,1,2,3}; absent or invalid slots
    are collected across both subscales and raised together as
    MissingItemsError. No partial score is ever returned.
    """
    totals: Dict[Scale, int] = {}
    missing: List[int] = []
    for sub in SUBSCALES:
        total = 0
        for i in sub.items:
            v = answers.get(i)
            if not is_valid_value(v):
                missing.append(i)
                continue
            total += sub.contribution(i, v)
        totals[sub.scale] = total

    if missing:
        raise MissingItemsError(missing)
    return RawScores(state=totals[Scale.STATE], trait=totals[Scale.TRAIT])


def assemble_result(answers: Answers, age_group, gender, table: Optional[NormTable] = None) -> StaiResult:
    raw = score_items(answers)
    age_group, gender = AgeGroup(age_group), Gender(gender)
    result = StaiResult(
        raw_score_state=raw.state,
        raw_score_trait=raw.trait,
        state_norms=lookup_norm(raw.state, age_group, gender, Scale.STATE, table=table),
        trait_norms=lookup_norm(raw.trait, age_group, gender, Scale.TRAIT, table=table),
        age_group=age_group,
        gender=gender,
    )
    logger.debug("STAI scored: %s", result)
    return result


def classify(decatype: int, meta: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Decatype → interpretation band from survey meta (label/color/description)."""
    for band in meta.get("interpretation", []):
        lo, hi = band.get("range", [None, None])
        if lo is not None and hi is not None and lo <= decatype <= hi:
            return band
    return None

