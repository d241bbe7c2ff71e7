# utils/session.py: answer sheet lifecycle over st.session_state (or any dict)
# - answers: {index: 0..3 | None}
# - result: StaiResult | None, discarded on every answer/profile change
from __future__ import annotations
from typing import Any, MutableMapping, Optional
import logging

from scoring.models import AgeGroup, Gender, StaiResult
from scoring.norms import NormTable
from scoring.stai import N_ITEMS, assemble_result, is_valid_value
from utils.config import default_age_group, default_gender

logger = logging.getLogger(__name__)

State = MutableMapping[str, Any]


def init_state(state: State, age_group: Optional[str] = None, gender: Optional[str] = None) -> None:
    defaults = dict(
        answers={},
        result=None,
        age_group=AgeGroup(age_group or default_age_group()),
        gender=Gender(gender or default_gender()),
        confirm_reset=False,
    )
    for k, v in defaults.items():
        if k not in state:
            state[k] = v


def discard_result(state: State) -> None:
    if state.get("result") is not None:
        logger.debug("Discarding cached STAI result")
    state["result"] = None


def set_answer(state: State, index: int, value: Optional[int]) -> None:
    if not 1 <= index <= N_ITEMS:
        raise ValueError(f"item index out of range: {index}")
    if value is not None and not is_valid_value(value):
        raise ValueError(f"item {index}: value must be 0–3 or None, got {value!r}")
    state["answers"] = {**state.get("answers", {}), index: value}
    discard_result(state)


def set_profile(state: State, age_group=None, gender=None) -> None:
    if age_group is not None:
        state["age_group"] = AgeGroup(age_group)
    if gender is not None:
        state["gender"] = Gender(gender)
    discard_result(state)


def compute(state: State, table: Optional[NormTable] = None) -> StaiResult:
    """Fresh result for the current answers/profile. MissingItemsError leaves result=None."""
    discard_result(state)
    result = assemble_result(state.get("answers", {}), state["age_group"], state["gender"], table=table)
    state["result"] = result
    return result


def reset(state: State) -> None:
    state["answers"] = {}
    state["confirm_reset"] = False
    discard_result(state)


def filled_count(state: State) -> int:
    return sum(1 for v in state.get("answers", {}).values() if v is not None)
