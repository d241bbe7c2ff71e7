# scoring/models.py: profile enums + immutable result records
from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any


class Scale(str, Enum):
    STATE = "STATE"
    TRAIT = "TRAIT"


class AgeGroup(str, Enum):
    ADOLESCENT = "ADOLESCENT"
    ADULT = "ADULT"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


@dataclass(frozen=True)
class NormResult:
    percentile: int
    decatype: int


@dataclass(frozen=True)
class RawScores:
    state: int
    trait: int


@dataclass(frozen=True)
class StaiResult:
    """Raw scores + resolved norms, tied to the profile they were computed under."""
    raw_score_state: int
    raw_score_trait: int
    state_norms: NormResult
    trait_norms: NormResult
    age_group: AgeGroup
    gender: Gender

    def norms_for(self, scale: Scale) -> NormResult:
        return self.state_norms if Scale(scale) is Scale.STATE else self.trait_norms

    def raw_for(self, scale: Scale) -> int:
        return self.raw_score_state if Scale(scale) is Scale.STATE else self.raw_score_trait

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["age_group"] = self.age_group.value
        out["gender"] = self.gender.value
        return out
