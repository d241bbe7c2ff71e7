# scoring/norms.py: normative lookup (raw score → percentile / decatype)
# - Table is data (norms/<key>.yaml), loaded once, validated at load time
# - Partition = (scale, age_group, gender); bands inclusive on both ends
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Any, Iterable, List, Optional, Tuple
import logging

from scoring.errors import NoMatchingBandError, NormTableError
from scoring.models import Scale, AgeGroup, Gender, NormResult
from utils.registry import load_norms, norms_dir

logger = logging.getLogger(__name__)

SCORE_MIN = 0
SCORE_MAX = 60
DECATYPE_RANGE = (1, 10)
PERCENTILE_RANGE = (1, 99)

PartitionKey = Tuple[Scale, AgeGroup, Gender]


@dataclass(frozen=True)
class NormBand:
    min: int
    max: int
    percentile: int
    decatype: int

    def contains(self, raw: int) -> bool:
        return self.min <= raw <= self.max


def _key(scale, age_group, gender) -> PartitionKey:
    return Scale(scale), AgeGroup(age_group), Gender(gender)


def _key_label(key: PartitionKey) -> str:
    return "/".join(k.value for k in key)


def _strict_int(band: Dict[str, Any], field: str) -> int:
    value = band[field]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{field} must be an integer, got {value!r}")
    return value


def validate_partition(key: PartitionKey, bands: Iterable[NormBand]) -> Tuple[NormBand, ...]:
    """
    Sort + check one partition: contiguous, non-overlapping, exhaustive over
    [SCORE_MIN, SCORE_MAX], percentile/decatype within their ranges.
    Returns the bands sorted by lower bound.
    """
    label = _key_label(key)
    ordered = tuple(sorted(bands, key=lambda b: (b.min, b.max)))
    if not ordered:
        raise NormTableError(f"{label}: partition has no bands")

    expected = SCORE_MIN
    for b in ordered:
        if any(isinstance(v, bool) or not isinstance(v, int) for v in (b.min, b.max, b.percentile, b.decatype)):
            raise NormTableError(f"{label}: non-integer value in band {b!r}")
        if b.min > b.max:
            raise NormTableError(f"{label}: band [{b.min}, {b.max}] has min > max")
        if b.min < expected:
            raise NormTableError(f"{label}: band [{b.min}, {b.max}] overlaps previous band (expected min {expected})")
        if b.min > expected:
            raise NormTableError(f"{label}: gap between {expected} and {b.min}")
        if not PERCENTILE_RANGE[0] <= b.percentile <= PERCENTILE_RANGE[1]:
            raise NormTableError(f"{label}: percentile {b.percentile} out of range in band [{b.min}, {b.max}]")
        if not DECATYPE_RANGE[0] <= b.decatype <= DECATYPE_RANGE[1]:
            raise NormTableError(f"{label}: decatype {b.decatype} out of range in band [{b.min}, {b.max}]")
        expected = b.max + 1

    if expected != SCORE_MAX + 1:
        raise NormTableError(f"{label}: bands end at {expected - 1}, must reach {SCORE_MAX}")
    return ordered


class NormTable:
    """Read-only normative table. Constructing one validates every partition."""

    def __init__(self, partitions: Dict[PartitionKey, Iterable[NormBand]], require_all: bool = True):
        checked: Dict[PartitionKey, Tuple[NormBand, ...]] = {}
        for key, bands in partitions.items():
            key = _key(*key)
            if key in checked:
                raise NormTableError(f"{_key_label(key)}: partition defined twice")
            checked[key] = validate_partition(key, bands)

        if require_all:
            missing = [
                _key_label((s, a, g))
                for s in Scale for a in AgeGroup for g in Gender
                if (s, a, g) not in checked
            ]
            if missing:
                raise NormTableError("missing partitions: " + ", ".join(missing))

        self._partitions = checked

    @classmethod
    def from_dict(cls, doc: Dict[str, Any], require_all: bool = True) -> "NormTable":
        """
        Expected shape:
          score_range: [0, 60]          # optional; must match SCORE_MIN/SCORE_MAX
          partitions:
            - {scale: STATE, age_group: ADULT, gender: MALE,
               bands: [{min, max, percentile, decatype}, ...]}
        Band fields must be plain ints (no floats, bools or numeric strings).
        """
        if not isinstance(doc, dict):
            raise NormTableError(f"norms document must be a mapping, got {type(doc).__name__}")

        score_range = doc.get("score_range")
        if score_range is not None and (not isinstance(score_range, list) or score_range != [SCORE_MIN, SCORE_MAX]):
            raise NormTableError(f"score_range {score_range!r} does not match [{SCORE_MIN}, {SCORE_MAX}]")

        parts: Dict[PartitionKey, List[NormBand]] = {}
        for i, part in enumerate(doc.get("partitions") or []):
            try:
                key = _key(part["scale"], part["age_group"], part["gender"])
                bands = [
                    NormBand(*(_strict_int(b, f) for f in ("min", "max", "percentile", "decatype")))
                    for b in part.get("bands") or []
                ]
            except (KeyError, TypeError, ValueError) as e:
                raise NormTableError(f"partition #{i}: malformed entry ({e})") from e
            if key in parts:
                raise NormTableError(f"{_key_label(key)}: partition defined twice")
            parts[key] = bands
        return cls(parts, require_all=require_all)

    @property
    def partitions(self) -> Dict[PartitionKey, Tuple[NormBand, ...]]:
        return dict(self._partitions)

    def bands(self, scale, age_group, gender) -> Tuple[NormBand, ...]:
        return self._partitions.get(_key(scale, age_group, gender), ())

    def lookup(self, raw_score: int, age_group, gender, scale) -> NormResult:
        if isinstance(raw_score, bool) or not isinstance(raw_score, int):
            raise NoMatchingBandError(raw_score, AgeGroup(age_group), Gender(gender), Scale(scale))
        for band in self.bands(scale, age_group, gender):
            if band.contains(raw_score):
                return NormResult(percentile=band.percentile, decatype=band.decatype)
        raise NoMatchingBandError(raw_score, AgeGroup(age_group), Gender(gender), Scale(scale))


@lru_cache(maxsize=None)
def _load_table(key: str, folder: str) -> NormTable:
    table = NormTable.from_dict(load_norms(key, Path(folder)))
    logger.info("Normative table '%s' loaded from %s: %d partitions", key, folder, len(table.partitions))
    return table


def get_norm_table(key: str = "stai") -> NormTable:
    """
    Load + validate norms/<key>.yaml once per (key, norms folder).
    The folder is resolved on every call, so STAI_NORMS_DIR changes are honoured.
    """
    return _load_table(key, str(norms_dir()))


def lookup_norm(raw_score: int, age_group, gender, scale, table: Optional[NormTable] = None) -> NormResult:
    table = table if table is not None else get_norm_table()
    return table.lookup(raw_score, age_group, gender, scale)
