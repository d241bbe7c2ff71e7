# utils/export.py: response table + summary row + CSV bytes (pandas)
from __future__ import annotations
from io import StringIO
from typing import Dict, Any, Mapping, Optional

import pandas as pd

from scoring.models import StaiResult
from scoring.stai import N_ITEMS, classify, is_valid_value, subscale_of


def _choice_label(meta: Dict[str, Any], scale: str, value: int) -> str:
    choices = meta.get("subscales", {}).get(scale, {}).get("choices", [])
    for label, v in choices:
        if v == value:
            return label
    return str(value)


def answers_frame(answers: Mapping[int, Optional[int]], meta: Dict[str, Any]) -> pd.DataFrame:
    """One row per item: no | subscale | reversed | response_label | response_score | contribution."""
    rows = []
    for i in range(1, N_ITEMS + 1):
        sub = subscale_of(i)
        v = answers.get(i)
        ok = is_valid_value(v)
        rows.append({
            "no": i,
            "subscale": meta.get("subscales", {}).get(sub.scale.value, {}).get("code", sub.scale.value),
            "reversed": i in sub.reversed_items,
            "response_label": _choice_label(meta, sub.scale.value, v) if ok else "",
            "response_score": v if ok else None,
            "contribution": sub.contribution(i, v) if ok else None,
        })
    return pd.DataFrame(rows).astype({"response_score": "Int64", "contribution": "Int64"})


def build_row(ts: str, pid: str, result: StaiResult, meta: Dict[str, Any]) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "timestamp": ts,
        "participant_id": pid,
        "age_group": result.age_group.value,
        "gender": result.gender.value,
    }
    for prefix, raw, norms in (
        ("state", result.raw_score_state, result.state_norms),
        ("trait", result.raw_score_trait, result.trait_norms),
    ):
        band = classify(norms.decatype, meta) or {}
        row[f"{prefix}_raw"] = raw
        row[f"{prefix}_percentile"] = norms.percentile
        row[f"{prefix}_decatype"] = norms.decatype
        row[f"{prefix}_label"] = band.get("label", "")
    return row


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8-sig")
