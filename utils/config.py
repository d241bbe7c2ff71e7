# utils/config.py: settings (Streamlit secrets → env → fallback) + logging setup
from __future__ import annotations
from collections.abc import Mapping
from typing import Optional
import logging
import os

import streamlit as st

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_setting(name: str, fallback: str = "") -> str:
    """Priority: st.secrets[name] → st.secrets["general"][name] → os.environ[name] → fallback."""
    if hasattr(st, "secrets"):
        try:
            if name in st.secrets and st.secrets[name]:
                return str(st.secrets[name]).strip()
            if "general" in st.secrets:
                gen = st.secrets["general"]
                if isinstance(gen, Mapping) and gen.get(name):
                    return str(gen[name]).strip()
        except Exception:
            # no secrets.toml → Streamlit raises on access
            pass
    v = os.getenv(name)
    return (v or fallback).strip()


def default_age_group() -> str:
    return get_setting("STAI_DEFAULT_AGE_GROUP", "ADULT").upper()


def default_gender() -> str:
    return get_setting("STAI_DEFAULT_GENDER", "MALE").upper()


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or get_setting("STAI_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
