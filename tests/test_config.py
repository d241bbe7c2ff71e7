"""Settings + logging setup (utils.config)."""

import logging

from utils import config


def test_env_setting(monkeypatch) -> None:
    monkeypatch.setenv("STAI_SOMETHING", "  value ")
    assert config.get_setting("STAI_SOMETHING") == "value"


def test_fallback(monkeypatch) -> None:
    monkeypatch.delenv("STAI_UNSET", raising=False)
    assert config.get_setting("STAI_UNSET", "x") == "x"


def test_profile_defaults(monkeypatch) -> None:
    monkeypatch.delenv("STAI_DEFAULT_AGE_GROUP", raising=False)
    monkeypatch.delenv("STAI_DEFAULT_GENDER", raising=False)
    assert config.default_age_group() == "ADULT"
    assert config.default_gender() == "MALE"


def test_configure_logging(monkeypatch) -> None:
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
    config.configure_logging("debug")
    assert calls["level"] == logging.DEBUG
    config.configure_logging("nonsense")
    assert calls["level"] == logging.INFO
