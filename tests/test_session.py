"""Answer-sheet lifecycle (utils.session): results never outlive their inputs."""

import pytest

from scoring.errors import MissingItemsError
from scoring.models import AgeGroup, Gender, NormResult
from utils import session


def fill(state, value=0):
    for i in range(1, 41):
        session.set_answer(state, i, value)


class TestInitState:
    def test_defaults(self, state) -> None:
        assert state["answers"] == {}
        assert state["result"] is None
        assert state["age_group"] is AgeGroup.ADULT
        assert state["gender"] is Gender.MALE
        assert state["confirm_reset"] is False

    def test_keeps_existing(self) -> None:
        s = {"answers": {1: 2}, "result": None}
        session.init_state(s, age_group="ADOLESCENT", gender="FEMALE")
        assert s["answers"] == {1: 2}
        assert s["age_group"] is AgeGroup.ADOLESCENT
        assert s["gender"] is Gender.FEMALE

    def test_env_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("STAI_DEFAULT_AGE_GROUP", "adolescent")
        monkeypatch.setenv("STAI_DEFAULT_GENDER", "female")
        s: dict = {}
        session.init_state(s)
        assert s["age_group"] is AgeGroup.ADOLESCENT
        assert s["gender"] is Gender.FEMALE


class TestAnswers:
    def test_set_and_count(self, state) -> None:
        session.set_answer(state, 1, 2)
        session.set_answer(state, 40, 0)
        assert state["answers"] == {1: 2, 40: 0}
        assert session.filled_count(state) == 2

    def test_unset(self, state) -> None:
        session.set_answer(state, 5, 3)
        session.set_answer(state, 5, None)
        assert session.filled_count(state) == 0

    @pytest.mark.parametrize("index", [0, 41])
    def test_bad_index(self, state, index) -> None:
        with pytest.raises(ValueError):
            session.set_answer(state, index, 1)

    @pytest.mark.parametrize("value", [4, -1, "1", True])
    def test_bad_value(self, state, value) -> None:
        with pytest.raises(ValueError):
            session.set_answer(state, 1, value)


class TestCompute:
    def test_compute_stores_result(self, state, table) -> None:
        fill(state, 0)
        result = session.compute(state, table=table)
        assert state["result"] is result
        assert result.raw_score_state == 30
        assert result.state_norms == NormResult(80, 7)

    def test_missing_items(self, state, table) -> None:
        for i in range(1, 20):
            session.set_answer(state, i, 1)
        for i in range(21, 41):
            session.set_answer(state, i, 1)
        with pytest.raises(MissingItemsError) as exc:
            session.compute(state, table=table)
        assert exc.value.missing == [20]
        assert state["result"] is None

    def test_failed_compute_discards_previous(self, state, table) -> None:
        fill(state, 0)
        session.compute(state, table=table)
        state["answers"] = {**state["answers"], 7: None}
        with pytest.raises(MissingItemsError):
            session.compute(state, table=table)
        assert state["result"] is None


class TestDiscardOnChange:
    """Any input or profile change clears a computed result."""

    @pytest.fixture
    def scored(self, state, table):
        fill(state, 0)
        session.compute(state, table=table)
        assert state["result"] is not None
        return state

    def test_gender_change_clears(self, scored) -> None:
        session.set_profile(scored, gender="FEMALE")
        assert scored["result"] is None
        assert scored["gender"] is Gender.FEMALE

    def test_age_change_clears(self, scored) -> None:
        session.set_profile(scored, age_group=AgeGroup.ADOLESCENT)
        assert scored["result"] is None

    def test_answer_change_clears(self, scored) -> None:
        session.set_answer(scored, 12, 3)
        assert scored["result"] is None

    def test_recompute_under_new_profile(self, scored, table) -> None:
        old = scored["result"]
        session.set_profile(scored, gender="FEMALE")
        new = session.compute(scored, table=table)
        assert new is not old
        assert new.gender is Gender.FEMALE
        assert old.gender is Gender.MALE
        assert new.state_norms == NormResult(70, 7)

    def test_reset(self, scored) -> None:
        scored["confirm_reset"] = True
        session.reset(scored)
        assert scored["answers"] == {}
        assert scored["result"] is None
        assert scored["confirm_reset"] is False
        assert session.filled_count(scored) == 0

    def test_bad_profile_value(self, scored) -> None:
        with pytest.raises(ValueError):
            session.set_profile(scored, gender="OTHER")
