"""Draft handling and submission recording."""

import pytest

from insights.errors import NotFound, ValidationFailed
from insights.logic import submissions as subs
from insights.models import User

SESSION = "station-1"


def _filled(state, **overrides):
    fields = dict(customer_name="Maria", gender="Feminino", age_range="35-44 anos", store_id="2", nps_score=9)
    fields.update(overrides)
    state = subs.update_form(state, SESSION, **fields)
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1", "Sim")
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q2", 4)
    return state


def test_set_answer_reevaluates_visibility(base_state):
    state, visible = subs.set_answer(base_state, SESSION, "ci-001", "q1", "Não")
    assert visible == ["q1", "q1_d", "q2", "q3"]
    state, visible = subs.set_answer(state, SESSION, "ci-001", "q1_d", "Arroz")
    state, visible = subs.set_answer(state, SESSION, "ci-001", "q1", "Sim")
    assert visible == ["q1", "q2", "q3"]
    # Stale answer kept on the draft
    assert subs.get_form(state, SESSION).answers["q1_d"] == "Arroz"


def test_set_answer_rejects_foreign_question(base_state):
    with pytest.raises(ValidationFailed):
        subs.set_answer(base_state, SESSION, "ci-001", "nope", "x")


def test_reducers_do_not_mutate_input(base_state):
    subs.update_form(base_state, SESSION, customer_name="Ana")
    assert base_state.forms == {}


def test_record_prepends_and_resets_transient_fields(base_state):
    state = _filled(base_state)
    state, first = subs.record_submission(state, SESSION, "ci-001")
    state = _filled(state, customer_name="João", gender="Masculino")
    state, second = subs.record_submission(state, SESSION, "ci-001")

    assert [s.id for s in state.submissions] == [second.id, first.id]
    assert first.store_id == "2"
    assert first.answers == {"q1": "Sim", "q2": 4}
    assert first.nps_score == 9

    form = subs.get_form(state, SESSION)
    assert form.customer_name == ""
    assert form.answers == {}
    assert form.nps_score == 10
    assert (form.gender, form.age_range, form.store_id) == ("Masculino", "35-44 anos", "2")


def test_assigned_store_wins_over_selected_store(base_state):
    manager = User(id="m1", username="g@x", role="MANAGER", assigned_store_id="1")
    state, sub = subs.record_submission(_filled(base_state), SESSION, "ci-001", manager)
    assert sub.store_id == "1"


def test_no_store_rejects_and_leaves_collection_unchanged(base_state):
    state = _filled(base_state, store_id="")
    admin = User(id="a1", username="adm", role="ADMIN")
    with pytest.raises(ValidationFailed, match="store"):
        subs.record_submission(state, SESSION, "ci-001", admin)
    assert state.submissions == []


def test_unknown_store_is_rejected(base_state):
    with pytest.raises(ValidationFailed, match="Unknown store"):
        subs.record_submission(_filled(base_state, store_id="99"), SESSION, "ci-001")


def test_hidden_required_question_does_not_block(base_state):
    state = _filled(base_state)
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1_d", "")
    state, sub = subs.record_submission(state, SESSION, "ci-001")
    assert "q1_d" not in sub.answers


def test_visible_required_question_blocks(base_state):
    state = _filled(base_state)
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1", "não")
    with pytest.raises(ValidationFailed, match="q1_d"):
        subs.record_submission(state, SESSION, "ci-001")


def test_boolean_false_opens_the_follow_up(base_state):
    state = _filled(base_state)
    state, visible = subs.set_answer(state, SESSION, "ci-001", "q1", False)
    assert "q1_d" in visible
    assert subs.get_form(state, SESSION).answers["q1"] == "Não"
    with pytest.raises(ValidationFailed, match="q1_d"):
        subs.record_submission(state, SESSION, "ci-001")


def test_hidden_answers_are_not_recorded(base_state):
    state = _filled(base_state)
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1", "Não")
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1_d", "Feijão")
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1", "Sim")
    state, sub = subs.record_submission(state, SESSION, "ci-001")
    assert sub.answers == {"q1": "Sim", "q2": 4}


def test_boolean_answer_is_canonicalised(base_state):
    state = _filled(base_state)
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1", " não ")
    state, _ = subs.set_answer(state, SESSION, "ci-001", "q1_d", "Leite")
    state, sub = subs.record_submission(state, SESSION, "ci-001")
    assert sub.answers["q1"] == "Não"


@pytest.mark.parametrize("qid, value", [("q1", "Talvez"), ("q2", 6), ("q2", 0), ("q2", True), ("q2", "ótimo")])
def test_invalid_typed_answers_are_rejected(base_state, qid, value):
    state = _filled(base_state)
    state, _ = subs.set_answer(state, SESSION, "ci-001", qid, value)
    with pytest.raises(ValidationFailed, match=qid):
        subs.record_submission(state, SESSION, "ci-001")


@pytest.mark.parametrize("override", [
    {"customer_name": "  "},
    {"gender": "Outro"},
    {"age_range": "30"},
])
def test_identification_fields_are_checked(base_state, override):
    with pytest.raises(ValidationFailed):
        subs.record_submission(_filled(base_state, **override), SESSION, "ci-001")


def test_nps_out_of_range_rejected_on_update(base_state):
    with pytest.raises(ValidationFailed):
        subs.update_form(base_state, SESSION, nps_score=11)


def test_inactive_or_unknown_survey(base_state):
    state = _filled(base_state)
    inactive = state.evolve(surveys=[state.surveys[0].model_copy(update={"is_active": False})])
    with pytest.raises(ValidationFailed):
        subs.record_submission(inactive, SESSION, "ci-001")
    with pytest.raises(NotFound):
        subs.record_submission(state, SESSION, "missing")


def test_clear_form(base_state):
    state = _filled(base_state)
    assert SESSION not in subs.clear_form(state, SESSION).forms
    assert subs.clear_form(base_state, SESSION) is base_state
