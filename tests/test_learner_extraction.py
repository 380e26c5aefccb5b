import json
from datetime import date

import pytest
from langchain_core.messages import HumanMessage, SystemMessage
from sqlalchemy.exc import OperationalError

from core.exceptions import MalformedResponseError, ValidationError
from generators.LearnerExtractor import LearnerExtractor, strip_code_fences
from models.child import ChildModel
from schemas.extraction import ExtractionCandidate
from utils.child_manager import ChildManager

LEARNERS_REPLY = {
    "learners": [
        {
            "name": "Lerato Dlamini",
            "dateOfBirth": "2010-04-12",
            "grade": "9",
            "parentName": "Nomsa Dlamini",
            "parentEmail": "nomsa@example.com",
            "parentPhone": "082 555 0101",
            "status": "success",
        },
        {
            "name": "Sipho Nkosi",
            "dateOfBirth": None,
            "grade": "10",
            "parentName": None,
            "parentEmail": None,
            "parentPhone": None,
            "status": "pending",
        },
    ]
}


@pytest.fixture
def extractor(gateway):
    return LearnerExtractor(gateway)


def test_extract_parses_fenced_json(extractor, fake_llm):
    fake_llm.replies = ["```json\n" + json.dumps(LEARNERS_REPLY) + "\n```"]

    learners = extractor.extract("Name: Lerato Dlamini, Grade 9 ...")

    assert [c.name for c in learners] == ["Lerato Dlamini", "Sipho Nkosi"]
    assert learners[0].parentEmail == "nomsa@example.com"
    assert all(c.status == "pending" for c in learners)


def test_extract_sends_system_and_user_prompt(extractor, fake_llm):
    fake_llm.replies = [json.dumps({"learners": []})]

    extractor.extract("Thabo Mokoena, grade 11")

    messages = fake_llm.calls[0]
    assert isinstance(messages[0], SystemMessage)
    assert isinstance(messages[1], HumanMessage)
    assert "Thabo Mokoena, grade 11" in messages[1].content
    assert "Return ONLY valid JSON" in messages[1].content


def test_empty_input_is_rejected_before_any_call(extractor, fake_llm):
    with pytest.raises(ValidationError):
        extractor.extract("   \n  ")
    assert fake_llm.calls == []


def test_non_json_reply_is_malformed(extractor, fake_llm):
    fake_llm.replies = ["Sorry, I could not find any learners in this document."]

    with pytest.raises(MalformedResponseError) as excinfo:
        extractor.extract("some text")
    assert "could not find" in excinfo.value.raw_content


@pytest.mark.parametrize(
    "reply",
    [
        '["Lerato"]',
        '{"learners": "Lerato"}',
        '{"learners": ["Lerato"]}',
    ],
)
def test_wrong_json_shape_is_malformed(extractor, fake_llm, reply):
    fake_llm.replies = [reply]
    with pytest.raises(MalformedResponseError):
        extractor.extract("some text")


def test_numeric_fields_are_read_as_text(extractor, fake_llm):
    fake_llm.replies = ['{"learners": [{"name": "Lerato", "grade": 9, "parentPhone": 825550101}]}']

    learners = extractor.extract("some text")

    assert learners[0].grade == "9"
    assert learners[0].parentPhone == "825550101"
    assert learners[0].status == "pending"


def test_wrong_shape_is_not_reported_as_invalid_json(extractor, fake_llm):
    fake_llm.replies = ['{"learners": ["Lerato"]}']

    with pytest.raises(MalformedResponseError) as excinfo:
        extractor.extract("some text")

    assert "not valid JSON" not in str(excinfo.value)


def test_missing_learners_key_means_none_found(extractor, fake_llm):
    fake_llm.replies = ['{"note": "no learners"}']
    assert extractor.extract("some text") == []


def test_record_without_name_passes_through(extractor, fake_llm):
    fake_llm.replies = ['{"learners": [{"grade": "8"}]}']

    learners = extractor.extract("some text")

    assert len(learners) == 1
    assert learners[0].name is None
    assert learners[0].grade == "8"


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'


# --- registration ---


def _candidate(name, email=None, **kwargs):
    return ExtractionCandidate(name=name, parentEmail=email, **kwargs)


def test_register_links_matching_parent_and_leaves_others_unlinked(db, make_user):
    parent, _ = make_user("nomsa@example.com", "parent")
    manager = ChildManager(db)

    results = manager.register_candidates(
        [
            _candidate("Lerato Dlamini", "Nomsa@Example.com", dateOfBirth="2010-04-12", grade="9"),
            _candidate("Sipho Nkosi"),
            _candidate("Zanele Khumalo", "nobody@example.com"),
        ]
    )

    assert [r.status for r in results] == ["success", "success", "success"]
    children = {c.name: c for c in db.query(ChildModel).all()}
    assert children["Lerato Dlamini"].parent_id == parent.user_id
    assert children["Lerato Dlamini"].grade == "9"
    assert children["Lerato Dlamini"].favorite_animal == "Not specified"
    assert children["Sipho Nkosi"].parent_id is None
    assert children["Sipho Nkosi"].date_of_birth == date.today().isoformat()
    assert children["Zanele Khumalo"].parent_id is None


def test_failure_on_one_candidate_does_not_stop_the_batch(db, monkeypatch):
    original_insert = ChildManager._insert_child
    calls = {"count": 0}

    def flaky_insert(self, *args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 2:
            raise OperationalError("INSERT INTO children", {}, Exception("database is locked"))
        return original_insert(self, *args, **kwargs)

    monkeypatch.setattr(ChildManager, "_insert_child", flaky_insert)
    manager = ChildManager(db)

    results = manager.register_candidates(
        [_candidate("First Learner"), _candidate("Second Learner"), _candidate("Third Learner")]
    )

    assert [r.status for r in results] == ["success", "error", "success"]
    assert "database is locked" in results[1].message
    assert results[0].message == "Registered successfully"
    names = sorted(c.name for c in db.query(ChildModel).all())
    assert names == ["First Learner", "Third Learner"]


def test_candidate_without_name_or_with_bad_date_is_an_error(db):
    manager = ChildManager(db)

    results = manager.register_candidates(
        [
            _candidate(None),
            _candidate("Bad Date", dateOfBirth="12 April 2010"),
            _candidate("Good Learner"),
        ]
    )

    assert [r.status for r in results] == ["error", "error", "success"]
    assert results[0].message == "Learner name is required"
    assert db.query(ChildModel).count() == 1


def test_error_candidates_are_skipped_unchanged(db):
    manager = ChildManager(db)
    skipped = _candidate("Already Failed", status="error", message="earlier failure")

    results = manager.register_candidates([skipped, _candidate("New Learner")])

    assert results[0] == skipped
    assert results[1].status == "success"
    assert db.query(ChildModel).count() == 1


def test_registering_the_same_list_twice_creates_duplicates(db):
    manager = ChildManager(db)
    first = manager.register_candidates([_candidate("Lerato Dlamini")])

    manager.register_candidates(first)

    assert db.query(ChildModel).filter(ChildModel.name == "Lerato Dlamini").count() == 2
