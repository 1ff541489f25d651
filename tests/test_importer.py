# tests/test_importer.py
import json

import pytest

from satact_tutor.errors import CatalogError
from satact_tutor.importer import (
    IMPORTED_QUESTIONS_KEY, import_question_bank, load_imported_questions, parse_questions,
    parse_tests, read_bank_file,
)
from satact_tutor.models import SubjectArea


def _raw(qid="imp-1", **overrides):
    data = {
        "id": qid,
        "subject": "SAT_Math_Calc",
        "difficulty": "medium",
        "content": "If 3x = 12, what is x?",
        "options": ["3", "4", "6", "9"],
        "correct_answer": 1,
        "explanation": "Divide both sides by 3.",
        "topics": ["Linear Equations"],
    }
    data.update(overrides)
    return data


def _write_json(tmp_path, questions, name="bank.json"):
    path = tmp_path / name
    path.write_text(json.dumps({"questions": questions}))
    return str(path)


def test_import_json_bank(store, tmp_path):
    path = _write_json(tmp_path, [_raw("imp-1"), _raw("imp-2", subject="ACT_Math", test_type="ACT")])
    result = import_question_bank(store, path)
    assert result == {"filename": "bank.json", "count": 2, "subjects": ["ACT_Math", "SAT_Math_Calc"]}
    imported = load_imported_questions(store)
    assert [q.id for q in imported] == ["imp-1", "imp-2"]
    assert imported[1].subject == SubjectArea.ACT_MATH
    assert "imported_at" in store.get(IMPORTED_QUESTIONS_KEY)


def test_import_yaml_bank(store, tmp_path):
    path = tmp_path / "bank.yaml"
    path.write_text(
        "questions:\n"
        "  - id: y1\n"
        "    subject: ACT_Science\n"
        "    difficulty: hard\n"
        "    content: Which variable was held constant?\n"
        "    options: [Temperature, Pressure, Volume]\n"
        "    correct_answer: 2\n"
        "    topics: [Experimental Design]\n"
    )
    result = import_question_bank(store, str(path))
    assert result["count"] == 1
    q = load_imported_questions(store)[0]
    assert q.options == ("Temperature", "Pressure", "Volume")
    assert q.test_type.value == "ACT"


def test_imports_accumulate(store, tmp_path):
    import_question_bank(store, _write_json(tmp_path, [_raw("imp-1")], "a.json"))
    import_question_bank(store, _write_json(tmp_path, [_raw("imp-2")], "b.json"))
    assert [q.id for q in load_imported_questions(store)] == ["imp-1", "imp-2"]


def test_reimport_same_ids_rejected(store, tmp_path):
    path = _write_json(tmp_path, [_raw("imp-1")])
    import_question_bank(store, path)
    with pytest.raises(CatalogError):
        import_question_bank(store, path)
    assert len(load_imported_questions(store)) == 1


def test_import_clashing_with_bundled_id_rejected(store, tmp_path):
    path = _write_json(tmp_path, [_raw("sat-r-1")])
    with pytest.raises(CatalogError):
        import_question_bank(store, path, existing_ids=["sat-r-1"])
    assert store.get(IMPORTED_QUESTIONS_KEY) is None


@pytest.mark.parametrize("overrides", [
    {"correct_answer": 4},
    {"correct_answer": "b"},
    {"options": ["only one"]},
    {"options": ["a", ""]},
    {"subject": "SAT_Chemistry"},
    {"difficulty": "impossible"},
    {"test_type": "ACT"},
    {"topics": []},
    {"correct_answer": True},
    {"topics": "Algebra"},
])
def test_invalid_questions_rejected(overrides):
    with pytest.raises(CatalogError):
        parse_questions({"questions": [_raw(**overrides)]})


def test_missing_fields_rejected():
    raw = _raw()
    del raw["topics"]
    with pytest.raises(CatalogError, match="topics"):
        parse_questions({"questions": [raw]})


def test_duplicate_ids_in_one_file_rejected():
    with pytest.raises(CatalogError, match="Duplicate"):
        parse_questions({"questions": [_raw("d"), _raw("d")]})


def test_unsupported_file_type(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("questions: []")
    with pytest.raises(CatalogError, match="Unsupported"):
        read_bank_file(str(path))


def test_invalid_utf8(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"questions": ["caf\xe9"]}')
    with pytest.raises(CatalogError, match="Could not read"):
        read_bank_file(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(CatalogError):
        read_bank_file(str(tmp_path / "nowhere.yaml"))


def test_malformed_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(CatalogError):
        read_bank_file(str(path))


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(CatalogError):
        read_bank_file(str(path))


def _test(**overrides):
    data = {
        "id": "t1", "test_type": "SAT", "name": "T1",
        "sections": [{"subject": "SAT_Reading", "duration": 65, "questions": ["q1"]}],
    }
    data.update(overrides)
    return data


def test_parse_tests_valid():
    tests = parse_tests({"tests": [_test()]}, ["q1"])
    assert tests[0].sections[0].questions == ("q1",)


def test_parse_tests_unknown_question():
    with pytest.raises(CatalogError, match="unknown questions"):
        parse_tests({"tests": [_test()]}, [])


def test_parse_tests_wrong_section_subject():
    bad = _test(sections=[{"subject": "ACT_Math", "duration": 60, "questions": ["q1"]}])
    with pytest.raises(CatalogError):
        parse_tests({"tests": [bad]}, ["q1"])


def test_parse_tests_no_sections():
    with pytest.raises(CatalogError):
        parse_tests({"tests": [_test(sections=[])]}, ["q1"])


def test_parse_tests_duplicate_id():
    with pytest.raises(CatalogError, match="Duplicate"):
        parse_tests({"tests": [_test(), _test()]}, ["q1"])
