"""Reading and validating question banks and test catalogs from files."""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

import yaml

from satact_tutor.db import KeyValueStore
from satact_tutor.errors import CatalogError
from satact_tutor.models import Difficulty, FullTest, Question, SubjectArea, TestType

logger = logging.getLogger(__name__)

IMPORTED_QUESTIONS_KEY = "imported-questions"

QUESTION_FIELDS = ("id", "subject", "difficulty", "content", "options", "correct_answer", "topics")


def read_bank_file(file_path: str) -> dict:
    """Load a .json or .yaml/.yml bank into a dict."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".yaml", ".yml"):
        raise CatalogError(f"Unsupported file type: {suffix or path.name}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Could not read {path.name}: {e}") from e
    try:
        if suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CatalogError(f"Could not parse {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"{path.name} must contain a mapping at the top level")
    return data


def _parse_question(raw: dict) -> Question:
    missing = [f for f in QUESTION_FIELDS if f not in raw]
    if missing:
        raise CatalogError(f"Question {raw.get('id', '?')} is missing {', '.join(missing)}")
    qid = raw["id"]
    try:
        subject = SubjectArea(raw["subject"])
        difficulty = Difficulty(raw["difficulty"])
        test_type = TestType(raw.get("test_type", subject.test_type.value))
    except ValueError as e:
        raise CatalogError(f"Question {qid}: {e}") from e
    if test_type != subject.test_type:
        raise CatalogError(f"Question {qid}: subject {subject.value} is not a {test_type.value} subject")
    options = raw["options"]
    if not isinstance(options, list) or len(options) < 2 or not all(str(o).strip() for o in options):
        raise CatalogError(f"Question {qid}: needs at least two non-empty options")
    correct = raw["correct_answer"]
    if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < len(options):
        raise CatalogError(f"Question {qid}: correct_answer {correct!r} is out of range")
    topics = raw["topics"]
    if not isinstance(topics, list) or not topics or not all(str(t).strip() for t in topics):
        raise CatalogError(f"Question {qid}: topics must be a non-empty list")
    return Question(
        id=str(qid),
        test_type=test_type,
        subject=subject,
        difficulty=difficulty,
        content=raw["content"],
        options=tuple(str(o) for o in options),
        correct_answer=correct,
        explanation=raw.get("explanation", ""),
        topics=tuple(str(t) for t in topics),
        image_url=raw.get("image_url"),
    )


def parse_questions(data: dict, existing_ids: Iterable[str] = ()) -> list[Question]:
    """Validate the ``questions`` list of a bank. Ids must be unique across ``existing_ids`` too."""
    seen = set(existing_ids)
    questions = []
    for raw in data.get("questions", []):
        question = _parse_question(raw)
        if question.id in seen:
            raise CatalogError(f"Duplicate question id: {question.id}")
        seen.add(question.id)
        questions.append(question)
    return questions


def parse_tests(data: dict, known_question_ids: Iterable[str]) -> list[FullTest]:
    """Validate the ``tests`` list of a catalog against the known question ids."""
    known = set(known_question_ids)
    tests = []
    seen = set()
    for raw in data.get("tests", []):
        try:
            test = FullTest.from_dict(raw)
        except (KeyError, ValueError, TypeError) as e:
            raise CatalogError(f"Test {raw.get('id', '?')}: {e}") from e
        if test.id in seen:
            raise CatalogError(f"Duplicate test id: {test.id}")
        if not test.sections:
            raise CatalogError(f"Test {test.id} has no sections")
        for section in test.sections:
            if section.subject.test_type != test.test_type:
                raise CatalogError(f"Test {test.id}: {section.subject.value} section in a {test.test_type.value} test")
            unknown = [q for q in section.questions if q not in known]
            if unknown:
                raise CatalogError(f"Test {test.id}: unknown questions {', '.join(unknown)}")
        seen.add(test.id)
        tests.append(test)
    return tests


def load_imported_questions(store: KeyValueStore, existing_ids: Iterable[str] = ()) -> list[Question]:
    data = store.get(IMPORTED_QUESTIONS_KEY) or {"questions": []}
    return parse_questions(data, existing_ids)


def import_question_bank(store: KeyValueStore, file_path: str, existing_ids: Iterable[str] = ()) -> dict:
    """Validate a question bank file and keep it with the previously imported ones."""
    existing_ids = set(existing_ids)
    current = store.get(IMPORTED_QUESTIONS_KEY) or {"questions": []}
    already = {q["id"] for q in current["questions"]}
    new = parse_questions(read_bank_file(file_path), existing_ids | already)
    current["questions"].extend(q.to_dict() for q in new)
    current["imported_at"] = datetime.now().isoformat()
    store.set(IMPORTED_QUESTIONS_KEY, current)
    logger.info("Imported %d questions from %s", len(new), file_path)
    return {
        "filename": Path(file_path).name,
        "count": len(new),
        "subjects": sorted({q.subject.value for q in new}),
    }
