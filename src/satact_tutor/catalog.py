"""Question repository and full-test catalog, loaded from the bundled content."""
from pathlib import Path
from typing import Iterable, Optional

from satact_tutor.errors import NotFound
from satact_tutor.importer import parse_questions, parse_tests, read_bank_file
from satact_tutor.models import Difficulty, FullTest, Question, SubjectArea, TestType

CONTENT_DIR = Path(__file__).parent / "content"


def parse_subject(value) -> SubjectArea:
    try:
        return SubjectArea(value)
    except ValueError:
        raise NotFound(f"Unknown subject: {value}") from None


def parse_test_type(value) -> TestType:
    try:
        return TestType(str(value).upper())
    except ValueError:
        raise NotFound(f"Unknown test type: {value}") from None


class QuestionRepository:
    """Fixed, read-only catalog of questions. Lookups preserve catalog order."""

    def __init__(self, questions: Iterable[Question]):
        self._questions = tuple(questions)
        self._by_id = {q.id: q for q in self._questions}

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self):
        return iter(self._questions)

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._by_id

    def ids(self) -> list[str]:
        return list(self._by_id)

    def by_id(self, question_id: str) -> Question:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise NotFound(f"Unknown question: {question_id}") from None

    def by_subject(self, subject: SubjectArea) -> list[Question]:
        return [q for q in self._questions if q.subject == subject]

    def by_test_type(self, test_type: TestType) -> list[Question]:
        return [q for q in self._questions if q.test_type == test_type]

    def by_difficulty(self, difficulty: Difficulty) -> list[Question]:
        return [q for q in self._questions if q.difficulty == difficulty]

    def by_topic(self, topic: str) -> list[Question]:
        return [q for q in self._questions if topic in q.topics]


class TestCatalog:
    """Fixed, read-only catalog of full-length tests."""

    def __init__(self, tests: Iterable[FullTest]):
        self._tests = tuple(tests)
        self._by_id = {t.id: t for t in self._tests}

    def __len__(self) -> int:
        return len(self._tests)

    def __iter__(self):
        return iter(self._tests)

    def by_id(self, test_id: str) -> FullTest:
        try:
            return self._by_id[test_id]
        except KeyError:
            raise NotFound(f"Unknown test: {test_id}") from None

    def by_type(self, test_type: TestType) -> list[FullTest]:
        return [t for t in self._tests if t.test_type == test_type]


def load_bundled_questions(content_dir: Optional[Path] = None) -> list[Question]:
    content_dir = Path(content_dir or CONTENT_DIR)
    return parse_questions(read_bank_file(str(content_dir / "questions.json")))


def load_test_catalog(repository: QuestionRepository, content_dir: Optional[Path] = None) -> TestCatalog:
    content_dir = Path(content_dir or CONTENT_DIR)
    return TestCatalog(parse_tests(read_bank_file(str(content_dir / "tests.json")), repository.ids()))
