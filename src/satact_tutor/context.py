"""Wiring of the tutor services into one application context."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from satact_tutor.auth import AuthContext
from satact_tutor.catalog import (
    QuestionRepository, TestCatalog, load_bundled_questions, load_test_catalog,
)
from satact_tutor.config import Settings
from satact_tutor.db import KeyValueStore, init_db
from satact_tutor.exam import ExamSessionMachine
from satact_tutor.importer import load_imported_questions
from satact_tutor.performance import PerformanceTracker
from satact_tutor.practice import PracticeSessionMachine
from satact_tutor.selector import AdaptiveSelector


@dataclass
class TutorContext:
    settings: Settings
    store: KeyValueStore
    auth: AuthContext
    questions: QuestionRepository
    tests: TestCatalog
    tracker: PerformanceTracker
    selector: AdaptiveSelector
    practice: PracticeSessionMachine
    exams: ExamSessionMachine


def build_context(settings: Optional[Settings] = None) -> TutorContext:
    """Create the database if needed and construct every service once."""
    settings = settings or Settings()
    init_db(settings.db_path)
    store = KeyValueStore(settings.db_path)
    content_dir = Path(settings.content_dir)
    bundled = load_bundled_questions(content_dir)
    imported = load_imported_questions(store, [q.id for q in bundled])
    questions = QuestionRepository([*bundled, *imported])
    tests = load_test_catalog(questions, content_dir)
    auth = AuthContext(store)
    tracker = PerformanceTracker(store)
    return TutorContext(
        settings=settings,
        store=store,
        auth=auth,
        questions=questions,
        tests=tests,
        tracker=tracker,
        selector=AdaptiveSelector(questions, tracker),
        practice=PracticeSessionMachine(store, tracker, auth),
        exams=ExamSessionMachine(store, tests, auth),
    )
