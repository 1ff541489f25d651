import logging
import random

import pytest

from satact_tutor.auth import AuthContext
from satact_tutor.catalog import QuestionRepository, TestCatalog, load_bundled_questions, load_test_catalog
from satact_tutor.config import Settings
from satact_tutor.context import build_context
from satact_tutor.db import KeyValueStore, init_db
from satact_tutor.logging_config import PACKAGE_LOGGER
from satact_tutor.models import FullTest, TestSection, TestType, SubjectArea


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def store(tmp_db):
    init_db(tmp_db)
    return KeyValueStore(tmp_db)


@pytest.fixture
def auth(store):
    """An AuthContext with 'student' logged in."""
    context = AuthContext(store)
    context.login("student")
    return context


@pytest.fixture
def repository():
    return QuestionRepository(load_bundled_questions())


@pytest.fixture
def catalog(repository):
    return load_test_catalog(repository)


@pytest.fixture
def short_catalog():
    """One SAT test with two sections of two bundled questions each."""
    test = FullTest(
        id="sat-short",
        test_type=TestType.SAT,
        name="SAT Short",
        sections=(
            TestSection(subject=SubjectArea.SAT_READING, duration=2, questions=("sat-r-1", "sat-r-2")),
            TestSection(subject=SubjectArea.SAT_WRITING, duration=2, questions=("sat-w-1", "sat-w-2")),
        ),
        total_duration=4,
    )
    return TestCatalog([test])


@pytest.fixture
def ctx(tmp_db):
    """A full application context with 'student' logged in and a seeded rng."""
    context = build_context(Settings(db_path=tmp_db))
    context.auth.login("student")
    context.selector.rng = random.Random(7)
    return context


@pytest.fixture
def package_logger():
    """The package logger, with its handlers and level restored afterwards."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
