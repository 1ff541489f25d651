"""Full-length, multi-section timed exams."""
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from satact_tutor.auth import AuthContext
from satact_tutor.catalog import TestCatalog
from satact_tutor.db import KeyValueStore
from satact_tutor.errors import NoActiveSession, NotFound
from satact_tutor.models import AnswerRecord, FullTest, TestResult, TestSection, TestType
from satact_tutor.scoring import score_test

logger = logging.getLogger(__name__)


def results_key(user_id: str) -> str:
    return f"test-results-{user_id}"


class ExamPhase(str, Enum):
    CREATED = "created"
    SECTION_STARTED = "section_started"
    IN_PROGRESS = "in_progress"
    SECTION_COMPLETE = "section_complete"


@dataclass
class LiveExam:
    """An exam in progress: the immutable test plus its unsealed result."""

    test: FullTest
    result: TestResult
    phase: ExamPhase = ExamPhase.CREATED
    section_index: int = 0
    question_index: int = 0

    @property
    def section(self) -> TestSection:
        return self.test.sections[self.section_index]

    @property
    def is_final_section(self) -> bool:
        return self.section_index == len(self.test.sections) - 1

    @property
    def ready_to_finish(self) -> bool:
        return self.phase == ExamPhase.SECTION_COMPLETE and self.is_final_section

    def answer_for(self, question_id: str) -> Optional[AnswerRecord]:
        for record in self.result.answers:
            if record.question_id == question_id:
                return record
        return None

    def section_time_spent(self, section_index: int) -> int:
        questions = set(self.test.sections[section_index].questions)
        return sum(a.time_spent for a in self.result.answers if a.question_id in questions)

    def section_time_remaining(self, section_index: Optional[int] = None) -> int:
        """Seconds left on a section's advisory countdown, never below zero."""
        index = self.section_index if section_index is None else section_index
        allotted = self.test.sections[index].duration * 60
        return max(0, allotted - self.section_time_spent(index))


class ExamSessionMachine:
    """One live exam per user. Results are saved only by ``finish``."""

    def __init__(self, store: KeyValueStore, catalog: TestCatalog, auth: AuthContext):
        self.store = store
        self.catalog = catalog
        self.auth = auth
        self._live: dict[str, LiveExam] = {}

    def start(self, test_id: str) -> LiveExam:
        user_id = self.auth.require_user()
        test = self.catalog.by_id(test_id)
        result = TestResult(
            id=f"result-{uuid4().hex[:12]}",
            user_id=user_id,
            test_id=test.id,
            date=datetime.now().isoformat(),
        )
        previous = self._live.get(user_id)
        if previous is not None:
            logger.warning("Discarding unfinished exam %s (%s)", previous.result.id, previous.test.id)
        live = LiveExam(test=test, result=result)
        self._live[user_id] = live
        logger.info("Started exam %s for %s", test.id, user_id)
        return live

    def current(self) -> Optional[LiveExam]:
        user_id = self.auth.current_user_id
        return self._live.get(user_id) if user_id else None

    def _require_live(self) -> tuple[str, LiveExam]:
        user_id = self.auth.require_user()
        live = self._live.get(user_id)
        if live is None:
            raise NoActiveSession("No exam in progress")
        return user_id, live

    def answer(
        self,
        section_index: int,
        question_index: int,
        question_id: str,
        selected_option: Optional[int],
        is_correct: bool,
        time_spent: int,
    ) -> LiveExam:
        """Record (or replace) the answer to one question. ``None`` records a skip."""
        _, live = self._require_live()
        sections = live.test.sections
        if not 0 <= section_index < len(sections):
            raise NotFound(f"Test {live.test.id} has no section {section_index}")
        section = sections[section_index]
        if not 0 <= question_index < len(section.questions) or section.questions[question_index] != question_id:
            raise NotFound(f"Question {question_id} is not at position {question_index} of section {section_index}")

        record = AnswerRecord(
            question_id=question_id,
            user_answer=selected_option,
            is_correct=bool(is_correct),
            time_spent=int(time_spent),
        )
        answers = live.result.answers
        for i, existing in enumerate(answers):
            if existing.question_id == question_id:
                answers[i] = record
                break
        else:
            answers.append(record)

        live.section_index = section_index
        live.question_index = question_index
        if question_index == len(section.questions) - 1:
            live.phase = ExamPhase.SECTION_COMPLETE
        else:
            live.phase = ExamPhase.IN_PROGRESS
        return live

    def advance_section(self) -> LiveExam:
        """Move to the first question of the next section after the user confirms."""
        _, live = self._require_live()
        if live.is_final_section:
            raise NotFound(f"Test {live.test.id} has no section after {live.section_index}")
        live.section_index += 1
        live.question_index = 0
        live.phase = ExamPhase.SECTION_STARTED
        return live

    def finish(self, total_duration: int) -> TestResult:
        """Score every section, save the sealed result and clear the live exam.

        weak_topics is left empty; no topic-level analysis is done yet.
        """
        user_id, live = self._require_live()
        completed = replace(
            live.result,
            completed=True,
            score=score_test(live.test, live.result.answers),
            answers=list(live.result.answers),
            weak_topics=[],
            duration=int(total_duration),
        )
        results = self.store.get(results_key(user_id)) or []
        results.append(completed.to_dict())
        self.store.set(results_key(user_id), results)
        del self._live[user_id]
        logger.info("Finished exam %s: overall %d", live.test.id, completed.score.overall)
        return completed

    def results(self, user_id: Optional[str] = None) -> list[TestResult]:
        user_id = user_id or self.auth.require_user()
        return [TestResult.from_dict(d) for d in self.store.get(results_key(user_id)) or []]

    def get_result(self, result_id: str, user_id: Optional[str] = None) -> Optional[TestResult]:
        for result in self.results(user_id):
            if result.id == result_id:
                return result
        return None

    def results_for_test(self, test_id: str, user_id: Optional[str] = None) -> list[TestResult]:
        return [r for r in self.results(user_id) if r.test_id == test_id]

    def recent_results(self, limit: int = 5, user_id: Optional[str] = None) -> list[TestResult]:
        return sorted(self.results(user_id), key=lambda r: r.date, reverse=True)[:limit]

    def highest_score(self, test_type: TestType, user_id: Optional[str] = None) -> int:
        of_type = {t.id for t in self.catalog.by_type(test_type)}
        scores = [r.score.overall for r in self.results(user_id) if r.completed and r.test_id in of_type]
        return max(scores, default=0)
