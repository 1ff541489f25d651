"""Per-subject performance tracking and weak-area recommendations."""
import logging
from datetime import datetime
from typing import Iterable, Optional

from satact_tutor.db import KeyValueStore
from satact_tutor.models import Difficulty, SubjectArea, SubjectPerformance, TestType
from satact_tutor.scoring import (
    RECOMMENDED_LIMIT, recommended_subjects, update_performance, weakest_subjects,
)

logger = logging.getLogger(__name__)


def performance_key(user_id: str) -> str:
    return f"performance-{user_id}"


def default_performances() -> list[SubjectPerformance]:
    return [SubjectPerformance(subject=subject) for subject in SubjectArea]


class PerformanceTracker:
    """Owns every user's SubjectPerformance records.

    The in-memory copy only changes after the store has accepted the write,
    so a PersistenceError leaves the last saved snapshot in place.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._performances: dict[str, list[SubjectPerformance]] = {}

    def initialize(self, user_id: str) -> list[SubjectPerformance]:
        if user_id in self._performances:
            return list(self._performances[user_id])
        data = self.store.get(performance_key(user_id))
        if data is None:
            performances = default_performances()
            self.store.set(performance_key(user_id), [p.to_dict() for p in performances])
            logger.info("Created performance records for %s", user_id)
        else:
            performances = self._merge_missing([SubjectPerformance.from_dict(d) for d in data])
        self._performances[user_id] = performances
        return list(performances)

    def performances(self, user_id: str) -> list[SubjectPerformance]:
        return self.initialize(user_id)

    def subject_performance(self, user_id: str, subject: SubjectArea) -> Optional[SubjectPerformance]:
        for perf in self.initialize(user_id):
            if perf.subject == subject:
                return perf
        return None

    def apply_outcomes(
        self, user_id: str, outcomes: Iterable[tuple[SubjectArea, bool]]
    ) -> list[SubjectPerformance]:
        """Return the records that would result from the outcomes, without saving them."""
        by_subject = {p.subject: p for p in self.initialize(user_id)}
        now = datetime.now().isoformat()
        for subject, is_correct in outcomes:
            before = by_subject.get(subject, SubjectPerformance(subject=subject))
            after = update_performance(before, is_correct, now)
            if after.level != before.level:
                logger.info("%s %s level %s -> %s", user_id, subject.value, before.level.value, after.level.value)
            by_subject[subject] = after
        return [by_subject[s] for s in SubjectArea if s in by_subject]

    def commit(self, user_id: str, performances: list[SubjectPerformance]) -> None:
        """Adopt records that the caller has already written to the store."""
        self._performances[user_id] = list(performances)

    def record_outcomes(
        self, user_id: str, outcomes: Iterable[tuple[SubjectArea, bool]]
    ) -> list[SubjectPerformance]:
        updated = self.apply_outcomes(user_id, outcomes)
        self.store.set(performance_key(user_id), [p.to_dict() for p in updated])
        self.commit(user_id, updated)
        return list(updated)

    def record_outcome(self, user_id: str, subject: SubjectArea, is_correct: bool) -> list[SubjectPerformance]:
        return self.record_outcomes(user_id, [(subject, is_correct)])

    def recommended_difficulty(self, user_id: str, subject: SubjectArea) -> Difficulty:
        perf = self.subject_performance(user_id, subject)
        return perf.level if perf else Difficulty.MEDIUM

    def weakest_subjects(self, user_id: str, test_type: TestType, limit: int = RECOMMENDED_LIMIT) -> list[SubjectArea]:
        return weakest_subjects(self.initialize(user_id), test_type, limit)

    def recommended(self, user_id: str) -> list[SubjectArea]:
        return recommended_subjects(self.initialize(user_id))

    @staticmethod
    def _merge_missing(performances: list[SubjectPerformance]) -> list[SubjectPerformance]:
        by_subject = {p.subject: p for p in performances}
        return [by_subject.get(s, SubjectPerformance(subject=s)) for s in SubjectArea]
