"""Adaptive question selection."""
import logging
import random
from typing import Optional

from satact_tutor.catalog import QuestionRepository
from satact_tutor.models import Question, SubjectArea
from satact_tutor.performance import PerformanceTracker

logger = logging.getLogger(__name__)


class AdaptiveSelector:
    def __init__(self, repository: QuestionRepository, tracker: PerformanceTracker,
                 rng: Optional[random.Random] = None):
        self.repository = repository
        self.tracker = tracker
        self.rng = rng or random.Random()

    def select_questions(self, user_id: str, subject: SubjectArea, count: int = 10) -> list[Question]:
        """Pick up to ``count`` questions at the user's recommended tier.

        When the tier has fewer than ``count`` questions, the rest of the
        subject's questions are added to the pool before shuffling. An empty
        list means the subject has no content at all.
        """
        if count <= 0:
            return []
        difficulty = self.tracker.recommended_difficulty(user_id, subject)
        subject_questions = self.repository.by_subject(subject)
        pool = [q for q in subject_questions if q.difficulty == difficulty]
        if len(pool) < count:
            pool += [q for q in subject_questions if q.difficulty != difficulty]
        # random.shuffle is an in-place Fisher-Yates shuffle
        self.rng.shuffle(pool)
        selected = pool[:count]
        logger.debug("Selected %d %s questions for %s at %s", len(selected), subject.value, user_id, difficulty.value)
        return selected
