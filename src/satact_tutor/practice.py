"""Adaptive practice sessions: start, answer, finish, and history lookups."""
import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional
from uuid import uuid4

from satact_tutor.auth import AuthContext
from satact_tutor.db import KeyValueStore
from satact_tutor.errors import NoActiveSession, NoContentAvailable, NotFound
from satact_tutor.models import PracticeSession, Question, QuestionOutcome, SubjectArea
from satact_tutor.performance import PerformanceTracker, performance_key
from satact_tutor.scoring import practice_score, round_half_up

logger = logging.getLogger(__name__)


def sessions_key(user_id: str) -> str:
    return f"practice-sessions-{user_id}"


class PracticeSessionMachine:
    """One live practice session per user.

    Nothing is persisted until ``finish`` succeeds; abandoning a session is
    simply never finishing it.
    """

    def __init__(self, store: KeyValueStore, tracker: PerformanceTracker, auth: AuthContext):
        self.store = store
        self.tracker = tracker
        self.auth = auth
        self._live: dict[str, PracticeSession] = {}

    def start(self, subjects: Iterable[SubjectArea], questions: list[Question]) -> PracticeSession:
        """Begin a new session, replacing any unfinished one for this user.

        Callers should confirm with the user before replacing live work; see
        ``current``.
        """
        user_id = self.auth.require_user()
        if not questions:
            raise NoContentAvailable("No questions available for this practice session")
        subjects = list(subjects) or list(dict.fromkeys(q.subject for q in questions))
        session = PracticeSession(
            id=f"practice-{uuid4().hex[:12]}",
            user_id=user_id,
            date=datetime.now().isoformat(),
            subject_areas=subjects,
            questions=[QuestionOutcome(question_id=q.id, subject=q.subject) for q in questions],
            total_questions=len(questions),
        )
        previous = self._live.get(user_id)
        if previous is not None:
            logger.warning("Discarding unfinished practice session %s", previous.id)
        self._live[user_id] = session
        logger.info("Started practice session %s (%d questions)", session.id, session.total_questions)
        return session

    def current(self) -> Optional[PracticeSession]:
        user_id = self.auth.current_user_id
        return self._live.get(user_id) if user_id else None

    def _require_live(self) -> tuple[str, PracticeSession]:
        user_id = self.auth.require_user()
        session = self._live.get(user_id)
        if session is None:
            raise NoActiveSession()
        return user_id, session

    def answer(self, index: int, selected_option: Optional[int], time_spent: int, is_correct: bool) -> PracticeSession:
        _, session = self._require_live()
        if not 0 <= index < session.total_questions:
            raise NotFound(f"No question at index {index} (session has {session.total_questions})")
        session.questions[index] = replace(
            session.questions[index],
            user_answer=selected_option,
            is_correct=bool(is_correct),
            time_spent=int(time_spent),
        )
        session.score = practice_score(session.questions)
        return session

    def finish(self, total_duration: int) -> PracticeSession:
        """Seal the live session, save it to history and update performance.

        History and performance are written in one transaction. On
        PersistenceError the live session is kept so the caller can retry.
        """
        user_id, session = self._require_live()
        finished = replace(session, duration=int(total_duration), questions=list(session.questions))
        history = self.store.get(sessions_key(user_id)) or []
        history.append(finished.to_dict())
        outcomes = [(o.subject, o.is_correct) for o in finished.questions if o.answered]
        performances = self.tracker.apply_outcomes(user_id, outcomes)
        self.store.set_many({
            sessions_key(user_id): history,
            performance_key(user_id): [p.to_dict() for p in performances],
        })
        self.tracker.commit(user_id, performances)
        del self._live[user_id]
        logger.info("Finished practice session %s: score %d, %ds", finished.id, finished.score, finished.duration)
        return finished

    def history(self, user_id: Optional[str] = None) -> list[PracticeSession]:
        user_id = user_id or self.auth.require_user()
        return [PracticeSession.from_dict(d) for d in self.store.get(sessions_key(user_id)) or []]

    def get_session(self, session_id: str, user_id: Optional[str] = None) -> Optional[PracticeSession]:
        for session in self.history(user_id):
            if session.id == session_id:
                return session
        return None

    def recent_sessions(self, limit: int = 5, user_id: Optional[str] = None) -> list[PracticeSession]:
        return sorted(self.history(user_id), key=lambda s: s.date, reverse=True)[:limit]

    def sessions_by_subject(self, subject: SubjectArea, user_id: Optional[str] = None) -> list[PracticeSession]:
        return [s for s in self.history(user_id) if subject in s.subject_areas]

    def sessions_on(self, day: date, user_id: Optional[str] = None) -> list[PracticeSession]:
        prefix = day.isoformat()
        return [s for s in self.history(user_id) if s.date.startswith(prefix)]

    def average_score(self, user_id: Optional[str] = None) -> int:
        sessions = self.history(user_id)
        if not sessions:
            return 0
        return round_half_up(sum(s.score for s in sessions) / len(sessions))

    def total_practice_time(self, user_id: Optional[str] = None) -> int:
        """Seconds spent across all finished sessions."""
        return sum(s.duration for s in self.history(user_id))
