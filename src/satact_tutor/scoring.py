"""Pure scoring and difficulty-tier rules."""
import math
from dataclasses import replace
from typing import Iterable

from satact_tutor.models import (
    AnswerRecord, Difficulty, FullTest, QuestionOutcome, SectionScore, SubjectArea,
    SubjectPerformance, TestScore, TestType,
)

MIN_ANSWERS_FOR_LEVEL = 5
HARD_THRESHOLD = 0.8
EASY_THRESHOLD = 0.4
RECOMMENDED_LIMIT = 3
SCALED_BASE = 200
SCALED_RANGE = 200


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


def level_for(correct_rate: float, questions_answered: int) -> Difficulty:
    """Difficulty tier for a subject.

    Args:
        correct_rate: Fraction of questions answered correctly (0.0-1.0)
        questions_answered: Total questions answered in the subject

    Returns:
        hard above 80%, easy below 40%, otherwise medium. Always medium
        until MIN_ANSWERS_FOR_LEVEL answers have been recorded.
    """
    if questions_answered < MIN_ANSWERS_FOR_LEVEL:
        return Difficulty.MEDIUM
    if correct_rate > HARD_THRESHOLD:
        return Difficulty.HARD
    if correct_rate < EASY_THRESHOLD:
        return Difficulty.EASY
    return Difficulty.MEDIUM


def update_performance(perf: SubjectPerformance, is_correct: bool, now: str) -> SubjectPerformance:
    """Fold one answer into a subject's running correct rate."""
    answered = perf.questions_answered + 1
    # correct_rate * questions_answered is always a whole number of correct answers
    correct_count = round(perf.correct_rate * perf.questions_answered) + (1 if is_correct else 0)
    rate = correct_count / answered
    return replace(
        perf,
        correct_rate=rate,
        questions_answered=answered,
        last_improvement=now if is_correct else perf.last_improvement,
        level=level_for(rate, answered),
    )


def recommended_subjects(performances: list[SubjectPerformance], limit: int = RECOMMENDED_LIMIT) -> list[SubjectArea]:
    """Weakest subjects first; every subject when nothing has been answered yet."""
    with_data = [p for p in performances if p.questions_answered > 0]
    if not with_data:
        return [p.subject for p in performances]
    # sorted() is stable, so ties keep the input (enumeration) order
    return [p.subject for p in sorted(with_data, key=lambda p: p.correct_rate)[:limit]]


def weakest_subjects(
    performances: list[SubjectPerformance], test_type: TestType, limit: int = RECOMMENDED_LIMIT
) -> list[SubjectArea]:
    of_type = [p for p in performances if p.subject.test_type == test_type]
    with_data = [p for p in of_type if p.questions_answered > 0]
    if not with_data:
        return [p.subject for p in of_type][:limit]
    return [p.subject for p in sorted(with_data, key=lambda p: p.correct_rate)[:limit]]


def practice_score(outcomes: list[QuestionOutcome]) -> int:
    """Live 0-100 score. Unanswered questions count as incorrect."""
    if not outcomes:
        return 0
    correct = sum(1 for o in outcomes if o.is_correct)
    return round_half_up(correct / len(outcomes) * 100)


def scaled_score(correct: int, total: int) -> int:
    """Linear 200-400 section score."""
    if total == 0:
        return SCALED_BASE
    return round_half_up(correct / total * SCALED_RANGE + SCALED_BASE)


def score_test(test: FullTest, answers: Iterable[AnswerRecord]) -> TestScore:
    answers = list(answers)
    by_section: dict[SubjectArea, SectionScore] = {}
    scaled_scores = []
    for section in test.sections:
        in_section = set(section.questions)
        raw = sum(1 for a in answers if a.question_id in in_section and a.is_correct)
        scaled = scaled_score(raw, len(section.questions))
        by_section[section.subject] = SectionScore(raw=raw, scaled=scaled)
        scaled_scores.append(scaled)
    overall = round_half_up(sum(scaled_scores) / len(scaled_scores)) if scaled_scores else 0
    return TestScore(overall=overall, by_section=by_section)
