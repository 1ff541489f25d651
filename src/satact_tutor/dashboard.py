"""Readiness dashboard scoring and statistics."""
import math

from satact_tutor.exam import ExamSessionMachine
from satact_tutor.models import TestType
from satact_tutor.performance import PerformanceTracker
from satact_tutor.practice import PracticeSessionMachine


def get_readiness_label(score: float) -> str:
    if score >= 80:
        return "READY"
    elif score >= 65:
        return "LIKELY"
    elif score >= 50:
        return "NEEDS WORK"
    return "NOT READY"


def get_readiness_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def calc_readiness_score(tracker: PerformanceTracker, user_id: str, test_type: TestType) -> float:
    """Mean correct rate (as a percentage) over the test type's practiced subjects."""
    rates = [
        p.correct_rate for p in tracker.performances(user_id)
        if p.subject.test_type == test_type and p.questions_answered > 0
    ]
    if not rates:
        return 0.0
    return round(sum(rates) / len(rates) * 100, 1)


def get_subject_scores(tracker: PerformanceTracker, user_id: str) -> list[dict]:
    results = []
    for p in tracker.performances(user_id):
        score = p.correct_rate * 100
        results.append({
            "subject": p.subject,
            "name": f"{p.subject.test_type.value} {p.subject.label}",
            "answered": p.questions_answered,
            "score": round(score, 1),
            "level": p.level.value,
            "label": get_readiness_label(score) if p.questions_answered else "NO DATA",
        })
    return results


def get_study_stats(practice: PracticeSessionMachine, exams: ExamSessionMachine, user_id: str) -> dict:
    sessions = practice.history(user_id)
    results = [r for r in exams.results(user_id) if r.completed]
    # Study time is credited in whole minutes per finished session or test
    minutes = sum(math.ceil(s.duration / 60) for s in sessions)
    minutes += sum(math.ceil(r.duration / 60) for r in results)
    return {
        "practice_sessions": len(sessions),
        "tests_completed": len(results),
        "avg_practice_score": practice.average_score(user_id),
        "study_minutes": minutes,
        "highest_sat": exams.highest_score(TestType.SAT, user_id),
        "highest_act": exams.highest_score(TestType.ACT, user_id),
    }
