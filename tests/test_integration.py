# tests/test_integration.py
"""End-to-end test of the core workflow."""
import random

from satact_tutor.config import Settings
from satact_tutor.context import build_context
from satact_tutor.dashboard import calc_readiness_score, get_study_stats
from satact_tutor.models import Difficulty, SubjectArea, TestType as ExamType


def test_adaptive_practice_then_exam(tmp_db):
    ctx = build_context(Settings(db_path=tmp_db))
    ctx.auth.login("student")
    ctx.selector.rng = random.Random(11)
    assert ctx.tracker.recommended("student") == list(SubjectArea)

    # Five perfect ACT Math sessions promote the subject to hard
    for _ in range(5):
        questions = ctx.selector.select_questions("student", SubjectArea.ACT_MATH, 1)
        ctx.practice.start([SubjectArea.ACT_MATH], questions)
        ctx.practice.answer(0, questions[0].correct_answer, 20, True)
        ctx.practice.finish(20)
    assert ctx.tracker.recommended_difficulty("student", SubjectArea.ACT_MATH) == Difficulty.HARD
    hard = ctx.selector.select_questions("student", SubjectArea.ACT_MATH, 1)
    assert hard[0].difficulty == Difficulty.HARD

    # One bad ACT Science session makes it the weakest subject
    questions = ctx.selector.select_questions("student", SubjectArea.ACT_SCIENCE, 2)
    ctx.practice.start([SubjectArea.ACT_SCIENCE], questions)
    ctx.practice.answer(0, (questions[0].correct_answer + 1) % 4, 30, False)
    ctx.practice.answer(1, (questions[1].correct_answer + 1) % 4, 30, False)
    ctx.practice.finish(60)
    assert ctx.tracker.recommended("student") == [SubjectArea.ACT_SCIENCE, SubjectArea.ACT_MATH]
    assert ctx.tracker.weakest_subjects("student", ExamType.ACT)[0] == SubjectArea.ACT_SCIENCE

    # Full ACT exam answering every question correctly
    live = ctx.exams.start("act-practice-1")
    for si, section in enumerate(live.test.sections):
        if si > 0:
            ctx.exams.advance_section()
        for qi, qid in enumerate(section.questions):
            question = ctx.questions.by_id(qid)
            ctx.exams.answer(si, qi, qid, question.correct_answer, True, 40)
    assert ctx.exams.current().ready_to_finish
    result = ctx.exams.finish(480)
    assert result.score.overall == 400

    # Everything is still there after a restart
    ctx = build_context(Settings(db_path=tmp_db))
    assert ctx.auth.current_user_id == "student"
    assert len(ctx.practice.history()) == 6
    assert ctx.exams.highest_score(ExamType.ACT) == 400
    assert ctx.tracker.subject_performance("student", SubjectArea.ACT_MATH).questions_answered == 5
    assert calc_readiness_score(ctx.tracker, "student", ExamType.ACT) == 50.0
    stats = get_study_stats(ctx.practice, ctx.exams, "student")
    assert stats["practice_sessions"] == 6
    assert stats["tests_completed"] == 1
    assert stats["study_minutes"] == 5 + 1 + 8
