# tests/test_models.py
from satact_tutor.models import (
    AnswerRecord, Difficulty, FullTest, PracticeSession, Question, QuestionOutcome,
    SectionScore, SubjectArea, TestResult as Result, TestScore as Score, TestSection as Section,
    TestType as ExamType,
)


def _question(**overrides):
    data = dict(
        id="q1",
        test_type=ExamType.SAT,
        subject=SubjectArea.SAT_MATH_CALC,
        difficulty=Difficulty.MEDIUM,
        content="What is 2 + 2?",
        options=("3", "4", "5", "6"),
        correct_answer=1,
        explanation="2 + 2 = 4",
        topics=("Arithmetic",),
    )
    data.update(overrides)
    return Question(**data)


def test_subject_area_test_type_and_label():
    assert SubjectArea.SAT_MATH_NO_CALC.test_type == ExamType.SAT
    assert SubjectArea.SAT_MATH_NO_CALC.label == "Math No Calc"
    assert SubjectArea.ACT_SCIENCE.test_type == ExamType.ACT
    assert SubjectArea.ACT_SCIENCE.label == "Science"


def test_subject_area_enumeration_order():
    assert [s.value for s in SubjectArea] == [
        "SAT_Reading", "SAT_Writing", "SAT_Math_No_Calc", "SAT_Math_Calc",
        "ACT_English", "ACT_Math", "ACT_Reading", "ACT_Science",
    ]


def test_subjects_for_test_type():
    assert SubjectArea.for_test_type(ExamType.ACT) == [
        SubjectArea.ACT_ENGLISH, SubjectArea.ACT_MATH, SubjectArea.ACT_READING, SubjectArea.ACT_SCIENCE,
    ]


def test_question_is_correct():
    q = _question()
    assert q.is_correct(1) is True
    assert q.is_correct(0) is False
    assert q.is_correct(None) is False


def test_question_dict_round_trip():
    q = _question(image_url="https://example.com/graph.png")
    assert Question.from_dict(q.to_dict()) == q


def test_question_outcome_answered():
    assert not QuestionOutcome(question_id="q1", subject=SubjectArea.SAT_READING).answered
    assert QuestionOutcome(question_id="q1", subject=SubjectArea.SAT_READING, user_answer=0).answered


def test_practice_session_to_dict_uses_enum_values():
    session = PracticeSession(
        id="p1", user_id="u1", date="2024-03-01T10:00:00",
        subject_areas=[SubjectArea.ACT_MATH],
        questions=[QuestionOutcome(question_id="act-m-1", subject=SubjectArea.ACT_MATH, user_answer=2, is_correct=True)],
        total_questions=1, score=100, duration=40,
    )
    data = session.to_dict()
    assert data["subject_areas"] == ["ACT_Math"]
    assert data["questions"][0]["subject"] == "ACT_Math"
    assert PracticeSession.from_dict(data) == session


def test_full_test_section_for():
    test = FullTest(
        id="t1", test_type=ExamType.SAT, name="T1",
        sections=(
            Section(subject=SubjectArea.SAT_READING, duration=65, questions=("a", "b")),
            Section(subject=SubjectArea.SAT_WRITING, duration=35, questions=("c",)),
        ),
    )
    assert test.section_for("c") == 1
    assert test.section_for("zzz") is None


def test_full_test_total_duration_defaults_to_section_sum():
    test = FullTest.from_dict({
        "id": "t1", "test_type": "ACT", "name": "T1",
        "sections": [
            {"subject": "ACT_English", "duration": 45, "questions": []},
            {"subject": "ACT_Math", "duration": 60, "questions": []},
        ],
    })
    assert test.total_duration == 105


def test_test_result_from_minimal_dict():
    result = Result.from_dict({"id": "r1", "user_id": "u1", "test_id": "t1", "date": "2024-03-01"})
    assert result.completed is False
    assert result.score.overall == 0
    assert result.answers == []
    assert result.weak_topics == []


def test_test_result_round_trip_with_score():
    result = Result(
        id="r1", user_id="u1", test_id="t1", date="2024-03-01", completed=True,
        score=Score(overall=300, by_section={SubjectArea.SAT_READING: SectionScore(raw=1, scaled=300)}),
        answers=[AnswerRecord(question_id="a", user_answer=None, is_correct=False, time_spent=4)],
        duration=90,
    )
    data = result.to_dict()
    assert data["score"]["by_section"] == {"SAT_Reading": {"raw": 1, "scaled": 300}}
    assert Result.from_dict(data) == result
