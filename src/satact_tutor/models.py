"""Data classes for the SAT/ACT tutor domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TestType(str, Enum):
    SAT = "SAT"
    ACT = "ACT"


class SubjectArea(str, Enum):
    SAT_READING = "SAT_Reading"
    SAT_WRITING = "SAT_Writing"
    SAT_MATH_NO_CALC = "SAT_Math_No_Calc"
    SAT_MATH_CALC = "SAT_Math_Calc"
    ACT_ENGLISH = "ACT_English"
    ACT_MATH = "ACT_Math"
    ACT_READING = "ACT_Reading"
    ACT_SCIENCE = "ACT_Science"

    @property
    def test_type(self) -> TestType:
        return TestType(self.value.split("_", 1)[0])

    @property
    def label(self) -> str:
        return self.value.split("_", 1)[1].replace("_", " ")

    @classmethod
    def for_test_type(cls, test_type: TestType) -> list["SubjectArea"]:
        return [s for s in cls if s.test_type == test_type]


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class Question:
    id: str
    test_type: TestType
    subject: SubjectArea
    difficulty: Difficulty
    content: str
    options: tuple[str, ...]
    correct_answer: int
    explanation: str = ""
    topics: tuple[str, ...] = ()
    image_url: Optional[str] = None

    def is_correct(self, option: Optional[int]) -> bool:
        return option is not None and option == self.correct_answer

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "test_type": self.test_type.value,
            "subject": self.subject.value,
            "difficulty": self.difficulty.value,
            "content": self.content,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "topics": list(self.topics),
        }
        if self.image_url:
            data["image_url"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        return cls(
            id=str(data["id"]),
            test_type=TestType(data["test_type"]),
            subject=SubjectArea(data["subject"]),
            difficulty=Difficulty(data["difficulty"]),
            content=data["content"],
            options=tuple(data["options"]),
            correct_answer=int(data["correct_answer"]),
            explanation=data.get("explanation", ""),
            topics=tuple(data.get("topics", ())),
            image_url=data.get("image_url"),
        )


@dataclass(frozen=True)
class SubjectPerformance:
    subject: SubjectArea
    correct_rate: float = 0.0
    questions_answered: int = 0
    last_improvement: Optional[str] = None
    level: Difficulty = Difficulty.MEDIUM

    def to_dict(self) -> dict:
        return {
            "subject": self.subject.value,
            "correct_rate": self.correct_rate,
            "questions_answered": self.questions_answered,
            "last_improvement": self.last_improvement,
            "level": self.level.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SubjectPerformance":
        return cls(
            subject=SubjectArea(data["subject"]),
            correct_rate=float(data.get("correct_rate", 0.0)),
            questions_answered=int(data.get("questions_answered", 0)),
            last_improvement=data.get("last_improvement"),
            level=Difficulty(data.get("level", Difficulty.MEDIUM.value)),
        )


@dataclass
class QuestionOutcome:
    question_id: str
    subject: SubjectArea
    user_answer: Optional[int] = None
    is_correct: bool = False
    time_spent: int = 0

    @property
    def answered(self) -> bool:
        return self.user_answer is not None

    def to_dict(self) -> dict:
        return {
            "question_id": self.question_id,
            "subject": self.subject.value,
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "time_spent": self.time_spent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuestionOutcome":
        return cls(
            question_id=data["question_id"],
            subject=SubjectArea(data["subject"]),
            user_answer=data.get("user_answer"),
            is_correct=bool(data.get("is_correct", False)),
            time_spent=int(data.get("time_spent", 0)),
        )


@dataclass
class PracticeSession:
    id: str
    user_id: str
    date: str
    subject_areas: list[SubjectArea]
    questions: list[QuestionOutcome]
    total_questions: int
    score: int = 0
    duration: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date,
            "duration": self.duration,
            "subject_areas": [s.value for s in self.subject_areas],
            "questions": [q.to_dict() for q in self.questions],
            "score": self.score,
            "total_questions": self.total_questions,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PracticeSession":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            date=data["date"],
            subject_areas=[SubjectArea(s) for s in data["subject_areas"]],
            questions=[QuestionOutcome.from_dict(q) for q in data["questions"]],
            total_questions=int(data["total_questions"]),
            score=int(data.get("score", 0)),
            duration=int(data.get("duration", 0)),
        )


@dataclass(frozen=True)
class TestSection:
    subject: SubjectArea
    duration: int  # minutes
    questions: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "subject": self.subject.value,
            "duration": self.duration,
            "questions": list(self.questions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TestSection":
        return cls(
            subject=SubjectArea(data["subject"]),
            duration=int(data["duration"]),
            questions=tuple(data["questions"]),
        )


@dataclass(frozen=True)
class FullTest:
    id: str
    test_type: TestType
    name: str
    sections: tuple[TestSection, ...]
    total_duration: int = 0  # minutes

    def section_for(self, question_id: str) -> Optional[int]:
        for index, section in enumerate(self.sections):
            if question_id in section.questions:
                return index
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "test_type": self.test_type.value,
            "name": self.name,
            "sections": [s.to_dict() for s in self.sections],
            "total_duration": self.total_duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FullTest":
        sections = tuple(TestSection.from_dict(s) for s in data["sections"])
        return cls(
            id=str(data["id"]),
            test_type=TestType(data["test_type"]),
            name=data["name"],
            sections=sections,
            total_duration=int(data.get("total_duration", sum(s.duration for s in sections))),
        )


@dataclass(frozen=True)
class SectionScore:
    raw: int
    scaled: int


@dataclass
class TestScore:
    overall: int = 0
    by_section: dict[SubjectArea, SectionScore] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "by_section": {
                subject.value: {"raw": s.raw, "scaled": s.scaled}
                for subject, s in self.by_section.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TestScore":
        return cls(
            overall=int(data.get("overall", 0)),
            by_section={
                SubjectArea(subject): SectionScore(raw=int(s["raw"]), scaled=int(s["scaled"]))
                for subject, s in data.get("by_section", {}).items()
            },
        )


@dataclass
class AnswerRecord:
    question_id: str
    user_answer: Optional[int]
    is_correct: bool
    time_spent: int

    def to_dict(self) -> dict:
        return {
            "question_id": self.question_id,
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "time_spent": self.time_spent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnswerRecord":
        return cls(
            question_id=data["question_id"],
            user_answer=data.get("user_answer"),
            is_correct=bool(data["is_correct"]),
            time_spent=int(data.get("time_spent", 0)),
        )


@dataclass
class TestResult:
    id: str
    user_id: str
    test_id: str
    date: str
    completed: bool = False
    score: TestScore = field(default_factory=TestScore)
    answers: list[AnswerRecord] = field(default_factory=list)
    weak_topics: list[str] = field(default_factory=list)
    duration: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "test_id": self.test_id,
            "date": self.date,
            "completed": self.completed,
            "score": self.score.to_dict(),
            "answers": [a.to_dict() for a in self.answers],
            "weak_topics": list(self.weak_topics),
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TestResult":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            test_id=data["test_id"],
            date=data["date"],
            completed=bool(data.get("completed", False)),
            score=TestScore.from_dict(data.get("score", {})),
            answers=[AnswerRecord.from_dict(a) for a in data.get("answers", [])],
            weak_topics=list(data.get("weak_topics", [])),
            duration=int(data.get("duration", 0)),
        )
