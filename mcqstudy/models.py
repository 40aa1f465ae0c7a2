from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional, Tuple


def _parse_date(value) -> datetime:
    """Accept a datetime or an ISO-8601 string (with an optional trailing 'Z')."""
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now()
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    # everything is compared as naive local time
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _format_date(value: datetime) -> str:
    return value.isoformat()


@dataclass(frozen=True)
class AdditionalSection:
    """A labelled block of context that is not question/options/answer/explanation."""
    title: str
    content: str

    def to_dict(self) -> dict:
        return {"title": self.title, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> "AdditionalSection":
        return cls(title=data.get("title", ""), content=data.get("content", ""))


@dataclass(frozen=True)
class Question:
    """
    One multiple-choice question.
    correct_answer is a zero-based index into options and defaults to 0.
    Instances are never mutated; use with_updates() to get an edited copy.
    Lists passed in are stored as tuples.
    """
    id: str
    question: str
    options: Tuple[str, ...]
    correct_answer: int = 0
    explanation: Optional[str] = None
    additional_sections: Optional[Tuple[AdditionalSection, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, "options", tuple(self.options))
        if self.additional_sections is not None:
            object.__setattr__(self, "additional_sections", tuple(self.additional_sections))

    def with_updates(self, **updates) -> "Question":
        return replace(self, **updates)

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer]

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }
        if self.explanation:
            out["explanation"] = self.explanation
        if self.additional_sections:
            out["additionalSections"] = [s.to_dict() for s in self.additional_sections]
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        sections = data.get("additionalSections")
        return cls(
            id=str(data.get("id", "")),
            question=data.get("question", ""),
            options=list(data.get("options", [])),
            correct_answer=int(data.get("correctAnswer", 0) or 0),
            explanation=data.get("explanation") or None,
            additional_sections=[AdditionalSection.from_dict(s) for s in sections] if sections else None,
        )


@dataclass
class Test:
    __test__ = False
    id: str
    name: str
    questions: List[Question]
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "questions": [q.to_dict() for q in self.questions],
            "createdAt": _format_date(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Test":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            questions=[Question.from_dict(q) for q in data.get("questions", [])],
            created_at=_parse_date(data.get("createdAt")),
        )


@dataclass
class TestResult:
    """Per-question state while a test is being taken. time_spent is in milliseconds."""
    __test__ = False
    question_id: str
    selected_answer: Optional[int] = None
    is_correct: bool = False
    time_spent: int = 0
    is_bookmarked: bool = False
    note: str = ""


@dataclass
class TestHistory:
    __test__ = False
    id: str
    name: str
    score: int
    total_questions: int
    correct_answers: int
    time_spent: int
    completed_at: datetime
    bookmarked_questions: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "timeSpent": self.time_spent,
            "completedAt": _format_date(self.completed_at),
            "bookmarkedQuestions": list(self.bookmarked_questions),
            "notes": list(self.notes),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TestHistory":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            score=int(data.get("score", 0)),
            total_questions=int(data.get("totalQuestions", 0)),
            correct_answers=int(data.get("correctAnswers", 0)),
            time_spent=int(data.get("timeSpent", 0)),
            completed_at=_parse_date(data.get("completedAt")),
            bookmarked_questions=list(data.get("bookmarkedQuestions", [])),
            notes=list(data.get("notes", [])),
        )


@dataclass
class StudyNote:
    id: str
    title: str
    content: str
    test_name: str = ""
    question_text: str = ""
    tags: List[str] = field(default_factory=list)
    is_bookmarked: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "testName": self.test_name,
            "questionText": self.question_text,
            "tags": list(self.tags),
            "isBookmarked": self.is_bookmarked,
            "createdAt": _format_date(self.created_at),
            "updatedAt": _format_date(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StudyNote":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            test_name=data.get("testName") or "",
            question_text=data.get("questionText") or "",
            tags=list(data.get("tags", [])),
            is_bookmarked=bool(data.get("isBookmarked", False)),
            created_at=_parse_date(data.get("createdAt")),
            updated_at=_parse_date(data.get("updatedAt")),
        )
