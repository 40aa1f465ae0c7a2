from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mcqstudy.models import Question, StudyNote, Test, TestHistory  # noqa: E402


@pytest.fixture
def sample_questions():
    return [
        Question(id="q-0", question="What is the capital of France?",
                 options=["London", "Paris", "Berlin", "Madrid"], correct_answer=1,
                 explanation="Paris is the capital of France."),
        Question(id="q-1", question="What is 2 + 2?", options=["3", "4", "5"], correct_answer=1),
        Question(id="q-2", question="Which gas do plants absorb?",
                 options=["Oxygen", "Carbon dioxide"], correct_answer=1),
    ]


@pytest.fixture
def sample_test(sample_questions):
    return Test(id="test-1", name="General Knowledge", questions=sample_questions,
                created_at=datetime(2026, 10, 1, 9, 30))


def make_history(name="Biology", score=80, total=10, correct=8, days_ago=0,
                 now=datetime(2026, 10, 18, 12, 0), bookmarked=None, hid=None):
    from datetime import timedelta
    return TestHistory(
        id=hid or f"history-{name}-{days_ago}-{score}",
        name=name,
        score=score,
        total_questions=total,
        correct_answers=correct,
        time_spent=60_000,
        completed_at=now - timedelta(days=days_ago),
        bookmarked_questions=list(bookmarked or []),
        notes=[],
    )


@pytest.fixture
def history_factory():
    return make_history


@pytest.fixture
def sample_notes():
    when = datetime(2024, 1, 10, 8, 0)
    return [
        StudyNote(id="note-1", title="Photosynthesis", content="Plants absorb CO2",
                  test_name="Biology", question_text="Which gas do plants absorb?",
                  tags=["bio", "review"], is_bookmarked=True, created_at=when, updated_at=when),
        StudyNote(id="note-2", title="Capitals", content="Paris, Berlin, Madrid",
                  test_name="Geography", question_text="", tags=["geo"],
                  created_at=when, updated_at=when),
        StudyNote(id="note-3", title="Loose thought", content="Revise chapter 4",
                  tags=[], created_at=when, updated_at=when),
    ]
