import math
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .models import Question, StudyNote, Test, TestHistory, TestResult

TIMEFRAME_DAYS = {"week": 7, "month": 30}

SCORE_BUCKETS = [
    ("90-100%", 90, 101),
    ("80-89%", 80, 90),
    ("70-79%", 70, 80),
    ("60-69%", 60, 70),
    ("Below 60%", -1, 60),
]


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def percent(part: float, whole: float) -> int:
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def _days_ago(when: datetime, now: datetime) -> int:
    return math.floor((now - when).total_seconds() / 86400)


def complete_test(test: Test, results: List[TestResult],
                  now: Optional[datetime] = None) -> Tuple[TestHistory, List[StudyNote]]:
    """Turn a finished attempt into a history entry plus a study note per non-blank note."""
    now = now or datetime.now()
    stamp = int(time.time() * 1000)
    correct = sum(1 for r in results if r.is_correct)
    noted = [r for r in results if r.note.strip()]

    entry = TestHistory(
        id=f"history-{stamp}",
        name=test.name,
        score=percent(correct, len(results)),
        total_questions=len(results),
        correct_answers=correct,
        time_spent=sum(r.time_spent for r in results),
        completed_at=now,
        bookmarked_questions=[r.question_id for r in results if r.is_bookmarked],
        notes=[r.note for r in noted],
    )

    by_id = {q.id: q for q in test.questions}
    notes = []
    for r in noted:
        q = by_id.get(r.question_id)
        notes.append(StudyNote(
            id=f"note-{stamp}-{r.question_id}",
            title=f"Note from {test.name}",
            content=r.note,
            test_name=test.name,
            question_text=q.question if q else "Unknown question",
            tags=["bookmarked", "review"] if r.is_bookmarked else [],
            is_bookmarked=r.is_bookmarked,
            created_at=now,
            updated_at=now,
        ))
    return entry, notes


def average_score(history: List[TestHistory]) -> int:
    if not history:
        return 0
    return round_half_up(sum(h.score for h in history) / len(history))


@dataclass
class DashboardStats:
    total_tests: int
    average_score: int
    total_notes: int
    bookmarked_notes: int
    recent_tests: List[TestHistory] = field(default_factory=list)


def dashboard_stats(history: List[TestHistory], notes: List[StudyNote]) -> DashboardStats:
    return DashboardStats(
        total_tests=len(history),
        average_score=average_score(history),
        total_notes=len(notes),
        bookmarked_notes=sum(1 for n in notes if n.is_bookmarked),
        recent_tests=list(reversed(history[-3:])),
    )


def filter_timeframe(history: List[TestHistory], timeframe: str,
                     now: Optional[datetime] = None) -> List[TestHistory]:
    """timeframe is "week", "month" or "all"."""
    limit = TIMEFRAME_DAYS.get(timeframe)
    if limit is None:
        return list(history)
    now = now or datetime.now()
    return [h for h in history if _days_ago(h.completed_at, now) <= limit]


def score_trend(history: List[TestHistory]) -> int:
    recent = [h.score for h in history[-5:]]
    if len(recent) < 2:
        return 0
    return recent[-1] - recent[0]


@dataclass
class WeakArea:
    topic: str
    accuracy: int
    attempts: int


def weak_areas(history: List[TestHistory], limit: int = 3) -> List[WeakArea]:
    # tests are grouped by name
    totals: Dict[str, List[int]] = OrderedDict()
    for h in history:
        t = totals.setdefault(h.name, [0, 0, 0])
        t[0] += h.total_questions
        t[1] += h.correct_answers
        t[2] += 1
    areas = [WeakArea(topic, percent(correct, total), count)
             for topic, (total, correct, count) in totals.items()]
    areas.sort(key=lambda a: a.accuracy)
    return areas[:limit]


def score_distribution(history: List[TestHistory]) -> "OrderedDict[str, int]":
    out = OrderedDict()
    for label, low, high in SCORE_BUCKETS:
        out[label] = sum(1 for h in history if low <= h.score < high)
    return out


@dataclass
class ReviewStats:
    total_tests: int
    average_score: int
    total_questions: int
    total_correct: int
    total_bookmarked: int
    total_study_time: int
    trend: int
    weekly_average: int
    monthly_average: int
    weak_areas: List[WeakArea]
    distribution: "OrderedDict[str, int]"
    filtered: List[TestHistory]


def review_stats(history: List[TestHistory], timeframe: str = "week",
                 now: Optional[datetime] = None) -> ReviewStats:
    now = now or datetime.now()
    filtered = filter_timeframe(history, timeframe, now)
    return ReviewStats(
        total_tests=len(history),
        average_score=average_score(history),
        total_questions=sum(h.total_questions for h in history),
        total_correct=sum(h.correct_answers for h in history),
        total_bookmarked=sum(len(h.bookmarked_questions) for h in history),
        total_study_time=sum(h.time_spent for h in history),
        trend=score_trend(filtered),
        weekly_average=average_score(filter_timeframe(history, "week", now)),
        monthly_average=average_score(filter_timeframe(history, "month", now)),
        weak_areas=weak_areas(history),
        distribution=score_distribution(history),
        filtered=filtered,
    )


def bookmarked_questions(history: List[TestHistory], tests: List[Test]) -> List[Question]:
    """
    Questions bookmarked in any attempt that still exist in the saved test of
    the same name, without duplicates, in bookmark order.
    Question ids are only unique within one test.
    """
    by_test: Dict[str, Dict[str, Question]] = {}
    for t in tests:
        questions = by_test.setdefault(t.name, {})
        for q in t.questions:
            questions.setdefault(q.id, q)
    seen = set()
    out = []
    for h in history:
        questions = by_test.get(h.name, {})
        for qid in h.bookmarked_questions:
            if qid in questions and (h.name, qid) not in seen:
                seen.add((h.name, qid))
                out.append(questions[qid])
    return out


def notes_by_test(notes: List[StudyNote]) -> "OrderedDict[str, List[StudyNote]]":
    grouped = OrderedDict()
    for n in notes:
        grouped.setdefault(n.test_name or "General", []).append(n)
    return grouped
