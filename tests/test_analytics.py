from __future__ import annotations

from datetime import datetime

from mcqstudy import analytics
from mcqstudy.models import Test, TestResult
from mcqstudy.parser import parse_json_questions

NOW = datetime(2026, 10, 18, 12, 0)


def test_complete_test_builds_history_and_notes(sample_test):
    results = [
        TestResult("q-0", selected_answer=1, is_correct=True, time_spent=2000, is_bookmarked=True,
                   note="Remember Paris"),
        TestResult("q-1", selected_answer=0, is_correct=False, time_spent=3000, note="   "),
        TestResult("q-2", selected_answer=1, is_correct=True, time_spent=1000, note="CO2"),
    ]
    entry, notes = analytics.complete_test(sample_test, results, now=NOW)
    assert entry.name == "General Knowledge"
    assert (entry.score, entry.correct_answers, entry.total_questions) == (67, 2, 3)
    assert entry.time_spent == 6000
    assert entry.completed_at == NOW
    assert entry.bookmarked_questions == ["q-0"]
    assert entry.notes == ["Remember Paris", "CO2"]

    assert [n.content for n in notes] == ["Remember Paris", "CO2"]
    assert notes[0].title == "Note from General Knowledge"
    assert notes[0].question_text == "What is the capital of France?"
    assert notes[0].tags == ["bookmarked", "review"]
    assert notes[0].is_bookmarked
    assert notes[1].tags == []


def test_percent_rounds_half_up():
    assert analytics.percent(1, 8) == 13
    assert analytics.percent(0, 0) == 0
    assert analytics.round_half_up(2.5) == 3


def test_dashboard_stats(history_factory, sample_notes):
    history = [history_factory(name=n, score=s) for n, s in [("A", 60), ("B", 70), ("C", 80), ("D", 95)]]
    stats = analytics.dashboard_stats(history, sample_notes)
    assert stats.average_score == 76
    assert [h.name for h in stats.recent_tests] == ["D", "C", "B"]
    assert stats.total_notes == 3
    assert stats.bookmarked_notes == 1


def test_dashboard_stats_empty():
    stats = analytics.dashboard_stats([], [])
    assert stats.average_score == 0
    assert stats.recent_tests == []


def test_filter_timeframe(history_factory):
    history = [history_factory(days_ago=d) for d in (0, 7, 8, 30, 31)]
    assert len(analytics.filter_timeframe(history, "week", NOW)) == 2
    assert len(analytics.filter_timeframe(history, "month", NOW)) == 4
    assert len(analytics.filter_timeframe(history, "all", NOW)) == 5


def test_score_trend(history_factory):
    assert analytics.score_trend([history_factory(score=50)]) == 0
    scores = [10, 40, 50, 60, 70, 90]
    history = [history_factory(score=s) for s in scores]
    # last five: 40 .. 90
    assert analytics.score_trend(history) == 50


def test_weak_areas(history_factory):
    history = [
        history_factory(name="Physics", total=10, correct=4),
        history_factory(name="Biology", total=10, correct=9),
        history_factory(name="Physics", total=10, correct=6),
        history_factory(name="Chemistry", total=4, correct=3),
        history_factory(name="History", total=5, correct=5),
    ]
    areas = analytics.weak_areas(history)
    assert [(a.topic, a.accuracy, a.attempts) for a in areas] == [
        ("Physics", 50, 2), ("Chemistry", 75, 1), ("Biology", 90, 1),
    ]


def test_score_distribution(history_factory):
    history = [history_factory(score=s) for s in (100, 90, 89, 75, 60, 59, 0)]
    assert analytics.score_distribution(history) == {
        "90-100%": 2, "80-89%": 1, "70-79%": 1, "60-69%": 1, "Below 60%": 2,
    }


def test_review_stats(history_factory):
    history = [
        history_factory(name="A", score=50, days_ago=40, bookmarked=["q-1"]),
        history_factory(name="B", score=70, days_ago=10),
        history_factory(name="C", score=90, days_ago=1, bookmarked=["q-2", "q-3"]),
    ]
    stats = analytics.review_stats(history, "month", now=NOW)
    assert stats.total_tests == 3
    assert stats.average_score == 70
    assert stats.total_bookmarked == 3
    assert stats.total_study_time == 180_000
    assert stats.trend == 20
    assert stats.weekly_average == 90
    assert stats.monthly_average == 80
    assert [h.name for h in stats.filtered] == ["B", "C"]


def test_bookmarked_questions(history_factory, sample_test):
    history = [
        history_factory(name="General Knowledge", bookmarked=["q-2", "missing"]),
        history_factory(name="General Knowledge", bookmarked=["q-0", "q-2"]),
        history_factory(name="Deleted test", bookmarked=["q-1"]),
    ]
    questions = analytics.bookmarked_questions(history, [sample_test])
    assert [q.id for q in questions] == ["q-2", "q-0"]


def test_bookmarks_resolve_within_their_own_test(history_factory):
    geo = Test(id="t-geo", name="Geo", questions=parse_json_questions(
        [{"question": "Capital of France?", "options": ["Paris", "Rome"]}]))
    math = Test(id="t-math", name="Math", questions=parse_json_questions(
        [{"question": "2+2?", "options": ["4", "5"]}]))
    assert geo.questions[0].id == math.questions[0].id == "q-0"

    history = [history_factory(name="Math", bookmarked=["q-0"])]
    resolved = analytics.bookmarked_questions(history, [geo, math])
    assert [q.question for q in resolved] == ["2+2?"]

    history.append(history_factory(name="Geo", bookmarked=["q-0"]))
    resolved = analytics.bookmarked_questions(history, [geo, math])
    assert [q.question for q in resolved] == ["2+2?", "Capital of France?"]


def test_notes_by_test(sample_notes):
    grouped = analytics.notes_by_test(sample_notes)
    assert list(grouped) == ["Biology", "Geography", "General"]
