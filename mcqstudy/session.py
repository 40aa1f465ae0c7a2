import random
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from .analytics import percent, round_half_up
from .models import Question, Test, TestResult


def _now_ms() -> int:
    return int(time.time() * 1000)


def shuffle_questions(questions: List[Question], rng: Optional[random.Random] = None) -> List[Question]:
    rng = rng or random.Random()
    out = list(questions)
    rng.shuffle(out)
    return out


def shuffle_options(question: Question, rng: Optional[random.Random] = None) -> Question:
    """Shuffle the options of one question; the correct answer follows its option."""
    rng = rng or random.Random()
    order = list(range(len(question.options)))
    rng.shuffle(order)
    options = [question.options[i] for i in order]
    return question.with_updates(options=options, correct_answer=order.index(question.correct_answer))


def build_test(name: str, questions: List[Question], shuffle: bool = False,
               rng: Optional[random.Random] = None) -> Test:
    if shuffle:
        rng = rng or random.Random()
        questions = [shuffle_options(q, rng) for q in shuffle_questions(questions, rng)]
    return Test(id=f"test-{uuid.uuid4().hex[:12]}", name=name, questions=list(questions))


@dataclass
class SessionSummary:
    correct_answers: int
    total_questions: int
    score: int
    bookmarked: int
    total_time: int
    average_seconds: int


class TestSession:
    """
    State of one test attempt: current position, one TestResult per question,
    and whether feedback is showing. Answers are locked once chosen.
    """
    __test__ = False

    def __init__(self, test: Test, clock: Callable[[], int] = _now_ms):
        if not test.questions:
            raise ValueError("Cannot start a test without questions")
        self.test = test
        self._clock = clock
        self.restart()

    def restart(self):
        self.index = 0
        self.results = [TestResult(question_id=q.id) for q in self.test.questions]
        self.show_feedback = False
        self.is_complete = False
        self.started_at = self._clock()
        self.question_started_at = self.started_at

    @property
    def current_question(self) -> Question:
        return self.test.questions[self.index]

    @property
    def current_result(self) -> TestResult:
        return self.results[self.index]

    @property
    def progress(self) -> float:
        return (self.index + 1) / len(self.test.questions) * 100

    def _set_result(self, **updates):
        self.results[self.index] = replace(self.results[self.index], **updates)

    def select_answer(self, answer_index: int) -> bool:
        """Record an answer for the current question. Returns False if it was already answered."""
        if self.current_result.selected_answer is not None:
            return False
        self._set_result(
            selected_answer=answer_index,
            is_correct=answer_index == self.current_question.correct_answer,
            time_spent=self._clock() - self.question_started_at,
        )
        self.show_feedback = True
        return True

    def toggle_bookmark(self):
        self._set_result(is_bookmarked=not self.current_result.is_bookmarked)

    def update_note(self, note: str):
        self._set_result(note=note)

    def _move_to(self, index: int):
        self.index = index
        self.show_feedback = self.results[index].selected_answer is not None
        self.question_started_at = self._clock()

    def next(self):
        if self.index < len(self.test.questions) - 1:
            self._move_to(self.index + 1)
            self.show_feedback = False
        else:
            self.is_complete = True

    def previous(self):
        if self.index > 0:
            self._move_to(self.index - 1)

    def jump_to(self, index: int):
        if 0 <= index < len(self.test.questions):
            self._move_to(index)

    def summary(self) -> SessionSummary:
        total = len(self.results)
        correct = sum(1 for r in self.results if r.is_correct)
        total_time = sum(r.time_spent for r in self.results)
        return SessionSummary(
            correct_answers=correct,
            total_questions=total,
            score=percent(correct, total),
            bookmarked=sum(1 for r in self.results if r.is_bookmarked),
            total_time=total_time,
            average_seconds=round_half_up(total_time / total / 1000),
        )
