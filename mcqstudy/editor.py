import time
from typing import List

from .models import Question


def update_question(questions: List[Question], question_id: str, **updates) -> List[Question]:
    """Return a new list where the matching question has updates merged in."""
    return [q.with_updates(**updates) if q.id == question_id else q for q in questions]


def delete_question(questions: List[Question], question_id: str) -> List[Question]:
    return [q for q in questions if q.id != question_id]


def new_blank_question() -> Question:
    return Question(
        id=f"q-{int(time.time() * 1000)}",
        question="New question",
        options=["Option A", "Option B", "Option C", "Option D"],
        correct_answer=0,
    )


def add_option(question: Question) -> Question:
    label = chr(65 + len(question.options))
    return question.with_updates(options=[*question.options, f"Option {label}"])


def delete_option(question: Question, index: int) -> Question:
    """
    Remove one option, keeping at least two. The correct answer moves with
    its option; deleting the correct option resets it to the first one.
    """
    if len(question.options) <= 2 or not 0 <= index < len(question.options):
        return question
    options = [opt for i, opt in enumerate(question.options) if i != index]
    correct = question.correct_answer
    if correct > index:
        correct -= 1
    elif correct == index:
        correct = 0
    return question.with_updates(options=options, correct_answer=correct)


def merge_questions(existing: List[Question], incoming: List[Question]) -> List[Question]:
    """
    Append incoming questions, renaming any whose id is already taken
    ("q-0" -> "q-0-2", "q-0-3", ...).
    """
    taken = {q.id for q in existing}
    out = list(existing)
    for q in incoming:
        qid, n = q.id, 1
        while qid in taken:
            n += 1
            qid = f"{q.id}-{n}"
        taken.add(qid)
        out.append(q if qid == q.id else q.with_updates(id=qid))
    return out
