import time
from datetime import datetime
from typing import List

from .models import StudyNote


def parse_tags(raw: str) -> List[str]:
    """ "a, b, ,c" -> ["a", "b", "c"] """
    return [t.strip() for t in raw.split(",") if t.strip()]


def create_note(notes: List[StudyNote], title: str, content: str, test_name: str = "",
                question_text: str = "", tags: List[str] | None = None,
                is_bookmarked: bool = False) -> List[StudyNote]:
    now = datetime.now()
    note = StudyNote(
        id=f"note-{int(time.time() * 1000)}",
        title=title,
        content=content,
        test_name=test_name,
        question_text=question_text,
        tags=list(tags or []),
        is_bookmarked=is_bookmarked,
        created_at=now,
        updated_at=now,
    )
    return [*notes, note]


def update_note(notes: List[StudyNote], note_id: str, **updates) -> List[StudyNote]:
    out = []
    for n in notes:
        if n.id == note_id:
            data = {**n.__dict__, **updates, "updated_at": datetime.now()}
            n = StudyNote(**data)
        out.append(n)
    return out


def delete_note(notes: List[StudyNote], note_id: str) -> List[StudyNote]:
    return [n for n in notes if n.id != note_id]


def all_tags(notes: List[StudyNote]) -> List[str]:
    seen = {}
    for n in notes:
        for tag in n.tags:
            seen.setdefault(tag, None)
    return list(seen)


def filter_notes(notes: List[StudyNote], query: str = "", tag: str = "all") -> List[StudyNote]:
    """Case-insensitive search over title, content, test name and question text."""
    q = query.lower()
    out = []
    for n in notes:
        haystacks = (n.title, n.content, n.test_name, n.question_text)
        if q and not any(q in (h or "").lower() for h in haystacks):
            continue
        if tag != "all" and tag not in n.tags:
            continue
        out.append(n)
    return out
