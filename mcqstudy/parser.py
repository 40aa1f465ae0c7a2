import enum
import json
import logging
import re
import time
from typing import Any, List, Optional

from .models import AdditionalSection, Question

logger = logging.getLogger(__name__)

# Inline marker for the correct option in JSON options and structured-header option lines.
CORRECT_MARKER = "\u2705"  # ✅
# Emphasis glyph accepted on line-pattern option lines (alongside "*").
CHECK_MARK = "\u2713"  # ✓

RESERVED_JSON_KEYS = ("question", "options", "correct_answer", "reasoning", "title")

# ---------- structured-header labels ----------
# (?!-) keeps "Label:-----" from handing its last dash to the trailing-text group
QUESTION_LABEL = re.compile(r"\*\*Question:\*\*|Question:\s*-+", re.I)
QUESTION_TRAILING = re.compile(r"(?:\*\*Question:\*\*|Question:\s*-+)(?!-)\s*(.+)", re.I)
OPTIONS_LABEL = re.compile(r"\*\*Options:\*\*|Options:\s*-+", re.I)
ANSWER_LABEL = re.compile(r"\*\*Correct Answer:\*\*|Correct Answer:\s*-+", re.I)
ANSWER_EMPHASIS_LABEL = re.compile(r"###\s*" + CORRECT_MARKER + r"\s*\*\*Correct Answer:\*\*", re.I)
ANSWER_TRAILING = re.compile(r"(?:\*\*Correct Answer:\*\*|Correct Answer:\s*-+)(?!-)\s*(.+)", re.I)
REASONING_LABEL = re.compile(r"\*\*Reasoning:\*\*|Reasoning:\s*-+", re.I)
REASONING_TRAILING = re.compile(r"(?:\*\*Reasoning:\*\*|Reasoning:\s*-+)(?!-)\s*(.+)", re.I)
CUSTOM_LABEL = re.compile(r"^(.+?):\s*-+")
BLOCK_SPLIT = re.compile(r"(?=\*\*Question:\*\*|Question:\s*-+)", re.I)

# ---------- line-pattern grammar ----------
LINE_QUESTION = re.compile(r"^\d+\.?\s|^Q\d*\.?\s", re.I)
LINE_OPTION = re.compile(r"^[A-Da-d][.)]\s")
LINE_ANSWER = re.compile(r"^(?:Answer|Correct|Ans):\s*([A-Da-d])", re.I)
LINE_EXPLANATION = re.compile(r"^(?:Explanation|Reason|Why):\s*", re.I)


class QuestionFormatError(ValueError):
    """Input could not be read as questions at all."""


class InvalidJSONError(QuestionFormatError):
    """Raised for JSON syntax errors; the JSONDecodeError is kept as __cause__."""

    def __init__(self, message: str = "Invalid JSON format. Please check file syntax."):
        super().__init__(message)


def _find_matching_option(options: List[str], answer_text: str) -> int:
    """
    Case-insensitive substring match in both directions.
    Returns the first matching position or -1.
    """
    needle = answer_text.lower().strip()
    for i, opt in enumerate(options):
        hay = opt.lower()
        if needle in hay or hay in needle:
            return i
    return -1


def _section_title(key: str) -> str:
    # "message_board_post" -> "Message Board Post"
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), key.replace("_", " "), flags=re.ASCII)


# =====================================================================
# JSON
# =====================================================================

def parse_json_question(item: Any, index: int) -> Optional[Question]:
    """
    Convert one decoded JSON object into a Question.
    Returns None when the object lacks a question or an options list.
    """
    if not isinstance(item, dict):
        return None
    options_raw = item.get("options")
    if not item.get("question") or not isinstance(options_raw, list) or not options_raw:
        return None

    sections = []
    for key, value in item.items():
        if key in RESERVED_JSON_KEYS:
            continue
        if isinstance(value, str) and value.strip():
            sections.append(AdditionalSection(title=_section_title(key), content=value))

    raw_options = [opt if isinstance(opt, str) else str(opt) for opt in options_raw]
    options = []
    correct = 0
    marked = False
    for i, opt in enumerate(raw_options):
        options.append(opt.replace(CORRECT_MARKER, "").strip())
        if CORRECT_MARKER in opt:
            correct = i
            marked = True

    answer_text = item.get("correct_answer")
    if not marked and isinstance(answer_text, str) and answer_text:
        idx = _find_matching_option(options, answer_text)
        if idx != -1:
            correct = idx

    explanation = None
    for key in ("reasoning", "explanation"):
        if isinstance(item.get(key), str) and item[key]:
            explanation = item[key]
            break

    return Question(
        id=f"q-{index}",
        question=str(item["question"]),
        options=options,
        correct_answer=correct,
        explanation=explanation,
        additional_sections=sections or None,
    )


def parse_json_questions(data: Any) -> List[Question]:
    """
    Accepts a single question object, a list of them, or {"questions": [...]}.
    Items that fail the shape check are skipped; an unknown shape gives [].
    """
    if isinstance(data, dict) and data.get("question") and data.get("options"):
        items = [data]
    elif isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("questions"), list):
        items = data["questions"]
    else:
        logger.debug("JSON value has no recognizable question shape (%s)", type(data).__name__)
        return []

    questions = []
    for index, item in enumerate(items):
        q = parse_json_question(item, index)
        if q is None:
            logger.debug("Skipping JSON item %d: missing question or options list", index)
            continue
        questions.append(q)
    return questions


def parse_json_text(text: str) -> List[Question]:
    """Strict JSON path: syntax errors raise InvalidJSONError."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise InvalidJSONError() from e
    return parse_json_questions(data)


# =====================================================================
# Structured headers ("**Question:**" / "Question:-----" blocks)
# =====================================================================

class Section(enum.Enum):
    NONE = "none"
    QUESTION = "question"
    OPTIONS = "options"
    ANSWER = "answer"
    REASONING = "reasoning"
    ADDITIONAL = "additional"


class _BlockState:
    """Accumulator for one structured-header block."""

    def __init__(self):
        self.section = Section.NONE
        self.question = ""
        self.options: List[str] = []
        self.correct = 0
        self.marked: Optional[int] = None
        self.answer_inline = False
        self.explanation = ""
        self.sections: List[AdditionalSection] = []
        self.pending_title = ""
        self.pending_content = ""

    def flush_pending(self):
        if self.section is Section.ADDITIONAL and self.pending_title and self.pending_content:
            self.sections.append(AdditionalSection(self.pending_title, self.pending_content.strip()))
        self.pending_title = ""
        self.pending_content = ""

    def resolve_answer(self, text: str):
        text = text.replace("**", "").strip()
        if not text:
            return
        idx = _find_matching_option(self.options, text)
        if idx != -1:
            self.correct = idx


def _feed_label(state: _BlockState, line: str) -> bool:
    """Handle a label line. Returns False when the line is not a label."""
    if QUESTION_LABEL.search(line):
        state.flush_pending()
        state.section = Section.QUESTION
        m = QUESTION_TRAILING.search(line)
        if m:
            text = m.group(1).replace("**", "").strip()
            if text:
                state.question = text
        return True

    if OPTIONS_LABEL.search(line):
        state.flush_pending()
        state.section = Section.OPTIONS
        return True

    if ANSWER_LABEL.search(line) or ANSWER_EMPHASIS_LABEL.search(line):
        state.flush_pending()
        state.section = Section.ANSWER
        state.answer_inline = False
        m = ANSWER_TRAILING.search(line)
        if m:
            state.answer_inline = True
            state.resolve_answer(m.group(1))
        return True

    if REASONING_LABEL.search(line):
        state.flush_pending()
        state.section = Section.REASONING
        m = REASONING_TRAILING.search(line)
        if m:
            state.explanation = m.group(1).strip()
        return True

    m = CUSTOM_LABEL.match(line)
    if m:
        state.flush_pending()
        state.section = Section.ADDITIONAL
        state.pending_title = m.group(1).strip()
        state.pending_content = ""
        return True

    return False


def _feed_content(state: _BlockState, line: str):
    section = state.section
    if section is Section.QUESTION:
        if not state.question:
            state.question = line.replace("**", "").strip()
    elif section is Section.OPTIONS:
        if line.startswith("-"):
            text = re.sub(r"^-\s*", "", line)
            text = text.replace("**", "").replace(CORRECT_MARKER, "").strip()
            state.options.append(text)
            if CORRECT_MARKER in line:
                state.marked = len(state.options) - 1
    elif section is Section.ANSWER:
        if not state.answer_inline:
            state.resolve_answer(line)
    elif section is Section.REASONING:
        state.explanation += ("\n" if state.explanation else "") + line
    elif section is Section.ADDITIONAL:
        state.pending_content += ("\n" if state.pending_content else "") + line


def _parse_block(block: str, index: int) -> Optional[Question]:
    state = _BlockState()
    for raw in block.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if not _feed_label(state, line):
            _feed_content(state, line)
    state.flush_pending()

    if not state.question or not state.options:
        return None

    # an inline ✅ on an option beats a "Correct Answer" text match
    correct = state.marked if state.marked is not None else state.correct
    return Question(
        id=f"q-{index}",
        question=state.question,
        options=state.options,
        correct_answer=correct,
        explanation=state.explanation or None,
        additional_sections=state.sections or None,
    )


def parse_structured_format(text: str) -> List[Question]:
    """
    Parse "**Question:** / **Options:** / **Correct Answer:** / **Reasoning:**" blocks,
    also accepting the "Label:-------" spelling and arbitrary "Label:----" sections.
    Blocks without a question or without options are dropped.
    """
    blocks = [b for b in BLOCK_SPLIT.split(text) if b.strip()]
    questions = []
    for index, block in enumerate(blocks):
        if not QUESTION_LABEL.search(block):
            continue
        q = _parse_block(block, index)
        if q is None:
            logger.debug("Dropping structured block %d: no question text or options", index)
            continue
        questions.append(q)
    return questions


# =====================================================================
# Line patterns ("1. ...", "A) ...", "Answer: B")
# =====================================================================

def _finish_line_question(cur: dict, qid: int) -> Optional[Question]:
    if not cur.get("question") or not cur.get("options"):
        return None
    options = cur["options"]
    correct = cur.get("correct", 0)
    if not 0 <= correct < len(options):
        correct = 0
    return Question(
        id=f"q-{qid}",
        question=cur["question"],
        options=options,
        correct_answer=correct,
        explanation=cur.get("explanation"),
    )


def parse_line_format(text: str, start_id: Optional[int] = None) -> List[Question]:
    """
    Free-form fallback:
      1. Question text        (or "Q3. ...")
      A. option               ("*" or "✓" on the line marks it correct)
      B) option
      Answer: B               (also "Correct:" / "Ans:")
      Explanation: ...        (also "Reason:" / "Why:")
    Ids count up from the current time in milliseconds unless start_id is given.
    """
    counter = start_id if start_id is not None else int(time.time() * 1000)
    questions = []
    cur: dict = {}

    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue

        # ---------- question ----------
        if LINE_QUESTION.match(line):
            q = _finish_line_question(cur, counter)
            if q:
                questions.append(q)
                counter += 1
            cur = {
                "question": LINE_QUESTION.sub("", line, count=1).strip(),
                "options": [],
                "correct": 0,
            }
            continue

        # ---------- option ----------
        if LINE_OPTION.match(line):
            options = cur.setdefault("options", [])
            options.append(LINE_OPTION.sub("", line, count=1).strip())
            if "*" in line or CHECK_MARK in line:
                cur["correct"] = len(options) - 1
            continue

        # ---------- answer ----------
        m = LINE_ANSWER.match(line)
        if m:
            cur["correct"] = ord(m.group(1).upper()) - ord("A")
            continue

        # ---------- explanation ----------
        if LINE_EXPLANATION.match(line):
            cur["explanation"] = LINE_EXPLANATION.sub("", line, count=1).strip()

    q = _finish_line_question(cur, counter)
    if q:
        questions.append(q)
    return questions


# =====================================================================
# Dispatch
# =====================================================================

def parse_mcq_text(text: str) -> List[Question]:
    """Structured headers first; line patterns if that finds nothing."""
    questions = parse_structured_format(text)
    if questions:
        logger.debug("Structured-header parser found %d question(s)", len(questions))
        return questions
    questions = parse_line_format(text)
    logger.debug("Line-pattern parser found %d question(s)", len(questions))
    return questions


def parse_input(text: str) -> List[Question]:
    """
    Entry point for pasted text. Valid JSON goes to the JSON extractor whatever
    its shape; anything else is parsed as one of the text conventions.
    An empty list means no recognizable questions.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        # too deeply nested counts as not JSON
        return parse_mcq_text(text)
    questions = parse_json_questions(data)
    logger.debug("JSON extractor found %d question(s)", len(questions))
    return questions
