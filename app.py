# app.py
import logging

import streamlit as st

from mcqstudy import analytics, backup, editor, notes as notes_ops
from mcqstudy.config import get_settings
from mcqstudy.extract_text import extract_text_from_bytes
from mcqstudy.gemini_utils import draft_questions
from mcqstudy.importer import import_files
from mcqstudy.logging_config import setup_logger
from mcqstudy.models import Test
from mcqstudy.parser import parse_input
from mcqstudy.session import TestSession, build_test
from mcqstudy.storage import (
    JsonStore, load_history, load_notes, load_tests, save_history, save_notes, save_tests,
)

settings = get_settings()
setup_logger("mcqstudy", settings.logs_dir, settings.log_level)
logger = logging.getLogger("mcqstudy.app")
store = JsonStore(settings.data_dir)

st.set_page_config(page_title="MCQ Study", layout="wide")
st.title("MCQ Study")

ss = st.session_state
if "tests" not in ss:
    ss["tests"] = load_tests(store)
    ss["notes"] = load_notes(store)
    ss["history"] = load_history(store)
    ss["draft"] = []
    ss["draft_name"] = ""
    ss["editing_test_id"] = None
    ss["active_session"] = None
    ss["upload_outcomes"] = []


def persist():
    try:
        save_tests(store, ss["tests"])
        save_notes(store, ss["notes"])
        save_history(store, ss["history"])
    except (OSError, TypeError, ValueError):
        st.warning("Could not save your data to disk. Changes will be lost when the app restarts.")


def letter(i: int) -> str:
    return chr(65 + i)


def add_to_draft(questions):
    ss["draft"] = editor.merge_questions(ss["draft"], questions)


##### SIDEBAR: BACKUP #####
with st.sidebar:
    st.header("Backup")
    kind = st.selectbox("Export", ["all", "tests", "notes", "history"], index=0)
    fname, payload = backup.export_data(kind, ss["tests"], ss["notes"], ss["history"])
    st.download_button("Download export", data=backup.dumps(payload), file_name=fname,
                       mime="application/json")

    imported = st.file_uploader("Import backup", type=["json"], key="backup_upload")
    if imported and st.button("Import"):
        try:
            result = backup.import_data(imported.getvalue().decode("utf-8"))
        except (backup.BackupFormatError, UnicodeDecodeError):
            st.error("Import failed: invalid file format or corrupted data")
        else:
            ss["tests"] = [*ss["tests"], *result.tests]
            ss["notes"] = [*ss["notes"], *result.notes]
            ss["history"] = [*ss["history"], *result.history]
            persist()
            st.success(result.message)


##### TEST TAKING #####
def render_session(session: TestSession):
    test = session.test
    if session.is_complete:
        summary = session.summary()
        st.header(f"{test.name} — results")
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Score", f"{summary.score}%")
        c2.metric("Correct", f"{summary.correct_answers}/{summary.total_questions}")
        c3.metric("Bookmarked", summary.bookmarked)
        c4.metric("Avg. time", f"{summary.average_seconds}s")
        for q, r in zip(test.questions, session.results):
            mark = "✅" if r.is_correct else "❌"
            chosen = letter(r.selected_answer) if r.selected_answer is not None else "—"
            st.write(f"{mark} {q.question}  (your answer: {chosen}, correct: {letter(q.correct_answer)})")
        col1, col2 = st.columns(2)
        if col1.button("Finish"):
            entry, new_notes = analytics.complete_test(test, session.results)
            ss["history"] = [*ss["history"], entry]
            ss["notes"] = [*ss["notes"], *new_notes]
            ss["active_session"] = None
            persist()
            st.rerun()
        if col2.button("Restart"):
            session.restart()
            st.rerun()
        return

    q = session.current_question
    r = session.current_result
    head, exit_col = st.columns([5, 1])
    head.subheader(f"{test.name} — Question {session.index + 1} of {len(test.questions)}")
    if exit_col.button("Exit Test"):
        ss["active_session"] = None
        st.rerun()
    st.progress(int(session.progress))

    nav = st.columns(min(len(test.questions), 12))
    for i, res in enumerate(session.results):
        label = f"{i + 1}{'🔖' if res.is_bookmarked else ''}"
        if nav[i % len(nav)].button(label, key=f"jump_{i}", disabled=i == session.index):
            session.jump_to(i)
            st.rerun()

    st.markdown(f"### {q.question}")
    for section in q.additional_sections or []:
        with st.expander(section.title, expanded=True):
            st.write(section.content)

    for i, option in enumerate(q.options):
        prefix = ""
        if session.show_feedback and i == q.correct_answer:
            prefix = "✅ "
        elif session.show_feedback and i == r.selected_answer:
            prefix = "❌ "
        if st.button(f"{prefix}{letter(i)}. {option}", key=f"opt_{session.index}_{i}",
                     disabled=r.selected_answer is not None, use_container_width=True):
            session.select_answer(i)
            st.rerun()

    if session.show_feedback:
        if session.current_result.is_correct:
            st.success("Correct!")
        else:
            st.error(f"Incorrect. The correct answer is {letter(q.correct_answer)}.")
        if q.explanation:
            st.info(q.explanation)

    if st.button("Remove bookmark" if r.is_bookmarked else "Bookmark", key=f"bm_{session.index}"):
        session.toggle_bookmark()
        st.rerun()
    note = st.text_area("Notes", value=r.note, key=f"note_{session.index}")
    if note != r.note:
        session.update_note(note)

    prev_col, next_col = st.columns(2)
    if prev_col.button("Previous", disabled=session.index == 0):
        session.previous()
        st.rerun()
    last = session.index == len(test.questions) - 1
    if next_col.button("Finish Test" if last else "Next"):
        session.next()
        st.rerun()


##### QUESTION PREVIEW / EDITOR #####
def render_draft_editor():
    draft = ss["draft"]
    st.markdown(f"**{len(draft)} question{'s' if len(draft) != 1 else ''}** in preview")
    for n, q in enumerate(draft, start=1):
        with st.expander(f"{n}. {q.question}"):
            with st.form(key=f"edit_{q.id}"):
                text = st.text_area("Question", value=q.question)
                opts_raw = st.text_area("Options (one per line)", value="\n".join(q.options))
                opts = [o.strip() for o in opts_raw.splitlines() if o.strip()] or q.options
                correct = st.selectbox("Correct answer", list(range(len(opts))),
                                       index=min(q.correct_answer, len(opts) - 1),
                                       format_func=lambda i, opts=opts: f"{letter(i)}. {opts[i]}")
                expl = st.text_area("Explanation", value=q.explanation or "")
                if st.form_submit_button("Save"):
                    ss["draft"] = editor.update_question(
                        ss["draft"], q.id, question=text.strip() or q.question, options=opts,
                        correct_answer=correct, explanation=expl.strip() or None,
                    )
                    st.rerun()
            c1, c2, c3 = st.columns(3)
            if c1.button("Add option", key=f"addopt_{q.id}"):
                ss["draft"] = [editor.add_option(x) if x.id == q.id else x for x in ss["draft"]]
                st.rerun()
            if len(q.options) > 2:
                drop = c2.selectbox("Option to delete", list(range(len(q.options))),
                                    format_func=letter, key=f"dropsel_{q.id}")
                if c2.button("Delete option", key=f"dropopt_{q.id}"):
                    ss["draft"] = [editor.delete_option(x, drop) if x.id == q.id else x for x in ss["draft"]]
                    st.rerun()
            if c3.button("Delete question", key=f"delq_{q.id}"):
                ss["draft"] = editor.delete_question(ss["draft"], q.id)
                st.rerun()

    if st.button("Create blank question"):
        add_to_draft([editor.new_blank_question()])
        st.rerun()


def render_import_panel():
    st.subheader("Add questions")
    raw = st.text_area("Paste questions (JSON, numbered list, or Question:/Options: headers)",
                       height=220, key="paste_text")
    if st.button("Parse Questions"):
        if not raw.strip():
            st.error("Please enter some text to parse.")
        else:
            parsed = parse_input(raw)
            if not parsed:
                st.error("No valid questions could be parsed from the text. "
                         "Please check the format and try again.")
            else:
                add_to_draft(parsed)
                st.success(f"Parsed {len(parsed)} question(s).")

    allow_docs = st.checkbox("Also accept text, PDF, DOCX and PPTX files", value=False)
    types = ["json", "txt", "md", "pdf", "docx", "pptx"] if allow_docs else ["json"]
    uploads = st.file_uploader("Upload question files", type=types, accept_multiple_files=True)
    if uploads and st.button("Import files"):
        with st.spinner("Processing files..."):
            outcomes, questions = import_files(
                ((u.name, u.getvalue(), u.type) for u in uploads),
                allow_documents=allow_docs, max_bytes=settings.max_upload_bytes,
            )
        ss["upload_outcomes"] = outcomes
        add_to_draft(questions)
        failed = sum(1 for o in outcomes if not o.ok)
        if failed and failed == len(outcomes):
            st.error(f"Failed to process {failed} file{'s' if failed != 1 else ''}. "
                     "Please check the errors below.")
    for o in ss["upload_outcomes"]:
        (st.success if o.ok else st.error)(f"{o.file_name}: {o.message}")

    with st.expander("Draft questions from study material (Gemini)"):
        material = st.file_uploader("Upload PDF / DOCX / PPTX", type=["pdf", "docx", "pptx"],
                                    key="material")
        num_q = st.number_input("Number of questions", min_value=1, max_value=30, value=8)
        difficulty = st.selectbox("Difficulty", ["Easy", "Medium", "Hard"], index=1)
        if material and st.button("Generate"):
            with st.spinner("Extracting text and generating..."):
                try:
                    source = extract_text_from_bytes(material.name, material.getvalue())
                    drafted = draft_questions(source, int(num_q), difficulty)
                except RuntimeError as e:
                    st.warning(str(e))
                    drafted = ""
            parsed = parse_input(drafted) if drafted else []
            if parsed:
                add_to_draft(parsed)
                st.success(f"Generated {len(parsed)} question(s) — preview below.")
            elif drafted:
                st.warning("The generated text did not contain recognizable questions.")
                st.code(drafted, language=None)


def render_tests_tab():
    st.header("Tests")
    editing = ss["editing_test_id"]
    render_import_panel()
    if ss["draft"]:
        st.divider()
        render_draft_editor()
        ss["draft_name"] = st.text_input("Test name", value=ss["draft_name"])
        label = "Save Changes" if editing else "Create Test"
        if st.button(label, disabled=not ss["draft_name"].strip()):
            name = ss["draft_name"].strip()
            if editing:
                ss["tests"] = [
                    Test(t.id, name, list(ss["draft"]), t.created_at) if t.id == editing else t
                    for t in ss["tests"]
                ]
            else:
                ss["tests"] = [*ss["tests"], build_test(name, ss["draft"])]
            ss["draft"], ss["draft_name"], ss["editing_test_id"] = [], "", None
            ss["upload_outcomes"] = []
            persist()
            st.rerun()

    st.divider()
    st.subheader("Saved tests")
    if not ss["tests"]:
        st.info("No tests yet. Paste or upload questions above to create one.")
    for t in ss["tests"]:
        st.markdown(f"**{t.name}** — {len(t.questions)} questions • "
                    f"Created {t.created_at.strftime('%Y-%m-%d')}")
        c1, c2, c3, c4, c5 = st.columns(5)
        shuffle = c1.checkbox("Shuffle", key=f"shuf_{t.id}")
        if c2.button("Start", key=f"start_{t.id}", disabled=not t.questions):
            test = build_test(t.name, t.questions, shuffle=True) if shuffle else t
            ss["active_session"] = TestSession(test)
            st.rerun()
        fname, payload = backup.export_single_test(t)
        c3.download_button("Export", data=backup.dumps(payload), file_name=fname,
                           mime="application/json", key=f"exp_{t.id}")
        if c4.button("Edit", key=f"edit_{t.id}"):
            ss["draft"], ss["draft_name"], ss["editing_test_id"] = list(t.questions), t.name, t.id
            st.rerun()
        if c5.button("Delete", key=f"del_{t.id}"):
            ss["tests"] = [x for x in ss["tests"] if x.id != t.id]
            persist()
            st.rerun()


def render_dashboard():
    stats = analytics.dashboard_stats(ss["history"], ss["notes"])
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Tests taken", stats.total_tests)
    c2.metric("Average score", f"{stats.average_score}%")
    c3.metric("Study notes", stats.total_notes)
    c4.metric("Bookmarked notes", stats.bookmarked_notes)
    st.subheader("Recent tests")
    if not stats.recent_tests:
        st.info("Take a test to see your progress here.")
    for h in stats.recent_tests:
        st.write(f"**{h.name}** — {h.score}% ({h.completed_at.strftime('%Y-%m-%d')})")


def render_notes_tab():
    st.header("Study notes")
    with st.expander("Create New Note"):
        with st.form("new_note", clear_on_submit=True):
            title = st.text_input("Title")
            test_name = st.text_input("Test name")
            question_text = st.text_input("Question")
            content = st.text_area("Content")
            tags = st.text_input("Tags (comma separated)")
            bookmarked = st.checkbox("Bookmarked")
            if st.form_submit_button("Save note") and title.strip() and content.strip():
                ss["notes"] = notes_ops.create_note(
                    ss["notes"], title.strip(), content.strip(), test_name.strip(),
                    question_text.strip(), notes_ops.parse_tags(tags), bookmarked,
                )
                persist()
                st.rerun()

    query = st.text_input("Search notes")
    tag = st.selectbox("Tag", ["all", *notes_ops.all_tags(ss["notes"])])
    shown = notes_ops.filter_notes(ss["notes"], query, tag)
    if not shown:
        st.info("No notes found.")
    for n in shown:
        star = "🔖 " if n.is_bookmarked else ""
        with st.expander(f"{star}{n.title}"):
            if n.question_text:
                st.caption(n.question_text)
            with st.form(key=f"note_form_{n.id}"):
                content = st.text_area("Content", value=n.content)
                tags = st.text_input("Tags", value=", ".join(n.tags))
                bookmarked = st.checkbox("Bookmarked", value=n.is_bookmarked)
                if st.form_submit_button("Update"):
                    ss["notes"] = notes_ops.update_note(
                        ss["notes"], n.id, content=content, tags=notes_ops.parse_tags(tags),
                        is_bookmarked=bookmarked,
                    )
                    persist()
                    st.rerun()
            if st.button("Delete", key=f"del_note_{n.id}"):
                ss["notes"] = notes_ops.delete_note(ss["notes"], n.id)
                persist()
                st.rerun()


def render_review_tab():
    st.header("Review")
    timeframe = st.radio("Timeframe", ["week", "month", "all"], horizontal=True)
    stats = analytics.review_stats(ss["history"], timeframe)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Average score", f"{stats.average_score}%", delta=f"{stats.trend}% trend")
    c2.metric("Questions answered", stats.total_questions)
    c3.metric("Bookmarked", stats.total_bookmarked)
    c4.metric("Study time", f"{round(stats.total_study_time / 60000)}m")

    st.subheader("Recent activity")
    for h in reversed(stats.filtered[-5:]):
        st.write(f"**{h.name}** — {h.correct_answers}/{h.total_questions} correct, {h.score}%")

    st.subheader("Weak areas")
    for area in stats.weak_areas:
        st.write(f"{area.topic}: {area.accuracy}% over {area.attempts} attempt(s)")

    st.subheader("Score distribution")
    st.bar_chart(dict(stats.distribution))
    st.write(f"Weekly average: {stats.weekly_average}% • Monthly average: {stats.monthly_average}%")

    st.subheader("Bookmarked questions")
    marked = analytics.bookmarked_questions(ss["history"], ss["tests"])
    st.write(f"{len(marked)} bookmarked question(s) available.")
    if marked and st.button("Review bookmarked questions"):
        ss["active_session"] = TestSession(
            build_test("Bookmarked Questions Review", editor.merge_questions([], marked)))
        st.rerun()

    st.subheader("Notes by test")
    for test_name, grouped in analytics.notes_by_test(ss["notes"]).items():
        st.write(f"**{test_name}** — {len(grouped)} note(s)")


if ss["active_session"] is not None:
    render_session(ss["active_session"])
else:
    tabs = st.tabs(["Dashboard", "Tests", "Notes", "Review"])
    with tabs[0]:
        render_dashboard()
    with tabs[1]:
        render_tests_tab()
    with tabs[2]:
        render_notes_tab()
    with tabs[3]:
        render_review_tab()
