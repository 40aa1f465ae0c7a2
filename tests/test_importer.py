from __future__ import annotations

import json

from mcqstudy.importer import import_file, import_files

VALID = json.dumps({"questions": [
    {"question": "Capital of France?", "options": ["London", "Paris ✅"]},
    {"question": "2 + 2?", "options": ["3", "4"], "correct_answer": "4"},
]}).encode("utf-8")


def test_valid_json_file():
    outcome = import_file("set.json", VALID, "application/json")
    assert outcome.ok
    assert outcome.message == "Successfully imported 2 questions"
    assert [q.correct_answer for q in outcome.questions] == [1, 1]


def test_single_question_message_is_singular():
    data = json.dumps({"question": "Q?", "options": ["a", "b"]}).encode()
    assert import_file("one.json", data).message == "Successfully imported 1 question"


def test_json_recognized_by_content_type_only():
    assert import_file("upload", VALID, "application/json").ok


def test_rejects_non_json_by_default():
    outcome = import_file("notes.txt", b"1. Q?\nA. x\nB. y\n", "text/plain")
    assert outcome.status == "error"
    assert outcome.message == "Invalid file type. Only JSON files are supported."
    assert outcome.questions == []


def test_text_files_allowed_with_documents_enabled():
    outcome = import_file("notes.txt", b"1. Q?\nA. x\nB. y\nAnswer: B\n", "text/plain",
                          allow_documents=True)
    assert outcome.ok
    assert outcome.questions[0].correct_answer == 1


def test_too_large():
    outcome = import_file("big.json", b" " * 2048, max_bytes=1024)
    assert outcome.status == "error"
    assert outcome.message.startswith("File too large.")
    outcome = import_file("big.json", b"x" * (5 * 1024 * 1024 + 1))
    assert outcome.message == "File too large. Maximum size is 5MB."


def test_empty_file():
    assert import_file("empty.json", b"  \n ").message == "File is empty."


def test_invalid_json_syntax():
    outcome = import_file("bad.json", b'[{"question": "Q", "options": ["a"]},]')
    assert outcome.status == "error"
    assert outcome.message == "Invalid JSON format. Please check file syntax."


def test_valid_json_without_questions():
    outcome = import_file("other.json", b'{"hello": "world"}')
    assert outcome.status == "error"
    assert outcome.message == "No valid questions found in file."


def test_batch_continues_after_failures():
    files = [
        ("bad.json", b"{", "application/json"),
        ("good.json", VALID, "application/json"),
        ("image.png", b"\x89PNG", "image/png"),
    ]
    outcomes, questions = import_files(files)
    assert [o.status for o in outcomes] == ["error", "success", "error"]
    assert len(questions) == 2
