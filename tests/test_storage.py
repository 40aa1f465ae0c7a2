from __future__ import annotations

import pytest

from mcqstudy.storage import (
    STORAGE_KEYS, JsonStore, load_history, load_notes, load_tests, save_history, save_notes, save_tests,
)


def test_save_and_load_round_trip(tmp_path):
    store = JsonStore(tmp_path / "data")
    store.save("prefs", {"theme": "dark", "sizes": [1, 2]})
    assert store.load("prefs") == {"theme": "dark", "sizes": [1, 2]}
    assert store.keys() == ["prefs"]
    store.delete("prefs")
    assert store.load("prefs", "fallback") == "fallback"
    store.delete("prefs")


def test_corrupt_file_falls_back_to_default(tmp_path):
    store = JsonStore(tmp_path)
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    assert store.load("broken", []) == []


def test_rejects_unsafe_keys(tmp_path):
    store = JsonStore(tmp_path)
    with pytest.raises(ValueError):
        store.save("../escape", {})


def test_typed_helpers_convert_dates(tmp_path, sample_test, sample_notes, history_factory):
    store = JsonStore(tmp_path)
    history = [history_factory()]
    save_tests(store, [sample_test])
    save_notes(store, sample_notes)
    save_history(store, history)
    assert set(store.keys()) == set(STORAGE_KEYS.values())

    [test] = load_tests(store)
    assert test.created_at == sample_test.created_at
    assert test.questions == sample_test.questions
    assert [n.updated_at for n in load_notes(store)] == [n.updated_at for n in sample_notes]
    assert load_history(store)[0].completed_at == history[0].completed_at


def test_missing_or_malformed_records(tmp_path):
    store = JsonStore(tmp_path)
    assert load_tests(store) == []
    store.save(STORAGE_KEYS["NOTES"], {"not": "a list"})
    assert load_notes(store) == []
    store.save(STORAGE_KEYS["HISTORY"], [{"name": "missing id"}])
    assert load_history(store) == []


def test_record_with_non_dict_question_is_skipped(tmp_path):
    store = JsonStore(tmp_path)
    store.save(STORAGE_KEYS["TESTS"], [
        {"id": "t1", "name": "Good", "questions": [], "createdAt": "2026-10-01T09:30:00"},
        {"id": "t2", "name": "Bad", "questions": ["oops"], "createdAt": "2026-10-01T09:30:00"},
    ])
    assert [t.id for t in load_tests(store)] == ["t1"]
