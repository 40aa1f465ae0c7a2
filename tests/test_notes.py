from __future__ import annotations

from mcqstudy import notes as notes_ops


def test_parse_tags():
    assert notes_ops.parse_tags("bio, review, , exam ") == ["bio", "review", "exam"]
    assert notes_ops.parse_tags("") == []


def test_create_note_appends(sample_notes):
    out = notes_ops.create_note(sample_notes, "New", "Body", tags=["x"], is_bookmarked=True)
    assert len(out) == 4
    assert len(sample_notes) == 3
    note = out[-1]
    assert (note.title, note.content, note.tags, note.is_bookmarked) == ("New", "Body", ["x"], True)
    assert note.id.startswith("note-")
    assert note.created_at == note.updated_at


def test_update_note_refreshes_timestamp(sample_notes):
    out = notes_ops.update_note(sample_notes, "note-2", content="Rome too")
    assert out[1].content == "Rome too"
    assert out[1].updated_at > sample_notes[1].updated_at
    assert out[1].created_at == sample_notes[1].created_at
    assert out[0] is sample_notes[0]


def test_delete_note(sample_notes):
    assert [n.id for n in notes_ops.delete_note(sample_notes, "note-1")] == ["note-2", "note-3"]


def test_all_tags_first_seen_order(sample_notes):
    assert notes_ops.all_tags(sample_notes) == ["bio", "review", "geo"]


def test_filter_notes(sample_notes):
    assert [n.id for n in notes_ops.filter_notes(sample_notes)] == ["note-1", "note-2", "note-3"]
    assert [n.id for n in notes_ops.filter_notes(sample_notes, "PARIS")] == ["note-2"]
    assert [n.id for n in notes_ops.filter_notes(sample_notes, "biology")] == ["note-1"]
    assert [n.id for n in notes_ops.filter_notes(sample_notes, "gas")] == ["note-1"]
    assert [n.id for n in notes_ops.filter_notes(sample_notes, tag="geo")] == ["note-2"]
    assert notes_ops.filter_notes(sample_notes, "paris", tag="bio") == []
