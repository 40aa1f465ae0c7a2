from __future__ import annotations

import docx
import pytest
from pptx import Presentation
from pptx.util import Inches

from mcqstudy.extract_text import extract_text_from_bytes, extract_text_from_path


@pytest.fixture
def docx_file(tmp_path):
    doc = docx.Document()
    doc.add_paragraph("1. What is 2 + 2?")
    doc.add_paragraph("")
    doc.add_paragraph("A. 3")
    doc.add_paragraph("B. 4")
    path = tmp_path / "quiz.docx"
    doc.save(str(path))
    return path


@pytest.fixture
def pptx_file(tmp_path):
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[6])  # blank
    for text in ("Question: Largest planet?", "", "Options: Mars, Jupiter"):
        box = slide.shapes.add_textbox(Inches(1), Inches(1), Inches(6), Inches(1))
        box.text_frame.text = text
    path = tmp_path / "deck.pptx"
    prs.save(str(path))
    return path


def test_docx_paragraphs_join_with_newlines(docx_file):
    expected = "1. What is 2 + 2?\nA. 3\nB. 4"
    assert extract_text_from_path(str(docx_file)) == expected
    assert extract_text_from_bytes("Quiz.DOCX", docx_file.read_bytes()) == expected


def test_pptx_shapes_join_with_blank_lines(pptx_file):
    expected = "Question: Largest planet?\n\nOptions: Mars, Jupiter"
    assert extract_text_from_path(str(pptx_file)) == expected
    assert extract_text_from_bytes("deck.pptx", pptx_file.read_bytes()) == expected


def test_plain_text_files(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text("1. Q?\nA. yes", encoding="utf-8")
    assert extract_text_from_path(str(path)) == "1. Q?\nA. yes"
    assert extract_text_from_bytes("notes.txt", b"caf\xc3\xa9") == "café"


def test_unsupported_extension(tmp_path):
    path = tmp_path / "sheet.xlsx"
    path.write_bytes(b"not really a spreadsheet")
    with pytest.raises(ValueError):
        extract_text_from_path(str(path))
    with pytest.raises(ValueError):
        extract_text_from_bytes("sheet.xlsx", b"")
