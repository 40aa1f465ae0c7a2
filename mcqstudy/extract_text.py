import io
from pathlib import Path

from PyPDF2 import PdfReader
import docx
from pptx import Presentation

TEXT_SUFFIXES = (".txt", ".md")
DOCUMENT_SUFFIXES = (".pdf", ".docx", ".pptx")


def _extract(source, suffix: str) -> str:
    text_chunks = []

    if suffix == ".pdf":
        reader = PdfReader(source)
        for page in reader.pages:
            t = page.extract_text()
            if t:
                text_chunks.append(t)

    elif suffix == ".docx":
        doc = docx.Document(source)
        for para in doc.paragraphs:
            if para.text:
                text_chunks.append(para.text)

    elif suffix == ".pptx":
        prs = Presentation(source)
        for slide in prs.slides:
            for shape in slide.shapes:
                if hasattr(shape, "text") and shape.text:
                    text_chunks.append(shape.text)
    else:
        raise ValueError("Unsupported file type. Use .pdf, .docx, .pptx, .txt or .md")

    # docx paragraphs are lines; pdf pages and pptx shapes are separate blocks
    sep = "\n" if suffix == ".docx" else "\n\n"
    return sep.join(text_chunks).strip()


def extract_text_from_path(path: str) -> str:
    """
    Extracts and returns plain text from .pdf, .docx, .pptx, .txt or .md files.
    Raises ValueError for unsupported extensions.
    """
    suffix = Path(path).suffix.lower()
    if suffix in TEXT_SUFFIXES:
        return Path(path).read_text(encoding="utf-8")
    with open(path, "rb") as f:
        return _extract(f, suffix)


def extract_text_from_bytes(file_name: str, data: bytes) -> str:
    """Same as extract_text_from_path for an in-memory upload."""
    suffix = Path(file_name).suffix.lower()
    if suffix in TEXT_SUFFIXES:
        return data.decode("utf-8", errors="replace")
    return _extract(io.BytesIO(data), suffix)
