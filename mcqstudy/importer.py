import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .config import DEFAULT_MAX_UPLOAD_BYTES
from .extract_text import DOCUMENT_SUFFIXES, TEXT_SUFFIXES, extract_text_from_bytes
from .models import Question
from .parser import InvalidJSONError, parse_input, parse_json_text

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass
class ImportOutcome:
    file_name: str
    status: str  # "success" or "error"
    message: str
    questions: List[Question] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "success"


def _error(name: str, message: str) -> ImportOutcome:
    logger.warning("Import of %s failed: %s", name, message)
    return ImportOutcome(name, "error", message)


def _is_json(file_name: str, content_type: Optional[str]) -> bool:
    return content_type == JSON_CONTENT_TYPE or Path(file_name).suffix.lower() == ".json"


def import_file(file_name: str, data: bytes, content_type: Optional[str] = None,
                allow_documents: bool = False,
                max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> ImportOutcome:
    """
    Import questions from one uploaded file. JSON files must be valid JSON;
    with allow_documents, text and office documents go through text parsing.
    Never raises for bad content; the outcome carries the message.
    """
    suffix = Path(file_name).suffix.lower()
    is_json = _is_json(file_name, content_type)
    is_document = allow_documents and suffix in TEXT_SUFFIXES + DOCUMENT_SUFFIXES
    if not is_json and not is_document:
        return _error(file_name, "Invalid file type. Only JSON files are supported.")

    if len(data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        return _error(file_name, f"File too large. Maximum size is {limit_mb}MB.")

    try:
        if is_json:
            content = data.decode("utf-8-sig")
            if not content.strip():
                return _error(file_name, "File is empty.")
            questions = parse_json_text(content)
        else:
            content = extract_text_from_bytes(file_name, data)
            if not content.strip():
                return _error(file_name, "File is empty.")
            questions = parse_input(content)
    except InvalidJSONError as e:
        return _error(file_name, str(e))
    except UnicodeDecodeError:
        return _error(file_name, "Failed to read file.")
    except Exception as e:
        # document readers raise their own error types for corrupt files
        logger.exception("Unexpected error while importing %s", file_name)
        return _error(file_name, str(e) or "Failed to process file.")

    if not questions:
        return _error(file_name, "No valid questions found in file.")

    n = len(questions)
    logger.info("Imported %d question(s) from %s", n, file_name)
    return ImportOutcome(
        file_name,
        "success",
        f"Successfully imported {n} question{'s' if n != 1 else ''}",
        questions,
    )


def import_files(files: Iterable[Tuple[str, bytes, Optional[str]]], **kwargs) -> Tuple[List[ImportOutcome], List[Question]]:
    """Import several files in order; one bad file does not stop the rest."""
    outcomes = []
    questions: List[Question] = []
    for name, data, content_type in files:
        outcome = import_file(name, data, content_type, **kwargs)
        outcomes.append(outcome)
        questions.extend(outcome.questions)
    return outcomes, questions
