import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from .models import StudyNote, Test, TestHistory

logger = logging.getLogger(__name__)

EXPORT_PREFIXES = {
    "tests": "mcq-tests",
    "notes": "mcq-notes",
    "history": "mcq-history",
    "all": "mcq-complete-backup",
}


class BackupFormatError(ValueError):
    """The document is not one of our export types."""


def _stamp(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")


def export_data(kind: str, tests: List[Test], notes: List[StudyNote], history: List[TestHistory],
                now: Optional[datetime] = None) -> Tuple[str, dict]:
    """
    Build (filename, payload) for kind in "tests", "notes", "history", "all".
    Payload keys match what import_data() reads back.
    """
    if kind not in EXPORT_PREFIXES:
        raise ValueError(f"Unknown export type: {kind}")
    now = now or datetime.now()
    payload: dict = {}
    if kind in ("tests", "all"):
        payload["tests"] = [t.to_dict() for t in tests]
    if kind in ("notes", "all"):
        payload["studyNotes"] = [n.to_dict() for n in notes]
    if kind in ("history", "all"):
        payload["testHistory"] = [h.to_dict() for h in history]
    payload["exportedAt"] = now.isoformat()
    payload["type"] = kind
    return f"{EXPORT_PREFIXES[kind]}-{_stamp(now)}.json", payload


def export_single_test(test: Test, now: Optional[datetime] = None) -> Tuple[str, dict]:
    now = now or datetime.now()
    safe = re.sub(r"[^a-z0-9]", "_", test.name, flags=re.I).lower()
    payload = {"test": test.to_dict(), "exportedAt": now.isoformat(), "type": "single-test"}
    return f"{safe}-{_stamp(now)}.json", payload


def dumps(payload: dict) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


@dataclass
class ImportedData:
    tests: List[Test] = field(default_factory=list)
    notes: List[StudyNote] = field(default_factory=list)
    history: List[TestHistory] = field(default_factory=list)
    message: str = ""


def import_data(text: str) -> ImportedData:
    """
    Read an exported document back. Anything that is not valid JSON or not
    one of the export types raises BackupFormatError.
    """
    try:
        data = json.loads(text)
        kind = data.get("type") if isinstance(data, dict) else None
        out = ImportedData()
        if kind == "single-test" and data.get("test"):
            out.tests = [Test.from_dict(data["test"])]
            out.message = f'Test "{out.tests[0].name}" imported successfully'
        elif kind == "tests" and data.get("tests"):
            out.tests = [Test.from_dict(t) for t in data["tests"]]
            out.message = f"{len(out.tests)} tests imported successfully"
        elif kind == "notes" and data.get("studyNotes"):
            out.notes = [StudyNote.from_dict(n) for n in data["studyNotes"]]
            out.message = f"{len(out.notes)} notes imported successfully"
        elif kind == "history" and data.get("testHistory"):
            out.history = [TestHistory.from_dict(h) for h in data["testHistory"]]
            out.message = f"{len(out.history)} test results imported successfully"
        elif kind == "all":
            out.tests = [Test.from_dict(t) for t in data.get("tests") or []]
            out.notes = [StudyNote.from_dict(n) for n in data.get("studyNotes") or []]
            out.history = [TestHistory.from_dict(h) for h in data.get("testHistory") or []]
            out.message = "Complete backup imported successfully"
        else:
            raise BackupFormatError("Invalid file format")
    except BackupFormatError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Backup import failed: %s", e)
        raise BackupFormatError("Invalid file format or corrupted data") from e
    return out
