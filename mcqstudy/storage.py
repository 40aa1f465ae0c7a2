import json
import logging
import re
from pathlib import Path
from typing import Any, List

from .models import StudyNote, Test, TestHistory

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "TESTS": "mcq-study-tests",
    "NOTES": "mcq-study-notes",
    "HISTORY": "mcq-study-history",
}

_SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class JsonStore:
    """
    Key-value store: each string key is one JSON file under root.
    Values must be JSON-serializable.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def save(self, key: str, data: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(path)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save %s", key)
            raise

    def load(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to load %s, using default", key)
            return default

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> List[str]:
        return sorted(p.stem for p in self.root.glob("*.json"))


def _load_records(store: JsonStore, key: str, from_dict) -> list:
    raw = store.load(key, [])
    if not isinstance(raw, list):
        logger.warning("Ignoring %s: expected a list, got %s", key, type(raw).__name__)
        return []
    records = []
    for item in raw:
        try:
            records.append(from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Skipping malformed record in %s", key)
    return records


def load_tests(store: JsonStore) -> List[Test]:
    return _load_records(store, STORAGE_KEYS["TESTS"], Test.from_dict)


def save_tests(store: JsonStore, tests: List[Test]) -> None:
    store.save(STORAGE_KEYS["TESTS"], [t.to_dict() for t in tests])


def load_notes(store: JsonStore) -> List[StudyNote]:
    return _load_records(store, STORAGE_KEYS["NOTES"], StudyNote.from_dict)


def save_notes(store: JsonStore, notes: List[StudyNote]) -> None:
    store.save(STORAGE_KEYS["NOTES"], [n.to_dict() for n in notes])


def load_history(store: JsonStore) -> List[TestHistory]:
    return _load_records(store, STORAGE_KEYS["HISTORY"], TestHistory.from_dict)


def save_history(store: JsonStore, history: List[TestHistory]) -> None:
    store.save(STORAGE_KEYS["HISTORY"], [h.to_dict() for h in history])
