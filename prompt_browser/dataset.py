"""Static prompt dataset: record type, path resolution and loaders."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

import duckdb

_DEFAULT_DATA_PATH = Path(__file__).parent / "data" / "prompts.json"

DUCKDB_SUFFIXES = {".duckdb", ".db"}


class DatasetError(Exception):
    """Raised when a prompt source cannot be read or is malformed."""


@dataclass(frozen=True)
class PromptRecord:
    """A single prompt: heading used for search, content used for copy."""
    id: str
    heading: str
    content: str


class Dataset:
    """Read-only, ordered collection of prompt records.

    Ids are unique for the lifetime of the dataset.
    """

    def __init__(self, records: Iterable[PromptRecord] = ()):
        self._records = tuple(records)
        self._by_id: dict[str, PromptRecord] = {}
        for record in self._records:
            if record.id in self._by_id:
                raise DatasetError(f"Duplicate prompt id: {record.id!r}")
            self._by_id[record.id] = record

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PromptRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> PromptRecord:
        return self._records[index]

    def __repr__(self) -> str:
        return f"Dataset({len(self._records)} prompts)"

    @property
    def records(self) -> tuple[PromptRecord, ...]:
        return self._records

    def get(self, prompt_id: str) -> Optional[PromptRecord]:
        return self._by_id.get(prompt_id)


def get_default_data_path() -> Path:
    return _DEFAULT_DATA_PATH


def get_data_path(override: Optional[str] = None) -> Path:
    """Return the configured dataset path.

    Resolution order: explicit override, `PROMPT_BROWSER_DATA`, bundled default.
    """
    if override:
        return Path(override).expanduser()
    env = os.environ.get("PROMPT_BROWSER_DATA")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_DATA_PATH


def _record_from_mapping(raw: object, position: int) -> PromptRecord:
    if not isinstance(raw, dict):
        raise DatasetError(f"Prompt #{position} is not an object")

    fields = {}
    for name in ("id", "heading", "content"):
        value = raw.get(name)
        if not isinstance(value, str):
            raise DatasetError(f"Prompt #{position} has no string field {name!r}")
        fields[name] = value
    return PromptRecord(**fields)


def parse_dataset(data: object) -> Dataset:
    """Build a dataset from a decoded `{"prompts": [...]}` document."""
    if not isinstance(data, dict) or not isinstance(data.get("prompts"), list):
        raise DatasetError("Expected an object with a 'prompts' list")
    return Dataset(
        _record_from_mapping(raw, position)
        for position, raw in enumerate(data["prompts"], 1)
    )


def load_json_dataset(path: Path) -> Dataset:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DatasetError(f"Cannot read prompts from {path}: {e}") from e
    return parse_dataset(data)


def load_duckdb_dataset(path: Path) -> Dataset:
    """Load prompts from the `prompts` table of a DuckDB file, in insertion order."""
    if not path.is_file():
        raise DatasetError(f"Database not found: {path}")

    try:
        conn = duckdb.connect(str(path), read_only=True)
    except duckdb.Error as e:
        raise DatasetError(f"Cannot open {path}: {e}") from e

    try:
        rows = conn.execute(
            """
            SELECT id, heading, content
            FROM prompts
            ORDER BY rowid
            """
        ).fetchall()
    except duckdb.Error as e:
        raise DatasetError(f"Cannot read prompts table from {path}: {e}") from e
    finally:
        conn.close()

    columns = ["id", "heading", "content"]
    return Dataset(
        _record_from_mapping(dict(zip(columns, row)), position)
        for position, row in enumerate(rows, 1)
    )


def load_dataset(path: Optional[Path] = None) -> Dataset:
    """Load the dataset once, choosing the loader by file suffix."""
    path = path or get_data_path()
    if path.suffix.lower() in DUCKDB_SUFFIXES:
        return load_duckdb_dataset(path)
    return load_json_dataset(path)
