"""Persistence for per-language string tables."""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Iterable, Mapping, Union

from ..utils.logging import module_logger

logger = module_logger('table_store')

Entries = Union[Mapping[str, str], Iterable[str]]


def normalize_entries(entries: Entries) -> Dict[str, str]:
    """
    Turn ``entries`` into a key -> value dict.

    A mapping is copied as-is; a collection of strings becomes an identity
    map where each string is both key and value.
    """
    if isinstance(entries, Mapping):
        return {str(k): str(v) for k, v in entries.items()}
    if isinstance(entries, str):
        return {entries: entries}
    return {text: text for text in entries}


class LanguageTableStore:
    """
    Reads and merges flat ``{string: translation}`` JSON tables.

    Merges into the same table are serialized by a per-table lock. Writes
    go to a temp file in the table's directory and are moved into place with
    ``os.replace``, so a reader sees either the old or the new table.
    """

    def __init__(self, indent: int = 4):
        self.indent = indent
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, table: Path) -> threading.Lock:
        key = str(Path(table).resolve())
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def read(self, table: Path) -> Dict[str, str]:
        """Return the table contents, or ``{}`` when it does not exist or is malformed."""
        table = Path(table)
        if not table.exists():
            return {}

        try:
            with open(table, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring malformed language table {table}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring language table {table}: top level is not an object")
            return {}

        return {str(k): v if isinstance(v, str) else str(v) for k, v in data.items()}

    def merge(self, table: Path, entries: Entries) -> Dict[str, str]:
        """
        Overlay ``entries`` on the stored table and write the union back.

        New keys are added and colliding keys take the new value. Keys absent
        from ``entries`` are never removed.

        Returns:
            The merged table
        """
        table = Path(table)
        updates = normalize_entries(entries)

        with self._lock_for(table):
            merged = self.read(table)
            merged.update(updates)
            self._write(table, merged)

        logger.debug(f"Merged {len(updates)} entries into {table}")
        return merged

    def _write(self, table: Path, data: Dict[str, str]) -> None:
        table.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{table.name}.", suffix='.tmp', dir=str(table.parent))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=self.indent)
                f.write('\n')
            os.replace(tmp_name, table)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
