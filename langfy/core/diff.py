"""Diff engine - which strings a language table still lacks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .table_store import Entries, normalize_entries


def missing(candidates: Entries, existing: Mapping[str, str]) -> Dict[str, str]:
    """
    Entries of ``candidates`` whose key is absent from ``existing``.

    Args:
        candidates: Mapping or collection of strings (identity-normalized)
        existing: The table to compare against

    Returns:
        New dict, candidate order preserved
    """
    return {
        key: value
        for key, value in normalize_entries(candidates).items()
        if key not in existing
    }


class DiffType(Enum):
    """Classification of one key between two tables."""
    MISSING = "missing"            # in source, absent from target
    EXTRA = "extra"                # in target only
    TRANSLATED = "translated"      # both, value differs
    UNTRANSLATED = "untranslated"  # both, same value


@dataclass
class DiffEntry:
    key: str
    diff_type: DiffType
    source_value: Optional[str] = None
    target_value: Optional[str] = None


@dataclass
class DiffResult:
    """Per-key comparison of a source table and a target table."""
    source_lang: str
    target_lang: str
    missing: List[DiffEntry] = field(default_factory=list)
    extra: List[DiffEntry] = field(default_factory=list)
    translated: List[DiffEntry] = field(default_factory=list)
    untranslated: List[DiffEntry] = field(default_factory=list)

    @property
    def total_source(self) -> int:
        return len(self.missing) + len(self.translated) + len(self.untranslated)

    @property
    def coverage(self) -> float:
        """Percentage of source keys present in the target table."""
        if self.total_source == 0:
            return 100.0
        present = len(self.translated) + len(self.untranslated)
        return round(present / self.total_source * 100, 2)

    @property
    def has_differences(self) -> bool:
        return bool(self.missing or self.extra)


def compare(
    source: Mapping[str, str],
    target: Mapping[str, str],
    source_lang: str = "en",
    target_lang: str = "es",
) -> DiffResult:
    """
    Classify every key of ``source`` and ``target``.

    Identical values count as untranslated; for an identity-keyed source
    table that usually means the target still holds the source text.
    """
    result = DiffResult(source_lang=source_lang, target_lang=target_lang)

    for key in sorted(set(source) - set(target)):
        result.missing.append(DiffEntry(key, DiffType.MISSING, source_value=source[key]))

    for key in sorted(set(target) - set(source)):
        result.extra.append(DiffEntry(key, DiffType.EXTRA, target_value=target[key]))

    for key in sorted(set(source) & set(target)):
        entry_type = DiffType.UNTRANSLATED if source[key] == target[key] else DiffType.TRANSLATED
        entry = DiffEntry(key, entry_type, source_value=source[key], target_value=target[key])
        if entry_type is DiffType.TRANSLATED:
            result.translated.append(entry)
        else:
            result.untranslated.append(entry)

    return result
