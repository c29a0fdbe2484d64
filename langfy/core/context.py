"""Scan roots: the discovery boundaries that own their own language tables."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple


class Context(Enum):
    """Where a scan root comes from."""
    APPLICATION = "application"
    MODULE = "module"


@dataclass(frozen=True)
class ScanRoot:
    """
    One discovery boundary.

    Attributes:
        context: Application or module
        name: Display name (``application`` or the module name)
        paths: Directories scanned for source strings
        lang_dir: Directory holding ``<language>.json`` tables
    """
    context: Context
    name: str
    paths: Tuple[Path, ...]
    lang_dir: Path

    def __post_init__(self):
        object.__setattr__(self, 'paths', tuple(Path(p) for p in self.paths))
        object.__setattr__(self, 'lang_dir', Path(self.lang_dir))

    @property
    def is_module(self) -> bool:
        return self.context is Context.MODULE

    def table_path(self, language: str) -> Path:
        return self.lang_dir / f"{language}.json"

    def existing_paths(self) -> Tuple[Path, ...]:
        return tuple(p for p in self.paths if p.is_dir())
