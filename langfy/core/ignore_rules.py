"""Suppression rules applied by the scanner."""

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterable, Optional, Tuple

from ..utils.logging import module_logger

logger = module_logger('ignore_rules')

DEFAULT_IGNORE_PATHS = (
    'vendor',
    'node_modules',
    'storage',
    'bootstrap',
    'public',
    'lang',
    'bootstrap/cache',
)

DEFAULT_IGNORE_EXTENSIONS = (
    'json',
    'md',
    'txt',
    'log',
)

_NAMESPACE = re.compile(r'^\s*namespace\s+\\?([A-Za-z_][\w\\]*)\s*[;{]', re.MULTILINE)


def extract_namespace(content: str) -> Optional[str]:
    """Return the first ``namespace Foo\\Bar;`` declared in ``content``."""
    match = _NAMESPACE.search(content)
    return match.group(1) if match else None


def _normalize_fragment(fragment: str) -> Tuple[str, ...]:
    return tuple(part for part in fragment.replace('\\', '/').split('/') if part)


def _compile_patterns(patterns: Iterable[str]) -> Tuple[re.Pattern, ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except (re.error, TypeError) as e:
            logger.warning(f"Skipping invalid ignore pattern {pattern!r}: {e}")
    return tuple(compiled)


@dataclass(frozen=True)
class IgnoreRuleSet:
    """
    Independent suppression axes for files and strings.

    Path fragments match whole path segments relative to the scan root, so
    ``lang`` excludes ``lang/en.json`` but not ``language_helpers.php``.
    Namespaces match by prefix (a leading backslash is ignored). Invalid
    regex patterns are dropped with a warning when the set is built.
    """
    paths: Tuple[str, ...] = DEFAULT_IGNORE_PATHS
    extensions: Tuple[str, ...] = DEFAULT_IGNORE_EXTENSIONS
    files: Tuple[str, ...] = ()
    namespaces: Tuple[str, ...] = ()
    strings: Tuple[str, ...] = ()
    patterns: Tuple[str, ...] = ()
    _path_parts: Tuple[Tuple[str, ...], ...] = field(init=False, repr=False, compare=False)
    _regexes: Tuple[re.Pattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ('paths', 'extensions', 'files', 'namespaces', 'strings', 'patterns'):
            object.__setattr__(self, name, tuple(getattr(self, name) or ()))

        object.__setattr__(self, 'extensions', tuple(ext.lower().lstrip('.') for ext in self.extensions))
        object.__setattr__(self, 'namespaces', tuple(ns.lstrip('\\') for ns in self.namespaces if ns))
        object.__setattr__(
            self, '_path_parts',
            tuple(parts for parts in (_normalize_fragment(p) for p in self.paths) if parts)
        )
        object.__setattr__(self, '_regexes', _compile_patterns(self.patterns))

    @classmethod
    def empty(cls) -> 'IgnoreRuleSet':
        """A rule set that suppresses nothing."""
        return cls(paths=(), extensions=())

    @property
    def valid_patterns(self) -> Tuple[str, ...]:
        return tuple(regex.pattern for regex in self._regexes)

    def is_path_ignored(self, relative_path: PurePath) -> bool:
        """True if any ignore-path fragment matches consecutive path segments."""
        parts = relative_path.parts
        for fragment in self._path_parts:
            size = len(fragment)
            for start in range(len(parts) - size + 1):
                if parts[start:start + size] == fragment:
                    return True
        return False

    def is_file_ignored(self, file_path: Path, relative_path: Optional[PurePath] = None) -> bool:
        """Exact match on the file name or on the root-relative path."""
        if file_path.name in self.files:
            return True
        return relative_path is not None and relative_path.as_posix() in self.files

    def is_namespace_ignored(self, namespace: Optional[str]) -> bool:
        if not namespace:
            return False
        return any(namespace.startswith(prefix) for prefix in self.namespaces)

    def is_extension_ignored(self, file_path: Path) -> bool:
        """Checks both the last suffix (``php``) and the compound one (``blade.php``)."""
        name = file_path.name.lower()
        if '.' not in name:
            return False
        last = name.rsplit('.', 1)[1]
        compound = name.split('.', 1)[1]
        return last in self.extensions or compound in self.extensions

    def is_string_ignored(self, text: str) -> bool:
        """True if ``text`` is listed literally or matches any ignore pattern."""
        if text in self.strings:
            return True
        for regex in self._regexes:
            if regex.search(text):
                return True
        return False
