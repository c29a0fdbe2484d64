"""String discovery over PHP and Blade source trees."""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .ignore_rules import IgnoreRuleSet, extract_namespace
from .patterns import DEFAULT_RULES, PatternRule, extract_candidates
from ..utils.logging import module_logger
from ..utils.progress import ProgressCallback, ProgressReporter

logger = module_logger('scanner')

# rglob('*.php') also yields '*.blade.php' templates.
SOURCE_GLOB = '*.php'


class Scanner:
    """
    Walks scan roots and collects translatable strings.

    The scanner is single-threaded and holds no state between calls, so
    scanning the same tree twice yields the same set.

    Usage:
        scanner = Scanner(IgnoreRuleSet(), on_progress=print)
        strings = scanner.scan([Path('app'), Path('resources')])
    """

    def __init__(
        self,
        ignore_rules: Optional[IgnoreRuleSet] = None,
        pattern_rules: Sequence[PatternRule] = DEFAULT_RULES,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.ignore_rules = ignore_rules if ignore_rules is not None else IgnoreRuleSet()
        self.pattern_rules = tuple(pattern_rules)
        self.progress = ProgressReporter(on_progress)

    def collect_files(self, roots: Iterable[Path]) -> List[Tuple[Path, Path]]:
        """
        Enumerate candidate source files under ``roots``.

        Missing roots are skipped. A file reachable from two roots is listed
        once, under the first root that reaches it.

        Returns:
            List of ``(file_path, root)`` pairs in a stable order
        """
        files: List[Tuple[Path, Path]] = []
        seen: Set[Path] = set()

        for root in roots:
            root = Path(root)
            if not root.is_dir():
                logger.debug(f"Skipping missing scan root: {root}")
                continue

            for file_path in sorted(root.rglob(SOURCE_GLOB)):
                if not file_path.is_file():
                    continue
                relative = file_path.relative_to(root)
                if self.ignore_rules.is_path_ignored(relative):
                    continue
                resolved = file_path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                files.append((file_path, root))

        return files

    def scan(self, roots: Iterable[Path]) -> Set[str]:
        """
        Scan every root and return the deduplicated set of strings.

        Progress fires once per file after it is processed, with ``file``
        and ``path`` in the event extras.
        """
        files = self.collect_files(roots)
        total = len(files)
        found: Set[str] = set()

        logger.debug(f"Scanning {total} files")

        for index, (file_path, root) in enumerate(files, 1):
            found.update(self.scan_file(file_path, root))
            self.progress.report(index, total, file=file_path.name, path=str(file_path))

        logger.info(f"Found {len(found)} strings in {total} files")
        return found

    def scan_file(self, file_path: Path, root: Optional[Path] = None) -> Set[str]:
        """Extract the strings of one file, honouring every ignore axis."""
        rules = self.ignore_rules
        relative = file_path.relative_to(root) if root is not None else None

        if rules.is_file_ignored(file_path, relative):
            return set()

        try:
            content = file_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable file {file_path}: {e}")
            return set()

        if rules.is_namespace_ignored(extract_namespace(content)):
            return set()

        if rules.is_extension_ignored(file_path):
            return set()

        return {
            text for text in extract_candidates(content, self.pattern_rules)
            if not rules.is_string_ignored(text)
        }


def scan(
    roots: Iterable[Path],
    ignore_rules: Optional[IgnoreRuleSet] = None,
    pattern_rules: Sequence[PatternRule] = DEFAULT_RULES,
    on_progress: Optional[ProgressCallback] = None,
) -> Set[str]:
    """Functional shortcut for ``Scanner(...).scan(roots)``."""
    return Scanner(ignore_rules, pattern_rules, on_progress).scan(roots)
