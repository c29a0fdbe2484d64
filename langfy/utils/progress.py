"""Progress events and their terminal rendering."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
import sys

from tqdm import tqdm


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification emitted by the scanner or orchestrator."""
    current: int
    total: int
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return round(self.current / self.total * 100, 2)

    @property
    def completed(self) -> bool:
        return self.current >= self.total

    @property
    def remaining(self) -> int:
        return max(self.total - self.current, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current': self.current,
            'total': self.total,
            'percentage': self.percentage,
            'completed': self.completed,
            'remaining': self.remaining,
            'extra': dict(self.extra),
        }


ProgressCallback = Callable[[ProgressEvent], None]


class ProgressReporter:
    """
    Builds :class:`ProgressEvent` objects and forwards them to a callback.

    A reporter without a callback is a no-op, so emitters never need to
    check whether anybody is listening.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback

    @property
    def enabled(self) -> bool:
        return self.callback is not None

    def report(self, current: int, total: int, **extra: Any) -> Optional[ProgressEvent]:
        """
        Emit a progress event.

        Args:
            current: Units processed so far
            total: Total units
            **extra: Context fields (``file``/``path`` or ``language``)

        Returns:
            The emitted event, or None when no callback is registered
        """
        if self.callback is None:
            return None

        event = ProgressEvent(current=current, total=total, extra=extra)
        self.callback(event)
        return event


class TqdmProgress:
    """
    Progress callback that renders events as tqdm bars.

    One bar is kept per ``key`` (e.g. the target language), so interleaved
    events from a multi-language translation each update their own bar.

    Usage:
        with TqdmProgress(desc="Scanning", unit="files") as bar:
            scanner = Scanner(rules, on_progress=bar)
            scanner.scan(roots)
    """

    def __init__(
        self,
        desc: str = '',
        unit: str = 'it',
        key: Optional[str] = None,
        disable: bool = False,
        file: Optional[object] = None,
    ):
        self.desc = desc
        self.unit = unit
        self.key = key
        self.disable = disable
        self.file = file or sys.stderr
        self._bars: Dict[str, tqdm] = {}

    def _bar_for(self, event: ProgressEvent) -> tqdm:
        label = str(event.extra.get(self.key, '')) if self.key else ''
        bar = self._bars.get(label)
        if bar is None:
            desc = f"{self.desc} {label}".strip()
            bar = tqdm(
                total=event.total,
                desc=desc,
                unit=self.unit,
                disable=self.disable,
                file=self.file,
                leave=True,
            )
            self._bars[label] = bar
        return bar

    def __call__(self, event: ProgressEvent) -> None:
        bar = self._bar_for(event)
        if bar.total != event.total:
            bar.total = event.total
        bar.n = event.current
        if 'file' in event.extra:
            bar.set_postfix_str(str(event.extra['file']), refresh=False)
        bar.refresh()

    def close(self) -> None:
        for bar in self._bars.values():
            bar.close()
        self._bars.clear()

    def __enter__(self) -> 'TqdmProgress':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
