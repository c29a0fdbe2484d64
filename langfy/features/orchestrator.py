"""Chunked, retrying translation of string sets into many languages."""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .translator import AITranslator
from ..core.diff import missing
from ..core.table_store import Entries, LanguageTableStore, normalize_entries
from ..utils.logging import module_logger
from ..utils.progress import ProgressCallback, ProgressReporter
from ..utils.retry import chunked, linear_delay

logger = module_logger('orchestrator')

TableResolver = Callable[[str], Path]
SaveCallback = Callable[[str, Dict[str, str]], None]


@dataclass
class TranslationSettings:
    """Chunking, concurrency and retry knobs."""
    chunk_size: int = 15
    concurrent: bool = True
    max_concurrent: int = 3
    max_retries: int = 3
    retry_delay: float = 2.0


@dataclass
class TranslationReport:
    """Outcome of one :meth:`TranslationOrchestrator.translate_with_report` call."""
    translations: Dict[str, Dict[str, str]] = field(default_factory=dict)
    unresolved: Dict[str, List[str]] = field(default_factory=dict)
    missing_history: Dict[str, List[int]] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not any(self.unresolved.values())

    @property
    def total_translated(self) -> int:
        return sum(len(t) for t in self.translations.values())


@dataclass
class _ChunkJob:
    language: str
    strings: Dict[str, str]


class TranslationOrchestrator:
    """
    Drives string sets through an :class:`AITranslator` for several languages.

    For each target language the strings already present in its table are
    skipped, the rest are split into chunks and dispatched either one at a
    time or in waves of ``max_concurrent`` chunks sharing one thread pool.
    Chunk results are merged into the language table as soon as they arrive.
    Keys the translator omitted are re-requested in reconciliation rounds
    with linear backoff; keys still missing after ``max_retries`` fruitless
    rounds are logged, never raised.
    """

    def __init__(
        self,
        translator: AITranslator,
        settings: Optional[TranslationSettings] = None,
        store: Optional[LanguageTableStore] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_save: Optional[SaveCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.translator = translator
        self.settings = settings or TranslationSettings()
        self.store = store or LanguageTableStore()
        self.progress = ProgressReporter(on_progress)
        self.on_save = on_save
        self.sleep = sleep

    def translate(
        self,
        strings: Entries,
        source: str,
        targets: Iterable[str],
        table_for: Optional[TableResolver] = None,
    ) -> Dict[str, Dict[str, str]]:
        """
        Translate ``strings`` into every language of ``targets``.

        Args:
            strings: Mapping of key -> source text, or a collection of strings
            source: Source language code
            targets: Target language codes
            table_for: Resolves a language to its table path; when given,
                strings already in the table are skipped and results are
                persisted chunk by chunk

        Returns:
            ``{language: {key: translation}}`` for the strings translated in this call
        """
        return self.translate_with_report(strings, source, targets, table_for).translations

    def quick_translate(
        self,
        strings: Entries,
        targets: Union[str, Sequence[str]],
        source: str,
    ) -> Union[Dict[str, str], Dict[str, Dict[str, str]]]:
        """
        Translate without touching any table.

        A single target given as a string returns its map directly; a list
        returns ``{language: map}``.
        """
        if isinstance(targets, str):
            return self.translate(strings, source, [targets]).get(targets, {})
        return self.translate(strings, source, targets)

    def translate_with_report(
        self,
        strings: Entries,
        source: str,
        targets: Iterable[str],
        table_for: Optional[TableResolver] = None,
    ) -> TranslationReport:
        entries = normalize_entries(strings)
        languages = self._target_languages(source, targets)
        report = TranslationReport(translations={lang: {} for lang in languages})

        pending: Dict[str, Dict[str, str]] = {}
        for language in languages:
            if table_for is not None:
                pending[language] = missing(entries, self.store.read(table_for(language)))
            else:
                pending[language] = dict(entries)

        jobs = [
            _ChunkJob(language, dict(chunk))
            for language in languages
            for chunk in chunked(list(pending[language].items()), self.settings.chunk_size)
        ]

        if jobs:
            logger.info(f"Translating {len(entries)} strings from {source} in {len(jobs)} chunks")

        totals = {lang: sum(1 for job in jobs if job.language == lang) for lang in languages}
        processed = {lang: 0 for lang in languages}

        def absorb(job: _ChunkJob, result: Dict[str, str]) -> None:
            self._absorb(job, result, report, table_for)
            processed[job.language] += 1
            self.progress.report(processed[job.language], totals[job.language], language=job.language)

        if self.settings.concurrent and len(jobs) > 1:
            self._dispatch_waves(jobs, source, absorb)
        else:
            for job in jobs:
                absorb(job, self._run_chunk(job, source))

        for language in languages:
            self._reconcile(language, source, pending[language], report, table_for)

        return report

    def _target_languages(self, source: str, targets: Iterable[str]) -> List[str]:
        languages = []
        for language in targets:
            if not language or language in languages:
                continue
            if language == source:
                logger.info(f"Skipping target {language}: same as source language")
                continue
            languages.append(language)
        return languages

    def _dispatch_waves(self, jobs: List[_ChunkJob], source: str, absorb) -> None:
        """Run ``jobs`` in waves; a wave completes before the next one starts."""
        width = max(1, self.settings.max_concurrent)

        with ThreadPoolExecutor(max_workers=width) as executor:
            for wave in chunked(jobs, width):
                futures = {executor.submit(self._translate_job, job, source): job for job in wave}
                for future in as_completed(futures):
                    job = futures[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        logger.error(f"Chunk for {job.language} failed: {e}")
                        result = {}
                    absorb(job, result)

    def _translate_job(self, job: _ChunkJob, source: str) -> Dict[str, str]:
        result = self.translator.translate(job.strings, source, job.language) or {}
        return {k: v for k, v in result.items() if k in job.strings}

    def _run_chunk(self, job: _ChunkJob, source: str) -> Dict[str, str]:
        try:
            return self._translate_job(job, source)
        except Exception as e:
            logger.error(f"Chunk for {job.language} failed: {e}")
            return {}

    def _absorb(
        self,
        job: _ChunkJob,
        result: Dict[str, str],
        report: TranslationReport,
        table_for: Optional[TableResolver],
    ) -> None:
        if not result:
            return
        report.translations[job.language].update(result)
        if table_for is not None:
            self.store.merge(table_for(job.language), result)
        if self.on_save is not None:
            self.on_save(job.language, result)

    def _reconcile(
        self,
        language: str,
        source: str,
        requested: Dict[str, str],
        report: TranslationReport,
        table_for: Optional[TableResolver],
    ) -> None:
        """Re-request omitted keys until none are left or retries run out."""
        received = report.translations[language]
        history: List[int] = []
        failures = 0

        outstanding = {k: v for k, v in requested.items() if k not in received}
        while outstanding and failures < self.settings.max_retries:
            history.append(len(outstanding))
            new = 0

            for chunk in chunked(list(outstanding.items()), self.settings.chunk_size):
                job = _ChunkJob(language, dict(chunk))
                result = self._run_chunk(job, source)
                new += sum(1 for key in result if key not in received)
                self._absorb(job, result, report, table_for)

            if new == 0:
                failures += 1
                if failures < self.settings.max_retries:
                    delay = linear_delay(self.settings.retry_delay, failures)
                    logger.warning(
                        f"No progress translating {len(outstanding)} {language} strings, "
                        f"retrying in {delay}s"
                    )
                    self.sleep(delay)
            else:
                failures = 0

            outstanding = {k: v for k, v in outstanding.items() if k not in received}

        report.missing_history[language] = history
        report.unresolved[language] = sorted(outstanding)

        if outstanding:
            logger.error(
                f"{len(outstanding)} strings could not be translated to {language}: "
                f"{', '.join(sorted(outstanding)[:10])}"
            )
