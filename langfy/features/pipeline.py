"""
Langfy pipeline
===============

One scan root per run: find strings, store the new ones in the source
table, translate what each target table lacks.

Usage:
    request = (
        RequestBuilder(config)
        .for_module('Billing')
        .finder()
        .save()
        .translate(to=['es_ES'])
        .build()
    )
    result = Langfy(config).perform(request)
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .orchestrator import TranslationOrchestrator, TranslationReport
from .translator import AITranslator
from ..core.context import ScanRoot
from ..core.diff import missing
from ..core.scanner import Scanner
from ..core.table_store import Entries, LanguageTableStore
from ..exceptions import ConfigurationError
from ..utils.config import Config
from ..utils.logging import module_logger
from ..utils.progress import ProgressCallback
from ..utils.validators import split_language_list

logger = module_logger('pipeline')


@dataclass(frozen=True)
class TranslationJob:
    """
    A deferred translation of one root's strings into one language.

    Jobs are built in queued mode and handed to a job sink; whoever runs
    them calls :meth:`handle` with an orchestrator.
    """
    strings: Dict[str, str]
    source: str
    target: str
    table_path: Path
    root_name: str = 'application'

    def handle(self, orchestrator: TranslationOrchestrator) -> Dict[str, str]:
        if not self.strings:
            return {}
        translations = orchestrator.translate(
            self.strings, self.source, [self.target], table_for=lambda _language: self.table_path
        )
        return translations.get(self.target, {})


JobSink = Callable[[List[TranslationJob]], None]


@dataclass(frozen=True)
class LangfyRequest:
    """Immutable description of one pipeline run."""
    root: ScanRoot
    source: str
    find: bool = False
    save: bool = False
    translate: bool = False
    targets: Tuple[str, ...] = ()
    queued: bool = False
    on_finder_progress: Optional[ProgressCallback] = None
    on_translate_progress: Optional[ProgressCallback] = None


@dataclass
class PerformResult:
    """What one :meth:`Langfy.perform` call did."""
    root: ScanRoot
    found: Dict[str, str] = field(default_factory=dict)
    new_strings: Dict[str, str] = field(default_factory=dict)
    translations: Dict[str, Dict[str, str]] = field(default_factory=dict)
    jobs: List[TranslationJob] = field(default_factory=list)
    report: Optional[TranslationReport] = None

    @property
    def found_strings(self) -> int:
        return len(self.found)

    @property
    def translated_count(self) -> int:
        return sum(len(t) for t in self.translations.values())


class RequestBuilder:
    """Accumulates options and produces a :class:`LangfyRequest`."""

    def __init__(self, config: Config):
        self.config = config
        self._root: Optional[ScanRoot] = None
        self._module: Optional[str] = None
        self._find = False
        self._save = False
        self._translate = False
        self._targets: Optional[List[str]] = None
        self._source: Optional[str] = None
        self._queued = False
        self._on_finder_progress: Optional[ProgressCallback] = None
        self._on_translate_progress: Optional[ProgressCallback] = None

    def for_application(self) -> 'RequestBuilder':
        self._root = self.config.application_root()
        self._module = None
        return self

    def for_module(self, name: str) -> 'RequestBuilder':
        self._root = None
        self._module = name
        return self

    def for_root(self, root: ScanRoot) -> 'RequestBuilder':
        self._root = root
        self._module = None
        return self

    def finder(self, enabled: bool = True) -> 'RequestBuilder':
        self._find = enabled
        return self

    def save(self, enabled: bool = True) -> 'RequestBuilder':
        self._save = enabled
        return self

    def translate(self, to: Union[str, Iterable[str], None] = None) -> 'RequestBuilder':
        """Enable translation into ``to`` (defaults to the configured targets)."""
        self._translate = True
        if to is not None:
            self._targets = split_language_list(to)
        return self

    def source(self, language: str) -> 'RequestBuilder':
        self._source = language
        return self

    def queued(self, enabled: bool = True) -> 'RequestBuilder':
        self._queued = enabled
        return self

    def on_finder_progress(self, callback: ProgressCallback) -> 'RequestBuilder':
        self._on_finder_progress = callback
        return self

    def on_translate_progress(self, callback: ProgressCallback) -> 'RequestBuilder':
        self._on_translate_progress = callback
        return self

    def build(self) -> LangfyRequest:
        """
        Raises:
            ConfigurationError: Unknown module or translation without targets
        """
        if self._module is not None:
            root = self.config.module_root(self._module)
        else:
            root = self._root or self.config.application_root()

        targets: Tuple[str, ...] = ()
        if self._translate:
            targets = tuple(
                self._targets if self._targets is not None else self.config.languages.targets
            )
            if not targets:
                raise ConfigurationError("No target languages specified")

        return LangfyRequest(
            root=root,
            source=self._source or self.config.languages.source,
            find=self._find,
            save=self._save,
            translate=self._translate,
            targets=targets,
            queued=self._queued,
            on_finder_progress=self._on_finder_progress,
            on_translate_progress=self._on_translate_progress,
        )


class Langfy:
    """
    Runs :class:`LangfyRequest` objects against one configuration.

    The translator is built from the ``ai`` section on first use unless one
    is injected.
    """

    def __init__(
        self,
        config: Config,
        translator: Optional[AITranslator] = None,
        store: Optional[LanguageTableStore] = None,
        job_sink: Optional[JobSink] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self._translator = translator
        self.store = store or LanguageTableStore()
        self.job_sink = job_sink
        self.sleep = sleep

    def request(self) -> RequestBuilder:
        return RequestBuilder(self.config)

    @property
    def translator(self) -> AITranslator:
        if self._translator is None:
            ai = self.config.ai
            self._translator = AITranslator.create(
                model=ai.model,
                temperature=ai.temperature,
                provider=ai.provider,
                api_key=ai.api_key,
                base_url=ai.base_url or None,
                timeout=ai.timeout,
                context=self.config.project.context or None,
                max_retries=self.config.translation.max_retries,
                retry_delay=self.config.translation.retry_delay,
            )
        return self._translator

    def orchestrator(self, on_progress: Optional[ProgressCallback] = None) -> TranslationOrchestrator:
        return TranslationOrchestrator(
            self.translator,
            settings=self.config.translation_settings(),
            store=self.store,
            on_progress=on_progress,
            sleep=self.sleep,
        )

    def perform(self, request: LangfyRequest) -> PerformResult:
        """
        Run the enabled stages of ``request``.

        Raises:
            ConfigurationError: Finder enabled but none of the root's paths exist
        """
        root = request.root
        result = PerformResult(root=root)
        source_table = root.table_path(request.source)

        if request.find:
            if not root.existing_paths():
                raise ConfigurationError(
                    f"No scan paths exist for {root.name}: {', '.join(str(p) for p in root.paths)}"
                )
            scanner = Scanner(
                self.config.ignore_rules(),
                self.config.pattern_rules(),
                on_progress=request.on_finder_progress,
            )
            result.found = {text: text for text in sorted(scanner.scan(root.paths))}

        if request.save and result.found:
            result.new_strings = missing(result.found, self.store.read(source_table))
            if result.new_strings:
                self.store.merge(source_table, result.new_strings)
                logger.info(f"Saved {len(result.new_strings)} new strings to {source_table}")

        if request.translate:
            strings = dict(result.found)
            strings.update(self.store.read(source_table))
            if request.queued:
                result.jobs = self._dispatch_jobs(request, strings)
            else:
                result.report = self.orchestrator(request.on_translate_progress).translate_with_report(
                    strings, request.source, request.targets, table_for=root.table_path
                )
                result.translations = result.report.translations

        return result

    def _dispatch_jobs(self, request: LangfyRequest, strings: Dict[str, str]) -> List[TranslationJob]:
        jobs = []
        for target in request.targets:
            if target == request.source:
                continue
            table = request.root.table_path(target)
            pending = missing(strings, self.store.read(table))
            if not pending:
                continue
            jobs.append(TranslationJob(
                strings=pending,
                source=request.source,
                target=target,
                table_path=table,
                root_name=request.root.name,
            ))

        if jobs and self.job_sink is not None:
            self.job_sink(jobs)
        logger.info(f"Dispatched {len(jobs)} translation jobs for {request.root.name}")
        return jobs

    def quick_translate(
        self,
        strings: Entries,
        to: Union[str, Sequence[str], None] = None,
        source: Optional[str] = None,
    ):
        """Translate ``strings`` without reading or writing any table."""
        targets = to if to is not None else list(self.config.languages.targets)
        if not targets:
            raise ConfigurationError("No target languages specified")
        return self.orchestrator().quick_translate(
            strings, targets, source or self.config.languages.source
        )
