"""AI translation client with placeholder protection and retries."""

import re
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Protocol

from .prompts import QUOTE_PLACEHOLDER
from .providers import ChatCompletionBackend, resolve_provider
from ..core.table_store import Entries, normalize_entries
from ..exceptions import TranslatorError
from ..utils.logging import module_logger
from ..utils.retry import call_with_retry

logger = module_logger('translator')

# Laravel-style interpolation markers (:name, :count); "\:" is a literal colon.
PLACEHOLDER_PATTERN = re.compile(r'(?<!\\):[A-Za-z_][A-Za-z0-9_]*')
_TOKEN_PATTERN = re.compile(r'__PH(\d+)__')
# Placeholders plus any literal sentinel text, which must not reach the wire verbatim.
_MASKED_PATTERN = re.compile(
    PLACEHOLDER_PATTERN.pattern + r'|__PH\d+__|' + re.escape(QUOTE_PLACEHOLDER)
)


class TranslationBackend(Protocol):
    def complete(self, strings: Mapping[str, str], source: str, target: str) -> Dict[str, str]:
        ...


@dataclass
class MaskedChunk:
    """
    A chunk prepared for the wire.

    Placeholder tokens are numbered per distinct placeholder text across the
    whole chunk. Text that already looks like a token or like the quote
    marker is tokenized too, so masking never makes two different keys collide.
    """
    payload: Dict[str, str] = field(default_factory=dict)
    key_map: Dict[str, str] = field(default_factory=dict)
    tokens: List[str] = field(default_factory=list)
    _token_index: Dict[str, int] = field(default_factory=dict, repr=False)

    def mask(self, text: str) -> str:
        def _token(match: 're.Match') -> str:
            placeholder = match.group(0)
            index = self._token_index.get(placeholder)
            if index is None:
                index = self._token_index[placeholder] = len(self.tokens)
                self.tokens.append(placeholder)
            return f'__PH{index}__'

        return _MASKED_PATTERN.sub(_token, text).replace('"', QUOTE_PLACEHOLDER)

    def unmask(self, text: str) -> str:
        def _placeholder(match: 're.Match') -> str:
            index = int(match.group(1))
            return self.tokens[index] if index < len(self.tokens) else match.group(0)

        return _TOKEN_PATTERN.sub(_placeholder, text.replace(QUOTE_PLACEHOLDER, '"'))

    def add(self, key: str, value: str) -> None:
        masked_key = self.mask(key)
        previous = self.key_map.get(masked_key)
        if previous is not None and previous != key:
            logger.warning(f"Keys {previous!r} and {key!r} collide on the wire; keeping {key!r}")
        self.payload[masked_key] = self.mask(value)
        self.key_map[masked_key] = key

    def restore(self, response: Mapping[str, str]) -> Dict[str, str]:
        """Map a backend response back to original keys; invented keys are dropped."""
        restored = {}
        for masked_key, translation in response.items():
            original = self.key_map.get(masked_key)
            if original is None:
                logger.debug(f"Dropping unexpected key from translator: {masked_key!r}")
                continue
            restored[original] = self.unmask(translation)
        return restored


def mask_chunk(strings: Mapping[str, str]) -> MaskedChunk:
    chunk = MaskedChunk()
    for key, value in strings.items():
        chunk.add(key, value)
    return chunk


class AITranslator:
    """
    Translates one chunk of strings between two languages.

    Transient backend failures (:class:`TranslatorError`) are retried with
    linear backoff. Once attempts are exhausted the failure is logged and an
    empty dict is returned; callers never see the exception. A result may
    cover only part of the requested keys.

    Usage:
        translator = AITranslator(backend, max_retries=3, retry_delay=2)
        result = translator.translate({'Save': 'Save'}, 'en', 'es')
    """

    def __init__(
        self,
        backend: TranslationBackend,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.backend = backend
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep

    @classmethod
    def create(
        cls,
        model: str = 'gpt-4o-mini',
        temperature: float = 0.2,
        provider: str = 'openai',
        api_key: str = '',
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        context: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> 'AITranslator':
        """Build a translator backed by :class:`ChatCompletionBackend`."""
        backend = ChatCompletionBackend(
            spec=resolve_provider(provider, base_url),
            api_key=api_key,
            model=model,
            temperature=temperature,
            timeout=timeout,
            context=context,
        )
        return cls(backend, max_retries=max_retries, retry_delay=retry_delay)

    def translate(self, strings: Entries, source: str, target: str) -> Dict[str, str]:
        """
        Translate ``strings`` from ``source`` to ``target``.

        Args:
            strings: Mapping of key -> source text, or a collection of strings
            source: Source language code
            target: Target language code

        Returns:
            Original key -> translation; possibly a subset, ``{}`` on failure
        """
        entries = normalize_entries(strings)
        if not entries:
            return {}

        chunk = mask_chunk(entries)

        def _attempt() -> Dict[str, str]:
            return chunk.restore(self.backend.complete(chunk.payload, source, target))

        return call_with_retry(
            _attempt,
            default={},
            max_attempts=self.max_retries,
            retry_delay=self.retry_delay,
            retry_on=(TranslatorError,),
            sleep=self.sleep,
            description=f"Translation {source}->{target} ({len(entries)} strings)",
        )
