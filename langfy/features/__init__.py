"""Feature modules: AI translation and orchestration."""

from .providers import Provider, ProviderSpec, ChatCompletionBackend, resolve_provider
from .translator import AITranslator
from .orchestrator import TranslationOrchestrator, TranslationReport, TranslationSettings

__all__ = [
    'Provider',
    'ProviderSpec',
    'ChatCompletionBackend',
    'resolve_provider',
    'AITranslator',
    'TranslationOrchestrator',
    'TranslationReport',
    'TranslationSettings',
]
