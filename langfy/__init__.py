"""
Langfy
======

Finds translatable strings in PHP and Blade sources and translates them
with an AI provider into per-language JSON tables.

Usage:
    from langfy import Config, Langfy

    config = Config.from_file()
    langfy = Langfy(config)
    request = langfy.request().for_application().finder().save().translate().build()
    result = langfy.perform(request)
    print(f"Found {result.found_strings} strings")

CLI:
    langfy finder --trans
    langfy trans --to es_ES,pt_BR
    langfy status
"""

from .__version__ import __version__, __author__, __description__

# Core exports
from .core.context import Context, ScanRoot
from .core.ignore_rules import IgnoreRuleSet
from .core.scanner import Scanner, scan
from .core.table_store import LanguageTableStore

# Features
from .features.orchestrator import TranslationOrchestrator, TranslationSettings
from .features.translator import AITranslator
from .features.pipeline import Langfy, LangfyRequest, RequestBuilder

from .exceptions import ConfigurationError, TranslatorError
from .utils.config import Config

__all__ = [
    '__version__',
    '__author__',
    '__description__',
    'Context',
    'ScanRoot',
    'IgnoreRuleSet',
    'Scanner',
    'scan',
    'LanguageTableStore',
    'TranslationOrchestrator',
    'TranslationSettings',
    'AITranslator',
    'Langfy',
    'LangfyRequest',
    'RequestBuilder',
    'ConfigurationError',
    'TranslatorError',
    'Config',
]
