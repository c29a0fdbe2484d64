"""Core modules: string discovery and language tables."""

from .context import Context, ScanRoot
from .patterns import PatternRule, ExtractionPattern, DEFAULT_RULES, default_rules
from .ignore_rules import IgnoreRuleSet
from .scanner import Scanner, scan
from .table_store import LanguageTableStore
from .diff import DiffResult, compare, missing

__all__ = [
    'Context',
    'ScanRoot',
    'PatternRule',
    'ExtractionPattern',
    'DEFAULT_RULES',
    'default_rules',
    'IgnoreRuleSet',
    'Scanner',
    'scan',
    'LanguageTableStore',
    'DiffResult',
    'compare',
    'missing',
]
