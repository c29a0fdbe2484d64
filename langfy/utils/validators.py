"""Validation utilities."""

import re

_LANGUAGE_CODE = re.compile(r'^[a-z]{2,3}(?:[-_](?:[A-Z]{2}|[A-Z][a-z]{3}|\d{3}))?$')


def is_valid_language_code(code: str) -> bool:
    """
    Validate a language code (ISO 639-1/639-2 with optional region or script).

    Examples: en, tr, es_ES, pt-BR, zh-Hans, es-419
    """
    if not code or not isinstance(code, str):
        return False
    return bool(_LANGUAGE_CODE.match(code))


def split_language_list(values) -> list:
    """
    Flatten repeated and comma-separated language options.

    ``['es,pt_BR', ' fr ']`` -> ``['es', 'pt_BR', 'fr']``
    """
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]

    languages = []
    for value in values:
        for part in str(value).split(','):
            part = part.strip()
            if part and part not in languages:
                languages.append(part)
    return languages


def is_valid_regex(pattern: str) -> bool:
    """Return True if ``pattern`` compiles as a Python regular expression."""
    try:
        re.compile(pattern)
    except (re.error, TypeError):
        return False
    return True
