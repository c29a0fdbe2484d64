"""Exceptions raised by langfy."""


class LangfyError(Exception):
    """Base class for langfy errors."""


class ConfigurationError(LangfyError):
    """Raised when a run cannot start: no targets, no roots, unknown module, bad provider."""


class TranslatorError(LangfyError):
    """
    A transient translator failure.

    Network errors, timeouts, HTTP failures and unparsable responses are all
    reported as this type so the retry envelope can catch them.
    """
