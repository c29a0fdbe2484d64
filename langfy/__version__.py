"""Version information for langfy."""

__version__ = "0.4.0"
__author__ = "Langfy Contributors"
__description__ = "String discovery and AI translation for PHP and Blade projects"

# Changelog:
# 0.4.0 - Queued translation jobs
#       - trans --queue builds TranslationJob objects for a job sink
#       - status command with per-language coverage
#       - quick_translate() for table-less translation
#
# 0.3.0 - Reconciliation of omitted keys
#       - Missing keys are re-requested with linear backoff
#       - TranslationReport with unresolved keys and missing-count history
#       - Source language is skipped when listed among targets
#
# 0.2.0 - Concurrent chunk dispatch
#       - Waves of max_concurrent chunks on one thread pool
#       - Per-table locks and atomic table writes
#       - tqdm progress bars per language
#
# 0.1.0 - Initial release
#       - Finder for __(), trans(), @lang(), @trans and #[Trans] strings
#       - Ignore rules for paths, files, namespaces, extensions, strings, patterns
#       - OpenAI-compatible providers over urllib + certifi
