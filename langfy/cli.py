"""Command-line interface for langfy."""

import sys
import argparse
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .__version__ import __version__
from .core.diff import compare
from .core.table_store import LanguageTableStore
from .exceptions import ConfigurationError
from .features.pipeline import Langfy, RequestBuilder, TranslationJob
from .utils.colors import Colors
from .utils.config import CONFIG_FILENAME, Config, ConfigValidationError, create_default_config
from .utils.logging import configure_logging
from .utils.progress import TqdmProgress
from .utils.validators import split_language_list

APPLICATION = 'application'


def load_and_validate_config(validate: bool = True, verbose: bool = False) -> Config:
    """
    Load configuration and optionally validate it.

    Args:
        validate: Whether to validate the config
        verbose: Whether to print warnings

    Returns:
        Loaded Config object

    Raises:
        ConfigValidationError: If validation fails with errors
    """
    config = Config.from_file(Path.cwd() / CONFIG_FILENAME)

    if validate:
        errors, warnings = config.validate()

        if verbose and warnings:
            for warning in warnings:
                print(f"{Colors.warning('⚠️')}  Config warning: {warning}")

        if errors:
            print(f"{Colors.error('❌')} Configuration errors:")
            for error in errors:
                print(f"   • {error}")
            raise ConfigValidationError(errors)

    return config


def selected_areas(args) -> List[str]:
    """
    Areas chosen with ``--app`` / ``--modules``.

    Without either option only the application is processed.
    """
    modules = split_language_list(getattr(args, 'modules', None))
    areas = []
    if getattr(args, 'app', False) or not modules:
        areas.append(APPLICATION)
    areas.extend(modules)
    return areas


def _builder(langfy: Langfy, area: str) -> RequestBuilder:
    builder = langfy.request()
    if area == APPLICATION:
        return builder.for_application()
    return builder.for_module(area)


def _print_table(headers: Tuple[str, str], rows: List[Tuple[str, int]]):
    width = max([len(headers[0])] + [len(name) for name, _ in rows]) + 2
    print(f"  {Colors.bold(headers[0].ljust(width))}{Colors.bold(headers[1])}")
    print(f"  {'-' * (width + len(headers[1]))}")
    for name, count in rows:
        print(f"  {name.ljust(width)}{count}")


def _setup_logging(args):
    configure_logging(
        verbose=getattr(args, 'verbose', False),
        quiet=getattr(args, 'quiet', False),
        use_colors=Colors.enabled,
    )


def cmd_init(args):
    """Initialize configuration file."""
    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists() and not args.force:
        print(f"{Colors.error('❌')} Config already exists: {config_path}")
        print(f"   Use --force to overwrite")
        return 1

    config = create_default_config()
    config.save(config_path)

    print(f"{Colors.success('✅')} Created: {config_path}")
    print(f"\n{Colors.bold('Next steps:')}")
    print(f"1. Edit {CONFIG_FILENAME} (languages, ai.api_key or LANGFY_AI_API_KEY)")
    print(f"2. Run: langfy finder --trans")

    return 0


def cmd_finder(args):
    """Find strings, save new ones to the source table, optionally translate them."""
    try:
        config = load_and_validate_config(validate=True, verbose=args.verbose)
    except ConfigValidationError:
        return 1

    _setup_logging(args)
    langfy = Langfy(config)
    found: Dict[str, int] = {}

    try:
        for area in selected_areas(args):
            print(f"\n{Colors.info('🔍')} Scanning {Colors.bold(area)}...")
            with TqdmProgress(desc=area, unit='files', disable=args.quiet) as progress:
                request = _builder(langfy, area).finder().save().on_finder_progress(progress).build()
                result = langfy.perform(request)
            found[area] = result.found_strings
            print(f"   {Colors.success('✓')} Found {result.found_strings} strings "
                  f"({len(result.new_strings)} new)")

        total = sum(found.values())
        if args.trans and total > 0:
            print(f"\n{Colors.info('🌐')} Translating found strings...")
            for area, count in found.items():
                if count == 0:
                    continue
                with TqdmProgress(desc=area, unit='chunks', key='language', disable=args.quiet) as progress:
                    request = _builder(langfy, area).translate().on_translate_progress(progress).build()
                    result = langfy.perform(request)
                print(f"   {Colors.success('✓')} {area}: {result.translated_count} translations")
    except ConfigurationError as e:
        print(f"{Colors.error('❌')} {e}")
        return 1

    print(f"\n{Colors.bold('Finished')}: {total} strings found in total")
    rows = [(name, count) for name, count in found.items() if count > 0]
    if rows:
        _print_table(('Area', 'Strings Found'), rows)
    else:
        print("No translatable strings were found.")

    return 0


def _job_runner(langfy: Langfy):
    """Job sink that lists queued jobs and then runs them in this process."""
    def run(jobs: List[TranslationJob]):
        for job in jobs:
            print(f"   {Colors.dim('•')} {job.root_name} → {job.target}: {len(job.strings)} strings")
        orchestrator = langfy.orchestrator()
        for job in jobs:
            job.handle(orchestrator)
    return run


def cmd_trans(args):
    """Translate each area's source table into the target languages."""
    try:
        config = load_and_validate_config(validate=True, verbose=args.verbose)
    except ConfigValidationError:
        return 1

    _setup_logging(args)

    targets = split_language_list(args.to) or list(config.languages.targets)
    if not targets:
        print(f"{Colors.error('❌')} No target languages specified. "
              f"Use --to or configure languages.targets")
        return 1

    if args.sequential:
        config.translation.concurrent = False

    langfy = Langfy(config)
    if args.queue:
        langfy.job_sink = _job_runner(langfy)

    print(f"Target languages: {', '.join(targets)}")
    counts: Dict[str, int] = {}

    try:
        for area in selected_areas(args):
            builder = _builder(langfy, area).translate(to=targets)
            if args.queue:
                print(f"\n{Colors.info('📨')} Dispatching translation jobs for {Colors.bold(area)}...")
                result = langfy.perform(builder.queued().build())
                counts[area] = sum(len(job.strings) for job in result.jobs)
                print(f"   {Colors.success('✓')} Dispatched {len(result.jobs)} jobs "
                      f"for {counts[area]} strings")
                continue

            print(f"\n{Colors.info('🌐')} Translating {Colors.bold(area)} strings...")
            with TqdmProgress(desc=area, unit='chunks', key='language', disable=args.quiet) as progress:
                result = langfy.perform(builder.on_translate_progress(progress).build())
            counts[area] = result.translated_count
            print(f"   {Colors.success('✓')} Translated {counts[area]} strings")
            if result.report and not result.report.complete:
                for language, keys in result.report.unresolved.items():
                    if keys:
                        print(f"   {Colors.warning('⚠️')}  {len(keys)} strings left untranslated in {language}")
    except ConfigurationError as e:
        print(f"{Colors.error('❌')} {e}")
        return 1

    total = sum(counts.values())
    print(f"\n{Colors.bold('Translation completed')}: {total} translations created in total")
    rows = [(name, count) for name, count in counts.items() if count > 0]
    if rows:
        _print_table(('Area', 'Translations Created'), rows)
    else:
        print("No translations were created.")

    return 0


def cmd_status(args):
    """Show per-language coverage against the source table."""
    try:
        config = load_and_validate_config(validate=True, verbose=False)
    except ConfigValidationError:
        return 1

    store = LanguageTableStore()
    source = config.languages.source

    try:
        for area in selected_areas(args):
            root = config.application_root() if area == APPLICATION else config.module_root(area)
            source_table = store.read(root.table_path(source))

            print(f"\n{Colors.bold(f'📊 {area.upper()}')} ({len(source_table)} {source} strings)")
            print("-" * 50)

            for target in config.languages.targets:
                if target == source:
                    continue
                diff = compare(source_table, store.read(root.table_path(target)), source, target)
                if diff.coverage >= 100:
                    label = Colors.success(f"{diff.coverage:.1f}%")
                elif diff.coverage >= 50:
                    label = Colors.warning(f"{diff.coverage:.1f}%")
                else:
                    label = Colors.error(f"{diff.coverage:.1f}%")
                print(f"  {target:<10} {label}  missing: {len(diff.missing)}  "
                      f"untranslated: {len(diff.untranslated)}  extra: {len(diff.extra)}")
    except ConfigurationError as e:
        print(f"{Colors.error('❌')} {e}")
        return 1

    return 0


def _add_area_options(parser: argparse.ArgumentParser):
    parser.add_argument('--app', action='store_true', help='Process the main application')
    parser.add_argument('--modules', nargs='+', metavar='NAME', help='Modules to process (comma-separated allowed)')


def _add_output_options(parser: argparse.ArgumentParser):
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--verbose', '-v', action='store_true', help='Show detailed output')
    group.add_argument('--quiet', '-q', action='store_true', help='Minimal output')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='langfy',
        description='Find translatable strings in PHP/Blade sources and translate them with AI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # init command
    init_parser = subparsers.add_parser('init', help='Initialize configuration file')
    init_parser.add_argument('--force', action='store_true', help='Overwrite existing config')

    # finder command
    finder_parser = subparsers.add_parser('finder', help='Find translatable strings and save them')
    _add_area_options(finder_parser)
    trans_group = finder_parser.add_mutually_exclusive_group()
    trans_group.add_argument('--trans', action='store_true', help='Translate found strings afterwards')
    trans_group.add_argument('--no-trans', action='store_true', help='Skip translation (default)')
    _add_output_options(finder_parser)

    # trans command
    trans_parser = subparsers.add_parser('trans', help='Translate strings using AI')
    trans_parser.add_argument('--to', action='append', metavar='LANG',
                              help='Target language (repeatable, comma-separated allowed)')
    _add_area_options(trans_parser)
    trans_parser.add_argument('--sequential', action='store_true', help='Translate one chunk at a time')
    trans_parser.add_argument('--queue', action='store_true', help='Build translation jobs and hand them to the job sink')
    _add_output_options(trans_parser)

    # status command
    status_parser = subparsers.add_parser('status', help='Show translation coverage')
    _add_area_options(status_parser)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'init':
        return cmd_init(args)
    elif args.command == 'finder':
        return cmd_finder(args)
    elif args.command == 'trans':
        return cmd_trans(args)
    elif args.command == 'status':
        return cmd_status(args)
    else:
        parser.print_help()
        return 0


if __name__ == '__main__':
    sys.exit(main())
