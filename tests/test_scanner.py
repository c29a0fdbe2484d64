"""Tests for the string scanner."""

import json
import logging
import tempfile
from pathlib import Path

import pytest

from langfy.core.ignore_rules import IgnoreRuleSet
from langfy.core.scanner import Scanner, scan
from langfy.features.orchestrator import TranslationOrchestrator


def write(root: Path, relative: str, content, encoding='utf-8') -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding=encoding)
    return path


@pytest.fixture
def project():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        write(root, 'app/Http/Controllers/HomeController.php', (
            "<?php\n"
            "namespace App\\Http\\Controllers;\n\n"
            "class HomeController {\n"
            "    /** @trans */\n"
            "    protected string $title = 'Dashboard';\n\n"
            "    public function index() {\n"
            "        return __('Welcome back');\n"
            "    }\n"
            "}\n"
        ))
        write(root, 'resources/views/home.blade.php', (
            "<h1>{{ __('Welcome back') }}</h1>\n"
            "<button>@lang('Save')</button>\n"
        ))
        write(root, 'app/Console/Kernel.php', (
            "<?php\n"
            "namespace App\\Console;\n"
            "echo __('Scheduled task finished');\n"
        ))
        write(root, 'app/vendor/package/Thing.php', "<?php echo __('From vendor');")
        write(root, 'resources/notes.txt', "__('Not php')")
        yield root


class TestScanner:
    """Test cases for Scanner."""

    def test_finds_strings_across_files_and_kinds(self, project):
        found = scan([project / 'app', project / 'resources'], IgnoreRuleSet())
        assert found == {'Dashboard', 'Welcome back', 'Save', 'Scheduled task finished'}

    def test_rescan_is_idempotent(self, project):
        roots = [project / 'app', project / 'resources']
        scanner = Scanner(IgnoreRuleSet())
        assert scanner.scan(roots) == scanner.scan(roots)

    def test_missing_root_is_skipped(self, project):
        found = scan([project / 'does-not-exist', project / 'resources'], IgnoreRuleSet())
        assert found == {'Welcome back', 'Save'}

    def test_ignore_paths(self, project):
        """Default ignore paths exclude vendor directories at any depth."""
        found = scan([project / 'app'], IgnoreRuleSet())
        assert 'From vendor' not in found

        found = scan([project / 'app'], IgnoreRuleSet.empty())
        assert 'From vendor' in found

    def test_ignore_namespace(self, project):
        rules = IgnoreRuleSet(namespaces=('App\\Console',))
        found = scan([project / 'app'], rules)
        assert 'Scheduled task finished' not in found
        assert 'Welcome back' in found

    def test_ignore_file(self, project):
        rules = IgnoreRuleSet(files=('HomeController.php',))
        found = scan([project / 'app'], rules)
        assert 'Dashboard' not in found

    def test_ignore_extension(self, project):
        rules = IgnoreRuleSet(extensions=('blade.php',))
        found = scan([project / 'resources'], rules)
        assert found == set()

    def test_ignore_strings_and_patterns_compose(self, project):
        """A string survives only if every axis lets it through."""
        rules = IgnoreRuleSet(strings=('Save',), patterns=(r'^Sched',))
        found = scan([project / 'app', project / 'resources'], rules)
        assert found == {'Dashboard', 'Welcome back'}

    def test_files_reachable_twice_are_scanned_once(self, project):
        events = []
        scan([project / 'resources', project / 'resources'], IgnoreRuleSet(), on_progress=events.append)
        assert events[-1].total == 1

    def test_undecodable_file_is_skipped(self, project, caplog):
        write(project, 'resources/views/broken.blade.php', b"\xff\xfe__('Broken')\x80")
        with caplog.at_level(logging.WARNING, logger='langfy'):
            found = scan([project / 'resources'], IgnoreRuleSet())
        assert found == {'Welcome back', 'Save'}
        assert 'broken.blade.php' in caplog.text


class TestScannerProgress:
    """Test cases for scanner progress events."""

    def test_one_event_per_file_after_processing(self, project):
        events = []
        scanner = Scanner(IgnoreRuleSet(), on_progress=events.append)
        scanner.scan([project / 'app', project / 'resources'])

        # HomeController, Kernel, home.blade.php (vendor and .txt excluded)
        assert [e.current for e in events] == [1, 2, 3]
        assert all(e.total == 3 for e in events)
        assert events[-1].completed
        assert events[-1].percentage == 100.0

    def test_event_extras(self, project):
        events = []
        scan([project / 'resources'], IgnoreRuleSet(), on_progress=events.append)

        assert events[0].extra['file'] == 'home.blade.php'
        assert events[0].extra['path'].endswith('home.blade.php')

    def test_skipped_files_still_count(self, project):
        events = []
        rules = IgnoreRuleSet(files=('Kernel.php',))
        scan([project / 'app'], rules, on_progress=events.append)
        assert len(events) == 2

    def test_no_callback(self, project):
        assert Scanner(IgnoreRuleSet()).progress.enabled is False


class SpanishTranslator:
    def translate(self, strings, source, target):
        return {key: 'Guardar' for key in strings if key == 'Save'}


class TestSaveScenario:
    """A PHP file and a Blade template using the same string."""

    def test_same_string_in_two_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, 'a.php', "<?php echo __('Save');")
            write(root, 'b.blade.php', "{{ trans('Save') }}")

            assert scan([root], IgnoreRuleSet()) == {'Save'}

    def test_found_string_translated_into_table(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, 'a.php', "<?php echo __('Save');")
            write(root, 'b.blade.php', "{{ trans('Save') }}")
            lang_dir = root / 'lang'

            found = scan([root], IgnoreRuleSet())
            orchestrator = TranslationOrchestrator(SpanishTranslator(), sleep=lambda s: None)
            orchestrator.translate(found, 'en', ['es'], table_for=lambda lang: lang_dir / f'{lang}.json')

            table = json.loads((lang_dir / 'es.json').read_text(encoding='utf-8'))
            assert table == {'Save': 'Guardar'}

    def test_dedup_across_files_and_pattern_kinds(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, 'Notice.php', "<?php echo __('Shared Message');")
            write(root, 'Banner.php', (
                "<?php\n"
                "class Banner {\n"
                "    /** @trans */\n"
                "    public string $text = 'Shared Message';\n"
                "}\n"
            ))
            events = []

            found = scan([root], IgnoreRuleSet(), on_progress=events.append)

            assert found == {'Shared Message'}
            assert events[-1].total == 2
