"""Tests for CLI commands."""

import json
import pytest
import tempfile
import yaml
from argparse import Namespace
from pathlib import Path
from unittest.mock import patch

from langfy.cli import (
    build_parser,
    cmd_finder,
    cmd_init,
    cmd_status,
    cmd_trans,
    load_and_validate_config,
    main,
    selected_areas,
)
from langfy.utils.config import CONFIG_FILENAME, ConfigValidationError, create_default_config
from langfy.utils.logging import reset_logger


class PrefixTranslator:
    def translate(self, strings, source, target):
        return {key: f'[{target}] {value}' for key, value in strings.items()}


def finder_args(**overrides):
    args = dict(app=False, modules=None, trans=False, no_trans=False, verbose=False, quiet=True)
    args.update(overrides)
    return Namespace(**args)


def trans_args(**overrides):
    args = dict(to=None, app=False, modules=None, sequential=False, queue=False, verbose=False, quiet=True)
    args.update(overrides)
    return Namespace(**args)


def read_json(path):
    return json.loads(Path(path).read_text(encoding='utf-8'))


@pytest.fixture
def project():
    """A small Laravel-style project with a config file and one module."""
    with tempfile.TemporaryDirectory() as tmpdir:
        base = Path(tmpdir)
        (base / 'app').mkdir()
        (base / 'app' / 'Page.php').write_text("<?php echo __('Save'); echo __('Cancel');", encoding='utf-8')
        (base / 'Modules' / 'Shop').mkdir(parents=True)
        (base / 'Modules' / 'Shop' / 'Cart.php').write_text("<?php echo __('Checkout');", encoding='utf-8')

        config = create_default_config(str(base))
        config.languages.targets = ['es']
        config.ai.api_key = 'sk-test'
        config.translation.retry_delay = 0
        config.save(base / CONFIG_FILENAME)

        with patch('langfy.cli.Path.cwd', return_value=base), \
                patch('langfy.features.pipeline.AITranslator.create', return_value=PrefixTranslator()):
            yield base

    reset_logger()


class TestCmdInit:
    """Test cases for cmd_init command."""

    def test_init_creates_config_file(self):
        """init should write a default .langfy.yml."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch('langfy.cli.Path.cwd', return_value=Path(tmpdir)):
                result = cmd_init(Namespace(force=False))

                assert result == 0
                config_path = Path(tmpdir) / CONFIG_FILENAME
                assert config_path.exists()

                with open(config_path, 'r') as f:
                    config_data = yaml.safe_load(f)
                assert config_data['languages']['source'] == 'en'
                assert config_data['translation']['chunk_size'] == 15

    def test_init_fails_without_force_if_exists(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / CONFIG_FILENAME).write_text('existing: config')

            with patch('langfy.cli.Path.cwd', return_value=Path(tmpdir)):
                assert cmd_init(Namespace(force=False)) == 1

    def test_init_overwrites_with_force(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / CONFIG_FILENAME
            config_path.write_text('old: config')

            with patch('langfy.cli.Path.cwd', return_value=Path(tmpdir)):
                assert cmd_init(Namespace(force=True)) == 0

            with open(config_path, 'r') as f:
                assert 'old' not in yaml.safe_load(f)


class TestLoadConfig:
    """Test cases for load_and_validate_config."""

    def test_invalid_config_raises(self, project, capsys):
        (project / CONFIG_FILENAME).write_text(yaml.dump({'languages': {'source': 'not a code'}}))
        with pytest.raises(ConfigValidationError):
            load_and_validate_config()
        assert 'Configuration errors' in capsys.readouterr().out

    def test_valid_config(self, project):
        assert load_and_validate_config().languages.targets == ['es']


class TestSelectedAreas:
    """Test cases for --app / --modules selection."""

    def test_default_is_application(self):
        assert selected_areas(Namespace(app=False, modules=None)) == ['application']

    def test_modules_only(self):
        assert selected_areas(Namespace(app=False, modules=['Shop,Blog', 'Auth'])) == ['Shop', 'Blog', 'Auth']

    def test_app_and_modules(self):
        assert selected_areas(Namespace(app=True, modules=['Shop'])) == ['application', 'Shop']


class TestCmdFinder:
    """Test cases for cmd_finder command."""

    def test_finds_and_saves(self, project, capsys):
        assert cmd_finder(finder_args()) == 0

        assert read_json(project / 'lang' / 'en.json') == {'Cancel': 'Cancel', 'Save': 'Save'}
        assert not (project / 'lang' / 'es.json').exists()
        assert '2 strings found in total' in capsys.readouterr().out

    def test_finder_with_translation(self, project):
        assert cmd_finder(finder_args(trans=True)) == 0
        assert read_json(project / 'lang' / 'es.json') == {'Cancel': '[es] Cancel', 'Save': '[es] Save'}

    def test_app_and_module(self, project):
        assert cmd_finder(finder_args(app=True, modules=['Shop'])) == 0
        assert read_json(project / 'Modules' / 'Shop' / 'lang' / 'en.json') == {'Checkout': 'Checkout'}
        assert 'Checkout' not in read_json(project / 'lang' / 'en.json')

    def test_unknown_module(self, project, capsys):
        assert cmd_finder(finder_args(modules=['Ghost'])) == 1
        assert "Unknown module: 'Ghost'" in capsys.readouterr().out

    def test_invalid_config(self, project):
        (project / CONFIG_FILENAME).write_text(yaml.dump({'translation': {'chunk_size': 0}}))
        assert cmd_finder(finder_args()) == 1


class TestCmdTrans:
    """Test cases for cmd_trans command."""

    def test_translates_source_table(self, project):
        (project / 'lang').mkdir()
        (project / 'lang' / 'en.json').write_text('{"Save": "Save"}', encoding='utf-8')

        assert cmd_trans(trans_args(to=['fr,de'], sequential=True)) == 0

        assert read_json(project / 'lang' / 'fr.json') == {'Save': '[fr] Save'}
        assert read_json(project / 'lang' / 'de.json') == {'Save': '[de] Save'}

    def test_queue_runs_jobs(self, project, capsys):
        (project / 'lang').mkdir()
        (project / 'lang' / 'en.json').write_text('{"Save": "Save"}', encoding='utf-8')

        assert cmd_trans(trans_args(queue=True)) == 0

        assert read_json(project / 'lang' / 'es.json') == {'Save': '[es] Save'}
        assert 'Dispatched 1 jobs' in capsys.readouterr().out

    def test_no_targets(self, project, capsys):
        (project / CONFIG_FILENAME).write_text(yaml.dump({
            'project': {'base_path': str(project)},
            'languages': {'targets': []},
        }))
        assert cmd_trans(trans_args()) == 1
        assert 'No target languages specified' in capsys.readouterr().out

    def test_nothing_to_translate(self, project, capsys):
        assert cmd_trans(trans_args()) == 0
        assert 'No translations were created' in capsys.readouterr().out


class TestCmdStatus:
    """Test cases for cmd_status command."""

    def test_coverage(self, project, capsys):
        (project / 'lang').mkdir()
        (project / 'lang' / 'en.json').write_text('{"Save": "Save", "Cancel": "Cancel"}', encoding='utf-8')
        (project / 'lang' / 'es.json').write_text('{"Save": "Guardar"}', encoding='utf-8')

        assert cmd_status(Namespace(app=False, modules=None)) == 0

        out = capsys.readouterr().out
        assert '50.0%' in out
        assert 'missing: 1' in out


class TestMain:
    """Test cases for the entry point and parser."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert 'usage' in capsys.readouterr().out.lower()

    def test_version(self):
        with pytest.raises(SystemExit):
            main(['--version'])

    def test_trans_options(self):
        args = build_parser().parse_args(['trans', '--to', 'es', '--to', 'fr,de', '--modules', 'Shop', '--queue'])
        assert args.to == ['es', 'fr,de']
        assert args.modules == ['Shop']
        assert args.queue

    def test_trans_flags_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['finder', '--trans', '--no-trans'])

    def test_main_dispatches(self, project):
        assert main(['finder', '--quiet']) == 0
        assert (project / 'lang' / 'en.json').exists()
