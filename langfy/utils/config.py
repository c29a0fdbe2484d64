"""Configuration management for langfy."""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from dataclasses import dataclass, field, fields

from ..core.context import Context, ScanRoot
from ..core.ignore_rules import DEFAULT_IGNORE_EXTENSIONS, DEFAULT_IGNORE_PATHS, IgnoreRuleSet
from ..core.patterns import DEFAULT_FUNCTIONS, PatternRule, default_rules
from ..exceptions import ConfigurationError
from ..features.orchestrator import TranslationSettings
from ..features.providers import Provider, resolve_provider
from .validators import is_valid_language_code, is_valid_regex, split_language_list

CONFIG_FILENAME = '.langfy.yml'


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")


class ConfigValidationWarning:
    """Represents a configuration warning (non-fatal)."""

    def __init__(self, message: str):
        self.message = message

    def __str__(self):
        return self.message


@dataclass
class ProjectConfig:
    """Project configuration."""
    base_path: str = "."
    # Free text embedded in the translation system prompt
    context: str = ""


@dataclass
class LanguagesConfig:
    """Languages configuration."""
    source: str = "en"
    targets: List[str] = field(default_factory=lambda: ["es_ES", "pt_BR"])


@dataclass
class PathsConfig:
    """Paths configuration, relative to ``project.base_path``."""
    application: List[str] = field(default_factory=lambda: [
        'app', 'resources', 'routes', 'config', 'database',
    ])
    lang: str = "lang"
    modules_dir: str = "Modules"
    # Module name -> module path, for modules outside modules_dir
    modules: Dict[str, str] = field(default_factory=dict)


@dataclass
class FinderConfig:
    """String finder configuration."""
    ignore_paths: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATHS))
    ignore_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_EXTENSIONS))
    ignore_files: List[str] = field(default_factory=list)
    ignore_namespaces: List[str] = field(default_factory=list)
    ignore_strings: List[str] = field(default_factory=list)
    ignore_patterns: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=lambda: list(DEFAULT_FUNCTIONS))


@dataclass
class AIConfig:
    """AI provider configuration."""
    api_key: str = ""
    model: str = "gpt-4o-mini"
    provider: str = "openai"
    base_url: str = ""
    temperature: float = 0.2
    timeout: float = 60.0


@dataclass
class TranslationConfig:
    """Chunking, concurrency and retry configuration."""
    chunk_size: int = 15
    concurrent: bool = True
    max_concurrent: int = 3
    max_retries: int = 3
    retry_delay: float = 2.0


def _section(section_cls, data: Optional[Mapping[str, Any]]):
    """Build a section dataclass, ignoring unknown keys."""
    known = {f.name for f in fields(section_cls)}
    return section_cls(**{k: v for k, v in (data or {}).items() if k in known})


@dataclass
class Config:
    """Main configuration class."""
    project: ProjectConfig = field(default_factory=ProjectConfig)
    languages: LanguagesConfig = field(default_factory=LanguagesConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    finder: FinderConfig = field(default_factory=FinderConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    translation: TranslationConfig = field(default_factory=TranslationConfig)

    @classmethod
    def from_file(cls, config_path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> 'Config':
        """
        Load configuration from a YAML file and apply environment overrides.

        Without ``config_path`` the ``.langfy.yml`` of the working directory is
        used, or the defaults when it does not exist.
        """
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        data: Dict[str, Any] = {}
        if Path(config_path).exists():
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}

        config = cls.from_dict(data)
        config.apply_env(os.environ if env is None else env)
        return config

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Config':
        return cls(
            project=_section(ProjectConfig, data.get('project')),
            languages=_section(LanguagesConfig, data.get('languages')),
            paths=_section(PathsConfig, data.get('paths')),
            finder=_section(FinderConfig, data.get('finder')),
            ai=_section(AIConfig, data.get('ai')),
            translation=_section(TranslationConfig, data.get('translation')),
        )

    def apply_env(self, env: Mapping[str, str]) -> None:
        """Apply ``LANGFY_*`` environment overrides."""
        if env.get('LANGFY_FROM_LANGUAGE'):
            self.languages.source = env['LANGFY_FROM_LANGUAGE'].strip()
        if env.get('LANGFY_TO_LANGUAGES'):
            self.languages.targets = split_language_list(env['LANGFY_TO_LANGUAGES'])
        if env.get('LANGFY_AI_API_KEY'):
            self.ai.api_key = env['LANGFY_AI_API_KEY']
        if env.get('LANGFY_AI_MODEL'):
            self.ai.model = env['LANGFY_AI_MODEL']
        if env.get('LANGFY_AI_PROVIDER'):
            self.ai.provider = env['LANGFY_AI_PROVIDER']
        if env.get('LANGFY_AI_TEMPERATURE'):
            try:
                self.ai.temperature = float(env['LANGFY_AI_TEMPERATURE'])
            except ValueError:
                raise ConfigurationError(
                    f"LANGFY_AI_TEMPERATURE must be a number, got {env['LANGFY_AI_TEMPERATURE']!r}"
                ) from None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            'project': {
                'base_path': self.project.base_path,
                'context': self.project.context,
            },
            'languages': {
                'source': self.languages.source,
                'targets': list(self.languages.targets),
            },
            'paths': {
                'application': list(self.paths.application),
                'lang': self.paths.lang,
                'modules_dir': self.paths.modules_dir,
                'modules': dict(self.paths.modules),
            },
            'finder': {
                'ignore_paths': list(self.finder.ignore_paths),
                'ignore_extensions': list(self.finder.ignore_extensions),
                'ignore_files': list(self.finder.ignore_files),
                'ignore_namespaces': list(self.finder.ignore_namespaces),
                'ignore_strings': list(self.finder.ignore_strings),
                'ignore_patterns': list(self.finder.ignore_patterns),
                'functions': list(self.finder.functions),
            },
            'ai': {
                'api_key': self.ai.api_key,
                'model': self.ai.model,
                'provider': self.ai.provider,
                'base_url': self.ai.base_url,
                'temperature': self.ai.temperature,
                'timeout': self.ai.timeout,
            },
            'translation': {
                'chunk_size': self.translation.chunk_size,
                'concurrent': self.translation.concurrent,
                'max_concurrent': self.translation.max_concurrent,
                'max_retries': self.translation.max_retries,
                'retry_delay': self.translation.retry_delay,
            },
        }

    def save(self, config_path: Optional[Path] = None):
        """Save configuration to YAML file."""
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def validate(self, raise_on_error: bool = False) -> Tuple[List[str], List[ConfigValidationWarning]]:
        """
        Validate configuration and return errors and warnings.

        Args:
            raise_on_error: If True, raise ConfigValidationError on validation errors

        Returns:
            Tuple of (errors, warnings) lists
        """
        errors = []
        warnings = []

        if not Path(self.project.base_path).exists():
            warnings.append(ConfigValidationWarning(
                f"Base path does not exist: {self.project.base_path}"
            ))

        if not is_valid_language_code(self.languages.source):
            errors.append(
                f"Invalid source language code: '{self.languages.source}'. "
                f"Use ISO 639 format (e.g., 'en', 'pt_BR', 'zh-Hans')"
            )

        if not self.languages.targets:
            warnings.append(ConfigValidationWarning("No target languages configured"))

        for lang in self.languages.targets:
            if not is_valid_language_code(lang):
                errors.append(f"Invalid target language code: '{lang}'")

        if self.languages.source in self.languages.targets:
            warnings.append(ConfigValidationWarning(
                f"Source language '{self.languages.source}' is listed among targets and will be skipped"
            ))

        if self.translation.chunk_size < 1:
            errors.append(f"translation.chunk_size must be positive, got {self.translation.chunk_size}")

        if self.translation.max_concurrent < 1:
            errors.append(
                f"translation.max_concurrent must be positive, got {self.translation.max_concurrent}"
            )

        if self.translation.max_retries < 0:
            errors.append(f"translation.max_retries cannot be negative, got {self.translation.max_retries}")

        if self.translation.retry_delay < 0:
            errors.append(f"translation.retry_delay cannot be negative, got {self.translation.retry_delay}")

        if not 0 <= self.ai.temperature <= 2:
            errors.append(f"ai.temperature must be between 0 and 2, got {self.ai.temperature}")

        if self.ai.timeout <= 0:
            errors.append(f"ai.timeout must be positive, got {self.ai.timeout}")

        try:
            spec = resolve_provider(self.ai.provider, self.ai.base_url or None)
        except ConfigurationError as e:
            errors.append(str(e))
        else:
            if not self.ai.api_key and spec.provider is not Provider.OLLAMA:
                warnings.append(ConfigValidationWarning(
                    "No AI API key configured (set ai.api_key or LANGFY_AI_API_KEY)"
                ))

        for pattern in self.finder.ignore_patterns:
            if not is_valid_regex(pattern):
                warnings.append(ConfigValidationWarning(
                    f"Invalid ignore pattern will be skipped: '{pattern}'"
                ))

        if raise_on_error and errors:
            raise ConfigValidationError(errors)

        return errors, warnings

    # Domain objects

    @property
    def base_path(self) -> Path:
        return Path(self.project.base_path)

    def application_root(self) -> ScanRoot:
        """The main application scan root; its tables live in ``<base>/<lang>``."""
        return ScanRoot(
            context=Context.APPLICATION,
            name='application',
            paths=tuple(self.base_path / p for p in self.paths.application),
            lang_dir=self.base_path / self.paths.lang,
        )

    def module_path(self, name: str) -> Optional[Path]:
        if name in self.paths.modules:
            return self.base_path / self.paths.modules[name]
        candidate = self.base_path / self.paths.modules_dir / name
        return candidate if candidate.is_dir() else None

    def available_modules(self) -> List[str]:
        """Configured modules plus every directory under ``modules_dir``."""
        names = list(self.paths.modules)
        modules_dir = self.base_path / self.paths.modules_dir
        if modules_dir.is_dir():
            for child in sorted(modules_dir.iterdir()):
                if child.is_dir() and child.name not in names:
                    names.append(child.name)
        return names

    def module_root(self, name: str) -> ScanRoot:
        """
        Scan root of one module; its tables live in ``<module>/lang``.

        Raises:
            ConfigurationError: Unknown module
        """
        path = self.module_path(name)
        if path is None:
            raise ConfigurationError(f"Unknown module: '{name}'")
        return ScanRoot(
            context=Context.MODULE,
            name=name,
            paths=(path,),
            lang_dir=path / 'lang',
        )

    def ignore_rules(self) -> IgnoreRuleSet:
        return IgnoreRuleSet(
            paths=tuple(self.finder.ignore_paths),
            extensions=tuple(self.finder.ignore_extensions),
            files=tuple(self.finder.ignore_files),
            namespaces=tuple(self.finder.ignore_namespaces),
            strings=tuple(self.finder.ignore_strings),
            patterns=tuple(self.finder.ignore_patterns),
        )

    def pattern_rules(self) -> Tuple[PatternRule, ...]:
        return default_rules(self.finder.functions or DEFAULT_FUNCTIONS)

    def translation_settings(self) -> TranslationSettings:
        return TranslationSettings(
            chunk_size=self.translation.chunk_size,
            concurrent=self.translation.concurrent,
            max_concurrent=self.translation.max_concurrent,
            max_retries=self.translation.max_retries,
            retry_delay=self.translation.retry_delay,
        )


def create_default_config(base_path: str = '.') -> Config:
    """Create default configuration rooted at ``base_path``."""
    config = Config()
    config.project.base_path = base_path
    return config
