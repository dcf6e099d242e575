"""Provider settings loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml


@dataclass
class SettingsValidationError(Exception):
    """Raised when provider settings are invalid."""
    message: str
    config_path: Optional[str] = None
    field_path: Optional[str] = None
    expected_type: Optional[str] = None
    actual_value: Optional[Any] = None

    def __str__(self) -> str:
        return self.message


ENV_PREFIX = "ROUTING_PROVIDER_"

_FIELD_TYPES = {
    'directory': str,
    'filename': str,
    'fallback_file': str,
    'watch': bool,
    'log_level': str,
    'log_dir': str,
    'structured_logs': bool,
}

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass
class ProviderSettings:
    """Knobs consumed by the file provider.

    ``directory`` wins over ``filename``, which wins over ``fallback_file``.
    ``template_functions`` is the function table made available to ``.tmpl``
    fragments and single-file configurations.
    """
    directory: Optional[str] = None
    filename: Optional[str] = None
    fallback_file: Optional[str] = None
    watch: bool = False
    template_functions: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    structured_logs: bool = False

    def validate(self, config_path: Optional[str] = None) -> None:
        """Check field types.

        Raises:
            SettingsValidationError: If a field has the wrong type
        """
        for name, expected_type in _FIELD_TYPES.items():
            value = getattr(self, name)
            if value is None and expected_type is str and name != 'log_level':
                continue
            if not isinstance(value, expected_type):
                raise SettingsValidationError(
                    f"Provider setting '{name}' must be of type {expected_type.__name__}",
                    config_path=config_path,
                    field_path=name,
                    expected_type=expected_type.__name__,
                    actual_value=type(value).__name__
                )

        if not isinstance(self.template_functions, dict):
            raise SettingsValidationError(
                "Provider setting 'template_functions' must be a dictionary",
                config_path=config_path,
                field_path='template_functions',
                expected_type='dict',
                actual_value=type(self.template_functions).__name__
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config_path: Optional[str] = None) -> 'ProviderSettings':
        unknown = sorted(set(data) - set(_FIELD_TYPES))
        if unknown:
            raise SettingsValidationError(
                f"Unknown provider setting '{unknown[0]}'",
                config_path=config_path,
                field_path=unknown[0]
            )
        settings = cls(**data)
        settings.validate(config_path)
        return settings

    @classmethod
    def from_yaml(cls, path: str) -> 'ProviderSettings':
        """Load settings from a YAML file.

        The document may either hold the settings at top level or under a
        ``file`` section.

        Raises:
            SettingsValidationError: If the file is missing or malformed
        """
        settings_file = Path(path)
        if not settings_file.exists():
            raise SettingsValidationError(
                f"Settings file not found: {path}",
                config_path=path
            )

        try:
            with open(settings_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsValidationError(
                f"Invalid YAML syntax in {path}: {e}",
                config_path=path
            ) from e

        if data is None:
            raise SettingsValidationError(
                f"Settings file is empty: {path}",
                config_path=path
            )

        if isinstance(data, dict) and isinstance(data.get('file'), dict):
            data = data['file']

        if not isinstance(data, dict):
            raise SettingsValidationError(
                f"Settings must be a dictionary, got {type(data).__name__}",
                config_path=path,
                expected_type="dict",
                actual_value=type(data).__name__
            )

        return cls.from_dict(data, config_path=path)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'ProviderSettings':
        """Build settings from ``ROUTING_PROVIDER_*`` environment variables."""
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for name, expected_type in _FIELD_TYPES.items():
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            if expected_type is bool:
                data[name] = raw.strip().lower() in _TRUE_VALUES
            else:
                data[name] = raw
        return cls.from_dict(data)
