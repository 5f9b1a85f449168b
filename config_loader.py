"""Export settings: YAML file, ${VAR} expansion, defaults, validation and CLI overrides."""

import copy
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    'youtrack': {
        'base_url': None,
        'token': None,
        'verify_ssl': True,
    },
    'export': {
        'output_directory': None,
        'page_size': 100,
        'max_pages': 1000,
        'max_depth': 50,
        'attachment_name_max_length': 50,
        'download_attachments': True,
        'write_report': False,
    },
    'advanced': {
        'request_timeout': 30,
    },
    'logging': {
        'level': None,
    },
}

REQUIRED_FIELDS = ('youtrack.base_url', 'youtrack.token', 'export.output_directory')
POSITIVE_INT_FIELDS = (
    'export.page_size',
    'export.max_pages',
    'export.max_depth',
    'export.attachment_name_max_length',
)
BOOL_FIELDS = ('youtrack.verify_ssl', 'export.download_attachments', 'export.write_report')

_ENV_REFERENCE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')


def expand_env(value: Any) -> Any:
    """
    Replace ``${NAME}`` references with environment values, walking dicts and lists.

    References to unset variables are left as written so validation can name them.
    """
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


class ConfigLoader:
    """Loads, completes and checks the export configuration."""

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Read a YAML settings file.

        Args:
            config_path: Path to the YAML file

        Returns:
            Settings with environment references expanded and defaults filled in

        Raises:
            FileNotFoundError: If the file is missing
            ValueError: If the top level is not a mapping
        """
        if not os.path.isfile(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            raise ValueError(f"{config_path} must contain a mapping of settings")

        return cls.with_defaults(expand_env(raw))

    @classmethod
    def with_defaults(cls, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of ``config`` with missing sections and keys filled from the defaults.

        An empty section (``youtrack:`` with nothing under it) keeps its defaults.

        Raises:
            ValueError: If a known section holds a scalar or list instead of a mapping
        """
        merged = copy.deepcopy(DEFAULT_CONFIG)
        for section, values in config.items():
            if not isinstance(merged.get(section), dict):
                merged[section] = values
            elif values is None:
                continue
            elif isinstance(values, dict):
                merged[section].update(values)
            else:
                raise ValueError(f"Section '{section}' must be a mapping of settings, got {values!r}")
        return merged

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Check required settings and value types.

        Raises:
            ValueError: Naming the first offending setting
        """
        for name in REQUIRED_FIELDS:
            cls._require(config, name)

        base_url = get_nested(config, 'youtrack.base_url')
        parsed = urlparse(base_url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(f"youtrack.base_url must be an http(s) URL with a host: {base_url}")

        output_dir = get_nested(config, 'export.output_directory')
        if os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        for name in POSITIVE_INT_FIELDS:
            value = get_nested(config, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        for name in BOOL_FIELDS:
            if not isinstance(get_nested(config, name), bool):
                raise ValueError(f"{name} must be true or false")

        timeout = get_nested(config, 'advanced.request_timeout')
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError(f"advanced.request_timeout must be a positive number, got {timeout!r}")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Apply CLI overrides on top of file settings.

        Only options the user actually gave are applied; the base URL loses any
        trailing slash.
        """
        merged = cls.with_defaults(config)
        youtrack = merged['youtrack']
        export_settings = merged['export']

        overrides = (
            (youtrack, 'base_url', getattr(args, 'base_url', None)),
            (youtrack, 'token', getattr(args, 'token', None)),
            (export_settings, 'output_directory', getattr(args, 'output', None)),
            (export_settings, 'max_depth', getattr(args, 'max_depth', None)),
            (merged['logging'], 'level', getattr(args, 'log_level', None)),
        )
        for section, key, value in overrides:
            if value is not None and value != '':
                section[key] = value

        if getattr(args, 'no_attachments', False):
            export_settings['download_attachments'] = False
        if getattr(args, 'report', False):
            export_settings['write_report'] = True
        if getattr(args, 'insecure', False):
            youtrack['verify_ssl'] = False

        if isinstance(youtrack.get('base_url'), str):
            youtrack['base_url'] = youtrack['base_url'].strip().rstrip('/')

        return merged

    @staticmethod
    def _require(config: Dict[str, Any], name: str) -> None:
        value = get_nested(config, name)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {name}")

        unresolved: Optional[re.Match] = _ENV_REFERENCE.search(value) if isinstance(value, str) else None
        if unresolved:
            raise ValueError(
                f"{name} refers to ${{{unresolved.group(1)}}}, which is not set; "
                f"export {unresolved.group(1)} or put the value in the config file"
            )


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Look up ``"section.key"`` style paths, returning ``default`` when any step is missing."""
    node = config
    for key in path.split('.'):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'expand_env', 'get_nested']
