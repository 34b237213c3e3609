"""
Settings for rendering and the command line tool.

Settings come from built-in defaults, overlaid with an optional YAML file,
overlaid with environment variables for a few keys::

    render:
      indent: 2
      align: true
    terraform:
      required_version: ">= 1.3.0"
    providers:
      aws:
        source: hashicorp/aws
        version: "~> 5.0"
    logging:
      level: INFO
      file: null
      dir: logs
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Iterable

import yaml

from tf_blocks._errors import SettingsError
from tf_blocks._model import TerraformSettings

__all__ = ["Settings", "DEFAULT_SETTINGS", "SETTINGS_ENV_VAR"]

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "TF_BLOCKS_SETTINGS"

DEFAULT_SETTINGS: dict[str, Any] = {
    "render": {"indent": 2, "align": True},
    "terraform": {"required_version": ">= 1.3.0"},
    "providers": {
        "aws": {"source": "hashicorp/aws", "version": "~> 5.0"},
    },
    "logging": {"level": "INFO", "file": None, "dir": "logs"},
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Settings:
    """
    Settings loaded from defaults, a YAML file and the environment.

    Features:
    - YAML settings file over built-in defaults
    - Dot-notation lookups with environment variable overrides
    """

    def __init__(self, settings_file: str | Path | None = None) -> None:
        self.settings_file = Path(settings_file) if settings_file else None

    @classmethod
    def from_env(cls) -> "Settings":
        """Use the file named by ``TF_BLOCKS_SETTINGS``, if set."""
        return cls(os.environ.get(SETTINGS_ENV_VAR) or None)

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        if not file_path.exists():
            logger.warning(f"Settings file not found: {file_path}")
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {file_path}: {e}") from e
        except OSError as e:
            raise SettingsError(f"Cannot read {file_path}: {e}") from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise SettingsError(f"{file_path} must contain a mapping at top level")
        return content

    def load_settings(self) -> dict[str, Any]:
        """Return defaults merged with the settings file."""
        if self.settings_file is None:
            return copy.deepcopy(DEFAULT_SETTINGS)
        return _merge(DEFAULT_SETTINGS, self._load_yaml_file(self.settings_file))

    @property
    def config(self) -> dict[str, Any]:
        """The merged settings, loaded once."""
        if not hasattr(self, "_cached_config"):
            self._cached_config = self.load_settings()
        return self._cached_config

    def reload_config(self) -> None:
        """Force reload of settings from file."""
        if hasattr(self, "_cached_config"):
            delattr(self, "_cached_config")

    def get_value(
        self, key_path: str, default: Any = None, env_var: str | None = None
    ) -> Any:
        """
        Get a value by dot-notation path, e.g. ``render.indent``.

        An environment variable, when named and set, wins over the file.
        """
        if env_var and env_var in os.environ:
            return os.environ[env_var]

        current: Any = self.config
        try:
            for key in key_path.split("."):
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_render_options(self) -> dict[str, Any]:
        """Keyword arguments for `render`: ``indent`` and ``align``."""
        indent = self.get_value("render.indent", 2, env_var="TF_BLOCKS_INDENT")
        try:
            indent = int(indent)
        except (TypeError, ValueError) as e:
            raise SettingsError(f"render.indent must be an integer, got {indent!r}") from e
        if indent < 1:
            raise SettingsError(f"render.indent must be positive, got {indent}")
        return {"indent": indent, "align": bool(self.get_value("render.align", True))}

    def get_logging_level(self) -> str:
        return str(self.get_value("logging.level", "INFO", env_var="TF_BLOCKS_LOG_LEVEL"))

    def get_logging_file(self) -> str | None:
        return self.get_value("logging.file", None, env_var="TF_BLOCKS_LOG_FILE") or None

    def get_logging_dir(self) -> str:
        return str(self.get_value("logging.dir", "logs"))

    def get_required_version(self) -> str | None:
        return self.get_value("terraform.required_version")

    def get_provider_requirements(self, name: str) -> dict[str, Any]:
        """Source and version constraint for provider ``name``; {} if unknown."""
        requirements = self.get_value(f"providers.{name}", {})
        if not isinstance(requirements, dict):
            raise SettingsError(f"providers.{name} must be a mapping")
        return dict(requirements)

    def terraform_settings(self, provider_names: Iterable[str]) -> TerraformSettings:
        """Build a ``terraform`` block requiring the given providers.

        Providers without configured requirements are left out.
        """
        required = {}
        for name in sorted(set(provider_names)):
            requirements = self.get_provider_requirements(name)
            if requirements:
                required[name] = requirements
            else:
                logger.debug("No requirements configured for provider %s", name)
        return TerraformSettings(
            required_version=self.get_required_version(),
            required_providers=required,
        )
