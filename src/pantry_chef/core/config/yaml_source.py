"""YAML settings source layering base files with per-environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import PydanticBaseSettingsSource


if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


CONFIG_DIR_ENV = "PANTRY_CHEF_CONFIG_DIR"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``override`` merged in recursively.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the value in ``base``.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_tree(config_dir: Path, app_env: str) -> dict[str, Any]:
    """Load ``base/*.yaml`` then ``environments/<app_env>/*.yaml``.

    Files inside each directory are applied in sorted order so that the
    result does not depend on filesystem listing order.
    """
    merged: dict[str, Any] = {}
    for directory in (config_dir / "base", config_dir / "environments" / app_env):
        if not directory.exists():
            continue
        for yaml_file in sorted(directory.glob("*.yaml")):
            with yaml_file.open(encoding="utf-8") as f:
                merged = deep_merge(merged, yaml.safe_load(f) or {})
    return merged


class MultiYamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the project's ``config/`` directory.

    ``APP_ENV`` selects the environment overlay. The directory itself can be
    relocated with ``PANTRY_CHEF_CONFIG_DIR`` (useful for containers where the
    package is installed away from the repository checkout).
    """

    def __init__(self, settings_cls: type[Any]) -> None:
        super().__init__(settings_cls)
        self._config_dir = self._find_config_dir()
        self._app_env = os.getenv("APP_ENV", "development")
        self._yaml_data = load_yaml_tree(self._config_dir, self._app_env)

    def _find_config_dir(self) -> Path:
        override = os.getenv(CONFIG_DIR_ENV)
        if override:
            return Path(override)
        # src/pantry_chef/core/config/yaml_source.py -> project root
        return Path(__file__).resolve().parents[4] / "config"

    def get_field_value(
        self,
        _field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        value = self._yaml_data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, Any]:
        return self._yaml_data
