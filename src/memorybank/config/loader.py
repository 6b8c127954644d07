"""Configuration loading with pydantic-settings.

Sources, highest precedence first:
1. Direct kwargs to load_config()
2. Environment variables (MEMORYBANK__SECTION__KEY)
3. Project config (<project>/.memorybank/config.yaml)
4. Global config (~/.config/memorybank/config.yaml)
5. Built-in defaults

YAML files are merged section by section. When a merged value fails
validation, the error names the file that supplied it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from memorybank.config.models import (
    AnalysisConfig,
    LoggingConfig,
    MemoryBankConfig,
    MemoryBankSettings,
)
from memorybank.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/memorybank/config.yaml").expanduser()
PROJECT_CONFIG_RELPATH = Path(".memorybank") / "config.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    """Mapping stored at ``path``; empty when the file does not exist."""
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


_MISSING = object()


def _leaf_keys(data: dict[str, Any], prefix: tuple[str, ...] = ()) -> list[tuple[str, ...]]:
    keys: list[tuple[str, ...]] = []
    for name, value in data.items():
        key = (*prefix, str(name))
        if isinstance(value, dict) and value:
            keys.extend(_leaf_keys(value, key))
        else:
            keys.append(key)
    return keys


@dataclass
class _YamlLayers:
    """YAML files merged in order, remembering which file last set each value."""

    values: dict[str, Any] = field(default_factory=dict)
    origins: dict[tuple[str, ...], Path] = field(default_factory=dict)

    @classmethod
    def read(cls, *paths: Path) -> "_YamlLayers":
        layers = cls()
        for path in paths:
            data = _load_yaml(path)
            layers.values = _deep_merge(layers.values, data)
            layers.origins.update(dict.fromkeys(_leaf_keys(data), path))
        return layers

    def _lookup(self, key: tuple[str, ...]) -> Any:
        node: Any = self.values
        for part in key:
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def origin_of(self, loc: tuple[Any, ...], value: Any) -> Path | None:
        """File that supplied ``value`` at ``loc``; None when env or kwargs did."""
        key = tuple(str(part) for part in loc)
        if self._lookup(key) != value:
            return None
        if key in self.origins:
            return self.origins[key]
        # A whole section (e.g. an unknown one) rather than a leaf
        nested = [path for k, path in self.origins.items() if k[: len(key)] == key]
        return nested[-1] if nested else None


class _YamlSource(PydanticBaseSettingsSource):
    """Lowest-precedence settings source backed by the merged YAML layers."""

    def __init__(self, settings_cls: type[BaseSettings], values: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._values = values

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        value = self._values.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return self._values


def _settings_class(values: dict[str, Any]) -> type[BaseSettings]:
    """Settings class bound to one set of YAML values."""

    class _Settings(BaseSettings):
        model_config = SettingsConfigDict(
            env_prefix="MEMORYBANK__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        analysis: AnalysisConfig = AnalysisConfig()
        memory_bank: MemoryBankConfig = MemoryBankConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # First source wins
            return (init_settings, env_settings, _YamlSource(settings_cls, values))

    return _Settings


def load_config(project_root: Path | None = None, **kwargs: Any) -> MemoryBankSettings:
    """Resolve settings for ``project_root`` (default: the working directory).

    Args:
        project_root: Project whose .memorybank/config.yaml is read.
        **kwargs: Section overrides, e.g. ``analysis={"depth": "deep"}``.

    Raises:
        ConfigError: On unreadable YAML or a value that fails validation.
    """
    root = project_root or Path.cwd()
    layers = _YamlLayers.read(GLOBAL_CONFIG_PATH, root / PROJECT_CONFIG_RELPATH)

    try:
        settings = _settings_class(layers.values)(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        loc = tuple(err["loc"])
        origin = layers.origin_of(loc, err.get("input"))
        raise ConfigError.invalid_value(
            ".".join(str(part) for part in loc),
            err.get("input"),
            err["msg"],
            path=str(origin) if origin else None,
        ) from e
    return MemoryBankSettings.model_validate(settings.model_dump())
