"""Load ``RevIndexConfig`` from YAML, environment and keyword overrides.

Highest precedence first: keyword arguments, ``REVINDEX__SECTION__KEY``
environment variables, the YAML file (``~/.config/revindex/config.yaml``
unless another path is given), built-in defaults.
"""

from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from revindex.config.models import (
    CacheConfig,
    DatabaseConfig,
    LoggingConfig,
    RepositoryConfig,
    RevIndexConfig,
)
from revindex.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/revindex/config.yaml").expanduser()


def read_yaml_config(path: Path) -> dict[str, Any]:
    """Top-level mapping of a YAML config file; empty when the file is missing or blank."""
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


class _YamlValues(PydanticBaseSettingsSource):
    """Settings source serving one YAML snapshot, section by section."""

    def __init__(self, settings_cls: type[BaseSettings], values: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._values = values

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:  # noqa: ARG002
        value = self._values.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return {name: value for name, value in self._values.items() if name in self.settings_cls.model_fields}


class RevIndexSettings(BaseSettings):
    """``RevIndexConfig`` sections, filled from every configuration source."""

    model_config = SettingsConfigDict(
        env_prefix="REVINDEX__",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    yaml_values: ClassVar[dict[str, Any]] = {}

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, _YamlValues(settings_cls, cls.yaml_values)


def load_config(config_path: Path | None = None, **overrides: Any) -> RevIndexConfig:
    """Build the effective configuration.

    Raises:
        ConfigError: The YAML file does not parse or a value fails validation.
    """
    path = config_path or GLOBAL_CONFIG_PATH
    settings_cls = type(
        "RevIndexSettings", (RevIndexSettings,), {"yaml_values": read_yaml_config(path)}
    )
    try:
        settings = settings_cls(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigError.invalid_value(
            ".".join(str(part) for part in first["loc"]), first.get("input"), first["msg"]
        ) from e
    return RevIndexConfig.model_validate(settings.model_dump())
