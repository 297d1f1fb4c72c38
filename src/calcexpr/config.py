from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from calcexpr.exceptions import ConfigError
from calcexpr.expressions.cache import set_cache_enabled
from calcexpr.expressions.options import EvaluateOptions
from calcexpr.logging import get_logger

__all__ = [
    "CalcExprConfig",
    "CacheConfig",
    "EvaluationConfig",
    "load_config",
    "apply_config",
    "get_user_config_path",
    "PROJECT_CONFIG_FILENAME",
]

logger = get_logger(__name__)

PROJECT_CONFIG_FILENAME = "calcexpr.yaml"

# Project file for the load in progress; None means ./calcexpr.yaml
_project_config_path: ContextVar[Path | None] = ContextVar(
    "calcexpr_project_config_path", default=None
)


class CacheConfig(BaseModel):
    """Settings for the process-wide compiled-expression cache."""

    enabled: bool = True


class EvaluationConfig(BaseModel):
    """Default evaluation flags for expressions built by the CLI."""

    ignore_case: bool = False
    no_cache: bool = False
    iterate_parameters: bool = False
    round_away_from_zero: bool = False

    def to_options(self) -> EvaluateOptions:
        options = EvaluateOptions.NONE
        if self.ignore_case:
            options |= EvaluateOptions.IGNORE_CASE
        if self.no_cache:
            options |= EvaluateOptions.NO_CACHE
        if self.iterate_parameters:
            options |= EvaluateOptions.ITERATE_PARAMETERS
        if self.round_away_from_zero:
            options |= EvaluateOptions.ROUND_AWAY_FROM_ZERO
        return options


def _read_yaml(path: Path) -> dict[str, Any]:
    """Mapping stored in ``path``; empty when the file is absent or blank.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        logger.warning("config_file_empty", path=str(path))
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping", value=data)
    return data


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by one YAML file, read when the source is built."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path) -> None:
        super().__init__(settings_cls)
        self.path = path
        self._data = _read_yaml(path)

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class CalcExprConfig(BaseSettings):
    """Root configuration object containing all calcexpr settings."""

    model_config = SettingsConfigDict(
        env_prefix="CALCEXPR_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Keyword arguments, then CALCEXPR_* variables, then the project
        file, then the user file. Earlier sources win; defaults fill the rest.
        """
        project_file = _project_config_path.get() or (
            Path.cwd() / PROJECT_CONFIG_FILENAME
        )
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_file),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """``~/.config/calcexpr/config.yaml``, whether or not it exists."""
    return Path.home() / ".config" / "calcexpr" / "config.yaml"


def _first_problem(error: ValidationError) -> ConfigError:
    problem = error.errors()[0]
    return ConfigError(
        f"Invalid configuration: {problem['msg']}",
        field=".".join(str(part) for part in problem["loc"]) or None,
        value=problem.get("input"),
    )


def load_config(config_path: Path | None = None) -> CalcExprConfig:
    """Merge defaults, the user file, the project file and the environment.

    Args:
        config_path: Project file to read instead of ./calcexpr.yaml. A
            missing file is logged and skipped.

    Raises:
        ConfigError: If a file is not valid YAML or a value fails validation.
    """
    if config_path is not None and not config_path.exists():
        logger.info("config_file_missing", path=str(config_path))

    token = _project_config_path.set(config_path)
    try:
        return CalcExprConfig()
    except ValidationError as e:
        raise _first_problem(e) from e
    finally:
        _project_config_path.reset(token)


def apply_config(config: CalcExprConfig) -> None:
    """Push process-wide settings into the engine (the cache switch)."""
    set_cache_enabled(config.cache.enabled)
