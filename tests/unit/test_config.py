from __future__ import annotations

import os
from pathlib import Path

import pytest

from calcexpr.config import (
    CalcExprConfig,
    EvaluationConfig,
    apply_config,
    get_user_config_path,
    load_config,
)
from calcexpr.exceptions import ConfigError
from calcexpr.expressions import EvaluateOptions, is_cache_enabled


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user config lookup at an empty directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


def test_load_defaults_when_no_config(
    clean_env: None, temp_dir: Path, isolated_home: Path
) -> None:
    """Test that defaults are used when no config file exists."""
    os.chdir(temp_dir)

    config = load_config()
    assert isinstance(config, CalcExprConfig)
    assert config.cache.enabled is True
    assert config.evaluation.to_options() == EvaluateOptions.NONE
    assert config.verbosity == "warning"


def test_load_project_config(
    clean_env: None, temp_dir: Path, isolated_home: Path, sample_config_yaml: str
) -> None:
    """Test loading configuration from calcexpr.yaml."""
    os.chdir(temp_dir)
    (temp_dir / "calcexpr.yaml").write_text(sample_config_yaml)

    config = load_config()
    assert config.cache.enabled is False
    assert config.evaluation.ignore_case is True
    assert config.evaluation.round_away_from_zero is True
    assert config.verbosity == "info"


def test_explicit_config_path(
    clean_env: None, temp_dir: Path, isolated_home: Path
) -> None:
    """An explicit path replaces ./calcexpr.yaml."""
    os.chdir(temp_dir)
    (temp_dir / "calcexpr.yaml").write_text("verbosity: debug\n")
    custom = temp_dir / "custom.yaml"
    custom.write_text("verbosity: error\n")

    assert load_config(custom).verbosity == "error"
    assert load_config().verbosity == "debug"


def test_user_config_is_lowest_priority(
    clean_env: None, temp_dir: Path, isolated_home: Path
) -> None:
    os.chdir(temp_dir)
    user_path = get_user_config_path()
    user_path.parent.mkdir(parents=True)
    user_path.write_text("verbosity: info\nevaluation:\n  no_cache: true\n")
    (temp_dir / "calcexpr.yaml").write_text("verbosity: error\n")

    config = load_config()
    assert config.verbosity == "error"
    assert config.evaluation.no_cache is True


def test_env_var_overrides(
    clean_env: None, temp_dir: Path, isolated_home: Path, sample_config_yaml: str
) -> None:
    """Test that CALCEXPR_* environment variables override config files."""
    os.chdir(temp_dir)
    (temp_dir / "calcexpr.yaml").write_text(sample_config_yaml)
    os.environ["CALCEXPR_CACHE__ENABLED"] = "true"
    os.environ["CALCEXPR_EVALUATION__ITERATE_PARAMETERS"] = "true"

    config = load_config()
    assert config.cache.enabled is True
    assert config.evaluation.iterate_parameters is True
    assert config.evaluation.ignore_case is True


def test_invalid_config_raises_config_error(
    clean_env: None, temp_dir: Path, isolated_home: Path
) -> None:
    """Test that invalid values raise ConfigError with the field path."""
    os.chdir(temp_dir)
    (temp_dir / "calcexpr.yaml").write_text("verbosity: loud\n")

    with pytest.raises(ConfigError) as exc_info:
        load_config()
    assert exc_info.value.field == "verbosity"
    assert exc_info.value.value == "loud"


def test_invalid_yaml_raises_config_error(
    clean_env: None, temp_dir: Path, isolated_home: Path
) -> None:
    os.chdir(temp_dir)
    (temp_dir / "calcexpr.yaml").write_text("cache: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config()


def test_non_mapping_yaml_raises_config_error(
    clean_env: None, temp_dir: Path, isolated_home: Path
) -> None:
    os.chdir(temp_dir)
    (temp_dir / "calcexpr.yaml").write_text("- just\n- a list\n")

    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config()


def test_empty_yaml_uses_defaults(
    clean_env: None, temp_dir: Path, isolated_home: Path
) -> None:
    os.chdir(temp_dir)
    (temp_dir / "calcexpr.yaml").write_text("")
    assert load_config().verbosity == "warning"


def test_evaluation_config_to_options() -> None:
    config = EvaluationConfig(ignore_case=True, round_away_from_zero=True)
    assert config.to_options() == (
        EvaluateOptions.IGNORE_CASE | EvaluateOptions.ROUND_AWAY_FROM_ZERO
    )


def test_apply_config_switches_cache() -> None:
    apply_config(CalcExprConfig(cache={"enabled": False}))
    assert not is_cache_enabled()
    apply_config(CalcExprConfig())
    assert is_cache_enabled()
