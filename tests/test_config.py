"""Tests for YAML configuration loading and weight validation."""

from pathlib import Path

import pytest

from contact_intel.config import AppConfig, load_config, validate_config, validate_weights
from contact_intel.errors import ConfigError


def test_default_weight_tables_sum_to_one():
    cfg = AppConfig()

    for weights in (
        cfg.assessment.weights,
        cfg.scoring.confidence_weights,
        cfg.scoring.quality_weights,
        cfg.dedup.weights,
    ):
        assert sum(weights.values()) == pytest.approx(1.0)
    validate_config(cfg)


def test_load_config_without_path_returns_defaults():
    cfg = load_config(None)

    assert cfg == AppConfig()


def test_load_config_merges_partial_sections(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "filter:\n  confidence_threshold: 0.5\nlogging:\n  level: DEBUG\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.filter.confidence_threshold == 0.5
    assert cfg.filter.min_quality == 0.3
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.filename == "run.jsonl"


def test_load_config_rejects_weights_that_do_not_sum_to_one(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "dedup:\n"
        "  weights:\n"
        "    email: 0.5\n"
        "    name: 0.5\n"
        "    outlet: 0.5\n"
        "    title: 0.0\n"
        "    bio: 0.0\n"
        "    social: 0.0\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError, match="dedup.weights"):
        load_config(str(path))


def test_load_config_rejects_unknown_keys(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("filter:\n  no_such_option: 1\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Unknown configuration key"):
        load_config(str(path))


def test_load_config_rejects_non_mapping_and_bad_yaml(tmp_path: Path):
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    broken = tmp_path / "broken.yaml"
    broken.write_text("filter: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(str(listing))
    with pytest.raises(ConfigError):
        load_config(str(broken))
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.yaml"))


def test_validate_weights_tolerates_float_rounding():
    validate_weights({"a": 0.1, "b": 0.2, "c": 0.7000000001}, "custom")

    with pytest.raises(ConfigError):
        validate_weights({"a": 0.5, "b": 0.4}, "custom")
