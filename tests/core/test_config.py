"""Tests for settings loading and validation."""

import pytest

from rrlabel.core.config_spec import Settings, load_settings, validate_settings
from rrlabel.core.enums import MarkerCategory
from rrlabel.core.exceptions import ConfigurationFileError, ConfigurationValidationError


def test_defaults():
    settings = Settings()
    assert settings.click_threshold_ms == 100
    assert settings.interaction_radius == 60
    assert settings.visual_radius == 8
    assert settings.symbol_size_mm == 5.0
    assert settings.deletable == frozenset({MarkerCategory.LABEL})
    assert load_settings(None) == settings


def test_load_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "click_threshold_ms: 150\n"
        "deletable_categories: [label, calibration]\n"
        "log_level: DEBUG\n"
    )
    settings = load_settings(path)
    assert settings.click_threshold_ms == 150
    assert settings.deletable == frozenset(MarkerCategory)
    assert settings.log_level == "debug"


def test_empty_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("")
    assert load_settings(path) == Settings()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationFileError):
        load_settings(tmp_path / "absent.yaml")


def test_unparsable_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("click_threshold_ms: [1, 2\n")
    with pytest.raises(ConfigurationFileError):
        load_settings(path)


def test_non_mapping_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationFileError):
        load_settings(path)


@pytest.mark.parametrize("values", [
    {"click_threshold_ms": 0},
    {"interaction_radius": -1},
    {"deletable_categories": ["everything"]},
    {"log_level": "loud"},
])
def test_invalid_values(values):
    with pytest.raises(ConfigurationValidationError):
        validate_settings(values)
