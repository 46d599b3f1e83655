import dataclasses
import json

import pytest

from constants import template_data
from helpers.config_utils import Size, Transform, build_config, load_config


def test_defaults_come_from_template_data(config):
    assert config.page_id.transform == Transform.from_api(template_data.PAGE_ID_TRANSFORM)
    assert config.watermark_skew_seconds == 15
    assert config.page_id_link == "LAST_SLIDE"
    assert config.validate_animations is False


def test_config_is_frozen(config):
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.page_size = 10
    with pytest.raises(TypeError):
        config.header.text_style["bold"] = True


def test_unknown_setting_raises():
    with pytest.raises(ValueError):
        build_config({"heder_text": "{name}"})


def test_transform_matches_exactly_with_missing_fields_as_zero():
    transform = Transform(1, 1, 0, 4731300)
    assert transform.matches({"scaleX": 1, "scaleY": 1, "translateY": 4731300, "unit": "EMU"})
    assert not transform.matches({"scaleX": 1, "scaleY": 1, "translateX": 1, "translateY": 4731300})
    assert not transform.matches({})


def test_size_matches_api_magnitudes():
    size = Size(600000, 300000)
    assert size.matches(size.to_api())
    assert not size.matches({"width": {"magnitude": 600000}, "height": {"magnitude": 1}})


def test_folder_name_normalizer(config):
    assert config.normalize_folder_name("01 - Algebra") == "Algebra"
    assert config.normalize_folder_name("3_Geometry ") == "Geometry"
    assert config.normalize_folder_name("Algebra 2") == "Algebra 2"


def test_load_config_overlays_file_and_overrides(tmp_path):
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"header_text": "{name}", "teacher_root_id": "root"}))

    config = load_config(str(settings_path), validate_animations=True, page_size=None)

    assert config.header_text == "{name}"
    assert config.teacher_root_id == "root"
    assert config.validate_animations is True
    assert config.page_size == template_data.PAGE_SIZE


def test_load_config_without_file_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.json"))
    assert config == build_config()
