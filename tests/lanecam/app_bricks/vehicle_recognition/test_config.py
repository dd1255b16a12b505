# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import json

import pytest

from lanecam.app_bricks.vehicle_recognition import ClassConfig, ConfigError, load_class_configs

ENTRIES = [
    {"percent": 0.9, "url": ""},
    {"label": "car", "percent": 0.7, "url": "http://collector.local/car", "data": {"vehicle": "car"}},
    {"label": "truck", "confidence_threshold": 0.8, "url": "http://collector.local/truck"},
]


def test_load_from_list():
    configs = load_class_configs(ENTRIES)

    assert [c.index for c in configs] == [0, 1, 2]
    assert configs[0].label == "Class 0"
    assert configs[0].webhook_url == ""
    assert not configs[0].notifies
    assert configs[1].confidence_threshold == 0.7
    assert dict(configs[1].extra_payload) == {"vehicle": "car"}
    assert configs[2].confidence_threshold == 0.8
    assert dict(configs[2].extra_payload) == {}


def test_load_from_json_file(tmp_path):
    path = tmp_path / "classes.json"
    path.write_text(json.dumps(ENTRIES), encoding="utf-8")

    configs = load_class_configs(path)

    assert len(configs) == 3
    assert configs[1].label == "car"


def test_load_from_env(tmp_path, monkeypatch):
    path = tmp_path / "classes.json"
    path.write_text(json.dumps(ENTRIES[:1]), encoding="utf-8")
    monkeypatch.setenv("LANECAM_CLASSES_FILE", str(path))

    assert len(load_class_configs()) == 1


def test_missing_source(monkeypatch):
    monkeypatch.delenv("LANECAM_CLASSES_FILE", raising=False)
    with pytest.raises(ConfigError, match="LANECAM_CLASSES_FILE"):
        load_class_configs()


def test_unreadable_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_class_configs(tmp_path / "missing.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "classes.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_class_configs(path)


@pytest.mark.parametrize(
    "entries",
    [
        [],
        {"percent": 0.5},
        [{"label": "no threshold"}],
        [{"percent": 1.5}],
        [{"percent": "high"}],
        [{"percent": 0.5, "url": 42}],
        [{"percent": 0.5, "data": ["not", "a", "mapping"]}],
        ["not a mapping"],
    ],
)
def test_invalid_entries(entries):
    with pytest.raises(ConfigError):
        load_class_configs(entries)


def test_class_config_passthrough():
    configs = [ClassConfig(0, "empty", 0.5), ClassConfig(1, "car", 0.5, "http://collector.local")]
    assert load_class_configs(configs) == configs


def test_class_config_index_must_match_position():
    with pytest.raises(ConfigError):
        load_class_configs([ClassConfig(1, "car", 0.5)])


def test_class_config_payload_is_read_only():
    config = ClassConfig(0, "car", 0.5, "http://collector.local", {"vehicle": "car"})
    with pytest.raises(TypeError):
        config.extra_payload["vehicle"] = "bus"


@pytest.mark.parametrize("threshold", [-0.1, 1.01])
def test_class_config_threshold_range(threshold):
    with pytest.raises(ValueError):
        ClassConfig(0, "car", threshold)
