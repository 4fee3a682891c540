"""Tests for engine configuration and YAML loading."""

from __future__ import annotations

import textwrap
from datetime import timedelta
from pathlib import Path

import pytest

from interest_signal.config import EngineConfig, engine_config_from_mapping, load_engine_config


class TestEngineConfig:
    def test_defaults(self):
        cfg = EngineConfig()
        assert cfg.hourly_decay == {"d1": 0.95, "d7": 0.98, "d30": 0.995}
        assert cfg.window_contribution == {"d1": 1.0, "d7": 0.7, "d30": 0.5}
        assert cfg.sweep_interval == timedelta(hours=1)
        assert cfg.session_capacity == 100
        assert cfg.default_geo_bucket == "0x00"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"hourly_decay": {"d1": 1.5, "d7": 0.98, "d30": 0.995}},
            {"hourly_decay": {"d1": 0.95}},
            {"window_contribution": {"d1": -1.0, "d7": 0.7, "d30": 0.5}},
            {"boost_floor": 0.5},
            {"sweep_interval": timedelta(0)},
            {"session_capacity": 0},
            {"recency_half_life_hours": 0},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            EngineConfig(**overrides)


class TestFromMapping:
    def test_durations_in_hours(self):
        cfg = engine_config_from_mapping({"sweep_interval_hours": 0.5, "session_window_hours": 12})
        assert cfg.sweep_interval == timedelta(minutes=30)
        assert cfg.session_window == timedelta(hours=12)

    def test_partial_window_dict_merged(self):
        cfg = engine_config_from_mapping({"hourly_decay": {"d1": 0.9}})
        assert cfg.hourly_decay == {"d1": 0.9, "d7": 0.98, "d30": 0.995}

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            engine_config_from_mapping({"decay": 0.5})

    def test_raw_duration_field_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            engine_config_from_mapping({"sweep_interval": 3})


class TestLoadEngineConfig:
    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "engine.yaml"
        path.write_text(textwrap.dedent("""\
            export_top_n: 5
            matching_top_n: 3
            default_geo_bucket: "0x1f"
            sweep_interval_hours: 2
        """), encoding="utf-8")
        cfg = load_engine_config(path)
        assert cfg.export_top_n == 5
        assert cfg.matching_top_n == 3
        assert cfg.default_geo_bucket == "0x1f"
        assert cfg.sweep_interval == timedelta(hours=2)

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_engine_config(tmp_path / "missing.yaml") == EngineConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "engine.yaml"
        path.write_text("", encoding="utf-8")
        assert load_engine_config(path) == EngineConfig()

    def test_list_root_rejected(self, tmp_path: Path):
        path = tmp_path / "engine.yaml"
        path.write_text("- 1\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_engine_config(path)
