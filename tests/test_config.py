"""Tests for YAML configuration loading and the assistant defaults."""

import pytest

from core.config_loader import load_config, merge_config
from pipelines.studio_assistant import config


class TestLoadConfig:

    def test_loads_mapping(self, tmp_path):
        path = tmp_path / "assistant.yaml"
        path.write_text("llm:\n  temperature: 0.5\n", encoding="utf-8")
        assert load_config(path) == {"llm": {"temperature": 0.5}}

    def test_empty_file_is_empty_mapping(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)


class TestMergeConfig:

    def test_nested_override(self):
        defaults = {"llm": {"temperature": 0.2, "max_tokens": 2048}, "availability": {"horizon_days": 14}}
        merged = merge_config(defaults, {"llm": {"temperature": 0.0}})

        assert merged == {"llm": {"temperature": 0.0, "max_tokens": 2048}, "availability": {"horizon_days": 14}}
        assert defaults["llm"]["temperature"] == 0.2

    def test_scalar_replaces_mapping(self):
        assert merge_config({"a": {"b": 1}}, {"a": 3}) == {"a": 3}

    def test_no_overrides(self):
        assert merge_config({"a": 1}) == {"a": 1}


class TestAssistantConfig:

    def test_packaged_defaults(self):
        assert config.HORIZON_DAYS == 14
        assert config.SCHEDULE_WEEKDAYS == ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
        assert (config.OPENING_HOUR, config.CLOSING_HOUR) == (9, 17)
        assert (config.MIN_SLOTS, config.MAX_SLOTS) == (2, 3)
        assert config.DEFAULT_TIMEZONE == "America/New_York"

    def test_override_file_from_environment(self, tmp_path, monkeypatch):
        override = tmp_path / "override.yaml"
        override.write_text("availability:\n  horizon_days: 7\nllm:\n  temperature: 0.0\n", encoding="utf-8")
        monkeypatch.setenv("STUDIO_ASSISTANT_CONFIG", str(override))

        loaded = config.load_assistant_config()

        assert loaded["availability"]["horizon_days"] == 7
        assert loaded["llm"] == {"temperature": 0.0, "max_tokens": 2048}
        assert loaded["schedule_generator"]["min_slots"] == 2
