"""
Unit tests for timing configuration loading.
"""

import pytest

from tickflow.config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_TIMING,
    TimingConfig,
    TimingConfigLoader,
    load_timing_config,
)


class TestTimingConfig:
    """Test the configuration record."""

    def test_defaults(self):
        config = TimingConfig()

        assert config.default_timeout == 30_000
        assert config.default_polling_rate == 600
        assert config.companion_rate == 100
        assert config.script_polling_rate == 60

    def test_negative_value_rejected(self):
        with pytest.raises(ValueError, match="default_timeout"):
            TimingConfig(default_timeout=-1)

    @pytest.mark.parametrize("value", ["600", None, True])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(ValueError):
            TimingConfig(default_polling_rate=value)

    def test_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_TIMING.default_timeout = 1


class TestTimingConfigLoader:
    """Test loading YAML timing files."""

    def test_loads_values(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("timing:\n  default_timeout: 1000\n  companion_rate: 250\n")

        loader = TimingConfigLoader(str(path))

        assert loader.load_config()
        assert loader.timing.default_timeout == 1000
        assert loader.timing.companion_rate == 250
        assert loader.timing.default_polling_rate == 600
        assert loader.warnings == []

    def test_missing_file_falls_back(self, tmp_path):
        loader = TimingConfigLoader(str(tmp_path / "absent.yaml"))

        assert not loader.load_config()
        assert loader.timing == DEFAULT_TIMING
        assert len(loader.warnings) == 1

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("")

        loader = TimingConfigLoader(str(path))

        assert loader.load_config()
        assert loader.timing == DEFAULT_TIMING

    def test_unknown_keys_warned(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("timing:\n  warp_speed: 9\n")

        loader = TimingConfigLoader(str(path))
        loader.load_config()

        assert loader.timing == DEFAULT_TIMING
        assert "warp_speed" in loader.warnings[0]

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("timing: [unclosed\n")

        with pytest.raises(ValueError):
            TimingConfigLoader(str(path)).load_config()

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("timing:\n  companion_rate: -5\n")

        with pytest.raises(ValueError):
            TimingConfigLoader(str(path)).load_config()

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("timing:\n  - 1\n  - 2\n")

        with pytest.raises(ValueError):
            TimingConfigLoader(str(path)).load_config()

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            TimingConfigLoader(str(path)).load_config()

    def test_scalar_top_level_rejected(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("just text\n")

        with pytest.raises(ValueError, match="mapping"):
            TimingConfigLoader(str(path)).load_config()

    def test_default_path_is_packaged_file(self):
        """The bundled defaults ship inside the package."""
        loader = TimingConfigLoader()

        assert DEFAULT_CONFIG_PATH.exists()
        assert DEFAULT_CONFIG_PATH.parent.name == "data"
        assert loader.load_config()
        assert loader.timing == DEFAULT_TIMING
        assert loader.warnings == []

    def test_relative_path_resolves_to_project_root(self):
        loader = TimingConfigLoader("tickflow/data/timing.yaml")

        assert loader.load_config()
        assert loader.timing == DEFAULT_TIMING

    def test_load_timing_config_helper(self, tmp_path):
        path = tmp_path / "timing.yaml"
        path.write_text("timing:\n  script_polling_rate: 120\n")

        assert load_timing_config(str(path)).script_polling_rate == 120
        assert load_timing_config(str(tmp_path / "missing.yaml")) == DEFAULT_TIMING
