"""Tests for AlignmentConfig class."""

from pathlib import Path

import pytest

from viosync import AlignmentConfig


class TestAlignmentConfig:
    """Test suite for AlignmentConfig class."""

    def test_defaults(self):
        """Test default parameters."""
        config = AlignmentConfig()

        assert config.gyro_noise_density == pytest.approx(1.6968e-04)
        assert config.use_imu_rate_window
        assert config.window_size == 100
        assert config.nominal_sample_period_s == pytest.approx(0.005)
        assert config.variance_threshold_scaling == 1.0
        assert config.rotation_axis is None
        assert config.imu_rate_hz == pytest.approx(200.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"gyro_noise_density": -1.0},
            {"window_size": 0},
            {"window_size": 2.5},
            {"window_size": True},
            {"nominal_sample_period_s": 0.0},
            {"variance_threshold_scaling": -0.5},
            {"rotation_axis": 3},
        ],
    )
    def test_invalid_values(self, kwargs: dict):
        """Test that out-of-range parameters raise ValueError."""
        with pytest.raises(ValueError):
            AlignmentConfig(**kwargs)

    def test_frozen(self):
        """Test that a configuration cannot change after construction."""
        config = AlignmentConfig()
        with pytest.raises(AttributeError):
            config.window_size = 5

    def test_to_dict_roundtrip(self):
        """Test rebuilding a configuration with overrides."""
        config = AlignmentConfig(window_size=20, rotation_axis=2)
        rebuilt = AlignmentConfig(**{**config.to_dict(), "use_imu_rate_window": False})

        assert rebuilt.window_size == 20
        assert rebuilt.rotation_axis == 2
        assert not rebuilt.use_imu_rate_window


class TestFromYaml:
    """Tests for loading configuration files."""

    def test_flat_file(self, tmp_path: Path):
        """Test loading top-level keys."""
        path = tmp_path / "alignment.yaml"
        path.write_text("window_size: 25\nuse_imu_rate_window: false\n")

        config = AlignmentConfig.from_yaml(path)

        assert config.window_size == 25
        assert not config.use_imu_rate_window
        assert config.gyro_noise_density == pytest.approx(1.6968e-04)

    def test_nested_section(self, tmp_path: Path):
        """Test loading keys under a time_alignment section."""
        path = tmp_path / "frontend.yaml"
        path.write_text(
            "time_alignment:\n"
            "  gyro_noise_density: 0.001\n"
            "  nominal_sample_period_s: 0.01\n"
            "  rotation_axis: 1\n"
        )

        config = AlignmentConfig.from_yaml(str(path))

        assert config.gyro_noise_density == pytest.approx(0.001)
        assert config.nominal_sample_period_s == pytest.approx(0.01)
        assert config.rotation_axis == 1

    def test_empty_file(self, tmp_path: Path):
        """Test that an empty file gives the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert AlignmentConfig.from_yaml(path) == AlignmentConfig()

    def test_unknown_key(self, tmp_path: Path):
        """Test that unknown keys are reported."""
        path = tmp_path / "typo.yaml"
        path.write_text("window_sise: 10\n")

        with pytest.raises(ValueError, match="window_sise"):
            AlignmentConfig.from_yaml(path)

    def test_not_a_mapping(self, tmp_path: Path):
        """Test that a non-mapping document raises ValueError."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ValueError, match="mapping"):
            AlignmentConfig.from_yaml(path)

    def test_invalid_value(self, tmp_path: Path):
        """Test that values are validated after loading."""
        path = tmp_path / "bad.yaml"
        path.write_text("window_size: -4\n")

        with pytest.raises(ValueError, match="window_size"):
            AlignmentConfig.from_yaml(path)

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            AlignmentConfig.from_yaml(tmp_path / "missing.yaml")
