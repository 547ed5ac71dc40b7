"""Time alignment configuration."""

from __future__ import annotations

import numbers
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml


@dataclass(frozen=True)
class AlignmentConfig:
    """Parameters of the camera-IMU time aligner, fixed for a session.

    Attributes:
        gyro_noise_density: Gyroscope white noise (rad/s/√Hz)
        use_imu_rate_window: If True the window holds one sample per IMU
            tick, otherwise one sample per frame
        window_size: Number of samples retained in the sliding window
        nominal_sample_period_s: Duration of one IMU tick in seconds
        variance_threshold_scaling: Multiplier on the noise variance the
            IMU signal must reach before correlating
        rotation_axis: Axis (0=x, 1=y, 2=z) whose signed angle is
            correlated, or None to correlate rotation magnitudes
    """

    gyro_noise_density: float = 1.6968e-04
    use_imu_rate_window: bool = True
    window_size: int = 100
    nominal_sample_period_s: float = 0.005
    variance_threshold_scaling: float = 1.0
    rotation_axis: int | None = None

    def __post_init__(self) -> None:
        """Validate parameter ranges."""
        if self.gyro_noise_density < 0.0:
            raise ValueError(
                f"gyro_noise_density must be >= 0, got {self.gyro_noise_density}"
            )
        if isinstance(self.window_size, bool) or not isinstance(
            self.window_size, numbers.Integral
        ):
            raise ValueError(f"window_size must be an integer, got {self.window_size}")
        if self.window_size <= 0:
            raise ValueError(f"window_size must be positive, got {self.window_size}")
        if self.nominal_sample_period_s <= 0.0:
            raise ValueError(
                "nominal_sample_period_s must be positive, "
                f"got {self.nominal_sample_period_s}"
            )
        if self.variance_threshold_scaling < 0.0:
            raise ValueError(
                "variance_threshold_scaling must be >= 0, "
                f"got {self.variance_threshold_scaling}"
            )
        if self.rotation_axis is not None and self.rotation_axis not in (0, 1, 2):
            raise ValueError(
                f"rotation_axis must be None, 0, 1 or 2, got {self.rotation_axis}"
            )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> AlignmentConfig:
        """Load configuration from a YAML file.

        The keys may sit at the top level or under a `time_alignment`
        section. Missing keys keep their defaults.

        Args:
            yaml_path: Path to the YAML file

        Returns:
            AlignmentConfig

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file contains unknown keys or invalid values
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if isinstance(data, dict) and "time_alignment" in data:
            data = data["time_alignment"] or {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {yaml_path}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown time alignment keys in {yaml_path}: {unknown}")

        return cls(**data)

    def to_dict(self) -> dict:
        """Return the configuration as a plain dictionary."""
        return asdict(self)

    @property
    def imu_rate_hz(self) -> float:
        """Nominal IMU sampling rate in Hz."""
        return 1.0 / self.nominal_sample_period_s
