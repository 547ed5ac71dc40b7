"""Result type returned by the time aligner."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AlignmentResult:
    """Outcome of one time alignment attempt.

    `valid=False` means "not determined yet", never a failure; the shift
    is then always 0.

    Attributes:
        valid: True if `imu_time_shift` may be applied
        imu_time_shift: Offset of the IMU clock w.r.t. the camera clock (s)
    """

    valid: bool
    imu_time_shift: float = 0.0

    @classmethod
    def pending(cls) -> AlignmentResult:
        """Result for "not enough information yet"."""
        return cls(valid=False, imu_time_shift=0.0)

    @classmethod
    def trivial(cls) -> AlignmentResult:
        """Result for intervals that cannot contradict alignment."""
        return cls(valid=True, imu_time_shift=0.0)

    def __bool__(self) -> bool:
        """Truthiness follows `valid`."""
        return self.valid
