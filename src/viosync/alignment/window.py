"""Fixed-capacity sliding window of paired vision/IMU samples."""

from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np

from .signal import CorrelationSample


class SlidingWindow:
    """Ring buffer of correlation samples in arrival order.

    Storage is preallocated; once `capacity` samples are held each push
    overwrites the oldest one. Ordered views are returned oldest first.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize an empty window.

        Args:
            capacity: Maximum number of samples retained

        Raises:
            ValueError: If capacity is not positive
        """
        if capacity <= 0:
            raise ValueError(f"Window capacity must be positive, got {capacity}")

        self._capacity = int(capacity)
        self._vision = np.zeros(self._capacity, dtype=np.float64)
        self._imu = np.zeros(self._capacity, dtype=np.float64)
        self._ticks = np.zeros(self._capacity, dtype=np.int64)
        self._head = 0  # Slot written by the next push
        self._size = 0

    def push(self, sample: CorrelationSample) -> None:
        """Append a sample, evicting the oldest one when full."""
        self._vision[self._head] = sample.vision_angle
        self._imu[self._head] = sample.imu_angle
        self._ticks[self._head] = sample.imu_ticks
        self._head = (self._head + 1) % self._capacity
        if self._size < self._capacity:
            self._size += 1

    def extend(self, samples: Iterable[CorrelationSample]) -> None:
        """Append several samples in order."""
        for sample in samples:
            self.push(sample)

    def clear(self) -> None:
        """Remove all samples."""
        self._head = 0
        self._size = 0

    def _ordered(self, storage: np.ndarray) -> np.ndarray:
        """Return a copy of the valid entries, oldest first."""
        if self._size < self._capacity:
            return storage[: self._size].copy()
        return np.roll(storage, -self._head)

    def vision_angles(self) -> np.ndarray:
        """Return (n,) vision angles, oldest first."""
        return self._ordered(self._vision)

    def imu_angles(self) -> np.ndarray:
        """Return (n,) IMU angles, oldest first."""
        return self._ordered(self._imu)

    def imu_ticks(self) -> np.ndarray:
        """Return (n,) IMU tick counts, oldest first."""
        return self._ordered(self._ticks)

    def is_full(self) -> bool:
        """Return True once `capacity` samples are held."""
        return self._size == self._capacity

    def is_empty(self) -> bool:
        """Return True if the window holds no samples."""
        return self._size == 0

    @property
    def capacity(self) -> int:
        """Maximum number of samples retained."""
        return self._capacity

    def __len__(self) -> int:
        """Return the number of samples held."""
        return self._size

    def __iter__(self) -> Iterator[CorrelationSample]:
        """Iterate over samples, oldest first."""
        for vision, imu, ticks in zip(
            self.vision_angles(), self.imu_angles(), self.imu_ticks()
        ):
            yield CorrelationSample(float(vision), float(imu), int(ticks))

    def __repr__(self) -> str:
        """Return string representation."""
        return f"SlidingWindow(size={self._size}, capacity={self._capacity})"
