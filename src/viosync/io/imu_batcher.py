"""Slicing of a continuous IMU stream into per-frame batches."""

from __future__ import annotations

import numpy as np


class ImuBatcher:
    """Cuts an IMU stream into the batches the time aligner consumes.

    The batch of a frame interval (t_prev, t_cur] starts with the last IMU
    sample at or before t_prev (the boundary sample shared with the
    previous batch) followed by every sample in (t_prev, t_cur].
    """

    def __init__(self, stamps: np.ndarray, acc_gyr: np.ndarray) -> None:
        """Initialize batcher.

        Args:
            stamps: (N,) IMU timestamps, strictly increasing
            acc_gyr: (6, N) accelerometer (rows 0-2) and gyroscope (rows 3-5)

        Raises:
            ValueError: If shapes disagree or stamps are not increasing
        """
        self._stamps = np.asarray(stamps).flatten()
        self._acc_gyr = np.asarray(acc_gyr, dtype=np.float64)

        if self._acc_gyr.ndim != 2 or self._acc_gyr.shape[0] != 6:
            raise ValueError(f"IMU samples must be (6, N), got {self._acc_gyr.shape}")
        if self._acc_gyr.shape[1] != len(self._stamps):
            raise ValueError(
                f"IMU stamps ({len(self._stamps)}) and samples "
                f"({self._acc_gyr.shape[1]}) disagree in length"
            )
        if np.any(self._stamps[1:] <= self._stamps[:-1]):
            raise ValueError("IMU stamps must be strictly increasing")

    def batch_between(
        self, start: int | float, end: int | float
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return the batch of the interval (start, end].

        Args:
            start: Previous frame timestamp
            end: Current frame timestamp

        Returns:
            Tuple of (stamps (1, K), acc_gyr (6, K)); K is 0 when the
            stream has no sample at or before `end`
        """
        if end < start:
            raise ValueError(f"Interval end {end} precedes start {start}")

        # Last index at or before start, or the first index after it
        first = int(np.searchsorted(self._stamps, start, side="right")) - 1
        first = max(first, 0)
        last = int(np.searchsorted(self._stamps, end, side="right"))

        stamps = self._stamps[first:last].reshape(1, -1)
        return stamps, self._acc_gyr[:, first:last]

    def first_batch(self, timestamp: int | float) -> tuple[np.ndarray, np.ndarray]:
        """Return the single boundary sample at or before the first frame."""
        idx = int(np.searchsorted(self._stamps, timestamp, side="right")) - 1
        if idx < 0:
            return (
                np.empty((1, 0), dtype=self._stamps.dtype),
                np.empty((6, 0), dtype=np.float64),
            )
        return self._stamps[idx : idx + 1].reshape(1, 1), self._acc_gyr[:, idx : idx + 1]

    def __len__(self) -> int:
        """Number of IMU samples in the stream."""
        return len(self._stamps)
