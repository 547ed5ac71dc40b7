"""Synchronized frame + IMU packets for the time aligner."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import numpy as np

from ..frontend.frame import Frame
from .imu_batcher import ImuBatcher
from .kitti_reader import KittiRawReader


@dataclass
class FramePacket:
    """One frame and the IMU samples since the previous frame.

    Attributes:
        frame: Left camera frame
        imu_stamps: (1, N+1) IMU timestamps in nanoseconds
        imu_acc_gyr: (6, N+1) accelerometer and gyroscope samples
    """

    frame: Frame
    imu_stamps: np.ndarray
    imu_acc_gyr: np.ndarray

    @property
    def num_imu(self) -> int:
        """Number of IMU columns, boundary sample included."""
        return self.imu_stamps.shape[1]


class KittiDataProvider:
    """Iterates a KITTI raw drive as `FramePacket`s.

    Example usage:
        provider = KittiDataProvider.from_path(drive_path)
        for packet in provider:
            aligner.estimate_time_alignment(
                tracker, packet.frame, packet.imu_stamps, packet.imu_acc_gyr
            )
    """

    def __init__(self, reader: KittiRawReader, max_frames: int | None = None) -> None:
        """Initialize provider.

        Args:
            reader: Opened KITTI raw drive
            max_frames: Stop after this many frames (all frames if None)
        """
        self._reader = reader
        self._batcher = ImuBatcher(reader.imu_stamps, reader.imu_acc_gyr)
        self._max_frames = max_frames

    @classmethod
    def from_path(
        cls, drive_path: str | Path, max_frames: int | None = None
    ) -> KittiDataProvider:
        """Open a drive directory and wrap it in a provider."""
        return cls(KittiRawReader(drive_path), max_frames=max_frames)

    def __len__(self) -> int:
        """Number of packets produced."""
        if self._max_frames is None:
            return len(self._reader)
        return min(len(self._reader), self._max_frames)

    def __iter__(self) -> Iterator[FramePacket]:
        """Yield packets in frame order."""
        prev_timestamp: int | None = None
        for idx in range(len(self)):
            image, timestamp_ns = self._reader.get_left_image(idx)
            if prev_timestamp is None:
                stamps, acc_gyr = self._batcher.first_batch(timestamp_ns)
            else:
                stamps, acc_gyr = self._batcher.batch_between(
                    prev_timestamp, timestamp_ns
                )
            yield FramePacket(
                frame=Frame(frame_id=idx, timestamp_ns=timestamp_ns, image=image),
                imu_stamps=stamps,
                imu_acc_gyr=acc_gyr,
            )
            prev_timestamp = timestamp_ns

    @property
    def reader(self) -> KittiRawReader:
        """Underlying dataset reader."""
        return self._reader
