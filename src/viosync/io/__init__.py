"""I/O utilities: KITTI raw drives and per-frame IMU batching."""

from .data_provider import FramePacket, KittiDataProvider
from .imu_batcher import ImuBatcher
from .kitti_reader import (
    KittiCalibration,
    KittiRawReader,
    load_kitti_calibration,
    parse_kitti_timestamp,
)

__all__ = [
    "FramePacket",
    "KittiDataProvider",
    "ImuBatcher",
    "KittiCalibration",
    "KittiRawReader",
    "load_kitti_calibration",
    "parse_kitti_timestamp",
]
