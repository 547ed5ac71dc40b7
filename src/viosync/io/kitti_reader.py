"""KITTI raw dataset reader (stereo images, OXTS IMU, calibration).

Expected layout of a raw drive:

    2011_09_26/
        calib_cam_to_cam.txt
        2011_09_26_drive_0001_sync/
            image_00/timestamps.txt, image_00/data/0000000000.png, ...
            image_01/timestamps.txt, image_01/data/0000000000.png, ...
            oxts/timestamps.txt, oxts/data/0000000000.txt, ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import cv2
import numpy as np

from ..frontend.camera import CameraIntrinsics

logger = logging.getLogger(__name__)

# Column indices in an OXTS packet line
OXTS_ACCEL_COLUMNS = (11, 12, 13)  # ax, ay, az (m/s²)
OXTS_GYRO_COLUMNS = (17, 18, 19)  # wx, wy, wz (rad/s)
OXTS_NUM_FIELDS = 30


def parse_kitti_timestamp(text: str) -> int:
    """Parse a KITTI timestamp ('2011-09-26 13:02:25.964389445') to ns.

    Args:
        text: Timestamp line with up to nanosecond fraction

    Returns:
        Nanoseconds since the Unix epoch (UTC)

    Raises:
        ValueError: If the line is not a KITTI timestamp
    """
    text = text.strip()
    base, _, fraction = text.partition(".")
    try:
        seconds = datetime.strptime(base, "%Y-%m-%d %H:%M:%S")
    except ValueError as e:
        raise ValueError(f"Invalid KITTI timestamp: '{text}'") from e
    if fraction and not fraction.isdigit():
        raise ValueError(f"Invalid KITTI timestamp fraction: '{text}'")

    nanoseconds = int(fraction.ljust(9, "0")[:9]) if fraction else 0
    epoch_s = int(seconds.replace(tzinfo=timezone.utc).timestamp())
    return epoch_s * 1_000_000_000 + nanoseconds


@dataclass
class KittiCalibration:
    """Stereo calibration from calib_cam_to_cam.txt.

    Attributes:
        intrinsics_left: Rectified intrinsics of camera 0 (from P_rect_00)
        R_01: 3x3 rotation from camera 0 to camera 1
        T_01: (3,) translation from camera 0 to camera 1 (m)
        image_size: (width, height) of the rectified images
    """

    intrinsics_left: CameraIntrinsics
    R_01: np.ndarray
    T_01: np.ndarray
    image_size: tuple[int, int]

    @property
    def baseline(self) -> float:
        """Stereo baseline in meters."""
        return float(np.linalg.norm(self.T_01))


def load_kitti_calibration(calib_path: str | Path) -> KittiCalibration:
    """Parse calib_cam_to_cam.txt.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a required entry is missing or malformed
    """
    path = Path(calib_path)
    if not path.exists():
        raise FileNotFoundError(f"Calibration file not found: {calib_path}")

    entries: dict[str, np.ndarray] = {}
    with open(path, "r") as f:
        for line in f:
            key, sep, values = line.partition(":")
            if not sep or key.strip() == "calib_time":
                continue
            try:
                entries[key.strip()] = np.array(
                    [float(v) for v in values.split()], dtype=np.float64
                )
            except ValueError as e:
                raise ValueError(f"Invalid entry '{key.strip()}' in {path}") from e

    def require(key: str, size: int) -> np.ndarray:
        value = entries.get(key)
        if value is None or value.size != size:
            raise ValueError(f"Missing or invalid {key} in {path}")
        return value

    P_rect_00 = require("P_rect_00", 12)
    R_01 = require("R_01", 9).reshape(3, 3)
    T_01 = require("T_01", 3)
    size = entries.get("S_rect_00")
    if size is None or size.size != 2:
        size = require("S_00", 2)

    return KittiCalibration(
        intrinsics_left=CameraIntrinsics.from_projection(P_rect_00),
        R_01=R_01,
        T_01=T_01,
        image_size=(int(size[0]), int(size[1])),
    )


class KittiRawReader:
    """Reader for one KITTI raw drive.

    Example usage:
        reader = KittiRawReader("data/kitti/2011_09_26/2011_09_26_drive_0001_sync")
        for left, right, timestamp_ns in reader:
            ...
        stamps, acc_gyr = reader.imu_stamps, reader.imu_acc_gyr
    """

    def __init__(
        self, drive_path: str | Path, calib_path: str | Path | None = None
    ) -> None:
        """Initialize reader.

        Args:
            drive_path: Path to the drive directory (…_drive_XXXX_sync)
            calib_path: calib_cam_to_cam.txt; searched in the drive directory
                and its parent if None. Calibration is optional.

        Raises:
            FileNotFoundError: If the drive or a required directory is missing
            ValueError: If timestamps and images disagree or a file is malformed
        """
        self.drive_path = Path(drive_path)
        self.left_path = self.drive_path / "image_00"
        self.right_path = self.drive_path / "image_01"
        self.oxts_path = self.drive_path / "oxts"

        self._validate_paths()

        self._left_images = sorted((self.left_path / "data").glob("*.png"))
        self._timestamps = self._load_timestamps(self.left_path / "timestamps.txt")
        if not self._left_images:
            raise ValueError(f"No images found in {self.left_path / 'data'}")
        if len(self._left_images) != len(self._timestamps):
            raise ValueError(
                f"{len(self._left_images)} images but {len(self._timestamps)} "
                f"timestamps in {self.left_path}"
            )

        self._imu_stamps, self._imu_acc_gyr = self._load_oxts()
        self._calibration = self._find_calibration(calib_path)
        logger.info(
            "Loaded KITTI drive %s: %d frames, %d OXTS packets",
            self.drive_path.name,
            len(self._left_images),
            self._imu_stamps.shape[0],
        )
        self._current_idx = 0

    def _validate_paths(self) -> None:
        """Validate that all required paths exist."""
        if not self.drive_path.exists():
            raise FileNotFoundError(f"Drive path does not exist: {self.drive_path}")

        for directory in (self.left_path, self.right_path, self.oxts_path):
            if not (directory / "data").exists():
                raise FileNotFoundError(
                    f"{directory.name}/data directory not found: {directory / 'data'}"
                )
            if not (directory / "timestamps.txt").exists():
                raise FileNotFoundError(
                    f"{directory.name}/timestamps.txt not found: "
                    f"{directory / 'timestamps.txt'}"
                )

    @staticmethod
    def _load_timestamps(path: Path) -> list[int]:
        """Parse a KITTI timestamps.txt file into nanoseconds."""
        with open(path, "r") as f:
            return [parse_kitti_timestamp(line) for line in f if line.strip()]

    def _load_oxts(self) -> tuple[np.ndarray, np.ndarray]:
        """Load OXTS packets as (N,) stamps and (6, N) acc/gyro samples."""
        stamps = self._load_timestamps(self.oxts_path / "timestamps.txt")
        packets = sorted((self.oxts_path / "data").glob("*.txt"))
        if len(packets) != len(stamps):
            raise ValueError(
                f"{len(packets)} OXTS packets but {len(stamps)} timestamps "
                f"in {self.oxts_path}"
            )

        acc_gyr = np.zeros((6, len(packets)), dtype=np.float64)
        columns = list(OXTS_ACCEL_COLUMNS + OXTS_GYRO_COLUMNS)
        for i, packet in enumerate(packets):
            fields = packet.read_text().split()
            if len(fields) != OXTS_NUM_FIELDS:
                raise ValueError(
                    f"Expected {OXTS_NUM_FIELDS} OXTS fields in {packet}, "
                    f"got {len(fields)}"
                )
            try:
                acc_gyr[:, i] = [float(fields[c]) for c in columns]
            except ValueError as e:
                raise ValueError(f"Invalid OXTS packet: {packet}") from e

        return np.array(stamps, dtype=np.int64), acc_gyr

    def _find_calibration(
        self, calib_path: str | Path | None
    ) -> KittiCalibration | None:
        """Load the stereo calibration if one is available."""
        if calib_path is not None:
            return load_kitti_calibration(calib_path)
        for directory in (self.drive_path, self.drive_path.parent):
            candidate = directory / "calib_cam_to_cam.txt"
            if candidate.exists():
                return load_kitti_calibration(candidate)
        logger.warning("No calib_cam_to_cam.txt found for %s", self.drive_path)
        return None

    def _load_image(self, camera_path: Path, filename: str) -> np.ndarray:
        """Load one grayscale image."""
        path = camera_path / "data" / filename
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")
        image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        if image is None:
            raise ValueError(f"Failed to load image: {path}")
        return image

    def get_stereo_pair(self, idx: int) -> tuple[np.ndarray, np.ndarray, int]:
        """Return (left_image, right_image, timestamp_ns) of frame `idx`."""
        filename = self._left_images[idx].name
        left = self._load_image(self.left_path, filename)
        right = self._load_image(self.right_path, filename)
        return left, right, self._timestamps[idx]

    def get_left_image(self, idx: int) -> tuple[np.ndarray, int]:
        """Return (left_image, timestamp_ns) of frame `idx`."""
        filename = self._left_images[idx].name
        return self._load_image(self.left_path, filename), self._timestamps[idx]

    @property
    def timestamps(self) -> list[int]:
        """Left camera timestamps in nanoseconds."""
        return list(self._timestamps)

    @property
    def imu_stamps(self) -> np.ndarray:
        """(N,) OXTS timestamps in nanoseconds."""
        return self._imu_stamps

    @property
    def imu_acc_gyr(self) -> np.ndarray:
        """(6, N) accelerometer (rows 0-2) and gyroscope (rows 3-5) samples."""
        return self._imu_acc_gyr

    @property
    def calibration(self) -> KittiCalibration | None:
        """Stereo calibration, or None if no calibration file was found."""
        return self._calibration

    def reset(self) -> None:
        """Reset iterator to beginning of drive."""
        self._current_idx = 0

    def __len__(self) -> int:
        """Return number of stereo frames."""
        return len(self._left_images)

    def __iter__(self) -> Iterator[tuple[np.ndarray, np.ndarray, int]]:
        """Iterate over (left_image, right_image, timestamp_ns)."""
        self.reset()
        return self

    def __next__(self) -> tuple[np.ndarray, np.ndarray, int]:
        """Get next stereo pair for iterator protocol."""
        if self._current_idx >= len(self):
            raise StopIteration
        pair = self.get_stereo_pair(self._current_idx)
        self._current_idx += 1
        return pair
