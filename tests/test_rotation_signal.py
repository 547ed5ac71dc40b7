"""Tests for the vision/IMU rotation signal reduction."""

import numpy as np
import pytest

from viosync import SE3
from viosync.alignment import (
    CorrelationSample,
    ImuBatch,
    frame_rate_sample,
    imu_rate_samples,
    integrate_gyro,
    vision_rotation_angle,
)


def make_batch(gyro: np.ndarray, start_ns: int = 0, step_ns: int = 10) -> ImuBatch:
    """Build a batch from (3, K) gyroscope columns and zero accelerations."""
    gyro = np.asarray(gyro, dtype=np.float64)
    num = gyro.shape[1]
    stamps = np.arange(num, dtype=np.int64).reshape(1, -1) * step_ns + start_ns
    return ImuBatch.from_arrays(stamps, np.vstack([np.zeros((3, num)), gyro]))


class TestImuBatch:
    """Tests for IMU batch validation."""

    def test_row_vector_stamps(self):
        """Test that (1, K) stamps are flattened and integers kept."""
        batch = make_batch(np.ones((3, 4)))

        assert batch.stamps.shape == (4,)
        assert batch.stamps.dtype == np.int64
        assert len(batch) == 4
        assert batch.num_interior == 3
        np.testing.assert_array_equal(batch.gyro, np.ones((3, 4)))

    def test_unsigned_stamps(self):
        """Test that unsigned stamps are accepted and made signed."""
        stamps = np.array([[10, 20, 30]], dtype=np.uint64)
        acc_gyr = np.arange(18, dtype=np.float64).reshape(6, 3)

        batch = ImuBatch.from_arrays(stamps, acc_gyr)

        assert batch.stamps.dtype == np.int64
        np.testing.assert_array_equal(batch.acc, acc_gyr[:3])
        np.testing.assert_array_equal(batch.gyro, acc_gyr[3:])

    def test_empty_batch(self):
        """Test that a batch without columns is accepted."""
        batch = ImuBatch.from_arrays(np.empty((1, 0)), np.empty((6, 0)))

        assert len(batch) == 0
        assert batch.num_interior == 0

    @pytest.mark.parametrize(
        "stamps,acc_gyr,message",
        [
            (np.zeros((2, 3)), np.zeros((6, 3)), "row"),
            (np.arange(3), np.zeros((3, 3)), r"\(6, K\)"),
            (np.arange(4), np.zeros((6, 3)), "disagree in length"),
            (np.array([0.0, 1.0, np.nan]), np.zeros((6, 3)), "finite"),
            (np.array([0, 2, 2]), np.zeros((6, 3)), "strictly increasing"),
            (np.array([5, 3], dtype=np.uint64), np.zeros((6, 2)), "increasing"),
        ],
    )
    def test_invalid_batch(self, stamps: np.ndarray, acc_gyr: np.ndarray, message: str):
        """Test that malformed batches raise ValueError."""
        with pytest.raises(ValueError, match=message):
            ImuBatch.from_arrays(stamps, acc_gyr)


class TestVisionAngle:
    """Tests for vision rotation reduction."""

    def test_magnitude(self):
        """Test that the default reduction is the rotation angle."""
        pose = SE3.from_rvec_tvec(np.array([0.0, 0.3, -0.4]))

        assert vision_rotation_angle(pose) == pytest.approx(0.5)

    def test_signed_axis(self):
        """Test that an axis selects the signed component."""
        pose = SE3.from_rvec_tvec(np.array([0.0, 0.0, -0.2]))

        assert vision_rotation_angle(pose, axis=2) == pytest.approx(-0.2)
        assert vision_rotation_angle(pose, axis=0) == pytest.approx(0.0)

    def test_identity(self):
        """Test that no rotation gives a zero angle."""
        assert vision_rotation_angle(SE3.identity()) == 0.0


class TestImuRateSamples:
    """Tests for per-tick sample construction."""

    def test_interpolation(self):
        """Test interpolation of the vision angle by column index."""
        gyro = np.zeros((3, 5))
        gyro[0] = [9.0, 1.0, 2.0, 3.0, 4.0]
        batch = make_batch(gyro)

        samples = imu_rate_samples(2.0, 1.0, batch, period_s=0.5)

        assert [s.vision_angle for s in samples] == pytest.approx([1.25, 1.5, 1.75, 2.0])
        assert [s.imu_angle for s in samples] == pytest.approx([0.5, 1.0, 1.5, 2.0])
        assert all(s.imu_ticks == 1 for s in samples)

    def test_include_boundary(self):
        """Test that the boundary column is emitted on request."""
        gyro = np.zeros((3, 3))
        gyro[1] = [2.0, 4.0, 6.0]
        batch = make_batch(gyro)

        samples = imu_rate_samples(1.0, 0.0, batch, period_s=1.0, include_boundary=True)

        assert samples == [
            CorrelationSample(0.0, 2.0, 1),
            CorrelationSample(0.5, 4.0, 1),
            CorrelationSample(1.0, 6.0, 1),
        ]

    def test_no_interior_ticks(self):
        """Test that a single-column batch maps to the current angle."""
        batch = make_batch(np.array([[3.0], [0.0], [4.0]]))

        assert imu_rate_samples(1.0, 0.0, batch, period_s=1.0) == []
        samples = imu_rate_samples(1.0, 0.5, batch, period_s=1.0, include_boundary=True)
        assert samples == [CorrelationSample(1.0, 5.0, 1)]

    def test_signed_axis(self):
        """Test that an axis keeps the sign of the gyro component."""
        gyro = np.zeros((3, 2))
        gyro[2] = [0.0, -2.0]
        batch = make_batch(gyro)

        samples = imu_rate_samples(0.0, 0.0, batch, period_s=0.5, axis=2)

        assert samples[0].imu_angle == pytest.approx(-1.0)


class TestFrameRateSample:
    """Tests for per-frame gyro integration."""

    def test_integrate_single_axis(self):
        """Test that rotations about one axis add up."""
        gyro = np.zeros((3, 4))
        gyro[2] = [0.1, 0.2, 0.3, 0.4]

        assert integrate_gyro(gyro, period_s=1.0) == pytest.approx(1.0)
        assert integrate_gyro(-gyro, period_s=1.0, axis=2) == pytest.approx(-1.0)

    def test_integrate_empty(self):
        """Test that no ticks give a zero angle."""
        assert integrate_gyro(np.zeros((3, 0)), period_s=1.0) == 0.0

    def test_integrate_non_commuting(self):
        """Test that ticks about different axes are composed, not summed."""
        gyro = np.array([[np.pi / 2, 0.0], [0.0, np.pi / 2], [0.0, 0.0]])

        # Two quarter turns about x then y compose to a 2pi/3 rotation
        assert integrate_gyro(gyro, period_s=1.0) == pytest.approx(2 * np.pi / 3)

    def test_boundary_skipped(self):
        """Test that the boundary column does not contribute."""
        gyro = np.zeros((3, 3))
        gyro[0] = [100.0, 1.0, 1.0]
        batch = make_batch(gyro)

        sample = frame_rate_sample(0.3, batch, period_s=0.1)

        assert sample.vision_angle == 0.3
        assert sample.imu_angle == pytest.approx(0.2)
        assert sample.imu_ticks == 2
