"""Tests for MonoTracker class."""

import numpy as np
import pytest

from viosync import SE3, CameraIntrinsics, Frame, MonoTracker, TrackingStatus
from viosync.frontend import FeatureDetector, FrameMatches

INTRINSICS = CameraIntrinsics(fx=700.0, fy=700.0, cx=320.0, cy=240.0)


class FixedMatcher:
    """Matcher returning predefined correspondences."""

    def __init__(self, matches: FrameMatches) -> None:
        self.matches = matches

    def match(self, features_ref, features_cur) -> FrameMatches:
        return self.matches


def project(points: np.ndarray) -> np.ndarray:
    """Project (N, 3) camera-frame points with INTRINSICS."""
    uv = points[:, :2] / points[:, 2:3]
    return uv * [INTRINSICS.fx, INTRINSICS.fy] + [INTRINSICS.cx, INTRINSICS.cy]


def synthetic_matches(T_cur_ref: SE3, num_points: int = 120) -> FrameMatches:
    """Project a random point cloud into two views related by T_cur_ref."""
    rng = np.random.default_rng(7)
    points_ref = np.column_stack(
        [
            rng.uniform(-3.0, 3.0, num_points),
            rng.uniform(-2.0, 2.0, num_points),
            rng.uniform(4.0, 10.0, num_points),
        ]
    )
    points_cur = points_ref @ T_cur_ref.rotation.T + T_cur_ref.translation
    return FrameMatches(
        ref_points=project(points_ref),
        cur_points=project(points_cur),
        distances=np.zeros(num_points, dtype=np.float32),
    )


@pytest.fixture
def frames() -> tuple[Frame, Frame]:
    """Two frames without image data."""
    return Frame(frame_id=0, timestamp_ns=0), Frame(frame_id=1, timestamp_ns=100)


class TestMonoTracker:
    """Test suite for MonoTracker class."""

    def test_disabled(self, frames: tuple[Frame, Frame]):
        """Test that a disabled tracker never runs RANSAC."""
        tracker = MonoTracker(INTRINSICS, enabled=False)
        result = tracker.geometric_outlier_rejection_mono(*frames)

        assert result.status == TrackingStatus.DISABLED
        assert not result.is_valid
        assert not tracker.enabled

    def test_frames_without_images(self, frames: tuple[Frame, Frame]):
        """Test that frames without pixels give too few matches."""
        result = MonoTracker(INTRINSICS).geometric_outlier_rejection_mono(*frames)

        assert result.status == TrackingStatus.FEW_MATCHES
        assert result.relative_pose.rotation_angle == 0.0

    def test_blank_images(self):
        """Test that textureless images give too few matches."""
        blank = np.full((120, 160), 128, dtype=np.uint8)
        ref = Frame(frame_id=0, timestamp_ns=0, image=blank)
        cur = Frame(frame_id=1, timestamp_ns=100, image=blank.copy())

        result = MonoTracker(INTRINSICS).geometric_outlier_rejection_mono(ref, cur)

        assert result.status == TrackingStatus.FEW_MATCHES

    def test_low_disparity(self, frames: tuple[Frame, Frame]):
        """Test that static correspondences are reported as LOW_DISPARITY."""
        matches = synthetic_matches(SE3.identity())
        tracker = MonoTracker(INTRINSICS, matcher=FixedMatcher(matches))

        result = tracker.geometric_outlier_rejection_mono(*frames)

        assert result.status == TrackingStatus.LOW_DISPARITY

    def test_recovers_rotation(self, frames: tuple[Frame, Frame]):
        """Test that RANSAC recovers the relative rotation T_ref_cur."""
        T_cur_ref = SE3.from_rvec_tvec(
            np.array([0.01, 0.05, -0.02]), np.array([0.3, 0.0, 0.05])
        )
        tracker = MonoTracker(
            INTRINSICS, matcher=FixedMatcher(synthetic_matches(T_cur_ref))
        )

        result = tracker.geometric_outlier_rejection_mono(*frames)

        assert result.status == TrackingStatus.VALID
        assert result.num_inliers >= 100
        np.testing.assert_allclose(
            result.relative_pose.rotation, T_cur_ref.rotation.T, atol=1e-3
        )
        assert result.relative_pose.rotation_angle == pytest.approx(
            T_cur_ref.rotation_angle, abs=1e-3
        )

    def test_min_matches(self):
        """Test that fewer than 5 required matches is rejected."""
        with pytest.raises(ValueError, match="min_matches"):
            MonoTracker(INTRINSICS, min_matches=4)


class TestFrame:
    """Tests for per-frame feature caching."""

    def test_features_cached(self):
        """Test that features are detected once per frame."""
        rng = np.random.default_rng(0)
        image = rng.integers(0, 255, (120, 160), dtype=np.uint8)
        frame = Frame(frame_id=0, timestamp_ns=0, image=image)
        detector = FeatureDetector(n_features=200)

        assert frame.has_image
        assert frame.features(detector) is frame.features(detector)

    def test_no_image(self):
        """Test that a frame without image has no features."""
        frame = Frame(frame_id=3, timestamp_ns=42)

        assert not frame.has_image
        assert len(frame.features(FeatureDetector())) == 0
