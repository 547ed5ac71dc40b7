"""Monocular relative pose estimation with 5-point RANSAC."""

from __future__ import annotations

import logging

import cv2
import numpy as np

from .camera import CameraIntrinsics
from .feature_detector import FeatureDetector
from .feature_matcher import FeatureMatcher
from .frame import Frame
from .pose import SE3
from .tracking import RansacResult, TrackingStatus

logger = logging.getLogger(__name__)


class MonoTracker:
    """Estimates the relative rotation between two frames of one camera.

    Features are matched between the reference and the current frame and
    the essential matrix is fitted with Nister's 5-point solver inside
    RANSAC. The decomposed pose is returned as T_ref_cur; its translation
    is only known up to scale.

    Implements the `Tracker` capability consumed by `TemporalAligner`.
    """

    def __init__(
        self,
        intrinsics: CameraIntrinsics,
        detector: FeatureDetector | None = None,
        matcher: FeatureMatcher | None = None,
        enabled: bool = True,
        min_matches: int = 15,
        min_inliers: int = 10,
        min_disparity_px: float = 0.5,
        ransac_threshold_px: float = 1.0,
        ransac_confidence: float = 0.999,
    ) -> None:
        """Initialize the tracker.

        Args:
            intrinsics: Pinhole intrinsics of the (rectified) camera
            detector: ORB detector, default-constructed if None
            matcher: Descriptor matcher, default-constructed if None
            enabled: If False every call returns DISABLED
            min_matches: Minimum correspondences before running RANSAC
            min_inliers: Minimum RANSAC inliers for a VALID result
            min_disparity_px: Below this median flow the motion is treated
                as too small to constrain the essential matrix
            ransac_threshold_px: Epipolar inlier threshold in pixels
            ransac_confidence: Desired RANSAC success probability
        """
        if min_matches < 5:
            raise ValueError(f"min_matches must be >= 5, got {min_matches}")

        self._K = intrinsics.to_matrix()
        self._detector = detector or FeatureDetector()
        self._matcher = matcher or FeatureMatcher()
        self._enabled = enabled
        self._min_matches = min_matches
        self._min_inliers = min_inliers
        self._min_disparity_px = min_disparity_px
        self._ransac_threshold_px = ransac_threshold_px
        self._ransac_confidence = ransac_confidence

    def geometric_outlier_rejection_mono(
        self, ref_frame: Frame, cur_frame: Frame
    ) -> RansacResult:
        """Estimate T_ref_cur between two frames.

        Args:
            ref_frame: Reference (previous) frame
            cur_frame: Current frame

        Returns:
            RansacResult; the pose is identity unless status is VALID
        """
        if not self._enabled:
            return RansacResult(TrackingStatus.DISABLED)

        matches = self._matcher.match(
            ref_frame.features(self._detector),
            cur_frame.features(self._detector),
        )
        if len(matches) < self._min_matches:
            logger.debug(
                "Frames %d->%d: only %d matches",
                ref_frame.frame_id,
                cur_frame.frame_id,
                len(matches),
            )
            return RansacResult(TrackingStatus.FEW_MATCHES)

        if matches.median_disparity < self._min_disparity_px:
            return RansacResult(TrackingStatus.LOW_DISPARITY)

        E, mask = cv2.findEssentialMat(
            matches.ref_points,
            matches.cur_points,
            self._K,
            method=cv2.RANSAC,
            prob=self._ransac_confidence,
            threshold=self._ransac_threshold_px,
        )
        # Several solutions may be stacked as (3k, 3); keep the first
        if E is None or E.shape[0] < 3 or mask is None:
            return RansacResult(TrackingStatus.INVALID)
        E = E[:3, :]

        num_inliers, R, t, _ = cv2.recoverPose(
            E, matches.ref_points, matches.cur_points, self._K, mask=mask
        )
        if num_inliers < self._min_inliers:
            logger.debug(
                "Frames %d->%d: %d RANSAC inliers",
                ref_frame.frame_id,
                cur_frame.frame_id,
                num_inliers,
            )
            return RansacResult(TrackingStatus.INVALID, num_inliers=int(num_inliers))

        # recoverPose returns T_cur_ref (x_cur = R @ x_ref + t)
        T_cur_ref = SE3.from_Rt(R, np.asarray(t).flatten())
        return RansacResult(
            TrackingStatus.VALID,
            relative_pose=T_cur_ref.inverse(),
            num_inliers=int(num_inliers),
        )

    @property
    def enabled(self) -> bool:
        """Return True if RANSAC is run."""
        return self._enabled
