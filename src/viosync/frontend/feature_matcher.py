"""Descriptor matching between a reference frame and the current frame."""

from dataclasses import dataclass

import cv2
import numpy as np

from .feature_detector import Features


@dataclass
class FrameMatches:
    """Correspondences between the reference and the current frame.

    Attributes:
        ref_points: Nx2 pixel coordinates in the reference frame
        cur_points: Nx2 pixel coordinates in the current frame
        distances: Hamming distances between matched descriptors
    """

    ref_points: np.ndarray  # (N, 2) float64
    cur_points: np.ndarray  # (N, 2) float64
    distances: np.ndarray  # (N,) float32

    @classmethod
    def empty(cls) -> "FrameMatches":
        """Return a match set without correspondences."""
        return cls(
            ref_points=np.empty((0, 2), dtype=np.float64),
            cur_points=np.empty((0, 2), dtype=np.float64),
            distances=np.empty(0, dtype=np.float32),
        )

    @property
    def median_disparity(self) -> float:
        """Median pixel displacement between matched points (0 if empty)."""
        if len(self) == 0:
            return 0.0
        flow = np.linalg.norm(self.cur_points - self.ref_points, axis=1)
        return float(np.median(flow))

    def __len__(self) -> int:
        """Return number of matches."""
        return len(self.distances)


class FeatureMatcher:
    """Brute-force Hamming matcher with Lowe's ratio test."""

    def __init__(
        self,
        ratio_threshold: float = 0.75,
        max_hamming_distance: int = 50,
    ) -> None:
        """Initialize matcher.

        Args:
            ratio_threshold: Accept a match only if best < ratio * second best
            max_hamming_distance: Maximum Hamming distance for a valid match
        """
        self._bf_matcher = cv2.BFMatcher(cv2.NORM_HAMMING, crossCheck=False)
        self._ratio_threshold = ratio_threshold
        self._max_distance = max_hamming_distance

    def match(self, features_ref: Features, features_cur: Features) -> FrameMatches:
        """Match reference features against current features.

        Args:
            features_ref: Features of the reference frame
            features_cur: Features of the current frame

        Returns:
            FrameMatches with pixel correspondences
        """
        if features_ref.descriptors is None or features_cur.descriptors is None:
            return FrameMatches.empty()

        knn_matches = self._bf_matcher.knnMatch(
            features_ref.descriptors,
            features_cur.descriptors,
            k=2,
        )

        ref_indices = []
        cur_indices = []
        distances = []

        for match_pair in knn_matches:
            if len(match_pair) == 0:
                continue
            best = match_pair[0]
            if (
                len(match_pair) > 1
                and best.distance > self._ratio_threshold * match_pair[1].distance
            ):
                continue
            if best.distance > self._max_distance:
                continue

            ref_indices.append(best.queryIdx)
            cur_indices.append(best.trainIdx)
            distances.append(best.distance)

        if not ref_indices:
            return FrameMatches.empty()

        ref_points = features_ref.points[ref_indices].astype(np.float64)
        cur_points = features_cur.points[cur_indices].astype(np.float64)
        return FrameMatches(
            ref_points=ref_points,
            cur_points=cur_points,
            distances=np.array(distances, dtype=np.float32),
        )

    @property
    def ratio_threshold(self) -> float:
        """Return the ratio test threshold."""
        return self._ratio_threshold
