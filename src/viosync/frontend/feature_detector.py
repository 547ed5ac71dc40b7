"""ORB feature detection for frame-to-frame rotation tracking."""

from dataclasses import dataclass

import cv2
import numpy as np


@dataclass
class Features:
    """Container for detected image features.

    Attributes:
        keypoints: Tuple of OpenCV KeyPoint objects
        descriptors: Nx32 array of ORB binary descriptors (uint8), or None if no features
    """

    keypoints: tuple[cv2.KeyPoint, ...]
    descriptors: np.ndarray | None

    @property
    def points(self) -> np.ndarray:
        """Return Nx2 array of keypoint (x, y) coordinates."""
        if len(self.keypoints) == 0:
            return np.empty((0, 2), dtype=np.float32)
        return np.array([kp.pt for kp in self.keypoints], dtype=np.float32)

    def __len__(self) -> int:
        """Return number of detected features."""
        return len(self.keypoints)


class FeatureDetector:
    """ORB feature detector used by the monocular RANSAC tracker."""

    def __init__(
        self,
        n_features: int = 1000,
        scale_factor: float = 1.2,
        n_levels: int = 8,
        fast_threshold: int = 20,
    ) -> None:
        """Initialize ORB detector.

        Args:
            n_features: Maximum number of features to retain (sorted by score)
            scale_factor: Pyramid decimation ratio (>1.0)
            n_levels: Number of pyramid levels for multi-scale detection
            fast_threshold: Threshold for FAST corner detection
        """
        self._orb = cv2.ORB_create(
            nfeatures=n_features,
            scaleFactor=scale_factor,
            nlevels=n_levels,
            fastThreshold=fast_threshold,
        )
        self._n_features = n_features

    def detect(self, image: np.ndarray) -> Features:
        """Detect ORB features in a grayscale image.

        Args:
            image: Grayscale image (uint8). Color images are converted first.

        Returns:
            Features object containing keypoints and descriptors
        """
        if image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

        keypoints, descriptors = self._orb.detectAndCompute(image, None)
        if keypoints is None:
            keypoints = []

        return Features(keypoints=tuple(keypoints), descriptors=descriptors)

    @property
    def n_features(self) -> int:
        """Return maximum number of features to detect."""
        return self._n_features
