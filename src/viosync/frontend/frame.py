"""Per-frame datum handed to the tracker and the time aligner."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .feature_detector import FeatureDetector, Features


@dataclass
class Frame:
    """A single camera frame.

    Attributes:
        frame_id: Sequential frame index
        timestamp_ns: Capture timestamp in nanoseconds (camera clock)
        image: Grayscale image, or None for frames that carry no pixels
            (e.g. when the tracker is replaced by a test double)
    """

    frame_id: int
    timestamp_ns: int
    image: np.ndarray | None = None
    _features: Features | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def features(self, detector: FeatureDetector) -> Features:
        """Return the frame's features, detecting them on first use.

        Args:
            detector: Detector used if the features are not cached yet

        Returns:
            Cached Features of this frame
        """
        if self._features is None:
            if self.image is None:
                self._features = Features(keypoints=(), descriptors=None)
            else:
                self._features = detector.detect(self.image)
        return self._features

    @property
    def has_image(self) -> bool:
        """Return True if the frame carries image data."""
        return self.image is not None
