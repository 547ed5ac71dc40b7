"""Frontend components feeding the time aligner.

- SE3: Rigid body transformation (relative pose between frames)
- Frame: Per-frame datum with cached features
- TrackingStatus / RansacResult / Tracker: the tracker capability
- MonoTracker: 5-point RANSAC implementation of that capability
"""

from .camera import CameraIntrinsics
from .feature_detector import FeatureDetector, Features
from .feature_matcher import FeatureMatcher, FrameMatches
from .frame import Frame
from .mono_tracker import MonoTracker
from .pose import SE3
from .tracking import RansacResult, Tracker, TrackingStatus

__all__ = [
    # Pose
    "SE3",
    # Camera
    "CameraIntrinsics",
    "Frame",
    # Features
    "FeatureDetector",
    "Features",
    "FeatureMatcher",
    "FrameMatches",
    # Tracking
    "MonoTracker",
    "RansacResult",
    "Tracker",
    "TrackingStatus",
]
