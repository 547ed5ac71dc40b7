"""viosync - online camera-IMU time alignment for visual-inertial odometry."""

__version__ = "0.1.0"

# Re-export main classes for convenient imports
from .config import AlignmentConfig
from .alignment import (
    AlignerState,
    AlignmentResult,
    CorrelationSample,
    CrossCorrelationEstimator,
    ImuBatch,
    SlidingWindow,
    TemporalAligner,
    VarianceGate,
)
from .frontend import (
    SE3,
    CameraIntrinsics,
    Frame,
    MonoTracker,
    RansacResult,
    Tracker,
    TrackingStatus,
)
from .io import FramePacket, ImuBatcher, KittiDataProvider, KittiRawReader

__all__ = [
    "__version__",
    # Configuration
    "AlignmentConfig",
    # Time alignment
    "TemporalAligner",
    "AlignerState",
    "AlignmentResult",
    "CorrelationSample",
    "ImuBatch",
    "SlidingWindow",
    "VarianceGate",
    "CrossCorrelationEstimator",
    # Frontend
    "SE3",
    "CameraIntrinsics",
    "Frame",
    "MonoTracker",
    "RansacResult",
    "Tracker",
    "TrackingStatus",
    # Dataset / I/O
    "KittiRawReader",
    "KittiDataProvider",
    "FramePacket",
    "ImuBatcher",
]
