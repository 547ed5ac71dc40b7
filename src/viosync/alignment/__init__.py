"""Online camera-IMU temporal calibration.

- TemporalAligner: per-frame orchestrator and state machine
- SlidingWindow: ring buffer of paired vision/IMU rotation angles
- VarianceGate: rejects windows at the gyroscope noise level
- CrossCorrelationEstimator: lag search and conversion to seconds
"""

from .aligner import AlignerState, TemporalAligner
from .cross_correlation import CorrelationPeak, CrossCorrelationEstimator
from .result import AlignmentResult
from .signal import (
    CorrelationSample,
    ImuBatch,
    frame_rate_sample,
    imu_rate_samples,
    integrate_gyro,
    vision_rotation_angle,
)
from .variance import VarianceCheck, VarianceGate
from .window import SlidingWindow

__all__ = [
    # Orchestration
    "TemporalAligner",
    "AlignerState",
    "AlignmentResult",
    # Signals
    "CorrelationSample",
    "ImuBatch",
    "frame_rate_sample",
    "imu_rate_samples",
    "integrate_gyro",
    "vision_rotation_angle",
    # Window and gate
    "SlidingWindow",
    "VarianceGate",
    "VarianceCheck",
    # Correlation
    "CrossCorrelationEstimator",
    "CorrelationPeak",
]
