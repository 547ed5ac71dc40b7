"""Tracking status and the tracker capability consumed by the time aligner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from .pose import SE3

if TYPE_CHECKING:
    from .frame import Frame


class TrackingStatus(Enum):
    """Outcome of geometric outlier rejection between two frames."""

    VALID = "VALID"
    LOW_DISPARITY = "LOW_DISPARITY"
    FEW_MATCHES = "FEW_MATCHES"
    INVALID = "INVALID"
    DISABLED = "DISABLED"


@dataclass
class RansacResult:
    """Result of monocular RANSAC between a reference and a current frame.

    Attributes:
        status: Tracking status; only VALID carries rotation information
        relative_pose: Relative pose T_ref_cur (translation up to scale)
        num_inliers: Number of RANSAC inliers, 0 when not run
    """

    status: TrackingStatus
    relative_pose: SE3 = field(default_factory=SE3.identity)
    num_inliers: int = 0

    @property
    def is_valid(self) -> bool:
        """Return True if the relative rotation can be used."""
        return self.status == TrackingStatus.VALID


class Tracker(Protocol):
    """Capability returning the relative rotation between two frames."""

    def geometric_outlier_rejection_mono(
        self, ref_frame: Frame, cur_frame: Frame
    ) -> RansacResult:
        """Estimate the relative pose T_ref_cur with outlier rejection."""
        ...
