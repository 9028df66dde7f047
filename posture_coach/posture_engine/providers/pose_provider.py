# posture_coach/posture_engine/providers/pose_provider.py
from abc import ABC, abstractmethod
from typing import Any, Optional
from ..common.models import Pose

class PoseProvider(ABC):
    """
    Model adapter interface.

    Implementations take a BGR frame (H, W, 3 uint8) and return one Pose with
    the 17 COCO keypoints in pixel coordinates, or None when nobody is in view.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Loads the model. Raises PoseProviderInitError on failure."""

    @abstractmethod
    def detect_pose(self, frame: Any) -> Optional[Pose]:
        """Runs one inference. Raises DetectionError on a transient failure."""

    @abstractmethod
    def dispose(self) -> None: ...
