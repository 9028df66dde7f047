# posture_coach/posture_engine/providers/mediapipe_provider.py
import logging
import cv2
import numpy as np
from typing import Optional
from ..common.constants import KEYPOINT_NAMES
from ..common.errors import DetectionError, PoseProviderInitError
from ..common.models import Keypoint, Pose
from .pose_provider import PoseProvider

logger = logging.getLogger(__name__)

# BlazePose landmark index for each COCO-17 keypoint, in COCO order
BLAZEPOSE_TO_COCO = (0, 2, 5, 7, 8, 11, 12, 13, 14, 15, 16, 23, 24, 25, 26, 27, 28)

class MediaPipePoseProvider(PoseProvider):
    """MediaPipe Pose reduced to the COCO-17 layout, with `visibility` as confidence."""

    def __init__(self, config: Optional[dict] = None):
        self.config = config or {}
        self.pose = None

    def initialize(self) -> None:
        if self.pose is not None:
            return
        try:
            import mediapipe as mp
            self.pose = mp.solutions.pose.Pose(
                static_image_mode=False,
                model_complexity=self.config.get('model_complexity', 1),
                smooth_landmarks=self.config.get('smooth_landmarks', True),
                enable_segmentation=False,
                min_detection_confidence=self.config.get('min_detection_confidence', 0.5),
                min_tracking_confidence=self.config.get('min_tracking_confidence', 0.5),
            )
        except Exception as e:
            raise PoseProviderInitError(f"Failed to load pose detection model: {e}") from e
        logger.info("MediaPipe pose model loaded.")

    def detect_pose(self, frame: np.ndarray) -> Optional[Pose]:
        if self.pose is None:
            raise DetectionError("Detector not initialized")

        try:
            frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            frame_rgb.flags.writeable = False # Performance optimization
            results = self.pose.process(frame_rgb)
        except Exception as e:
            raise DetectionError(f"Pose inference failed: {e}") from e

        if not results.pose_landmarks:
            return None

        height, width = frame.shape[:2]
        landmarks = results.pose_landmarks.landmark
        keypoints = []
        for name, idx in zip(KEYPOINT_NAMES, BLAZEPOSE_TO_COCO):
            lm = landmarks[idx]
            keypoints.append(Keypoint(
                x=float(lm.x) * width,
                y=float(lm.y) * height,
                confidence=float(np.clip(lm.visibility, 0.0, 1.0)),
                name=name,
            ))
        confidence = float(np.mean([kp.confidence for kp in keypoints]))
        return Pose(keypoints=keypoints, confidence=confidence)

    def dispose(self) -> None:
        if self.pose is not None:
            self.pose.close()
            self.pose = None
