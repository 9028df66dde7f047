# posture_coach/posture_engine/processing/keypoint_validator.py
from typing import Iterable, Optional
from ..common.constants import DEFAULT_MIN_CONFIDENCE, MAX_INVALID_REQUIRED, REQUIRED_KEYPOINTS
from ..common.models import Keypoint, Pose

def is_valid(keypoint: Optional[Keypoint], min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> bool:
    """A keypoint is valid iff its confidence is defined and reaches the threshold."""
    if keypoint is None or keypoint.confidence is None:
        return False
    return keypoint.confidence >= min_confidence

def all_valid(keypoints: Iterable[Optional[Keypoint]], min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> bool:
    return all(is_valid(kp, min_confidence) for kp in keypoints)

class KeypointValidator:
    """Confidence-gates the landmarks a posture analysis depends on."""

    def __init__(self, min_confidence: float = DEFAULT_MIN_CONFIDENCE,
                 required=REQUIRED_KEYPOINTS, max_invalid: int = MAX_INVALID_REQUIRED):
        self.min_confidence = min_confidence
        self.required = tuple(required)
        self.max_invalid = max_invalid

    def is_valid(self, keypoint: Optional[Keypoint]) -> bool:
        return is_valid(keypoint, self.min_confidence)

    def count_invalid(self, pose: Pose) -> int:
        """Counts required landmarks that are missing or below the confidence threshold."""
        keypoints = pose.keypoints
        return sum(
            1 for idx in self.required
            if idx >= len(keypoints) or not self.is_valid(keypoints[idx])
        )

    def is_indeterminate(self, pose: Pose) -> bool:
        """More than `max_invalid` failed landmarks means the frame yields no score."""
        return self.count_invalid(pose) > self.max_invalid
