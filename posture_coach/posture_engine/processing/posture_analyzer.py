# posture_coach/posture_engine/processing/posture_analyzer.py
import logging
from typing import Optional
from ..common.constants import DEFAULT_MIN_CONFIDENCE, NUM_KEYPOINTS, SMOOTHING_FACTOR
from ..common.models import EngineState, Pose, PostureAngles, PostureScore
from .geometry import compute_posture_angles
from .keypoint_validator import KeypointValidator
from .posture_scorer import PostureScorer
from .temporal_smoother import TemporalSmoother

logger = logging.getLogger(__name__)

class PostureAnalyzer:
    """Runs one Pose through validation, geometry, scoring and smoothing."""

    def __init__(self, config: Optional[dict] = None):
        config = config or {}
        self.min_confidence = config.get('min_confidence', DEFAULT_MIN_CONFIDENCE)
        self.validator = KeypointValidator(self.min_confidence)
        self.scorer = PostureScorer(config.get('tolerances'), config.get('weights'))
        self.smoother = TemporalSmoother(config.get('smoothing_factor', SMOOTHING_FACTOR))

    def measure(self, pose: Optional[Pose]) -> Optional[PostureAngles]:
        """Posture angles for the frame, or None when the frame is indeterminate."""
        if pose is None or len(pose.keypoints) < NUM_KEYPOINTS:
            return None

        invalid = self.validator.count_invalid(pose)
        if invalid > self.validator.max_invalid:
            logger.debug("Indeterminate frame: %d of %d required keypoints invalid",
                         invalid, len(self.validator.required))
            return None

        return compute_posture_angles(pose.keypoints, self.min_confidence)

    def analyze(self, pose: Optional[Pose], state: EngineState, timestamp: float) -> Optional[PostureScore]:
        """Scores the frame against the current baseline and smooths the overall score."""
        angles = self.measure(pose)
        if angles is None:
            return None
        raw = self.scorer.score(angles, state.baseline, timestamp)
        return self.smoother.apply(raw, state)

    def reset(self, state: EngineState):
        self.smoother.reset(state)
