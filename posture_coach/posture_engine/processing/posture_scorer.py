# posture_coach/posture_engine/processing/posture_scorer.py
import math
from typing import Optional
from ..common.constants import (
    DEFAULT_REFERENCE,
    STATUS_GOOD_MIN,
    STATUS_WARNING_MIN,
    TOLERANCES,
    WEIGHTS,
)
from ..common.enums import PostureStatus
from ..common.models import CalibrationBaseline, Deviations, PostureAngles, PostureScore
from .geometry import normalize_score

DEFAULT_ANGLES = PostureAngles(**DEFAULT_REFERENCE)

STATUS_MESSAGES = {
    PostureStatus.GOOD: "Good posture! Keep it up!",
    PostureStatus.WARNING: "Posture needs attention",
    PostureStatus.BAD: "Poor posture detected",
}

def round_half_up(value: float) -> int:
    # round() would send 70.5 to 70
    return int(math.floor(value + 0.5))

def classify_status(overall: Optional[float]) -> PostureStatus:
    """Maps an overall score onto the good / warning / bad bands."""
    if overall is None or overall >= STATUS_GOOD_MIN:
        return PostureStatus.GOOD
    if overall >= STATUS_WARNING_MIN:
        return PostureStatus.WARNING
    return PostureStatus.BAD

class PostureScorer:
    """Scores measured angles against a calibration baseline (or the default posture)."""

    def __init__(self, tolerances=None, weights=None):
        self.tolerances = dict(TOLERANCES, **(tolerances or {}))
        self.weights = dict(WEIGHTS, **(weights or {}))

    def reference(self, baseline: Optional[CalibrationBaseline]) -> PostureAngles:
        if baseline is not None and baseline.valid:
            return baseline.angles
        return DEFAULT_ANGLES

    def deviations(self, angles: PostureAngles, baseline: Optional[CalibrationBaseline]) -> Deviations:
        ref = self.reference(baseline)
        return Deviations(
            neck=abs(angles.neck_angle - ref.neck_angle),
            shoulder=abs(angles.shoulder_angle - ref.shoulder_angle),
            spine=abs(angles.spine_angle - ref.spine_angle),
            head_position=abs(angles.head_forward_distance - ref.head_forward_distance),
        )

    def sub_scores(self, deviations: Deviations) -> dict:
        values = deviations.model_dump()
        return {
            factor: normalize_score(values[factor], *self.tolerances[factor])
            for factor in self.weights
        }

    def overall(self, deviations: Deviations) -> int:
        """Weighted sum of per-factor sub-scores, rounded to the nearest integer."""
        sub_scores = self.sub_scores(deviations)
        total = sum(sub_scores[factor] * weight for factor, weight in self.weights.items())
        return round_half_up(max(0.0, min(100.0, total)))

    def score(self, angles: PostureAngles, baseline: Optional[CalibrationBaseline],
              timestamp: float) -> PostureScore:
        deviations = self.deviations(angles, baseline)
        return PostureScore(
            overall=self.overall(deviations),
            angles=angles,
            deviations=deviations,
            timestamp=timestamp,
        )
