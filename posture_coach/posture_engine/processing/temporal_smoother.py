# posture_coach/posture_engine/processing/temporal_smoother.py
from typing import Optional
from ..common.constants import SMOOTHING_FACTOR
from ..common.models import EngineState, PostureScore
from .posture_scorer import round_half_up

def smooth(current: float, previous: Optional[float], factor: float = SMOOTHING_FACTOR) -> float:
    """Exponential smoothing: the previous value keeps `factor` of the weight."""
    if previous is None:
        return current
    return previous * factor + current * (1 - factor)

class TemporalSmoother:
    """
    Exponential filter for the overall posture score.

    Only `overall` is smoothed, angles and deviations pass through untouched.
    The running value lives in the EngineState so the smoother itself only
    carries the fixed factor. The unrounded value is kept between frames so a
    constant input converges exactly instead of sticking a point or two away.
    """
    def __init__(self, factor: float = SMOOTHING_FACTOR):
        if not 0.0 <= factor < 1.0:
            raise ValueError(f"smoothing factor must be in [0, 1), got {factor}")
        self.factor = factor

    def apply(self, score: PostureScore, state: EngineState) -> PostureScore:
        value = smooth(score.overall, state.previous_overall, self.factor)
        smoothed = score.model_copy(update={"overall": round_half_up(value)})
        state.previous_overall = value
        state.previous_score = smoothed
        return smoothed

    @staticmethod
    def reset(state: EngineState):
        state.previous_overall = None
        state.previous_score = None
