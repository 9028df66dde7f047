import pytest

from posture_engine.common.models import Deviations, EngineState, PostureAngles, PostureScore
from posture_engine.processing.temporal_smoother import TemporalSmoother, smooth

ANGLES = PostureAngles(neck_angle=165, shoulder_angle=2, spine_angle=175, head_forward_distance=1.5)
ZERO = Deviations(neck=0, shoulder=0, spine=0, head_position=0)


def raw_score(overall):
    return PostureScore(overall=overall, angles=ANGLES, deviations=ZERO, timestamp=0.0)


def test_smooth_without_previous_passes_through():
    assert smooth(42.0, None) == 42.0


@pytest.mark.parametrize("current,previous,factor", [
    (50.0, 100.0, 0.8), (100.0, 0.0, 0.8), (70.0, 70.0, 0.5), (10.0, 90.0, 0.0),
])
def test_smooth_formula(current, previous, factor):
    assert smooth(current, previous, factor) == pytest.approx(previous * factor + current * (1 - factor))


def test_repeated_smoothing_converges():
    value = 0.0
    for _ in range(200):
        value = smooth(80.0, value)
    assert value == pytest.approx(80.0, abs=1e-6)


def test_smoother_only_touches_overall():
    state = EngineState()
    smoother = TemporalSmoother(0.8)
    first = smoother.apply(raw_score(100), state)
    second = smoother.apply(raw_score(50), state)
    assert first.overall == 100
    assert second.overall == 90
    assert second.angles == ANGLES
    assert state.previous_score == second
    assert state.previous_overall == pytest.approx(90.0)


def test_smoothed_score_reaches_constant_input():
    state = EngineState()
    smoother = TemporalSmoother(0.8)
    smoother.apply(raw_score(100), state)
    for _ in range(60):
        result = smoother.apply(raw_score(60), state)
    assert result.overall == 60


def test_reset_forgets_history():
    state = EngineState()
    smoother = TemporalSmoother()
    smoother.apply(raw_score(100), state)
    smoother.reset(state)
    assert state.previous_score is None
    assert smoother.apply(raw_score(40), state).overall == 40


def test_factor_must_be_below_one():
    with pytest.raises(ValueError):
        TemporalSmoother(1.0)
