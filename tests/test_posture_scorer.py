import pytest

from posture_engine.calibration.calibration_sampler import fallback_baseline
from posture_engine.common.enums import PostureStatus
from posture_engine.common.models import CalibrationBaseline, PostureAngles
from posture_engine.processing.posture_scorer import (
    DEFAULT_ANGLES,
    PostureScorer,
    classify_status,
    round_half_up,
)

BASELINE_ANGLES = PostureAngles(neck_angle=165, shoulder_angle=2, spine_angle=175, head_forward_distance=1.5)


@pytest.fixture
def scorer():
    return PostureScorer()


@pytest.fixture
def baseline():
    return CalibrationBaseline(angles=BASELINE_ANGLES, captured_at=0.0, valid=True)


def shifted(**deltas):
    values = BASELINE_ANGLES.model_dump()
    for key, delta in deltas.items():
        values[key] += delta
    return PostureAngles(**values)


def test_identical_angles_score_100(scorer, baseline):
    score = scorer.score(BASELINE_ANGLES, baseline, timestamp=1.0)
    assert score.overall == 100
    assert score.deviations.model_dump() == {"neck": 0, "shoulder": 0, "spine": 0, "head_position": 0}
    assert score.timestamp == 1.0


def test_neck_at_tolerance_limit_costs_its_weight(scorer, baseline):
    score = scorer.score(shifted(neck_angle=30), baseline, timestamp=0.0)
    assert score.deviations.neck == pytest.approx(30)
    assert scorer.sub_scores(score.deviations)["neck"] == 0.0
    assert score.overall == 70


def test_deviation_is_absolute(scorer, baseline):
    below = scorer.score(shifted(spine_angle=-12), baseline, timestamp=0.0)
    above = scorer.score(shifted(spine_angle=12), baseline, timestamp=0.0)
    assert below.deviations.spine == pytest.approx(12)
    assert below.overall == above.overall


def test_partial_deviation_is_linear(scorer, baseline):
    # shoulder range is [0, 15], 7.5 deg -> sub-score 50 -> loses 10 points
    score = scorer.score(shifted(shoulder_angle=7.5), baseline, timestamp=0.0)
    assert score.overall == 90


def test_everything_out_of_range_scores_zero(scorer, baseline):
    angles = shifted(neck_angle=-60, shoulder_angle=40, spine_angle=90, head_forward_distance=8)
    assert scorer.score(angles, baseline, timestamp=0.0).overall == 0


def test_without_baseline_uses_default_reference(scorer):
    assert scorer.reference(None) == DEFAULT_ANGLES
    assert scorer.score(DEFAULT_ANGLES, None, timestamp=0.0).overall == 100


def test_level_shoulders_without_baseline_score_100(scorer):
    angles = PostureAngles(neck_angle=165, shoulder_angle=0.0, spine_angle=175, head_forward_distance=1.5)
    score = scorer.score(angles, None, timestamp=0.0)
    assert score.deviations.shoulder == 0.0
    assert score.overall == 100


def test_fallback_baseline_keeps_its_own_shoulder_reference(scorer):
    baseline = fallback_baseline(0.0)
    assert baseline.angles.shoulder_angle == 2.0
    assert scorer.score(baseline.angles, None, timestamp=0.0).deviations.shoulder == 2.0


def test_invalid_baseline_is_ignored(scorer):
    stale = CalibrationBaseline(angles=shifted(neck_angle=40), captured_at=0.0, valid=False)
    assert scorer.reference(stale) == DEFAULT_ANGLES


def test_round_half_up():
    assert round_half_up(70.5) == 71
    assert round_half_up(70.49) == 70
    assert round_half_up(0.0) == 0


@pytest.mark.parametrize("overall,status", [
    (100, PostureStatus.GOOD),
    (80, PostureStatus.GOOD),
    (79, PostureStatus.WARNING),
    (60, PostureStatus.WARNING),
    (59, PostureStatus.BAD),
    (0, PostureStatus.BAD),
])
def test_classify_status(overall, status):
    assert classify_status(overall) == status
