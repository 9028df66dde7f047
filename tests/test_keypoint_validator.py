import pytest

from posture_engine.common.constants import KeypointIndex as K, REQUIRED_KEYPOINTS
from posture_engine.common.models import EngineState, Keypoint
from posture_engine.processing.keypoint_validator import KeypointValidator, is_valid
from posture_engine.processing.posture_analyzer import PostureAnalyzer


@pytest.mark.parametrize("confidence,expected", [
    (None, False),
    (0.0, False),
    (0.19, False),
    (0.2, True),
    (0.95, True),
])
def test_is_valid_threshold(confidence, expected):
    assert is_valid(Keypoint(x=0, y=0, confidence=confidence)) is expected


def test_is_valid_custom_threshold():
    kp = Keypoint(x=0, y=0, confidence=0.4)
    assert is_valid(kp, 0.3)
    assert not is_valid(kp, 0.5)


def test_count_invalid_only_counts_required_landmarks(make_pose):
    validator = KeypointValidator()
    # nose and wrists are not part of the analysis
    pose = make_pose(low=(K.NOSE, K.LEFT_WRIST, K.RIGHT_WRIST, K.LEFT_EAR))
    assert validator.count_invalid(pose) == 1


def test_five_invalid_is_indeterminate(make_pose):
    validator = KeypointValidator()
    pose = make_pose(low=REQUIRED_KEYPOINTS[:5])
    assert validator.count_invalid(pose) == 5
    assert validator.is_indeterminate(pose)


def test_four_invalid_still_scores(make_pose):
    analyzer = PostureAnalyzer()
    state = EngineState()
    assert analyzer.analyze(make_pose(low=REQUIRED_KEYPOINTS[:4]), state, 0.0) is not None
    assert analyzer.analyze(make_pose(low=REQUIRED_KEYPOINTS[:5]), state, 0.0) is None


def test_short_pose_is_not_analyzable(make_pose):
    pose = make_pose()
    truncated = pose.model_copy(update={"keypoints": pose.keypoints[:10]})
    assert PostureAnalyzer().measure(truncated) is None
    # hips and knees are missing
    assert KeypointValidator().count_invalid(truncated) == 4
