from posture_engine.common.models import Deviations, PostureAngles, PostureScore
from posture_engine.session.session_recorder import SessionRecorder

ANGLES = PostureAngles(neck_angle=165, shoulder_angle=2, spine_angle=175, head_forward_distance=1.5)
ZERO = Deviations(neck=0, shoulder=0, spine=0, head_position=0)


def score(overall, timestamp):
    return PostureScore(overall=overall, angles=ANGLES, deviations=ZERO, timestamp=timestamp)


def test_finish_without_begin_returns_none():
    assert SessionRecorder().finish(0.0) is None


def test_scores_outside_a_session_are_ignored():
    recorder = SessionRecorder()
    recorder.record(score(50, 0.0))
    recorder.begin(10.0)
    assert recorder.scores == []


def test_session_average_and_duration():
    recorder = SessionRecorder()
    recorder.begin(1000.0)
    for i, overall in enumerate((90, 80, 75)):
        recorder.record(score(overall, 1000.0 + i * 500))
    record = recorder.finish(61000.0)
    assert record.average_score == 82
    assert record.duration == 60000.0
    assert record.start_time == 1000.0
    assert record.end_time == 61000.0
    assert len(record.scores) == 3
    assert not recorder.recording


def test_empty_session_averages_to_zero():
    recorder = SessionRecorder()
    recorder.begin(0.0)
    assert recorder.finish(500.0).average_score == 0
