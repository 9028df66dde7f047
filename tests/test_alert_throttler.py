import random

import pytest

from posture_engine.alerts.alert_throttler import AlertThrottler, classify_severity
from posture_engine.common.constants import POSTURE_TIPS
from posture_engine.common.enums import AlertType, Severity
from posture_engine.common.models import Deviations, EngineState, PostureAngles, PostureScore, UserSettings

ANGLES = PostureAngles(neck_angle=165, shoulder_angle=2, spine_angle=175, head_forward_distance=1.5)
ZERO = Deviations(neck=0, shoulder=0, spine=0, head_position=0)


def score(overall):
    return PostureScore(overall=overall, angles=ANGLES, deviations=ZERO, timestamp=0.0)


@pytest.fixture
def throttler():
    return AlertThrottler(rng=random.Random(7))


@pytest.fixture
def settings():
    return UserSettings(alert_threshold=70)


@pytest.mark.parametrize("overall,severity", [
    (0, Severity.HIGH), (39, Severity.HIGH), (40, Severity.MEDIUM),
    (59, Severity.MEDIUM), (60, Severity.LOW), (69, Severity.LOW),
])
def test_classify_severity(overall, severity):
    assert classify_severity(overall) == severity


def test_score_at_threshold_does_not_alert(throttler, settings):
    assert throttler.evaluate(score(70), EngineState(), settings, now=1000.0) is None


def test_low_score_fires_alert(throttler, settings):
    state = EngineState()
    event = throttler.evaluate(score(50), state, settings, now=1000.0)
    assert event is not None
    assert event.severity == Severity.MEDIUM
    assert event.message == "Time to sit up straight!"
    assert event.duration_ms == 5000
    assert event.fired_at == 1000.0
    assert event.tip in POSTURE_TIPS
    assert state.last_alert_at == 1000.0


def test_cooldown_allows_one_alert_per_window(throttler, settings):
    state = EngineState()
    fired = [throttler.evaluate(score(30), state, settings, now=t) for t in (0.0, 10000.0, 29999.0)]
    assert sum(e is not None for e in fired) == 1
    assert throttler.evaluate(score(30), state, settings, now=30000.0) is not None
    assert state.last_alert_at == 30000.0


def test_recovered_score_does_not_rearm_early(throttler, settings):
    state = EngineState()
    throttler.evaluate(score(30), state, settings, now=0.0)
    assert throttler.evaluate(score(95), state, settings, now=5000.0) is None
    assert throttler.evaluate(score(10), state, settings, now=6000.0) is None
    assert not throttler.is_armed(state, 6000.0)
    assert throttler.is_armed(state, 30000.0)


def test_alert_type_follows_sound_setting(throttler):
    loud = throttler.evaluate(score(20), EngineState(), UserSettings(sound_enabled=True), now=0.0)
    quiet = throttler.evaluate(score(20), EngineState(), UserSettings(sound_enabled=False), now=0.0)
    assert loud.alert_type == AlertType.BOTH
    assert quiet.alert_type == AlertType.VISUAL


def test_alert_frequency_does_not_change_cooldown(throttler):
    settings = UserSettings(alert_threshold=70, alert_frequency=10)
    state = EngineState()
    throttler.evaluate(score(20), state, settings, now=0.0)
    assert throttler.evaluate(score(20), state, settings, now=15000.0) is None
