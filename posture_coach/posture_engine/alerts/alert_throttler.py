# posture_coach/posture_engine/alerts/alert_throttler.py
import logging
import random
from typing import Optional
from ..common.constants import (
    ALERT_COOLDOWN_MS,
    ALERT_DURATION_MS,
    ALERT_MESSAGE,
    HIGH_SEVERITY_BELOW,
    MEDIUM_SEVERITY_BELOW,
    POSTURE_TIPS,
)
from ..common.enums import AlertType, Severity
from ..common.models import AlertEvent, EngineState, PostureScore, UserSettings

logger = logging.getLogger(__name__)

def classify_severity(overall: int) -> Severity:
    if overall < HIGH_SEVERITY_BELOW:
        return Severity.HIGH
    if overall < MEDIUM_SEVERITY_BELOW:
        return Severity.MEDIUM
    return Severity.LOW

class AlertThrottler:
    """
    Cooldown gate for posture alerts.

    The throttler is Armed whenever `now - last_alert_at >= cooldown_ms` and in
    Cooldown otherwise; there is no stored state besides `last_alert_at` in the
    EngineState. Dismissing an alert on screen does not touch it.
    """

    def __init__(self, config: Optional[dict] = None, rng: Optional[random.Random] = None):
        config = config or {}
        # Fixed at 30s; UserSettings.alert_frequency is deliberately not wired in.
        self.cooldown_ms = float(config.get('cooldown_ms', ALERT_COOLDOWN_MS))
        self.duration_ms = float(config.get('duration_ms', ALERT_DURATION_MS))
        self.message = config.get('message', ALERT_MESSAGE)
        self.tips = tuple(config.get('tips', POSTURE_TIPS))
        self._rng = rng or random.Random()

    def is_armed(self, state: EngineState, now: float) -> bool:
        return now - state.last_alert_at >= self.cooldown_ms

    def evaluate(self, score: PostureScore, state: EngineState, settings: UserSettings,
                 now: float) -> Optional[AlertEvent]:
        """Returns an AlertEvent when the smoothed score is low and the cooldown has elapsed."""
        if score.overall >= settings.alert_threshold:
            return None
        if not self.is_armed(state, now):
            return None

        event = AlertEvent(
            severity=classify_severity(score.overall),
            message=self.message,
            duration_ms=self.duration_ms,
            fired_at=now,
            alert_type=AlertType.BOTH if settings.sound_enabled else AlertType.VISUAL,
            tip=self._rng.choice(self.tips) if self.tips else None,
        )
        state.last_alert_at = max(state.last_alert_at, now)
        logger.info("Posture alert fired (score=%d, severity=%s)", score.overall, event.severity.value)
        return event
