# posture_coach/posture_engine/scheduling/detection_scheduler.py
import logging
from pydantic import BaseModel
from typing import Any, Optional
from ..alerts.alert_throttler import AlertThrottler
from ..common.constants import FRAME_INTERVAL_MS, SCORE_CHANGE_THRESHOLD, SCORE_UPDATE_INTERVAL_MS
from ..common.enums import FrameOutcome
from ..common.errors import DetectionError
from ..common.models import AlertEvent, EngineState, Pose, PostureScore, UserSettings
from ..processing.posture_analyzer import PostureAnalyzer
from ..providers.provider_gate import ProviderGate

logger = logging.getLogger(__name__)

class FrameResult(BaseModel):
    """What happened on one scheduling opportunity."""
    outcome: FrameOutcome
    pose: Optional[Pose] = None
    score: Optional[PostureScore] = None
    emit_score: bool = False
    alert: Optional[AlertEvent] = None

class ScoreDebouncer:
    """Limits score notifications to one per interval unless the score jumps."""

    def __init__(self, interval_ms: float = SCORE_UPDATE_INTERVAL_MS,
                 change_threshold: float = SCORE_CHANGE_THRESHOLD):
        self.interval_ms = interval_ms
        self.change_threshold = change_threshold
        self.reset()

    def should_emit(self, overall: int, now: float) -> bool:
        if self.last_emitted is None:
            return True
        if now - self.last_emitted_at >= self.interval_ms:
            return True
        return abs(overall - self.last_emitted) > self.change_threshold

    def mark(self, overall: int, now: float):
        self.last_emitted = overall
        self.last_emitted_at = now

    def reset(self):
        self.last_emitted: Optional[int] = None
        self.last_emitted_at = float("-inf")

class DetectionScheduler:
    """
    Frame-rate gated monitoring loop, driven by the host one opportunity at a time.

    An opportunity closer than `frame_interval_ms` to the previous analysis is
    skipped. Otherwise exactly one provider query is issued and the returned
    pose is scored, smoothed and run through the alert throttler synchronously.
    """

    def __init__(self, gate: ProviderGate, analyzer: PostureAnalyzer, throttler: AlertThrottler,
                 config: Optional[dict] = None):
        config = config or {}
        self.gate = gate
        self.analyzer = analyzer
        self.throttler = throttler
        self.frame_interval_ms = float(config.get('frame_interval_ms', FRAME_INTERVAL_MS))
        self.debouncer = ScoreDebouncer(
            float(config.get('score_update_interval_ms', SCORE_UPDATE_INTERVAL_MS)),
            float(config.get('score_change_threshold', SCORE_CHANGE_THRESHOLD)),
        )
        self.last_analysis_at = float("-inf")
        self.generation = 0

    def cancel(self):
        """Drops the pending opportunity; results of a query already in flight are discarded."""
        self.generation += 1
        self.last_analysis_at = float("-inf")
        self.debouncer.reset()

    def step(self, frame: Any, state: EngineState, settings: UserSettings, now: float) -> FrameResult:
        if frame is None or now - self.last_analysis_at < self.frame_interval_ms:
            return FrameResult(outcome=FrameOutcome.SKIPPED)
        if self.gate.in_flight:
            return FrameResult(outcome=FrameOutcome.BUSY)

        generation = self.generation
        self.last_analysis_at = now
        try:
            acquired, pose = self.gate.detect(frame)
        except DetectionError as e:
            logger.warning("Pose detection failed, frame dropped: %s", e)
            return FrameResult(outcome=FrameOutcome.DETECTION_FAILED)

        if not acquired:
            return FrameResult(outcome=FrameOutcome.BUSY)
        if generation != self.generation:
            return FrameResult(outcome=FrameOutcome.DISCARDED)
        if pose is None:
            return FrameResult(outcome=FrameOutcome.NO_POSE)

        score = self.analyzer.analyze(pose, state, now)
        if score is None:
            return FrameResult(outcome=FrameOutcome.INDETERMINATE, pose=pose)

        alert = self.throttler.evaluate(score, state, settings, now)
        emit = self.debouncer.should_emit(score.overall, now)
        if emit:
            self.debouncer.mark(score.overall, now)
        return FrameResult(outcome=FrameOutcome.SCORED, pose=pose, score=score, emit_score=emit, alert=alert)
