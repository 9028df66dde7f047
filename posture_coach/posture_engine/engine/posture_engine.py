# posture_coach/posture_engine/engine/posture_engine.py
import logging
import time
from typing import Any, Callable, List, Optional
from ..alerts.alert_throttler import AlertThrottler
from ..calibration.calibration_sampler import CalibrationSampler
from ..common.enums import CalibrationPhase, EngineMode
from ..common.models import (
    AlertEvent,
    CalibrationBaseline,
    EngineState,
    PostureScore,
    SessionRecord,
    UserSettings,
)
from ..processing.posture_analyzer import PostureAnalyzer
from ..providers.pose_provider import PoseProvider
from ..providers.provider_gate import ProviderGate
from ..scheduling.detection_scheduler import DetectionScheduler, FrameResult
from ..session.session_recorder import SessionRecorder

logger = logging.getLogger(__name__)

def epoch_ms() -> float:
    return time.time() * 1000.0

class PostureEngine:
    """
    Owns the posture pipeline and its state for one monitored subject.

    The host calls `step(frame)` on every scheduling opportunity. Calibration
    and monitoring are exclusive modes: starting a calibration suspends
    monitoring until the run completes or is cancelled. Both paths reach the
    pose provider through one single-flight gate.
    """

    def __init__(self, provider: PoseProvider, config: Optional[dict] = None,
                 settings: Optional[UserSettings] = None,
                 clock: Optional[Callable[[], float]] = None, rng=None):
        config = config or {}
        self.provider = provider
        self.settings = settings or UserSettings()
        self.clock = clock or epoch_ms
        self.state = EngineState()
        self.mode = EngineMode.UNINITIALIZED

        self.gate = ProviderGate(provider)
        self.analyzer = PostureAnalyzer(config.get('analysis'))
        self.throttler = AlertThrottler(config.get('alerts'), rng=rng)
        self.scheduler = DetectionScheduler(self.gate, self.analyzer, self.throttler, config.get('scheduler'))
        self.sampler = CalibrationSampler(self.gate, self.analyzer, config.get('calibration'))
        self.recorder = SessionRecorder()

        self._score_listeners: List[Callable[[PostureScore], None]] = []
        self._alert_listeners: List[Callable[[AlertEvent], None]] = []
        self._calibration_listeners: List[Callable[[CalibrationBaseline], None]] = []
        self._resume_monitoring = False

    # --- Observers ---

    def _subscribe(self, listeners: list, callback: Callable) -> Callable[[], None]:
        listeners.append(callback)

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)
        return unsubscribe

    def subscribe_score(self, callback: Callable[[PostureScore], None]) -> Callable[[], None]:
        return self._subscribe(self._score_listeners, callback)

    def subscribe_alert(self, callback: Callable[[AlertEvent], None]) -> Callable[[], None]:
        return self._subscribe(self._alert_listeners, callback)

    def subscribe_calibration(self, callback: Callable[[CalibrationBaseline], None]) -> Callable[[], None]:
        return self._subscribe(self._calibration_listeners, callback)

    # --- Lifecycle ---

    def initialize(self):
        """Loads the pose model. PoseProviderInitError propagates to the caller."""
        if self.mode == EngineMode.DISPOSED:
            raise RuntimeError("Engine has been disposed")
        if self.mode != EngineMode.UNINITIALIZED:
            return
        self.provider.initialize()
        self.mode = EngineMode.IDLE
        logger.info("Posture engine initialized.")

    def dispose(self):
        """Releases the pose provider and clears all engine state."""
        if self.mode == EngineMode.DISPOSED:
            return
        self.scheduler.cancel()
        self.sampler.cancel()
        self.recorder = SessionRecorder()
        self.provider.dispose()
        self.state.clear()
        self._resume_monitoring = False
        self.mode = EngineMode.DISPOSED
        logger.info("Posture engine disposed.")

    def _require_ready(self):
        if self.mode in (EngineMode.UNINITIALIZED, EngineMode.DISPOSED):
            raise RuntimeError(f"Engine is not ready (mode={self.mode.value})")

    # --- Monitoring ---

    @property
    def is_monitoring(self) -> bool:
        return self.mode == EngineMode.MONITORING

    def start_monitoring(self, now: Optional[float] = None):
        self._require_ready()
        if self.mode == EngineMode.MONITORING:
            return
        now = self.clock() if now is None else now
        if not self.recorder.recording:
            self.recorder.begin(now)
        if self.mode == EngineMode.CALIBRATING:
            # picked up by _leave_calibration once the run ends
            self._resume_monitoring = True
            return
        self.scheduler.cancel()
        self.mode = EngineMode.MONITORING
        logger.info("Monitoring started.")

    def stop_monitoring(self, now: Optional[float] = None) -> Optional[SessionRecord]:
        """Stops the loop, discards in-flight results and returns the session summary."""
        now = self.clock() if now is None else now
        self._resume_monitoring = False
        self.scheduler.cancel()
        self.analyzer.reset(self.state)
        if self.mode == EngineMode.MONITORING:
            self.mode = EngineMode.IDLE
            logger.info("Monitoring stopped.")
        return self.recorder.finish(now)

    # --- Calibration ---

    @property
    def is_calibrated(self) -> bool:
        return self.state.baseline is not None and self.state.baseline.valid

    @property
    def calibration_phase(self) -> CalibrationPhase:
        return self.sampler.phase

    @property
    def countdown_remaining(self) -> int:
        return self.sampler.seconds_remaining

    def start_calibration(self, now: Optional[float] = None):
        self._require_ready()
        if self.mode == EngineMode.CALIBRATING:
            return
        now = self.clock() if now is None else now
        if self.mode == EngineMode.MONITORING:
            self._resume_monitoring = True
            self.scheduler.cancel()
        self.mode = EngineMode.CALIBRATING
        self.sampler.start(now)

    def cancel_calibration(self):
        if self.mode != EngineMode.CALIBRATING:
            return
        self.sampler.cancel()
        self._leave_calibration()

    def _leave_calibration(self):
        if self._resume_monitoring:
            self.scheduler.cancel()
            self.mode = EngineMode.MONITORING
            logger.info("Monitoring resumed after calibration.")
        else:
            self.mode = EngineMode.IDLE
        self._resume_monitoring = False

    def set_baseline(self, baseline: Optional[CalibrationBaseline]):
        """Installs a baseline (e.g. one restored from the store) and restarts smoothing."""
        self.state.baseline = baseline if baseline is not None and baseline.valid else None
        self.analyzer.reset(self.state)

    def clear_baseline(self):
        self.set_baseline(None)

    def _commit_baseline(self, baseline: CalibrationBaseline):
        self.set_baseline(baseline)
        self._leave_calibration()
        for callback in list(self._calibration_listeners):
            callback(baseline)

    # --- Settings ---

    def update_settings(self, settings: UserSettings):
        if settings.alert_frequency * 1000.0 != self.throttler.cooldown_ms:
            logger.debug("alert_frequency=%ds stored; alert cooldown stays at %.0f ms",
                         settings.alert_frequency, self.throttler.cooldown_ms)
        self.settings = settings

    # --- Scheduling ---

    def step(self, frame: Any, now: Optional[float] = None) -> Optional[FrameResult]:
        """Handles one scheduling opportunity. Returns the monitoring result, if any."""
        now = self.clock() if now is None else now

        if self.mode == EngineMode.CALIBRATING:
            baseline = self.sampler.tick(frame, now)
            if baseline is not None:
                self._commit_baseline(baseline)
            return None

        if self.mode != EngineMode.MONITORING:
            return None

        result = self.scheduler.step(frame, self.state, self.settings, now)
        if result.emit_score and result.score is not None:
            self.recorder.record(result.score)
            for callback in list(self._score_listeners):
                callback(result.score)
        if result.alert is not None:
            for callback in list(self._alert_listeners):
                callback(result.alert)
        return result
