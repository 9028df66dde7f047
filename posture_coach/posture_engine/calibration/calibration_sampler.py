# posture_coach/posture_engine/calibration/calibration_sampler.py
import logging
import math
import numpy as np
from typing import Any, List, Optional
from ..common.constants import (
    CAPTURE_INTERVAL_MS,
    CAPTURE_WINDOW_MS,
    COUNTDOWN_SECONDS,
    COUNTDOWN_TICK_MS,
    FALLBACK_BASELINE_ANGLES,
)
from ..common.enums import CalibrationPhase
from ..common.errors import DetectionError
from ..common.models import CalibrationBaseline, PostureAngles
from ..processing.posture_analyzer import PostureAnalyzer
from ..providers.provider_gate import ProviderGate

logger = logging.getLogger(__name__)

ANGLE_FIELDS = ("neck_angle", "shoulder_angle", "spine_angle", "head_forward_distance")

def fallback_baseline(now: float) -> CalibrationBaseline:
    return CalibrationBaseline(angles=PostureAngles(**FALLBACK_BASELINE_ANGLES), captured_at=now, valid=True)

def average_angles(samples: List[PostureAngles]) -> PostureAngles:
    """Elementwise arithmetic mean of the captured angle sets."""
    stacked = np.array([[getattr(s, f) for f in ANGLE_FIELDS] for s in samples], dtype=float)
    means = np.mean(stacked, axis=0)
    return PostureAngles(**{f: float(v) for f, v in zip(ANGLE_FIELDS, means)})

class CalibrationSampler:
    """
    One-shot, poll-driven calibration run.

    Idle -> Countdown (1 tick/s) -> Capturing (sample every 100 ms over a 2 s
    window) -> Averaging -> Complete. The host calls `tick(frame, now)` on every
    scheduling opportunity; the run never fails from the caller's point of
    view, falling back to the default posture when no sample was captured.
    """

    def __init__(self, gate: ProviderGate, analyzer: PostureAnalyzer, config: Optional[dict] = None):
        config = config or {}
        self.gate = gate
        self.analyzer = analyzer
        self.countdown_seconds = int(config.get('countdown_seconds', COUNTDOWN_SECONDS))
        self.countdown_tick_ms = float(config.get('countdown_tick_ms', COUNTDOWN_TICK_MS))
        self.capture_window_ms = float(config.get('capture_window_ms', CAPTURE_WINDOW_MS))
        self.capture_interval_ms = float(config.get('capture_interval_ms', CAPTURE_INTERVAL_MS))

        self.phase = CalibrationPhase.IDLE
        self.seconds_remaining = self.countdown_seconds
        self.samples: List[PostureAngles] = []
        self._started_at = 0.0
        self._capture_started_at = 0.0
        self._next_sample_at = 0.0

    @property
    def active(self) -> bool:
        return self.phase in (CalibrationPhase.COUNTDOWN, CalibrationPhase.CAPTURING,
                              CalibrationPhase.AVERAGING)

    def start(self, now: float):
        self.samples = []
        self.phase = CalibrationPhase.COUNTDOWN
        self.seconds_remaining = self.countdown_seconds
        self._started_at = now
        logger.info("Calibration started, capturing in %d s", self.countdown_seconds)

    def cancel(self):
        """Drops partial samples and returns to Idle without producing a baseline."""
        if self.active:
            logger.info("Calibration cancelled after %d samples", len(self.samples))
        self.samples = []
        self.phase = CalibrationPhase.IDLE
        self.seconds_remaining = self.countdown_seconds

    def tick(self, frame: Any, now: float) -> Optional[CalibrationBaseline]:
        """Advances the run. Returns the baseline on the tick that completes it."""
        if not self.active:
            return None

        try:
            if self.phase == CalibrationPhase.COUNTDOWN:
                self._advance_countdown(now)

            if self.phase == CalibrationPhase.CAPTURING:
                if now >= self._capture_started_at + self.capture_window_ms:
                    self.phase = CalibrationPhase.AVERAGING
                elif now >= self._next_sample_at:
                    self._next_sample_at = now + self.capture_interval_ms
                    self._capture_sample(frame)

            if self.phase == CalibrationPhase.AVERAGING:
                return self._finish(now)
        except Exception:
            logger.exception("Calibration error, using default baseline")
            self.samples = []
            return self._finish(now)
        return None

    def _advance_countdown(self, now: float):
        elapsed_ticks = int(math.floor((now - self._started_at) / self.countdown_tick_ms))
        self.seconds_remaining = max(0, self.countdown_seconds - elapsed_ticks)
        if self.seconds_remaining == 0:
            self.phase = CalibrationPhase.CAPTURING
            self._capture_started_at = self._started_at + self.countdown_seconds * self.countdown_tick_ms
            self._next_sample_at = self._capture_started_at + self.capture_interval_ms

    def _capture_sample(self, frame: Any):
        if frame is None:
            return
        try:
            acquired, pose = self.gate.detect(frame)
        except DetectionError as e:
            logger.warning("Calibration sample dropped: %s", e)
            return
        if not acquired:
            return
        angles = self.analyzer.measure(pose)
        if angles is not None:
            self.samples.append(angles)

    def _finish(self, now: float) -> CalibrationBaseline:
        if self.samples:
            baseline = CalibrationBaseline(angles=average_angles(self.samples), captured_at=now, valid=True)
            logger.info("Calibration complete from %d samples", len(self.samples))
        else:
            baseline = fallback_baseline(now)
            logger.warning("No valid calibration samples captured, using default baseline")
        self.samples = []
        self.phase = CalibrationPhase.COMPLETE
        return baseline
