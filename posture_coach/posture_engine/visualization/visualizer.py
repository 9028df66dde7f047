# posture_coach/posture_engine/visualization/visualizer.py
import cv2
import numpy as np
from typing import Optional
from ..common.constants import SKELETON_CONNECTIONS
from ..common.enums import CalibrationPhase, PostureStatus, Severity
from ..common.models import AlertEvent, Pose, PostureScore
from ..processing.posture_scorer import STATUS_MESSAGES, classify_status

# BGR
STATUS_COLORS = {
    PostureStatus.GOOD: (129, 185, 16),
    PostureStatus.WARNING: (11, 158, 245),
    PostureStatus.BAD: (94, 63, 244),
}
SEVERITY_COLORS = {
    Severity.HIGH: (68, 68, 239),
    Severity.MEDIUM: (8, 179, 234),
    Severity.LOW: (246, 130, 59),
}

def keypoint_color(confidence: float):
    if confidence >= 0.8:
        return STATUS_COLORS[PostureStatus.GOOD]
    if confidence >= 0.5:
        return STATUS_COLORS[PostureStatus.WARNING]
    return STATUS_COLORS[PostureStatus.BAD]

class Visualizer:
    """Draws the skeleton, score panel, alert banner and calibration countdown onto frames."""

    def __init__(self, config: dict):
        self.config = config
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.min_confidence = config.get('min_confidence', 0.2)
        self.dark_mode = config.get('dark_mode', False)

    def render(self, frame: np.ndarray, pose: Optional[Pose], score: Optional[PostureScore],
               alert: Optional[AlertEvent], now: float, current_fps: float,
               calibration_phase: CalibrationPhase = CalibrationPhase.IDLE,
               countdown: int = 0, monitoring: bool = False) -> np.ndarray:
        output_frame = frame.copy()

        if pose is not None and self.config.get('draw_skeleton', True):
            self._draw_skeleton(output_frame, pose)

        if self.config.get('draw_hud', True):
            self._draw_score_panel(output_frame, score, current_fps, monitoring)

        if alert is not None and now < alert.fired_at + alert.duration_ms:
            self._draw_alert(output_frame, alert)

        if calibration_phase in (CalibrationPhase.COUNTDOWN, CalibrationPhase.CAPTURING,
                                 CalibrationPhase.AVERAGING):
            self._draw_calibration(output_frame, calibration_phase, countdown)

        return output_frame

    def _draw_skeleton(self, frame: np.ndarray, pose: Pose):
        keypoints = pose.keypoints
        for i, j in SKELETON_CONNECTIONS:
            if i >= len(keypoints) or j >= len(keypoints):
                continue
            kp1, kp2 = keypoints[i], keypoints[j]
            if (kp1.confidence or 0.0) < self.min_confidence or (kp2.confidence or 0.0) < self.min_confidence:
                continue
            color = keypoint_color(min(kp1.confidence, kp2.confidence))
            cv2.line(frame, (int(kp1.x), int(kp1.y)), (int(kp2.x), int(kp2.y)), color, 3, cv2.LINE_AA)

        for kp in keypoints:
            if (kp.confidence or 0.0) < self.min_confidence:
                continue
            center = (int(kp.x), int(kp.y))
            cv2.circle(frame, center, 4, keypoint_color(kp.confidence), -1, cv2.LINE_AA)
            cv2.circle(frame, center, 2, (255, 255, 255), -1, cv2.LINE_AA)

    def _draw_score_panel(self, frame: np.ndarray, score: Optional[PostureScore], fps: float,
                          monitoring: bool):
        text_color = (240, 240, 240) if self.dark_mode else (30, 30, 30)
        panel_color = (40, 40, 40) if self.dark_mode else (235, 235, 235)
        cv2.rectangle(frame, (0, 0), (320, 170), panel_color, -1)

        if score is None:
            lines = [("Waiting for data..." if monitoring else "Monitoring paused", text_color)]
        else:
            status = classify_status(score.overall)
            d = score.deviations
            lines = [
                (f"Posture: {score.overall}/100", STATUS_COLORS[status]),
                (STATUS_MESSAGES[status], STATUS_COLORS[status]),
                (f"Neck dev: {d.neck:.1f} deg  Shoulder dev: {d.shoulder:.1f} deg", text_color),
                (f"Spine dev: {d.spine:.1f} deg  Head fwd: {score.angles.head_forward_distance:.1f} in", text_color),
            ]
        lines.append((f"FPS: {fps:.1f}", text_color))

        for i, (text, color) in enumerate(lines):
            scale = 0.7 if i == 0 else 0.45
            cv2.putText(frame, text, (10, 30 + i * 28), self.font, scale, color, 1, cv2.LINE_AA)

    def _draw_alert(self, frame: np.ndarray, alert: AlertEvent):
        color = SEVERITY_COLORS[alert.severity]
        height, width = frame.shape[:2]
        cv2.rectangle(frame, (4, 4), (width - 5, height - 5), color, 4)
        cv2.putText(frame, alert.message, (20, height - 50), self.font, 0.8, color, 2, cv2.LINE_AA)
        if alert.tip:
            cv2.putText(frame, alert.tip, (20, height - 20), self.font, 0.45, color, 1, cv2.LINE_AA)

    def _draw_calibration(self, frame: np.ndarray, phase: CalibrationPhase, countdown: int):
        height, width = frame.shape[:2]
        if phase == CalibrationPhase.COUNTDOWN:
            text = str(countdown)
            scale = 4.0
        else:
            text = "Analyzing your posture..."
            scale = 1.0
        (tw, th), _ = cv2.getTextSize(text, self.font, scale, 3)
        cv2.putText(frame, text, ((width - tw) // 2, (height + th) // 2), self.font, scale,
                    STATUS_COLORS[PostureStatus.GOOD], 3, cv2.LINE_AA)
