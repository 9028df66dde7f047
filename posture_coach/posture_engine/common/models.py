# posture_coach/posture_engine/common/models.py
from pydantic import BaseModel, Field
from typing import List, Optional, Tuple
from .enums import AlertType, Severity

class FrameMetadata(BaseModel):
    """Metadata associated with a single camera frame."""
    frame_id: int
    timestamp: float
    source_resolution: Tuple[int, int]

class Keypoint(BaseModel):
    """A 2D landmark in pixel coordinates with an optional confidence."""
    x: float
    y: float
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    name: Optional[str] = None

    class Config:
        frozen = True

class Pose(BaseModel):
    """One detection's keypoints in COCO-17 order plus an overall confidence."""
    keypoints: List[Keypoint]
    confidence: Optional[float] = None

    class Config:
        frozen = True

class PostureAngles(BaseModel):
    neck_angle: float
    shoulder_angle: float
    spine_angle: float
    head_forward_distance: float

    class Config:
        frozen = True

class Deviations(BaseModel):
    neck: float = Field(ge=0.0)
    shoulder: float = Field(ge=0.0)
    spine: float = Field(ge=0.0)
    head_position: float = Field(ge=0.0)

class CalibrationBaseline(BaseModel):
    """Reference posture captured by a calibration run. Immutable once created."""
    angles: PostureAngles
    captured_at: float
    valid: bool = True

    class Config:
        frozen = True

class PostureScore(BaseModel):
    """Result of a single successful analysis cycle."""
    overall: int = Field(ge=0, le=100)
    angles: PostureAngles
    deviations: Deviations
    timestamp: float

class AlertEvent(BaseModel):
    severity: Severity
    message: str
    duration_ms: float
    fired_at: float
    alert_type: AlertType = AlertType.VISUAL
    tip: Optional[str] = None

class EngineState(BaseModel):
    """Mutable state owned by exactly one engine instance."""
    baseline: Optional[CalibrationBaseline] = None
    previous_score: Optional[PostureScore] = None
    previous_overall: Optional[float] = None
    last_alert_at: float = float("-inf")

    def clear(self):
        self.baseline = None
        self.previous_score = None
        self.previous_overall = None
        self.last_alert_at = float("-inf")

class UserSettings(BaseModel):
    """User preferences. `alert_frequency` is stored but the cooldown stays fixed."""
    alert_threshold: int = Field(default=70, ge=0, le=100)
    sound_enabled: bool = True
    sound_volume: float = Field(default=0.5, ge=0.0, le=1.0)
    alert_frequency: int = Field(default=30, ge=10, le=120)
    selected_camera: Optional[str] = None
    dark_mode: bool = False

class SessionRecord(BaseModel):
    """Summary of one monitoring session."""
    date: str
    start_time: float
    end_time: Optional[float] = None
    scores: List[PostureScore] = Field(default_factory=list)
    average_score: int = 0
    duration: float = 0.0
