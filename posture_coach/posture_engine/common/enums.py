# posture_coach/posture_engine/common/enums.py
from enum import Enum

class EngineMode(str, Enum):
    """Defines the operational mode of the PostureEngine."""
    UNINITIALIZED = "UNINITIALIZED"
    IDLE = "IDLE"
    CALIBRATING = "CALIBRATING"
    MONITORING = "MONITORING"
    DISPOSED = "DISPOSED"

class CalibrationPhase(str, Enum):
    """Phases of a single calibration run."""
    IDLE = "IDLE"
    COUNTDOWN = "COUNTDOWN"
    CAPTURING = "CAPTURING"
    AVERAGING = "AVERAGING"
    COMPLETE = "COMPLETE"

class FrameOutcome(str, Enum):
    """What the scheduler did with one scheduling opportunity."""
    SKIPPED = "SKIPPED"
    BUSY = "BUSY"
    NO_POSE = "NO_POSE"
    DETECTION_FAILED = "DETECTION_FAILED"
    INDETERMINATE = "INDETERMINATE"
    SCORED = "SCORED"
    DISCARDED = "DISCARDED"

class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class AlertType(str, Enum):
    VISUAL = "visual"
    AUDIO = "audio"
    BOTH = "both"

class PostureStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    BAD = "bad"

class LogLevel(str, Enum):
    """Defines logging levels for structured logging."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
