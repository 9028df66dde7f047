# posture_coach/posture_engine/common/errors.py

class PostureEngineError(Exception):
    """Base class for errors raised by the posture engine."""

class PoseProviderInitError(PostureEngineError):
    """The pose model could not be loaded. Monitoring cannot start."""

class DetectionError(PostureEngineError):
    """A single inference call failed. The frame is dropped, the loop continues."""
