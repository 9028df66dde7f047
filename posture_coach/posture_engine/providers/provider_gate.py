# posture_coach/posture_engine/providers/provider_gate.py
import threading
from typing import Any, Optional, Tuple
from ..common.models import Pose
from .pose_provider import PoseProvider

class ProviderGate:
    """
    Single-flight access to a PoseProvider.

    Both the detection scheduler and the calibration sampler query through the
    same gate. A query arriving while another is in flight is refused rather
    than queued; the caller simply retries at its next opportunity.
    """

    def __init__(self, provider: PoseProvider):
        self.provider = provider
        self._lock = threading.Lock()
        self.queries = 0
        self.refused = 0

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def detect(self, frame: Any) -> Tuple[bool, Optional[Pose]]:
        """Returns (acquired, pose). DetectionError from the provider propagates."""
        if not self._lock.acquire(blocking=False):
            self.refused += 1
            return False, None
        try:
            self.queries += 1
            return True, self.provider.detect_pose(frame)
        finally:
            self._lock.release()
