import pytest

from posture_engine.common.constants import KEYPOINT_NAMES
from posture_engine.common.models import Keypoint, Pose
from posture_engine.providers.pose_provider import PoseProvider

# Seated subject facing the camera, pixel coordinates
UPRIGHT_POINTS = (
    (320, 80), (310, 75), (330, 75), (300, 85), (340, 85),
    (270, 150), (370, 150), (260, 220), (380, 220),
    (260, 280), (380, 280), (280, 300), (360, 300),
    (280, 400), (360, 400), (280, 480), (360, 480),
)

def build_pose(confidence=0.9, overrides=None, low=()):
    """Upright pose; `overrides` maps index -> (x, y), `low` lists indices with confidence 0.1."""
    overrides = overrides or {}
    keypoints = []
    for idx, (name, point) in enumerate(zip(KEYPOINT_NAMES, UPRIGHT_POINTS)):
        x, y = overrides.get(idx, point)
        keypoints.append(Keypoint(x=x, y=y, confidence=0.1 if idx in low else confidence, name=name))
    return Pose(keypoints=keypoints, confidence=confidence)

class FakePoseProvider(PoseProvider):
    def __init__(self, pose=None):
        self.pose = pose
        self.error = None
        self.init_error = None
        self.on_detect = None
        self.calls = 0
        self.initialized = False
        self.disposed = False

    def initialize(self):
        if self.init_error is not None:
            raise self.init_error
        self.initialized = True

    def detect_pose(self, frame):
        self.calls += 1
        if self.on_detect is not None:
            self.on_detect()
        if self.error is not None:
            raise self.error
        return self.pose

    def dispose(self):
        self.disposed = True

@pytest.fixture
def make_pose():
    return build_pose

@pytest.fixture
def provider():
    return FakePoseProvider(build_pose())

@pytest.fixture
def frame():
    # Providers are faked, any non-None object stands in for an image
    return object()
