# posture_coach/posture_engine/common/constants.py
"""Fixed layout, reference angles and tuning constants shared across the engine."""

# COCO-17 keypoint layout produced by every pose provider
class KeypointIndex:
    NOSE = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2
    LEFT_EAR = 3
    RIGHT_EAR = 4
    LEFT_SHOULDER = 5
    RIGHT_SHOULDER = 6
    LEFT_ELBOW = 7
    RIGHT_ELBOW = 8
    LEFT_WRIST = 9
    RIGHT_WRIST = 10
    LEFT_HIP = 11
    RIGHT_HIP = 12
    LEFT_KNEE = 13
    RIGHT_KNEE = 14
    LEFT_ANKLE = 15
    RIGHT_ANKLE = 16

KEYPOINT_NAMES = (
    "nose", "left_eye", "right_eye", "left_ear", "right_ear",
    "left_shoulder", "right_shoulder", "left_elbow", "right_elbow",
    "left_wrist", "right_wrist", "left_hip", "right_hip",
    "left_knee", "right_knee", "left_ankle", "right_ankle",
)
NUM_KEYPOINTS = len(KEYPOINT_NAMES)

# Landmarks the analysis depends on
REQUIRED_KEYPOINTS = (
    KeypointIndex.LEFT_EAR, KeypointIndex.RIGHT_EAR,
    KeypointIndex.LEFT_SHOULDER, KeypointIndex.RIGHT_SHOULDER,
    KeypointIndex.LEFT_HIP, KeypointIndex.RIGHT_HIP,
    KeypointIndex.LEFT_KNEE, KeypointIndex.RIGHT_KNEE,
)
MAX_INVALID_REQUIRED = 4

SKELETON_CONNECTIONS = (
    (5, 6), (5, 7), (7, 9), (6, 8), (8, 10), (5, 11),
    (6, 12), (11, 12), (11, 13), (13, 15), (12, 14), (14, 16),
)

DEFAULT_MIN_CONFIDENCE = 0.2

# Measurement fallbacks when neither side of the body is visible
DEFAULT_NECK_ANGLE = 165.0
DEFAULT_SHOULDER_ANGLE = 0.0
DEFAULT_SPINE_ANGLE = 175.0
DEFAULT_HEAD_FORWARD = 1.5

# Reference posture used when no calibration is installed
DEFAULT_REFERENCE = {
    "neck_angle": DEFAULT_NECK_ANGLE,
    "shoulder_angle": DEFAULT_SHOULDER_ANGLE,
    "spine_angle": DEFAULT_SPINE_ANGLE,
    "head_forward_distance": DEFAULT_HEAD_FORWARD,
}

# Baseline committed when a calibration run captures nothing usable
FALLBACK_BASELINE_ANGLES = {
    "neck_angle": 165.0,
    "shoulder_angle": 2.0,
    "spine_angle": 175.0,
    "head_forward_distance": 1.5,
}

# Assumed average shoulder width: 100 px ~ 16 in
SHOULDER_WIDTH_PX = 100.0
SHOULDER_WIDTH_IN = 16.0
INCHES_PER_PIXEL = SHOULDER_WIDTH_IN / SHOULDER_WIDTH_PX

# Deviation tolerance ranges (min, max) and weights per factor
TOLERANCES = {
    "neck": (0.0, 30.0),
    "shoulder": (0.0, 15.0),
    "spine": (0.0, 30.0),
    "head_position": (0.0, 3.0),
}
WEIGHTS = {
    "neck": 0.30,
    "shoulder": 0.20,
    "spine": 0.30,
    "head_position": 0.20,
}

SMOOTHING_FACTOR = 0.8

ALERT_COOLDOWN_MS = 30000.0
ALERT_DURATION_MS = 5000.0
ALERT_MESSAGE = "Time to sit up straight!"
HIGH_SEVERITY_BELOW = 40
MEDIUM_SEVERITY_BELOW = 60

FRAME_INTERVAL_MS = 100.0
SCORE_UPDATE_INTERVAL_MS = 500.0
SCORE_CHANGE_THRESHOLD = 5

COUNTDOWN_SECONDS = 5
COUNTDOWN_TICK_MS = 1000.0
CAPTURE_WINDOW_MS = 2000.0
CAPTURE_INTERVAL_MS = 100.0

STATUS_GOOD_MIN = 80
STATUS_WARNING_MIN = 60

SESSION_RETENTION_DAYS = 30

POSTURE_TIPS = (
    "Try adjusting your chair height so your feet are flat on the floor",
    "Position your screen at eye level to reduce neck strain",
    "Keep your shoulders relaxed and pulled back",
    "Take a short break and stretch your neck and shoulders",
    "Ensure your lower back is supported by your chair",
    "Keep your keyboard and mouse at elbow height",
    "Try the 20-20-20 rule: Every 20 minutes, look at something 20 feet away for 20 seconds",
    "Stand up and walk around for a minute",
    "Check if your chair's armrests are at the right height",
    "Consider using a lumbar support cushion",
)
