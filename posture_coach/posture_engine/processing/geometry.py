# posture_coach/posture_engine/processing/geometry.py
"""
Geometric calculation utilities for posture analysis.

All functions are pure and work on 2D pixel keypoints. Angles are in degrees,
the head-forward distance is an approximation in inches.
"""
import math
from typing import Optional, Sequence
from ..common.constants import (
    DEFAULT_HEAD_FORWARD,
    DEFAULT_MIN_CONFIDENCE,
    DEFAULT_NECK_ANGLE,
    DEFAULT_SHOULDER_ANGLE,
    DEFAULT_SPINE_ANGLE,
    INCHES_PER_PIXEL,
    KeypointIndex as K,
)
from ..common.models import Keypoint, PostureAngles
from .keypoint_validator import all_valid

def angle_between(point_a: Keypoint, vertex: Keypoint, point_b: Keypoint) -> float:
    """
    Angle at `vertex` between the rays to `point_a` and `point_b`.

    Computed from the difference of two atan2 results and reflected into
    [0, 180] so the result does not depend on the order of `point_a` and `point_b`.
    """
    radians = (math.atan2(point_b.y - vertex.y, point_b.x - vertex.x)
               - math.atan2(point_a.y - vertex.y, point_a.x - vertex.x))
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle

def horizontal_deviation(left: Keypoint, right: Keypoint) -> float:
    """
    Absolute angle of the shoulder line from horizontal, in [0, 90].

    Folded so the result is the same whether or not the image is mirrored,
    i.e. whether the left landmark lies left or right of the right one.
    """
    angle = abs(math.degrees(math.atan2(right.y - left.y, right.x - left.x)))
    if angle > 90.0:
        angle = 180.0 - angle
    return angle

def head_forward_distance(ear: Keypoint, shoulder: Keypoint) -> float:
    """
    Horizontal ear-to-shoulder offset in inches.

    The pixel offset is converted with a fixed ratio taken from an average
    shoulder width (100 px ~ 16 in). This is a rough estimate, not a
    calibrated measurement.
    """
    return abs(ear.x - shoulder.x) * INCHES_PER_PIXEL

def normalize_score(value: float, min_value: float, max_value: float) -> float:
    """Linear map of a deviation onto 100 (at or below min) .. 0 (at or above max)."""
    if value <= min_value:
        return 100.0
    if value >= max_value:
        return 0.0
    normalized = 100.0 - ((value - min_value) / (max_value - min_value)) * 100.0
    return max(0.0, min(100.0, normalized))

def combine_bilateral(left: Optional[float], right: Optional[float], default: float) -> float:
    """Average both sides when available, else whichever side exists, else the default."""
    if left is not None and right is not None:
        return (left + right) / 2.0
    if left is not None:
        return left
    if right is not None:
        return right
    return default

def _side_angle(keypoints, a, vertex, b, min_confidence):
    points = (keypoints[a], keypoints[vertex], keypoints[b])
    if not all_valid(points, min_confidence):
        return None
    return angle_between(*points)

def _side_head_forward(keypoints, ear, shoulder, min_confidence):
    if not all_valid((keypoints[ear], keypoints[shoulder]), min_confidence):
        return None
    return head_forward_distance(keypoints[ear], keypoints[shoulder])

def compute_posture_angles(keypoints: Sequence[Keypoint],
                           min_confidence: float = DEFAULT_MIN_CONFIDENCE) -> PostureAngles:
    """Derives the four posture measurements from a COCO-17 keypoint list."""
    # ear - shoulder - hip
    neck = combine_bilateral(
        _side_angle(keypoints, K.LEFT_EAR, K.LEFT_SHOULDER, K.LEFT_HIP, min_confidence),
        _side_angle(keypoints, K.RIGHT_EAR, K.RIGHT_SHOULDER, K.RIGHT_HIP, min_confidence),
        DEFAULT_NECK_ANGLE,
    )

    shoulders = (keypoints[K.LEFT_SHOULDER], keypoints[K.RIGHT_SHOULDER])
    if all_valid(shoulders, min_confidence):
        shoulder = horizontal_deviation(*shoulders)
    else:
        shoulder = DEFAULT_SHOULDER_ANGLE

    # shoulder - hip - knee
    spine = combine_bilateral(
        _side_angle(keypoints, K.LEFT_SHOULDER, K.LEFT_HIP, K.LEFT_KNEE, min_confidence),
        _side_angle(keypoints, K.RIGHT_SHOULDER, K.RIGHT_HIP, K.RIGHT_KNEE, min_confidence),
        DEFAULT_SPINE_ANGLE,
    )

    head = combine_bilateral(
        _side_head_forward(keypoints, K.LEFT_EAR, K.LEFT_SHOULDER, min_confidence),
        _side_head_forward(keypoints, K.RIGHT_EAR, K.RIGHT_SHOULDER, min_confidence),
        DEFAULT_HEAD_FORWARD,
    )

    return PostureAngles(
        neck_angle=neck,
        shoulder_angle=shoulder,
        spine_angle=spine,
        head_forward_distance=head,
    )
