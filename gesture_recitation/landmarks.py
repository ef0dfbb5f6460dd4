"""
Hand landmark geometry and conversion of detector output into frames.
"""
import logging
import numpy as np
from typing import Iterable

from .errors import MalformedFrame
from .types import Frame, HandDetection, HandSide, HandSnapshot, Landmark

logger = logging.getLogger(__name__)

# MediaPipe landmark indices
WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

# (tip, pip, mcp) per non-thumb finger
FINGER_JOINTS = {
    "index": (INDEX_TIP, INDEX_PIP, INDEX_MCP),
    "middle": (MIDDLE_TIP, MIDDLE_PIP, MIDDLE_MCP),
    "ring": (RING_TIP, RING_PIP, RING_MCP),
    "pinky": (PINKY_TIP, PINKY_PIP, PINKY_MCP),
}

HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17),
]

def distance(a: Landmark, b: Landmark) -> float:
    """Euclidean 3D distance between two landmarks."""
    return float(np.linalg.norm(np.subtract(a, b)))

def hand_scale(hand: HandSnapshot) -> float:
    """
    Wrist to middle-finger MCP distance.

    Used to normalize inter-hand measurements so they do not depend on how
    far the hands are from the camera.
    """
    return distance(hand[WRIST], hand[MIDDLE_MCP])

def wrist_separation(left: HandSnapshot, right: HandSnapshot) -> float:
    """Distance between the two wrists."""
    return distance(left[WRIST], right[WRIST])

def is_finger_extended(hand: HandSnapshot, finger: str, margin: float = 0.0) -> bool:
    """
    Check if a finger points straight up.

    Args:
        hand: Hand snapshot
        finger: One of 'index', 'middle', 'ring', 'pinky'
        margin: Minimum vertical gap between consecutive joints

    Returns:
        True if tip is above PIP and PIP is above MCP (smaller y is higher)
    """
    tip, pip, mcp = FINGER_JOINTS[finger]
    return (hand[tip].y + margin < hand[pip].y and
            hand[pip].y + margin < hand[mcp].y)

def is_finger_folded(hand: HandSnapshot, finger: str, margin: float = 0.0) -> bool:
    """Check if a finger tip is not above its PIP joint."""
    tip, pip, _ = FINGER_JOINTS[finger]
    return hand[tip].y > hand[pip].y - margin

def palm_depth_span(hand: HandSnapshot) -> float:
    """Absolute z difference between the index tip and the wrist."""
    return abs(hand[INDEX_TIP].z - hand[WRIST].z)

def snapshot_from_detection(detection: HandDetection, swap_handedness: bool = False) -> HandSnapshot:
    """
    Convert one raw detection into a hand snapshot.

    Raises:
        MalformedFrame: if the side label or landmark count is invalid
    """
    side = HandSide.parse(detection.side)
    if swap_handedness:
        side = side.opposite()
    return HandSnapshot.from_points(side, detection.points)

def frame_from_detections(detections: Iterable[HandDetection], swap_handedness: bool = False) -> Frame:
    """
    Build a frame from detector output.

    Malformed hands are dropped and the frame degrades to fewer hands. When two
    detections report the same side the later one wins.
    """
    hands = []
    for detection in detections:
        try:
            hands.append(snapshot_from_detection(detection, swap_handedness))
        except MalformedFrame as e:
            logger.debug(f"Skipping malformed hand: {e}")
    return Frame.from_hands(hands)
