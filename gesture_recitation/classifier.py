"""
Gesture classification from a single frame of hand landmarks.
"""
import logging
from collections import deque
from typing import Optional

from .config import ClassifierConfig
from .landmarks import (
    INDEX_TIP, distance, hand_scale, is_finger_extended, is_finger_folded,
    palm_depth_span, wrist_separation,
)
from .types import Frame, GestureLabel

logger = logging.getLogger(__name__)


class WristSeparationHistory:
    """
    Bounded history of wrist-to-wrist separations.

    Backs the motion-aware variant of the hands-moving-apart gesture. Only
    consecutive two-hand frames are kept; any frame without both hands clears it.
    """

    def __init__(self, size: int):
        self.samples: deque = deque(maxlen=max(2, size))

    def update(self, frame: Frame) -> None:
        if not frame.has_both_hands:
            self.samples.clear()
            return
        self.samples.append(wrist_separation(frame.left, frame.right))

    def growth(self) -> float:
        """Separation gained from the oldest to the newest sample."""
        if len(self.samples) < 2:
            return 0.0
        return self.samples[-1] - self.samples[0]

    def clear(self) -> None:
        self.samples.clear()


def detect_index_finger_up(frame: Frame, cfg: ClassifierConfig) -> bool:
    """Index finger straight up, other three fingers folded, on the right hand or else the left."""
    hand = frame.right or frame.left
    if hand is None:
        return False
    index_up = is_finger_extended(hand, "index", cfg.extend_margin)
    others_down = all(
        is_finger_folded(hand, finger, cfg.fold_margin)
        for finger in ("middle", "ring", "pinky")
    )
    return index_up and others_down


def detect_fingertips_touch(frame: Frame, cfg: ClassifierConfig) -> bool:
    """
    Index fingertips of both hands touching.

    The fingertip gap is divided by the smaller hand scale so the test holds at
    any distance from the camera. Hands whose wrists are far apart are rejected
    before the fine check.
    """
    if not frame.has_both_hands:
        return False
    left, right = frame.left, frame.right

    if wrist_separation(left, right) > cfg.touch_max_wrist_separation:
        return False

    min_scale = min(hand_scale(left), hand_scale(right))
    if min_scale <= 0:
        return False

    tip_gap = distance(left[INDEX_TIP], right[INDEX_TIP])
    return tip_gap / min_scale < cfg.touch_max_normalized_distance


def detect_hands_moving_apart(frame: Frame, cfg: ClassifierConfig,
                              history: Optional[WristSeparationHistory] = None) -> bool:
    """Wrists spread wider than the separation threshold."""
    if not frame.has_both_hands:
        return False
    if wrist_separation(frame.left, frame.right) <= cfg.apart_min_wrist_separation:
        return False
    if history is not None:
        return history.growth() >= cfg.apart_min_separation_growth
    return True


def detect_palms_facing(frame: Frame, cfg: ClassifierConfig) -> bool:
    """Both palms flat toward the camera with wrists reasonably close."""
    if not frame.has_both_hands:
        return False
    left, right = frame.left, frame.right
    flat = (palm_depth_span(left) < cfg.palm_flatness_max_z and
            palm_depth_span(right) < cfg.palm_flatness_max_z)
    return flat and wrist_separation(left, right) < cfg.palms_max_wrist_separation


class GestureClassifier:
    """
    Maps one frame to exactly one gesture label.

    Predicates run in a fixed priority order and the first match wins:
    index finger up, fingertips touch, hands moving apart, palms facing.
    Touch is tested before palms facing because close, flat hands satisfy both.
    """

    def __init__(self, cfg: Optional[ClassifierConfig] = None,
                 history: Optional[WristSeparationHistory] = None):
        """
        Initialize the classifier.

        Args:
            cfg: Threshold configuration, defaults when None
            history: Wrist separation history for the motion-aware apart test.
                Created automatically when cfg.apart_require_motion is set.
        """
        self.cfg = cfg or ClassifierConfig()
        if history is None and self.cfg.apart_require_motion:
            history = WristSeparationHistory(self.cfg.apart_history_frames)
        self.history = history

    def classify(self, frame: Frame) -> GestureLabel:
        """
        Classify a frame.

        Args:
            frame: Hands detected in the current video frame

        Returns:
            The highest priority matching gesture, or UNKNOWN
        """
        if self.history is not None:
            self.history.update(frame)

        if frame.is_empty:
            return GestureLabel.UNKNOWN

        cfg = self.cfg
        if detect_index_finger_up(frame, cfg):
            return GestureLabel.INDEX_FINGER_UP
        if detect_fingertips_touch(frame, cfg):
            return GestureLabel.FINGERTIPS_TOUCH
        if detect_hands_moving_apart(frame, cfg, self.history):
            return GestureLabel.HANDS_MOVING_APART
        if detect_palms_facing(frame, cfg):
            return GestureLabel.PALMS_FACING
        return GestureLabel.UNKNOWN

    def reset(self) -> None:
        """Forget motion history."""
        if self.history is not None:
            self.history.clear()
