"""
Hand landmark detection using the MediaPipe Hand Landmarker task.
"""
import logging
from pathlib import Path
from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_python
from mediapipe.tasks.python import vision

from .config import DetectorConfig
from .errors import DetectionUnavailable
from .types import HandDetection

logger = logging.getLogger(__name__)


class MediaPipeHandDetector:
    """Detects up to two hands per video frame with handedness labels."""

    def __init__(self, cfg: DetectorConfig):
        """
        Initialize the detector. No model is loaded until start().

        Args:
            cfg: Detector configuration (model path and confidence thresholds)
        """
        self.cfg = cfg
        self.landmarker: Optional[vision.HandLandmarker] = None
        self._last_timestamp_ms = -1

    @property
    def running(self) -> bool:
        return self.landmarker is not None

    def start(self) -> None:
        """
        Load the landmark model.

        Raises:
            DetectionUnavailable: if the model file is missing or fails to load
        """
        if self.running:
            return
        model_path = Path(self.cfg.model_asset_path)
        if not model_path.exists():
            raise DetectionUnavailable(f"Hand landmarker model not found: {model_path}")

        options = vision.HandLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=self.cfg.max_num_hands,
            min_hand_detection_confidence=self.cfg.min_detection_confidence,
            min_hand_presence_confidence=self.cfg.min_presence_confidence,
            min_tracking_confidence=self.cfg.min_tracking_confidence,
        )
        try:
            self.landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise DetectionUnavailable(f"Failed to initialize hand landmarker: {e}") from e
        self._last_timestamp_ms = -1
        logger.info(f"Hand landmarker loaded from {model_path}")

    def stop(self) -> None:
        """Release the landmark model. Safe to call more than once."""
        if self.landmarker is None:
            return
        landmarker, self.landmarker = self.landmarker, None
        landmarker.close()

    def detect(self, image: np.ndarray, timestamp_ms: int) -> List[HandDetection]:
        """
        Detect hands in a frame.

        Args:
            image: Input frame in BGR format
            timestamp_ms: Frame time; must increase between calls

        Returns:
            One detection per hand with 21 (x, y, z) normalized points
        """
        if self.landmarker is None:
            raise DetectionUnavailable("Hand landmarker is not started")

        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        frame_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self.landmarker.detect_for_video(mp_image, timestamp_ms)

        detections = []
        for hand_landmarks, handedness in zip(result.hand_landmarks, result.handedness):
            if not handedness:
                continue
            category = handedness[0]
            detections.append(HandDetection(
                side=category.category_name,
                points=[(lm.x, lm.y, lm.z) for lm in hand_landmarks],
                score=category.score,
            ))
        return detections
