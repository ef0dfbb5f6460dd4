"""
Main application for gesture-driven recitation.
"""
import logging
import os
from typing import Optional

import cv2
import numpy as np
from dotenv import load_dotenv

from .config import load_config
from .detector import MediaPipeHandDetector
from .engine import RecitationEngine
from .errors import DataLoadFailure, DetectionUnavailable
from .landmarks import HAND_CONNECTIONS
from .listener_mock import MockListener
from .types import Frame, ProgressionState, RecitationView

logger = logging.getLogger(__name__)

DEFAULT_SURAH = "ikhlas"
LANDMARK_COLOR = (36, 191, 251)  # amber, BGR


def draw_landmarks(frame_bgr: np.ndarray, hands: Frame) -> np.ndarray:
    """
    Draw hand skeletons on the frame.

    Args:
        frame_bgr: Input frame
        hands: Detected hands with normalized landmarks

    Returns:
        Frame with skeletons drawn
    """
    height, width = frame_bgr.shape[:2]
    for hand in hands.hands:
        points = [(int(lm.x * width), int(lm.y * height)) for lm in hand.landmarks]
        for start, end in HAND_CONNECTIONS:
            cv2.line(frame_bgr, points[start], points[end], LANDMARK_COLOR, 1, cv2.LINE_AA)
        for point in points:
            cv2.circle(frame_bgr, point, 3, LANDMARK_COLOR, -1)
    return frame_bgr


def draw_status(frame_bgr: np.ndarray, view: RecitationView) -> np.ndarray:
    """Draw progression status text and the hold progress bar."""
    white = (255, 255, 255)
    if not view.camera_ready:
        cv2.putText(frame_bgr, "Camera not ready", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 255), 2)
        return frame_bgr

    header = f"{view.surah_name or ''}  {view.verse_index + 1}/{view.verse_count}"
    cv2.putText(frame_bgr, header, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.6, white, 2)
    cv2.putText(frame_bgr, f"Gesture: {view.current_gesture.value}", (10, 55),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, white, 1)

    if view.current_verse is not None:
        required = view.current_verse.required_gesture.value
        cv2.putText(frame_bgr, f"Required: {required}", (10, 75), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 0), 1)

    if view.state == ProgressionState.AWAITING_GESTURE and view.hold_progress > 0:
        bar_width = int((frame_bgr.shape[1] - 20) * view.hold_progress)
        cv2.rectangle(frame_bgr, (10, 85), (10 + bar_width, 92), LANDMARK_COLOR, -1)
    elif view.state == ProgressionState.REVEALED and view.current_verse is not None:
        # Arabic glyphs need a text shaper; the overlay shows the translation
        cv2.putText(frame_bgr, view.current_verse.translation, (10, 110),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, LANDMARK_COLOR, 1)
    elif view.completed:
        cv2.putText(frame_bgr, "Completed!", (10, 110), cv2.FONT_HERSHEY_SIMPLEX, 0.8, LANDMARK_COLOR, 2)

    cv2.putText(frame_bgr, "Press 'q' to quit", (10, frame_bgr.shape[0] - 20),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, white, 1)
    return frame_bgr


class RecitationApp:
    """Webcam loop feeding the recitation engine."""

    def __init__(self, surah_id: str = DEFAULT_SURAH, config_path: Optional[str] = None):
        """Initialize the application with configuration."""
        self.config = load_config(config_path)
        self.listener = MockListener()
        self.engine = RecitationEngine(
            MediaPipeHandDetector(self.config.detector),
            cfg=self.config,
            listener=self.listener,
        )
        self.engine.load_surah(surah_id)
        self.cap: Optional[cv2.VideoCapture] = None

    def open_camera(self) -> None:
        """
        Open the webcam.

        Raises:
            DetectionUnavailable: if the camera cannot be opened
        """
        if self.cap is not None and self.cap.isOpened():
            return
        camera = self.config.camera
        self.cap = cv2.VideoCapture(camera.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, camera.fps)

        if not self.cap.isOpened():
            self.cap = None
            raise DetectionUnavailable(f"Failed to open camera {camera.index}")

    def close(self) -> None:
        """Release the camera and detector. Safe to call more than once."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        self.engine.close()
        cv2.destroyAllWindows()

    def run(self) -> None:
        """Run the main application loop."""
        try:
            self.open_camera()
            if not self.engine.start():
                raise DetectionUnavailable("Hand detector failed to start")

            logger.info(f"Starting {self.config.display.window_name}")
            while True:
                ret, frame = self.cap.read()
                if not ret:
                    logger.error("Failed to read frame from camera")
                    break

                self.engine.process_image(frame)
                view = self.engine.view()

                # Mirror for a selfie view; landmarks are drawn in the same space
                if self.config.display.show_landmarks:
                    frame = draw_landmarks(frame, self.engine.last_frame)
                frame = draw_status(cv2.flip(frame, 1), view)

                cv2.imshow(self.config.display.window_name, frame)

                if cv2.waitKey(1) & 0xFF == ord('q'):
                    break
        finally:
            self.close()


def main() -> None:
    """Entry point for the application."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    config_path = os.getenv("GESTURE_RECITATION_CONFIG")
    surah_id = os.getenv("GESTURE_RECITATION_SURAH", DEFAULT_SURAH)

    app = None
    try:
        app = RecitationApp(surah_id=surah_id, config_path=config_path)
        app.run()
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except DataLoadFailure as e:
        logger.error(f"❌ {e}")
    except DetectionUnavailable as e:
        logger.error(f"❌ Camera not ready: {e}")
    finally:
        if app is not None:
            app.close()


if __name__ == "__main__":
    main()
