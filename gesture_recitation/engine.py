"""
Recitation engine: wires the detector, classifier and progression together.
"""
import logging
from typing import Any, Optional

from .classifier import GestureClassifier
from .config import Cfg, load_config
from .errors import DetectionUnavailable
from .landmarks import frame_from_detections
from .progression import RecitationProgression
from .scheduler import Scheduler
from .surah import SurahRepository
from .types import (
    EMPTY_FRAME, Frame, GestureLabel, HandDetectorProto, ProgressionListener, RecitationView, Surah,
)

logger = logging.getLogger(__name__)


class RecitationEngine:
    """
    Single-threaded recitation session.

    The detector is injected so the engine can run against recorded or
    synthetic landmarks. Feed frames with process_image() or process_frame();
    timers are serviced on every frame, or explicitly with poll().
    """

    def __init__(self, detector: HandDetectorProto, cfg: Optional[Cfg] = None,
                 scheduler: Optional[Scheduler] = None,
                 listener: Optional[ProgressionListener] = None,
                 repository: Optional[SurahRepository] = None):
        """
        Initialize the engine.

        Args:
            detector: Hand landmark detector
            cfg: Configuration, loads the bundled defaults when None
            scheduler: Timer queue, a wall-clock scheduler when None
            listener: Receives reveal/advance/completion events
            repository: Surah source, the configured data directory when None
        """
        self.cfg = cfg or load_config()
        self.detector = detector
        self.scheduler = scheduler or Scheduler()
        self.listener = listener
        self.repository = repository or SurahRepository(self.cfg.data.surah_dir)
        self.classifier = GestureClassifier(self.cfg.classifier)

        self.progression: Optional[RecitationProgression] = None
        self.current_gesture = GestureLabel.UNKNOWN
        self.last_frame: Frame = EMPTY_FRAME
        self.camera_ready = False
        self._last_frame_ms: Optional[int] = None

    # Lifecycle

    def start(self) -> bool:
        """
        Start the detector. Does nothing if already running.

        Returns:
            True if the detector is ready, False if it could not be started
        """
        if self.camera_ready:
            return True
        try:
            self.detector.start()
        except DetectionUnavailable as e:
            logger.warning(f"Hand detection unavailable: {e}")
            self.camera_ready = False
            return False
        self.camera_ready = True
        self._last_frame_ms = None
        logger.info("Hand detection started")
        return True

    def stop(self) -> None:
        """Stop the detector. Safe to call more than once."""
        if not self.camera_ready:
            return
        self.camera_ready = False
        self.detector.stop()
        logger.info("Hand detection stopped")

    def close(self) -> None:
        """Stop detection and cancel any pending progression timers."""
        self.stop()
        if self.progression is not None:
            self.progression.cancel()

    def __enter__(self) -> "RecitationEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Content

    def load_surah(self, surah_id: str) -> Surah:
        """
        Load a surah by identifier and start a fresh session for it.

        Raises:
            DataLoadFailure: if the surah cannot be loaded; the engine is then left without a surah
        """
        self._discard_progression()
        surah = self.repository.load(surah_id)
        self.set_surah(surah)
        return surah

    def set_surah(self, surah: Surah) -> None:
        """Start a fresh session for an already loaded surah."""
        self._discard_progression()
        self.classifier.reset()
        self.progression = RecitationProgression(
            surah, self.scheduler, self.cfg.timing, listener=self.listener
        )

    def _discard_progression(self) -> None:
        if self.progression is not None:
            self.progression.cancel()
            self.progression = None

    # Frames

    def poll(self, now_ms: Optional[int] = None) -> int:
        """Run timers that are due. Returns the number fired."""
        return self.scheduler.run_due(now_ms)

    def process_image(self, image: Any, timestamp_ms: Optional[int] = None) -> GestureLabel:
        """
        Detect hands in an image and process the resulting frame.

        Raises:
            DetectionUnavailable: if the detector has not been started
        """
        if not self.camera_ready:
            raise DetectionUnavailable("Detector is not running")
        now = self.scheduler.now_ms() if timestamp_ms is None else timestamp_ms
        detections = self.detector.detect(image, now)
        frame = frame_from_detections(detections, self.cfg.detector.swap_handedness)
        return self.process_frame(frame, now)

    def process_frame(self, frame: Frame, timestamp_ms: Optional[int] = None) -> GestureLabel:
        """
        Classify one frame and feed the result to the progression.

        Args:
            frame: Hands detected in this frame
            timestamp_ms: Frame time on the scheduler clock, now when None

        Returns:
            The gesture classified for this frame
        """
        now = self.scheduler.now_ms() if timestamp_ms is None else timestamp_ms
        self.scheduler.run_due(now)

        label = self.classifier.classify(frame)
        self.last_frame = frame
        self.current_gesture = label

        delta_ms = self._frame_delta(now)
        if self.progression is not None:
            result = self.progression.on_gesture(label, delta_ms)
            if result is not None:
                logger.debug(f"{label.value} for {delta_ms}ms -> {result.kind.value} ({result.accumulated_ms}ms)")
        return label

    def _frame_delta(self, now: int) -> int:
        """Time since the previous frame, limited to the gap cap and the current state's age."""
        previous = self._last_frame_ms
        self._last_frame_ms = now
        if previous is None:
            return 0
        delta = min(max(0, now - previous), self.cfg.timing.max_tick_gap_ms)
        if self.progression is not None:
            delta = min(delta, max(0, now - self.progression.state_entered_ms))
        return delta

    # Output

    def view(self) -> RecitationView:
        """Snapshot of everything the UI renders."""
        progression = self.progression
        if progression is None:
            return RecitationView(current_gesture=self.current_gesture,
                                  camera_ready=self.camera_ready)
        session = progression.session
        return RecitationView(
            current_gesture=self.current_gesture,
            camera_ready=self.camera_ready,
            state=session.state,
            verse_index=session.current_verse_index,
            verse_count=progression.surah.verse_count,
            hold_progress=progression.hold_progress,
            verse_revealed=session.verse_revealed,
            completed=session.completed,
            current_verse=progression.current_verse,
            overall_progress=progression.overall_progress,
            surah_name=progression.surah.name,
        )
