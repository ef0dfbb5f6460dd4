"""
Type definitions for the gesture recitation system.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, NamedTuple, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .errors import MalformedFrame


LANDMARK_COUNT = 21


class Landmark(NamedTuple):
    """One normalized 3D point on a tracked hand."""
    x: float
    y: float
    z: float = 0.0


class HandSide(str, Enum):
    """Handedness label assigned by the detector."""
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, label: str) -> "HandSide":
        """Parse a detector label such as 'Left' or 'right'."""
        try:
            return cls(str(label).strip().lower())
        except ValueError:
            raise MalformedFrame(f"Unknown hand side label: {label!r}") from None

    def opposite(self) -> "HandSide":
        return HandSide.LEFT if self is HandSide.RIGHT else HandSide.RIGHT


class GestureLabel(str, Enum):
    """Closed vocabulary of recognizable gestures."""
    INDEX_FINGER_UP = "index_finger_up"
    PALMS_FACING = "palms_facing"
    HANDS_MOVING_APART = "hands_moving_apart"
    FINGERTIPS_TOUCH = "fingertips_touch"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class HandSnapshot:
    """Exactly 21 landmarks of one detected hand plus its side."""
    side: HandSide
    landmarks: Tuple[Landmark, ...]

    def __post_init__(self):
        if len(self.landmarks) != LANDMARK_COUNT:
            raise MalformedFrame(
                f"Expected {LANDMARK_COUNT} landmarks, got {len(self.landmarks)}"
            )

    @classmethod
    def from_points(cls, side: HandSide, points: Sequence[Sequence[float]]) -> "HandSnapshot":
        """
        Build a snapshot from raw (x, y[, z]) points.

        Raises:
            MalformedFrame: if the point count or a point's shape is wrong
        """
        landmarks = []
        for point in points:
            if len(point) not in (2, 3):
                raise MalformedFrame(f"Landmark must have 2 or 3 coordinates, got {len(point)}")
            landmarks.append(Landmark(*(float(v) for v in point)))
        return cls(side=side, landmarks=tuple(landmarks))

    def __getitem__(self, index: int) -> Landmark:
        return self.landmarks[index]


@dataclass(frozen=True)
class Frame:
    """Hands detected in one video frame, at most one per side."""
    left: Optional[HandSnapshot] = None
    right: Optional[HandSnapshot] = None

    @classmethod
    def from_hands(cls, hands: Sequence[HandSnapshot]) -> "Frame":
        """Key hands by side; a later hand replaces an earlier one of the same side."""
        by_side = {}
        for hand in hands:
            by_side[hand.side] = hand
        return cls(left=by_side.get(HandSide.LEFT), right=by_side.get(HandSide.RIGHT))

    @property
    def hands(self) -> List[HandSnapshot]:
        return [hand for hand in (self.left, self.right) if hand is not None]

    @property
    def hand_count(self) -> int:
        return len(self.hands)

    @property
    def is_empty(self) -> bool:
        return self.left is None and self.right is None

    @property
    def has_both_hands(self) -> bool:
        return self.left is not None and self.right is not None


EMPTY_FRAME = Frame()


@dataclass
class HandDetection:
    """Raw per-hand output of a landmark detector."""
    side: str
    points: Sequence[Sequence[float]]
    score: float = 1.0


@dataclass(frozen=True)
class Verse:
    """One verse of a surah, gated behind a required gesture."""
    ordinal: int
    arabic_text: str
    translation: str
    required_gesture: GestureLabel
    display_id: int
    gesture_name: str = ""


@dataclass(frozen=True)
class Surah:
    """An ordered, non-empty sequence of verses."""
    name: str
    verses: Tuple[Verse, ...]
    surah_id: Optional[str] = None

    def __post_init__(self):
        if not self.verses:
            raise ValueError(f"Surah {self.name!r} has no verses")
        for expected, verse in enumerate(self.verses):
            if verse.ordinal != expected:
                raise ValueError(
                    f"Surah {self.name!r}: verse ordinal {verse.ordinal} at position {expected}"
                )

    @property
    def verse_count(self) -> int:
        return len(self.verses)

    @property
    def last_index(self) -> int:
        return len(self.verses) - 1


class ProgressionState(str, Enum):
    """States of the recitation progression."""
    AWAITING_GESTURE = "awaiting_gesture"
    REVEALED = "revealed"
    TRANSITIONING = "transitioning"
    COMPLETED = "completed"


@dataclass
class Session:
    """Mutable progression state for one loaded surah."""
    current_verse_index: int = 0
    hold_elapsed_ms: int = 0
    verse_revealed: bool = False
    transitioning: bool = False
    completed: bool = False

    @property
    def state(self) -> ProgressionState:
        if self.completed:
            return ProgressionState.COMPLETED
        if self.transitioning:
            return ProgressionState.TRANSITIONING
        if self.verse_revealed:
            return ProgressionState.REVEALED
        return ProgressionState.AWAITING_GESTURE


class HoldKind(str, Enum):
    """Outcome of one hold-timer tick."""
    MATCHING = "matching"
    RESET = "reset"
    REACHED = "reached"


@dataclass(frozen=True)
class HoldResult:
    """Hold-timer tick result with the accumulated hold time."""
    kind: HoldKind
    accumulated_ms: int = 0


@dataclass
class RecitationView:
    """Everything the UI needs to render one moment of a session."""
    current_gesture: GestureLabel
    camera_ready: bool
    state: Optional[ProgressionState] = None
    verse_index: int = 0
    verse_count: int = 0
    hold_progress: float = 0.0  # 0..1 toward the hold threshold
    verse_revealed: bool = False
    completed: bool = False
    current_verse: Optional[Verse] = None
    overall_progress: float = 0.0  # fraction of verses revealed
    surah_name: Optional[str] = None


@runtime_checkable
class HandDetectorProto(Protocol):
    """Abstract protocol for hand landmark detectors."""

    def start(self) -> None:
        """Acquire the detector; raise DetectionUnavailable on failure."""
        ...

    def stop(self) -> None:
        """Release the detector. Safe to call more than once."""
        ...

    def detect(self, image: Any, timestamp_ms: int) -> List[HandDetection]:
        """Detect up to two hands in an image."""
        ...


@runtime_checkable
class ProgressionListener(Protocol):
    """Receives progression events for display or logging."""

    def on_verse_revealed(self, verse: Verse) -> None:
        ...

    def on_verse_advanced(self, verse: Verse) -> None:
        ...

    def on_surah_completed(self, surah: Surah) -> None:
        ...
