"""
Gesture Recitation

Recognizes a small vocabulary of hand gestures from MediaPipe hand landmarks
and uses sustained gestures to reveal memorization content verse by verse.
"""

__version__ = "0.1.0"

from .types import (
    GestureLabel, HandSide, Landmark, HandSnapshot, Frame, HandDetection,
    Verse, Surah, Session, ProgressionState, HoldKind, HoldResult,
    RecitationView, HandDetectorProto, ProgressionListener,
)
from .errors import RecitationError, DetectionUnavailable, DataLoadFailure, MalformedFrame
from .config import load_config, Cfg, ClassifierConfig, TimingConfig
from .classifier import GestureClassifier
from .hold_timer import HoldTimer
from .scheduler import Scheduler, ManualClock
from .progression import RecitationProgression
from .surah import SurahRepository, parse_surah
from .engine import RecitationEngine
from .listener_mock import MockListener

__all__ = [
    "GestureLabel",
    "HandSide",
    "Landmark",
    "HandSnapshot",
    "Frame",
    "HandDetection",
    "Verse",
    "Surah",
    "Session",
    "ProgressionState",
    "HoldKind",
    "HoldResult",
    "RecitationView",
    "HandDetectorProto",
    "ProgressionListener",
    "RecitationError",
    "DetectionUnavailable",
    "DataLoadFailure",
    "MalformedFrame",
    "load_config",
    "Cfg",
    "ClassifierConfig",
    "TimingConfig",
    "GestureClassifier",
    "HoldTimer",
    "Scheduler",
    "ManualClock",
    "RecitationProgression",
    "SurahRepository",
    "parse_surah",
    "RecitationEngine",
    "MockListener",
]
