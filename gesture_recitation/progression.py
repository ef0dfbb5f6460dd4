"""
Recitation progression: reveal, advance and completion driven by held gestures.
"""
import dataclasses
import logging
from typing import Callable, Dict, Optional

from .config import TimingConfig
from .hold_timer import HoldTimer
from .scheduler import Scheduler, TimerHandle
from .types import (
    GestureLabel, HoldKind, HoldResult, ProgressionListener, ProgressionState,
    Session, Surah, Verse,
)

logger = logging.getLogger(__name__)

REVEAL_TIMER = "reveal"
TRANSITION_TIMER = "transition"


class RecitationProgression:
    """
    Per-surah state machine.

    AWAITING_GESTURE -> REVEALED when the current verse's gesture is held long
    enough; REVEALED -> TRANSITIONING when the reveal window elapses;
    TRANSITIONING -> AWAITING_GESTURE on the next verse, or COMPLETED after the
    last one. Gestures are only accepted while AWAITING_GESTURE, so one
    sustained pose can never skip several verses.
    """

    def __init__(self, surah: Surah, scheduler: Scheduler,
                 timing: Optional[TimingConfig] = None,
                 listener: Optional[ProgressionListener] = None):
        self.surah = surah
        self.scheduler = scheduler
        self.timing = timing or TimingConfig()
        self.listener = listener
        self.hold_timer = HoldTimer(self.timing.hold_threshold_ms)

        self._session = Session()
        self._timers: Dict[str, TimerHandle] = {}
        self._generation = 0
        self.state_entered_ms = scheduler.now_ms()
        logger.info(f"Loaded surah {surah.name!r} with {surah.verse_count} verses")

    @property
    def session(self) -> Session:
        """Copy of the current session state."""
        return dataclasses.replace(self._session)

    @property
    def state(self) -> ProgressionState:
        return self._session.state

    @property
    def current_verse(self) -> Verse:
        return self.surah.verses[self._session.current_verse_index]

    @property
    def target_gesture(self) -> GestureLabel:
        return self.current_verse.required_gesture

    @property
    def accepting_gestures(self) -> bool:
        return self.state == ProgressionState.AWAITING_GESTURE

    @property
    def hold_progress(self) -> float:
        return self.hold_timer.progress

    @property
    def overall_progress(self) -> float:
        """Fraction of verses revealed so far."""
        session = self._session
        if session.completed:
            return 1.0
        revealed = session.current_verse_index + (1 if session.verse_revealed else 0)
        return revealed / self.surah.verse_count

    def on_gesture(self, label: GestureLabel, delta_ms: int) -> Optional[HoldResult]:
        """
        Feed one classification tick.

        Args:
            label: Gesture classified for this tick
            delta_ms: Time covered by this tick

        Returns:
            The hold-timer result, or None when gestures are not being accepted
        """
        if not self.accepting_gestures:
            return None

        result = self.hold_timer.advance(label, self.target_gesture, delta_ms)
        self._session.hold_elapsed_ms = self.hold_timer.elapsed_ms
        if result.kind == HoldKind.REACHED:
            self._reveal()
        return result

    def cancel(self) -> None:
        """Cancel in-flight timers and invalidate any callback already captured."""
        self._generation += 1
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    def _reveal(self) -> None:
        verse = self.current_verse
        self.hold_timer.reset()
        self._session.hold_elapsed_ms = 0
        self._session.verse_revealed = True
        self._enter_state()
        logger.info(f"Verse {verse.display_id} revealed ({verse.required_gesture.value})")
        self._schedule(REVEAL_TIMER, self.timing.reveal_ms,
                       ProgressionState.REVEALED, self._end_reveal)
        if self.listener is not None:
            self.listener.on_verse_revealed(verse)

    def _end_reveal(self) -> None:
        self._session.verse_revealed = False
        self._session.transitioning = True
        self._enter_state()
        logger.debug(f"Transitioning from verse index {self._session.current_verse_index}")
        self._schedule(TRANSITION_TIMER, self.timing.transition_ms,
                       ProgressionState.TRANSITIONING, self._end_transition)

    def _end_transition(self) -> None:
        session = self._session
        session.transitioning = False
        if session.current_verse_index >= self.surah.last_index:
            session.completed = True
            self._enter_state()
            self.cancel()
            logger.info(f"Surah {self.surah.name!r} completed")
            if self.listener is not None:
                self.listener.on_surah_completed(self.surah)
            return

        session.current_verse_index += 1
        self.hold_timer.reset()
        session.hold_elapsed_ms = 0
        self._enter_state()
        verse = self.current_verse
        logger.info(f"Advanced to verse {verse.display_id}, awaiting {verse.required_gesture.value}")
        if self.listener is not None:
            self.listener.on_verse_advanced(verse)

    def _enter_state(self) -> None:
        self.state_entered_ms = self.scheduler.now_ms()

    def _schedule(self, role: str, delay_ms: int, expected: ProgressionState,
                  action: Callable[[], None]) -> None:
        """Replace the in-flight timer for role with a guarded callback."""
        previous = self._timers.pop(role, None)
        if previous is not None:
            previous.cancel()

        generation = self._generation

        def fire():
            if generation != self._generation or self.state != expected:
                logger.debug(f"Ignoring stale {role} timer")
                return
            self._timers.pop(role, None)
            action()

        self._timers[role] = self.scheduler.call_later(delay_ms, fire)
