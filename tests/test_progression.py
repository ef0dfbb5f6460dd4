"""
Test cases for the recitation progression state machine.
"""
import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from gesture_recitation.config import TimingConfig
from gesture_recitation.listener_mock import MockListener
from gesture_recitation.progression import REVEAL_TIMER, RecitationProgression
from gesture_recitation.scheduler import ManualClock, Scheduler
from gesture_recitation.types import GestureLabel, HoldKind, ProgressionState, Surah, Verse

TICK_MS = 100
HOLD_TICKS = 15

IKHLAS_GESTURES = [
    GestureLabel.INDEX_FINGER_UP,
    GestureLabel.PALMS_FACING,
    GestureLabel.HANDS_MOVING_APART,
    GestureLabel.FINGERTIPS_TOUCH,
]


def make_surah(gestures) -> Surah:
    verses = tuple(
        Verse(ordinal=i, arabic_text=f"verse {i + 1}", translation=f"translation {i + 1}",
              required_gesture=gesture, display_id=i + 1)
        for i, gesture in enumerate(gestures)
    )
    return Surah(name="Test", verses=verses)


class ProgressionTestCase(unittest.TestCase):
    """Shared fixture: a progression on a manual clock."""

    gestures = IKHLAS_GESTURES

    def setUp(self):
        self.clock = ManualClock()
        self.scheduler = Scheduler(self.clock)
        self.listener = MockListener()
        self.surah = make_surah(self.gestures)
        self.progression = RecitationProgression(self.surah, self.scheduler, TimingConfig(),
                                                 listener=self.listener)

    def tick(self, label, ms=TICK_MS):
        """Advance time by one tick, fire due timers, then feed the gesture."""
        self.clock.advance(ms)
        self.scheduler.run_due()
        return self.progression.on_gesture(label, ms)

    def hold(self, label, ticks=HOLD_TICKS):
        return [self.tick(label) for _ in range(ticks)]

    def wait(self, ms):
        self.clock.advance(ms)
        self.scheduler.run_due()


class TestTransitions(ProgressionTestCase):
    """Test individual state transitions."""

    def test_initial_state(self):
        self.assertEqual(self.progression.state, ProgressionState.AWAITING_GESTURE)
        self.assertEqual(self.progression.target_gesture, GestureLabel.INDEX_FINGER_UP)
        self.assertEqual(self.progression.session.current_verse_index, 0)

    def test_hold_reveals(self):
        results = self.hold(GestureLabel.INDEX_FINGER_UP)
        self.assertEqual(results[-1].kind, HoldKind.REACHED)
        session = self.progression.session
        self.assertTrue(session.verse_revealed)
        self.assertEqual(session.hold_elapsed_ms, 0)
        self.assertEqual(self.progression.state, ProgressionState.REVEALED)
        self.assertEqual(self.listener.revealed_ordinals, [0])
        self.assertAlmostEqual(self.progression.overall_progress, 0.25)

    def test_partial_hold_tracked_in_session(self):
        self.hold(GestureLabel.INDEX_FINGER_UP, ticks=5)
        self.assertEqual(self.progression.session.hold_elapsed_ms, 500)
        self.assertAlmostEqual(self.progression.hold_progress, 500 / 1500)

    def test_wrong_gesture_never_reveals(self):
        self.hold(GestureLabel.PALMS_FACING, ticks=40)
        self.assertEqual(self.progression.state, ProgressionState.AWAITING_GESTURE)
        self.assertEqual(self.listener.reveal_count, 0)

    def test_reveal_window_then_transition(self):
        self.hold(GestureLabel.INDEX_FINGER_UP)
        self.wait(2999)
        self.assertEqual(self.progression.state, ProgressionState.REVEALED)
        self.wait(1)
        self.assertEqual(self.progression.state, ProgressionState.TRANSITIONING)
        self.assertFalse(self.progression.session.verse_revealed)
        self.wait(499)
        self.assertEqual(self.progression.state, ProgressionState.TRANSITIONING)
        self.wait(1)
        self.assertEqual(self.progression.state, ProgressionState.AWAITING_GESTURE)
        self.assertEqual(self.progression.session.current_verse_index, 1)
        self.assertEqual(self.progression.target_gesture, GestureLabel.PALMS_FACING)
        self.assertEqual(self.listener.advance_count, 1)

    def test_gestures_ignored_while_not_awaiting(self):
        """Even the next verse's gesture cannot move the index early."""
        self.hold(GestureLabel.INDEX_FINGER_UP)
        next_gesture = GestureLabel.PALMS_FACING
        for _ in range(34):
            result = self.tick(next_gesture)
            self.assertIsNone(result)
            self.assertEqual(self.progression.session.current_verse_index, 0)
            self.assertIn(self.progression.state,
                          (ProgressionState.REVEALED, ProgressionState.TRANSITIONING))
        self.assertEqual(self.listener.reveal_count, 1)

    def test_stale_timer_after_cancel_is_noop(self):
        self.hold(GestureLabel.INDEX_FINGER_UP)
        self.progression.cancel()
        self.wait(10000)
        self.assertEqual(self.progression.state, ProgressionState.REVEALED)
        self.assertEqual(self.progression.session.current_verse_index, 0)
        self.assertEqual(self.scheduler.pending, 0)

    def test_rescheduling_a_role_replaces_its_timer(self):
        fired = []
        self.progression._schedule(REVEAL_TIMER, 100, ProgressionState.AWAITING_GESTURE,
                                   lambda: fired.append("first"))
        self.progression._schedule(REVEAL_TIMER, 200, ProgressionState.AWAITING_GESTURE,
                                   lambda: fired.append("second"))
        self.assertEqual(self.scheduler.pending, 1)
        self.wait(300)
        self.assertEqual(fired, ["second"])
        self.assertEqual(self.scheduler.pending, 0)

    def test_session_is_a_copy(self):
        session = self.progression.session
        session.current_verse_index = 3
        self.assertEqual(self.progression.session.current_verse_index, 0)


class TestSustainedPose(ProgressionTestCase):
    """A pose held through reveal and transition must not skip verses."""

    gestures = [GestureLabel.INDEX_FINGER_UP, GestureLabel.INDEX_FINGER_UP, GestureLabel.PALMS_FACING]

    def test_sustained_pose_reveals_one_verse_at_a_time(self):
        # 49 ticks reach 4900ms: verse 0 revealed at 1500, transition ends at 5000
        self.hold(GestureLabel.INDEX_FINGER_UP, ticks=49)
        self.assertEqual(self.listener.reveal_count, 1)
        self.assertEqual(self.progression.session.current_verse_index, 0)

        # Accepting resumes at 5000; a fresh full hold is needed for verse 1
        self.hold(GestureLabel.INDEX_FINGER_UP, ticks=14)
        self.assertEqual(self.progression.session.current_verse_index, 1)
        self.assertEqual(self.listener.reveal_count, 1)
        self.hold(GestureLabel.INDEX_FINGER_UP, ticks=2)
        self.assertEqual(self.listener.reveal_count, 2)
        self.assertEqual(self.listener.revealed_ordinals, [0, 1])


class TestEndToEnd(ProgressionTestCase):
    """Full four-verse run."""

    def test_four_verse_surah(self):
        """Four holds of exactly 1500ms with no idle time: 4 reveals, 3 advances, then completion."""
        for index, gesture in enumerate(IKHLAS_GESTURES):
            self.assertEqual(self.progression.state, ProgressionState.AWAITING_GESTURE)
            self.assertEqual(self.progression.session.current_verse_index, index)
            results = self.hold(gesture)
            self.assertEqual(results[-1].kind, HoldKind.REACHED)
            self.assertEqual(self.listener.reveal_count, index + 1)
            if index < len(IKHLAS_GESTURES) - 1:
                self.wait(3500)

        # Last verse: completion only after the reveal window plus the transition
        self.wait(3499)
        self.assertFalse(self.progression.session.completed)
        self.wait(1)
        session = self.progression.session
        self.assertTrue(session.completed)
        self.assertEqual(self.progression.state, ProgressionState.COMPLETED)
        self.assertEqual(session.current_verse_index, 3)
        self.assertEqual(self.listener.reveal_count, 4)
        self.assertEqual(self.listener.advance_count, 3)
        self.assertEqual(self.listener.complete_count, 1)
        self.assertEqual(self.progression.overall_progress, 1.0)

        # Nothing after completion
        self.hold(GestureLabel.INDEX_FINGER_UP, ticks=40)
        self.assertEqual(self.listener.reveal_count, 4)
        self.assertEqual(self.listener.complete_count, 1)
        self.assertEqual(self.scheduler.pending, 0)

    def test_hand_leaves_frame_mid_hold(self):
        """Hand loss at 1000ms resets the hold instead of pausing it."""
        self.hold(GestureLabel.INDEX_FINGER_UP, ticks=10)
        self.tick(GestureLabel.UNKNOWN)
        self.assertEqual(self.progression.session.hold_elapsed_ms, 0)
        self.hold(GestureLabel.INDEX_FINGER_UP, ticks=14)
        self.assertEqual(self.progression.state, ProgressionState.AWAITING_GESTURE)
        self.tick(GestureLabel.INDEX_FINGER_UP)
        self.assertEqual(self.progression.state, ProgressionState.REVEALED)


if __name__ == '__main__':
    unittest.main()
