"""
Continuous-hold tracking for a target gesture.
"""
from .types import GestureLabel, HoldKind, HoldResult


DEFAULT_HOLD_THRESHOLD_MS = 1500


class HoldTimer:
    """
    Accumulates how long the live gesture has continuously matched a target.

    Any mismatch, including a frame with no hands (classified UNKNOWN), resets
    the count to zero. Reaching the threshold emits REACHED once and starts a
    fresh count.
    """

    def __init__(self, threshold_ms: int = DEFAULT_HOLD_THRESHOLD_MS):
        if threshold_ms <= 0:
            raise ValueError(f"threshold_ms must be positive, got {threshold_ms}")
        self.threshold_ms = threshold_ms
        self.elapsed_ms = 0

    @property
    def progress(self) -> float:
        """Fraction of the threshold accumulated so far, in [0, 1]."""
        return min(1.0, self.elapsed_ms / self.threshold_ms)

    def advance(self, current: GestureLabel, target: GestureLabel, delta_ms: int) -> HoldResult:
        """
        Process one classification tick.

        Args:
            current: Gesture classified for this tick
            target: Gesture required by the current verse
            delta_ms: Time covered by this tick, negative values count as zero

        Returns:
            MATCHING with the running total, RESET, or REACHED with the final total
        """
        if current != target or current == GestureLabel.UNKNOWN:
            self.elapsed_ms = 0
            return HoldResult(HoldKind.RESET, 0)

        self.elapsed_ms += max(0, int(delta_ms))
        if self.elapsed_ms >= self.threshold_ms:
            total = self.elapsed_ms
            self.elapsed_ms = 0
            return HoldResult(HoldKind.REACHED, total)
        return HoldResult(HoldKind.MATCHING, self.elapsed_ms)

    def reset(self) -> None:
        self.elapsed_ms = 0
