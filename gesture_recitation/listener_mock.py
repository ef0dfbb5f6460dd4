"""
Mock progression listener for testing and demos.
"""
import logging

from .types import Surah, Verse

logger = logging.getLogger(__name__)


class MockListener:
    """Listener that logs progression events and counts them."""

    def __init__(self):
        """Initialize the mock listener."""
        self.reveal_count = 0
        self.advance_count = 0
        self.complete_count = 0
        self.revealed_ordinals = []

    def on_verse_revealed(self, verse: Verse) -> None:
        self.reveal_count += 1
        self.revealed_ordinals.append(verse.ordinal)
        logger.info(f"[MockListener] Revealed verse {verse.display_id} (event #{self.reveal_count})")

    def on_verse_advanced(self, verse: Verse) -> None:
        self.advance_count += 1
        logger.info(f"[MockListener] Advanced to verse {verse.display_id} (event #{self.advance_count})")

    def on_surah_completed(self, surah: Surah) -> None:
        self.complete_count += 1
        logger.info(f"[MockListener] Completed {surah.name}")
