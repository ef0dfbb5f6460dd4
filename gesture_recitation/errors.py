"""
Error taxonomy for the gesture recitation system.
"""


class RecitationError(Exception):
    """Base class for recitation errors."""


class DetectionUnavailable(RecitationError):
    """The hand detector or camera could not be started. Start may be retried."""


class DataLoadFailure(RecitationError):
    """A surah document is missing or malformed."""

    def __init__(self, surah_id: str, reason: str):
        super().__init__(f"Failed to load surah {surah_id!r}: {reason}")
        self.surah_id = surah_id
        self.reason = reason


class MalformedFrame(RecitationError):
    """A detected hand does not have the expected landmark shape."""
