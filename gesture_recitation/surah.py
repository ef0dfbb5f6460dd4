"""
Surah document validation and loading.
"""
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import BUNDLED_DATA_DIR
from .errors import DataLoadFailure
from .types import GestureLabel, Surah, Verse

logger = logging.getLogger(__name__)

SURAH_ID_PATTERN = re.compile(r"^[a-z0-9_-]+$")
DATA_FILE_SUFFIX = "_data.json"


# Document models
class VerseDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    verse_number: int = Field(alias="verseNumber")
    arabic_text: str = Field(alias="arabicText")
    translation: str = ""
    gesture_key: GestureLabel = Field(alias="gestureKey")
    gesture_name: str = Field(default="", alias="gestureName")

    @field_validator("gesture_key")
    @classmethod
    def gesture_must_be_recognizable(cls, value: GestureLabel) -> GestureLabel:
        if value == GestureLabel.UNKNOWN:
            raise ValueError("'unknown' cannot be a required gesture")
        return value


class SurahDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    surah_name: str = Field(alias="surahName")
    verses: List[VerseDocument] = Field(min_length=1)


def parse_surah(document: Union[Dict[str, Any], str, bytes], surah_id: Optional[str] = None) -> Surah:
    """
    Validate a surah document and convert it into a Surah.

    Args:
        document: Parsed JSON object, or raw JSON text
        surah_id: Identifier used in error messages and kept on the result

    Returns:
        Surah with verse ordinals numbered from 0 in document order

    Raises:
        DataLoadFailure: if the document does not match the expected shape
    """
    label = surah_id or "<document>"
    try:
        if isinstance(document, (str, bytes)):
            parsed = SurahDocument.model_validate_json(document)
        else:
            parsed = SurahDocument.model_validate(document)
    except ValidationError as e:
        raise DataLoadFailure(label, f"invalid document ({e.error_count()} errors): {e}") from e

    verses = tuple(
        Verse(
            ordinal=ordinal,
            arabic_text=verse.arabic_text,
            translation=verse.translation,
            required_gesture=verse.gesture_key,
            display_id=verse.verse_number,
            gesture_name=verse.gesture_name,
        )
        for ordinal, verse in enumerate(parsed.verses)
    )
    return Surah(name=parsed.surah_name, verses=verses, surah_id=surah_id)


class SurahRepository:
    """Loads surah documents named <surah_id>_data.json from a directory."""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else BUNDLED_DATA_DIR

    def path_for(self, surah_id: str) -> Path:
        if not SURAH_ID_PATTERN.match(surah_id or ""):
            raise DataLoadFailure(str(surah_id), "identifier must match [a-z0-9_-]+")
        return self.data_dir / f"{surah_id}{DATA_FILE_SUFFIX}"

    def load(self, surah_id: str) -> Surah:
        """
        Load and validate one surah.

        Raises:
            DataLoadFailure: if the file is missing, unreadable or malformed
        """
        path = self.path_for(surah_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            raise DataLoadFailure(surah_id, f"no data file at {path}") from None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DataLoadFailure(surah_id, f"unreadable data file: {e}") from e

        surah = parse_surah(document, surah_id=surah_id)
        logger.info(f"Loaded surah {surah_id!r} ({surah.verse_count} verses) from {path}")
        return surah

    def available(self) -> List[str]:
        """Identifiers of the surahs present in the data directory, sorted."""
        if not self.data_dir.is_dir():
            return []
        ids = []
        for path in self.data_dir.glob(f"*{DATA_FILE_SUFFIX}"):
            surah_id = path.name[:-len(DATA_FILE_SUFFIX)]
            if SURAH_ID_PATTERN.match(surah_id):
                ids.append(surah_id)
        return sorted(ids)
