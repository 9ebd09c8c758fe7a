"""
Verse Store

Read-only verse snapshot loaded once at startup and passed explicitly to
the retriever. The retriever depends only on VerseStoreProtocol, so tests
substitute fixture stores.

Data file format (JSON array, one object per verse):
    {"verse_id": "2.47", "chapter": 2, "verse_number": "47",
     "sanskrit": "...", "transliteration": "...", "word_meanings": "...",
     "translation": "...", "commentary": "..."}
"""

from __future__ import annotations

import json
import random
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from src.core.exceptions import StoreUnavailableError, VerseDataError
from src.core.logging import get_logger
from src.retrieval.models import Verse

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

MIN_CHAPTER: int = 1
MAX_CHAPTER: int = 18


# =============================================================================
# Protocol
# =============================================================================


@runtime_checkable
class VerseStoreProtocol(Protocol):
    """Anything that can enumerate every verse.

    Implementations raise StoreUnavailableError when the backing data
    cannot be read.
    """

    def all_verses(self) -> Sequence[Verse]:
        """Return every verse in the store."""
        ...


# =============================================================================
# In-memory implementation
# =============================================================================


class InMemoryVerseStore:
    """Immutable verse snapshot ordered by (chapter, verse).

    Usage:
        store = InMemoryVerseStore([Verse(2, "47", "You have a right ...")])
        store.get_by_reference("2.47")
    """

    def __init__(self, verses: Iterable[Verse]) -> None:
        ordered = sorted(verses, key=lambda v: v.sort_key)
        index: dict[tuple[int, str], Verse] = {}
        for verse in ordered:
            key = (verse.chapter_number, verse.verse_number)
            if key in index:
                msg = f"Duplicate verse {verse.reference}"
                raise VerseDataError(msg)
            index[key] = verse
        self._verses: tuple[Verse, ...] = tuple(ordered)
        self._index = index

    def __len__(self) -> int:
        return len(self._verses)

    def all_verses(self) -> Sequence[Verse]:
        return self._verses

    def get_verse(self, chapter_number: int, verse_number: str | int) -> Verse | None:
        return self._index.get((chapter_number, str(verse_number)))

    def get_by_reference(self, reference: str) -> Verse | None:
        """Look up a verse by its "{chapter}.{verse}" reference."""
        chapter, sep, verse = reference.strip().partition(".")
        if not sep or not chapter.isdigit():
            return None
        return self.get_verse(int(chapter), verse)

    def verses_in_chapter(self, chapter_number: int) -> list[Verse]:
        return [v for v in self._verses if v.chapter_number == chapter_number]

    def chapters(self) -> list[int]:
        return sorted({v.chapter_number for v in self._verses})

    def random_verse(self, rng: random.Random | None = None) -> Verse | None:
        """Pick one verse uniformly at random; None when the store is empty."""
        if not self._verses:
            return None
        return (rng or random).choice(self._verses)

    def stats(self) -> dict[str, Any]:
        """Summary of the loaded data.

        missing_chapters lists chapter numbers in 1..18 that have no verses.
        """
        chapters = self.chapters()
        per_chapter = {c: 0 for c in chapters}
        for verse in self._verses:
            per_chapter[verse.chapter_number] += 1
        return {
            "total_verses": len(self._verses),
            "chapters": chapters,
            "verses_per_chapter": per_chapter,
            "missing_chapters": [
                c for c in range(MIN_CHAPTER, MAX_CHAPTER + 1) if c not in per_chapter
            ],
            "data_loaded": bool(self._verses),
        }


# =============================================================================
# Loading
# =============================================================================


def _text(record: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def verse_from_record(record: Any, index: int = 0) -> Verse:
    """Build a Verse from one data-file record.

    Raises:
        VerseDataError: If the record is not an object, the chapter is not
            an integer in 1..18, the verse number is missing, or the
            translation is empty
    """
    if not isinstance(record, dict):
        raise VerseDataError(f"Record {index} is not an object", record_index=index)

    chapter = record.get("chapter", record.get("chapter_number"))
    if isinstance(chapter, bool) or not isinstance(chapter, int):
        try:
            chapter = int(str(chapter))
        except ValueError:
            raise VerseDataError(
                f"Record {index} has invalid chapter {chapter!r}", record_index=index
            ) from None
    if not MIN_CHAPTER <= chapter <= MAX_CHAPTER:
        raise VerseDataError(
            f"Record {index} chapter {chapter} outside {MIN_CHAPTER}-{MAX_CHAPTER}",
            record_index=index,
        )

    verse_number = _text(record, "verse_number")
    if not verse_number:
        verse_id = _text(record, "verse_id")
        verse_number = verse_id.partition(".")[2]
    if not verse_number:
        raise VerseDataError(f"Record {index} has no verse number", record_index=index)

    translation = _text(record, "translation", "translation_english")
    if not translation:
        raise VerseDataError(
            f"Record {index} ({chapter}.{verse_number}) has no translation",
            record_index=index,
        )

    return Verse(
        chapter_number=chapter,
        verse_number=verse_number,
        translation=translation,
        sanskrit_text=_text(record, "sanskrit", "sanskrit_text"),
        transliteration=_text(record, "transliteration"),
        word_meanings=_text(record, "word_meanings"),
        commentary=_text(record, "commentary", "purport"),
    )


def load_verses(path: Path | str) -> InMemoryVerseStore:
    """Load a verse data file into an InMemoryVerseStore.

    Args:
        path: Path to the JSON verse data file

    Returns:
        Populated store

    Raises:
        StoreUnavailableError: If the file is missing, unreadable or not a JSON array
        VerseDataError: If any record is malformed
    """
    data_path = Path(path)
    try:
        with open(data_path, encoding="utf-8") as f:
            records = json.load(f)
    except FileNotFoundError as e:
        raise StoreUnavailableError(f"Verse data file not found: {data_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise StoreUnavailableError(f"Could not read verse data {data_path}: {e}") from e

    if not isinstance(records, list):
        raise StoreUnavailableError(f"Verse data must be a JSON array: {data_path}")

    store = InMemoryVerseStore(
        verse_from_record(record, i) for i, record in enumerate(records)
    )
    logger.info("verses_loaded", path=str(data_path), count=len(store))
    return store
