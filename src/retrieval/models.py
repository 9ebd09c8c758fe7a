"""
Verse Retrieval Models

Immutable data models for verses and retrieval results.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_LEADING_INT = re.compile(r"^\s*(\d+)")


def verse_sort_number(label: str) -> int:
    """Numeric sort key for a verse label ("47" -> 47, "16-18" -> 16).

    Labels without a leading integer sort after every numbered verse.
    """
    match = _LEADING_INT.match(label)
    if match is None:
        return 10**9
    return int(match.group(1))


@dataclass(frozen=True, slots=True)
class Verse:
    """A single numbered Bhagavad Gita verse.

    Attributes:
        chapter_number: Chapter number (1-18)
        verse_number: Opaque verse label, e.g. "47" or "16-18"
        translation: English translation (always present)
        sanskrit_text: Devanagari text
        transliteration: Roman transliteration
        word_meanings: Word-for-word synonyms
        commentary: Purport / commentary text
    """

    chapter_number: int
    verse_number: str
    translation: str
    sanskrit_text: str = ""
    transliteration: str = ""
    word_meanings: str = ""
    commentary: str = ""

    @property
    def reference(self) -> str:
        """Citation string "{chapter}.{verse}"."""
        return f"{self.chapter_number}.{self.verse_number}"

    @property
    def sort_key(self) -> tuple[int, int, str]:
        return (
            self.chapter_number,
            verse_sort_number(self.verse_number),
            self.verse_number,
        )

    @property
    def searchable_text(self) -> str:
        """Lowercased translation, commentary and word meanings."""
        return " ".join(
            (self.translation, self.commentary, self.word_meanings)
        ).lower()

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "chapter_number": self.chapter_number,
            "verse_number": self.verse_number,
            "sanskrit_text": self.sanskrit_text,
            "transliteration": self.transliteration,
            "word_meanings": self.word_meanings,
            "translation": self.translation,
            "commentary": self.commentary,
        }


@dataclass(frozen=True, slots=True)
class VerseMatch:
    """A verse selected by the matcher and the keywords that selected it."""

    verse: Verse
    matched_keywords: tuple[str, ...] = ()

    @property
    def reference(self) -> str:
        return self.verse.reference


class RetrievalStatus(str, Enum):
    """Outcome of a retrieval call that did not fail."""

    MATCHED = "matched"
    NO_KEYWORDS = "no_keywords"
    NO_MATCHES = "no_matches"


@dataclass(frozen=True, slots=True)
class RetrievalResult:
    """Ordered verses retrieved for one query.

    Attributes:
        query: The original query text
        keywords: Keywords extracted from the query
        matches: Matches ordered by (chapter, verse) ascending
        max_results: Effective result cap used for this call
    """

    query: str
    keywords: tuple[str, ...]
    matches: tuple[VerseMatch, ...] = field(default_factory=tuple)
    max_results: int = 5

    @property
    def status(self) -> RetrievalStatus:
        if not self.keywords:
            return RetrievalStatus.NO_KEYWORDS
        if not self.matches:
            return RetrievalStatus.NO_MATCHES
        return RetrievalStatus.MATCHED

    @property
    def verses(self) -> list[Verse]:
        return [m.verse for m in self.matches]

    @property
    def references(self) -> list[str]:
        return [m.reference for m in self.matches]

    def __len__(self) -> int:
        return len(self.matches)

    def __bool__(self) -> bool:
        return bool(self.matches)
