"""
Shared fixtures: a small verse corpus and stores built from it.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from src.retrieval.models import Verse
from src.retrieval.store import InMemoryVerseStore

SAMPLE_VERSES_PATH = Path(__file__).resolve().parent.parent / "data" / "verses.json"


def make_verse(
    chapter: int,
    verse: str,
    translation: str,
    commentary: str = "",
    word_meanings: str = "",
) -> Verse:
    return Verse(
        chapter_number=chapter,
        verse_number=verse,
        translation=translation,
        commentary=commentary,
        word_meanings=word_meanings,
    )


class FailingVerseStore:
    """Store whose backing service is down."""

    def all_verses(self) -> Sequence[Verse]:
        raise ConnectionRefusedError("verse database unreachable")


@pytest.fixture
def verses() -> list[Verse]:
    """Corpus deliberately listed out of (chapter, verse) order."""
    return [
        make_verse(
            6,
            "35",
            "The restless mind is difficult to control, but it is restrained by practice.",
            "Steady practice and detachment bring the mind under control.",
        ),
        make_verse(
            2,
            "47",
            "You have a right to perform your duty, but never to the fruits of your actions.",
            "This verse is the heart of karma yoga.",
            "karmani - in prescribed duties; phalesu - in the fruits",
        ),
        make_verse(
            2,
            "56",
            "One who is free from attachment, fear and anger is a sage of steady mind.",
            "Fear arises from attachment.",
        ),
        make_verse(
            16,
            "1-3",
            "Fearlessness, purity of heart and self-control are divine qualities.",
        ),
        make_verse(
            2,
            "14",
            "Pleasure and pain come and go; learn to endure them.",
            "Equanimity grows through steady duty.",
        ),
        make_verse(
            4,
            "10",
            "Freed from attachment, fear and anger, many were purified by knowledge.",
        ),
        make_verse(
            18,
            "66",
            "Abandon all varieties of duty and surrender unto Me; do not fear.",
            "The one who surrenders need not fear the reactions of past karma.",
        ),
    ]


@pytest.fixture
def store(verses: list[Verse]) -> InMemoryVerseStore:
    return InMemoryVerseStore(verses)


@pytest.fixture
def failing_store() -> FailingVerseStore:
    return FailingVerseStore()


@pytest.fixture
def stop_words() -> frozenset[str]:
    return frozenset(
        {"the", "how", "can", "what", "does", "about", "with", "and", "gita", "this", "that"}
    )
