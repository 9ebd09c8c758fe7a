"""
Verse Store Tests

- Verse model: reference, sort key, searchable text
- InMemoryVerseStore lookups, statistics and random picks
- Loading and validating the JSON verse data file
"""

import json
import random
from pathlib import Path
from typing import Any

import pytest

from src.core.exceptions import StoreUnavailableError, VerseDataError
from src.retrieval.models import Verse, verse_sort_number
from src.retrieval.store import (
    InMemoryVerseStore,
    VerseStoreProtocol,
    load_verses,
    verse_from_record,
)
from tests.conftest import SAMPLE_VERSES_PATH, make_verse


def _write(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# =============================================================================
# Verse model
# =============================================================================


class TestVerseModel:
    def test_reference(self) -> None:
        assert make_verse(2, "47", "duty").reference == "2.47"

    def test_merged_range_reference(self) -> None:
        assert make_verse(16, "1-3", "qualities").reference == "16.1-3"

    def test_sort_number_uses_leading_integer(self) -> None:
        assert verse_sort_number("16-18") == 16
        assert verse_sort_number("7") == 7

    def test_sort_number_without_digits_sorts_last(self) -> None:
        assert verse_sort_number("intro") > verse_sort_number("78")

    def test_searchable_text_is_lowercase_union(self) -> None:
        verse = Verse(2, "47", "Duty", word_meanings="Karmani", commentary="Yoga")

        text = verse.searchable_text

        assert "duty" in text and "karmani" in text and "yoga" in text

    def test_verse_is_immutable(self) -> None:
        verse = make_verse(2, "47", "duty")

        with pytest.raises(AttributeError):
            verse.translation = "changed"  # type: ignore[misc]


# =============================================================================
# InMemoryVerseStore
# =============================================================================


class TestInMemoryVerseStore:
    def test_implements_protocol(self, store: InMemoryVerseStore) -> None:
        assert isinstance(store, VerseStoreProtocol)

    def test_all_verses_sorted(self, store: InMemoryVerseStore) -> None:
        refs = [v.reference for v in store.all_verses()]

        assert refs == ["2.14", "2.47", "2.56", "4.10", "6.35", "16.1-3", "18.66"]

    def test_len(self, store: InMemoryVerseStore) -> None:
        assert len(store) == 7

    def test_get_verse_accepts_int_or_str(self, store: InMemoryVerseStore) -> None:
        assert store.get_verse(2, 47) is store.get_verse(2, "47")
        assert store.get_verse(2, 47) is not None

    def test_get_verse_missing(self, store: InMemoryVerseStore) -> None:
        assert store.get_verse(3, "1") is None

    def test_get_by_reference(self, store: InMemoryVerseStore) -> None:
        verse = store.get_by_reference("16.1-3")

        assert verse is not None
        assert verse.chapter_number == 16

    @pytest.mark.parametrize("reference", ["", "247", "x.47", "2."])
    def test_get_by_reference_invalid(self, store: InMemoryVerseStore, reference: str) -> None:
        assert store.get_by_reference(reference) is None

    def test_verses_in_chapter(self, store: InMemoryVerseStore) -> None:
        assert [v.verse_number for v in store.verses_in_chapter(2)] == ["14", "47", "56"]

    def test_duplicate_verse_rejected(self) -> None:
        with pytest.raises(VerseDataError, match="Duplicate"):
            InMemoryVerseStore([make_verse(2, "47", "a"), make_verse(2, "47", "b")])

    def test_stats(self, store: InMemoryVerseStore) -> None:
        stats = store.stats()

        assert stats["total_verses"] == 7
        assert stats["chapters"] == [2, 4, 6, 16, 18]
        assert stats["verses_per_chapter"][2] == 3
        assert 1 in stats["missing_chapters"]
        assert 2 not in stats["missing_chapters"]
        assert stats["data_loaded"] is True

    def test_empty_store_stats(self) -> None:
        stats = InMemoryVerseStore([]).stats()

        assert stats["data_loaded"] is False
        assert stats["missing_chapters"] == list(range(1, 19))

    def test_chapters(self, store: InMemoryVerseStore) -> None:
        assert store.chapters() == [2, 4, 6, 16, 18]

    def test_random_verse(self, store: InMemoryVerseStore) -> None:
        first = store.random_verse(random.Random(0))

        assert first in store.all_verses()
        assert store.random_verse(random.Random(0)) == first

    def test_random_verse_empty_store(self) -> None:
        assert InMemoryVerseStore([]).random_verse() is None


# =============================================================================
# Loading
# =============================================================================


class TestLoadVerses:
    def test_loads_sample_data(self) -> None:
        store = load_verses(SAMPLE_VERSES_PATH)

        assert len(store) > 0
        assert store.get_by_reference("2.47") is not None

    def test_loads_records(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "verses.json",
            [
                {
                    "verse_id": "2.47",
                    "chapter": 2,
                    "verse_number": "47",
                    "sanskrit": "karmany evadhikaras te",
                    "word_meanings": "karmani - in duties",
                    "translation": "Perform your duty.",
                    "commentary": "Karma yoga.",
                }
            ],
        )

        verse = load_verses(path).get_verse(2, "47")

        assert verse is not None
        assert verse.sanskrit_text == "karmany evadhikaras te"
        assert verse.word_meanings == "karmani - in duties"
        assert verse.commentary == "Karma yoga."

    def test_missing_file_is_store_unavailable(self, tmp_path: Path) -> None:
        with pytest.raises(StoreUnavailableError, match="not found"):
            load_verses(tmp_path / "missing.json")

    def test_invalid_json_is_store_unavailable(self, tmp_path: Path) -> None:
        path = tmp_path / "verses.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(StoreUnavailableError):
            load_verses(path)

    def test_non_array_is_store_unavailable(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "verses.json", {"verses": []})

        with pytest.raises(StoreUnavailableError):
            load_verses(path)


class TestVerseFromRecord:
    def test_integer_verse_number_becomes_label(self) -> None:
        verse = verse_from_record({"chapter": 2, "verse_number": 47, "translation": "duty"})

        assert verse.verse_number == "47"

    def test_verse_number_from_verse_id(self) -> None:
        verse = verse_from_record({"verse_id": "16.1-3", "chapter": 16, "translation": "qualities"})

        assert verse.verse_number == "1-3"

    def test_database_column_names_accepted(self) -> None:
        verse = verse_from_record(
            {
                "chapter_number": "3",
                "verse_number": "19",
                "translation_english": "Work without attachment.",
                "purport": "Detached action.",
            }
        )

        assert verse.chapter_number == 3
        assert verse.commentary == "Detached action."

    @pytest.mark.parametrize("chapter", [0, 19, "x", None, True])
    def test_invalid_chapter_rejected(self, chapter: Any) -> None:
        with pytest.raises(VerseDataError):
            verse_from_record({"chapter": chapter, "verse_number": "1", "translation": "t"}, 4)

    def test_missing_translation_rejected(self) -> None:
        with pytest.raises(VerseDataError) as exc_info:
            verse_from_record({"chapter": 2, "verse_number": "1", "translation": "  "}, 7)

        assert exc_info.value.record_index == 7

    def test_missing_verse_number_rejected(self) -> None:
        with pytest.raises(VerseDataError):
            verse_from_record({"chapter": 2, "translation": "t"})

    def test_non_object_rejected(self) -> None:
        with pytest.raises(VerseDataError):
            verse_from_record(["2.47"])
