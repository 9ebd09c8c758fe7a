"""
Keyword Extractor Tests

- Lowercasing, punctuation stripping and whitespace splitting
- Short-token and stop-word removal
- Order-preserving deduplication and the max_keywords cap
- Stop words loaded from YAML configuration
"""

from pathlib import Path

import pytest

from src.core.exceptions import ConfigurationError
from src.retrieval.keywords import (
    DEFAULT_STOP_WORDS_PATH,
    KeywordExtractor,
    KeywordExtractorConfig,
    default_stop_words,
    extract_keywords,
    load_stop_words,
)


@pytest.fixture
def extractor(stop_words: frozenset[str]) -> KeywordExtractor:
    return KeywordExtractor(KeywordExtractorConfig(stop_words=stop_words))


# =============================================================================
# Extraction pipeline
# =============================================================================


class TestKeywordExtraction:
    """Tests for KeywordExtractor.extract()."""

    def test_inner_peace_question(self) -> None:
        """Question words and auxiliaries drop out, content words stay in order."""
        assert extract_keywords("How can I find inner peace?") == ["find", "inner", "peace"]

    def test_whitespace_only_query_yields_nothing(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("   ") == []
        assert extractor.extract("") == []

    def test_only_stop_words_yields_nothing(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("How can the what does") == []

    def test_tokens_of_two_characters_or_fewer_dropped(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("I am ok, go on!") == []

    def test_three_character_tokens_kept(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("ego joy") == ["ego", "joy"]

    def test_repeated_words_kept_once_at_first_position(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("fear anger FEAR Fear courage anger") == [
            "fear",
            "anger",
            "courage",
        ]

    def test_punctuation_splits_tokens(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("duty,karma;dharma...yoga") == ["duty", "karma", "dharma", "yoga"]

    def test_output_is_lowercase(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("KARMA Dharma") == ["karma", "dharma"]

    def test_truncates_to_max_keywords(self, extractor: KeywordExtractor) -> None:
        keywords = extractor.extract("anger desire greed pride envy delusion illusion")

        assert keywords == ["anger", "desire", "greed", "pride", "envy"]

    def test_custom_max_keywords(self, stop_words: frozenset[str]) -> None:
        extractor = KeywordExtractor(KeywordExtractorConfig(stop_words=stop_words, max_keywords=2))

        assert extractor.extract("anger desire greed") == ["anger", "desire"]

    def test_digits_are_kept(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("verse 247 chapter") == ["verse", "247", "chapter"]

    def test_unicode_input_does_not_crash(self, extractor: KeywordExtractor) -> None:
        """Non-ASCII characters act as separators."""
        keywords = extractor.extract("¿Qué es el karma? — ध्यान “peace”")

        assert keywords == ["karma", "peace"]

    def test_unicode_punctuation_stripped(self, extractor: KeywordExtractor) -> None:
        assert extractor.extract("«detachment»…equanimity") == ["detachment", "equanimity"]

    def test_extraction_is_deterministic(self, extractor: KeywordExtractor) -> None:
        query = "What does the Gita say about karma and duty?"

        assert extractor.extract(query) == extractor.extract(query)


# =============================================================================
# Configuration
# =============================================================================


class TestKeywordExtractorConfig:
    """Tests for stop-word loading and config validation."""

    def test_bundled_stop_words_file_exists(self) -> None:
        assert DEFAULT_STOP_WORDS_PATH.exists()

    def test_bundled_stop_words_cover_question_words(self) -> None:
        words = default_stop_words()

        for word in ("how", "what", "can", "the", "does", "about"):
            assert word in words

    def test_bundled_stop_words_keep_content_words(self) -> None:
        words = default_stop_words()

        for word in ("find", "peace", "karma", "fear"):
            assert word not in words

    def test_yaml_boolean_words_stay_strings(self) -> None:
        """'off' must not be read as the boolean False."""
        words = default_stop_words()

        assert "off" in words
        assert "false" not in words

    def test_default_config_uses_bundled_stop_words(self) -> None:
        config = KeywordExtractorConfig()

        assert config.stop_words == default_stop_words()
        assert config.max_keywords == 5
        assert config.min_keyword_length == 3

    def test_load_stop_words_merges_categories(self, tmp_path: Path) -> None:
        path = tmp_path / "stop.yaml"
        path.write_text("articles:\n  - The\n  - an\nfiller:\n  - very\nempty:\n", encoding="utf-8")

        assert load_stop_words(path) == frozenset({"the", "an", "very"})

    def test_load_stop_words_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_stop_words(tmp_path / "missing.yaml")

    def test_load_stop_words_rejects_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "stop.yaml"
        path.write_text("- the\n- a\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_stop_words(path)

    def test_load_stop_words_rejects_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "stop.yaml"
        path.write_text("articles: [the, a\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_stop_words(path)

    def test_negative_max_keywords_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            KeywordExtractorConfig(stop_words=frozenset(), max_keywords=-1)

    def test_zero_min_length_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            KeywordExtractorConfig(stop_words=frozenset(), min_keyword_length=0)
