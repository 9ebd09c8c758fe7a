"""
Keyword Extractor

Turns a free-text question into a short, ordered list of search keywords
used to pick grounding verses.

Pipeline (pure function of the query and KeywordExtractorConfig):
1. lowercase
2. every character outside [a-z0-9] and whitespace becomes a separator
3. split on whitespace runs
4. drop tokens shorter than min_keyword_length
5. drop stop words
6. deduplicate, keeping first occurrence
7. keep the first max_keywords

Stop words are static configuration loaded from config/stop_words.yaml.

Pattern: Configuration-Driven Filter
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

import yaml  # type: ignore[import-untyped]

from src.core.exceptions import ConfigurationError

# =============================================================================
# Constants
# =============================================================================

DEFAULT_STOP_WORDS_PATH = Path(__file__).parent.parent.parent / "config" / "stop_words.yaml"
DEFAULT_MAX_KEYWORDS: int = 5
DEFAULT_MIN_KEYWORD_LENGTH: int = 3

# Anything that is not an ASCII letter, digit or whitespace separates tokens
REGEX_SEPARATOR = re.compile(r"[^a-z0-9\s]")


# =============================================================================
# Configuration
# =============================================================================


def load_stop_words(path: Path | str | None = None) -> frozenset[str]:
    """Load the stop-word set from a YAML file of categorized word lists.

    Args:
        path: YAML file path. Uses config/stop_words.yaml if None.

    Returns:
        Lowercased union of every category's words.

    Raises:
        ConfigurationError: If the file is missing or not a mapping of lists
    """
    config_path = Path(path) if path is not None else DEFAULT_STOP_WORDS_PATH
    if not config_path.exists():
        msg = f"Stop word file not found: {config_path}"
        raise ConfigurationError(msg)

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in stop word file: {e}"
        raise ConfigurationError(msg) from e

    if not isinstance(config, dict):
        msg = f"Stop word file must map categories to word lists: {config_path}"
        raise ConfigurationError(msg)

    words: set[str] = set()
    for category, terms in config.items():
        if terms is None:
            continue
        if not isinstance(terms, list):
            msg = f"Stop word category '{category}' must be a list"
            raise ConfigurationError(msg)
        # Unquoted yes/no/off parse as booleans in YAML; coerce to str
        words.update(str(t).strip().lower() for t in terms)
    return frozenset(w for w in words if w)


@lru_cache(maxsize=1)
def default_stop_words() -> frozenset[str]:
    """Stop words from the bundled config, read once per process."""
    return load_stop_words()


@dataclass(frozen=True)
class KeywordExtractorConfig:
    """Configuration for KeywordExtractor.

    Attributes:
        stop_words: Words never used as keywords
        max_keywords: Maximum number of keywords returned (K)
        min_keyword_length: Shortest token kept (tokens of length <= 2 dropped by default)
    """

    stop_words: frozenset[str] = field(default_factory=default_stop_words)
    max_keywords: int = DEFAULT_MAX_KEYWORDS
    min_keyword_length: int = DEFAULT_MIN_KEYWORD_LENGTH

    def __post_init__(self) -> None:
        if self.max_keywords < 0:
            raise ConfigurationError("max_keywords must be >= 0")
        if self.min_keyword_length < 1:
            raise ConfigurationError("min_keyword_length must be >= 1")


# =============================================================================
# Extractor
# =============================================================================


class KeywordExtractor:
    """Extracts search keywords from a free-text query.

    Usage:
        extractor = KeywordExtractor()
        extractor.extract("How can I find inner peace?")
        # ["find", "inner", "peace"]
    """

    def __init__(self, config: KeywordExtractorConfig | None = None) -> None:
        self._config = config or KeywordExtractorConfig()

    @property
    def config(self) -> KeywordExtractorConfig:
        return self._config

    def tokenize(self, text: str) -> list[str]:
        """Lowercase, strip punctuation and split into raw tokens."""
        return REGEX_SEPARATOR.sub(" ", text.lower()).split()

    def extract(self, query: str) -> list[str]:
        """Extract up to max_keywords keywords from a query.

        Args:
            query: Raw query text; blank input yields []

        Returns:
            Ordered, deduplicated lowercase keywords
        """
        config = self._config
        keywords: list[str] = []
        seen: set[str] = set()

        for token in self.tokenize(query):
            if len(keywords) >= config.max_keywords:
                break
            if len(token) < config.min_keyword_length:
                continue
            if token in config.stop_words or token in seen:
                continue
            seen.add(token)
            keywords.append(token)

        return keywords


def extract_keywords(
    query: str,
    config: KeywordExtractorConfig | None = None,
) -> list[str]:
    """Module-level convenience wrapper around KeywordExtractor.extract()."""
    return KeywordExtractor(config).extract(query)
