"""
Verse retrieval library.

Keyword extraction and keyword-substring verse matching used to pick the
Bhagavad Gita verses that ground generated guidance.
"""

from src.retrieval.keywords import (
    KeywordExtractor,
    KeywordExtractorConfig,
    extract_keywords,
    load_stop_words,
)
from src.retrieval.matcher import DEFAULT_MAX_RESULTS, HARD_MAX_RESULTS, VerseMatcher
from src.retrieval.models import RetrievalResult, RetrievalStatus, Verse, VerseMatch
from src.retrieval.retriever import VerseRetriever
from src.retrieval.store import InMemoryVerseStore, VerseStoreProtocol, load_verses

__all__ = [
    "DEFAULT_MAX_RESULTS",
    "HARD_MAX_RESULTS",
    "InMemoryVerseStore",
    "KeywordExtractor",
    "KeywordExtractorConfig",
    "RetrievalResult",
    "RetrievalStatus",
    "Verse",
    "VerseMatch",
    "VerseMatcher",
    "VerseRetriever",
    "VerseStoreProtocol",
    "extract_keywords",
    "load_stop_words",
    "load_verses",
]
