"""
Verse Retriever

Public entry point of the retrieval library: query in, ordered verses out.

Outcomes:
- InvalidQueryError: blank query (caller maps to HTTP 400)
- StoreUnavailableError: store unreadable or empty (caller maps to HTTP 503)
- RetrievalResult with status NO_KEYWORDS / NO_MATCHES / MATCHED

The retriever never logs-and-swallows; every failure propagates typed.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.core.exceptions import InvalidQueryError, StoreUnavailableError
from src.core.logging import get_logger
from src.core.tracing import get_tracer
from src.retrieval.keywords import KeywordExtractor
from src.retrieval.matcher import DEFAULT_MAX_RESULTS, VerseMatcher
from src.retrieval.models import RetrievalResult, Verse
from src.retrieval.store import VerseStoreProtocol

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class VerseRetriever:
    """Keyword-driven verse retrieval over an injected verse store.

    Usage:
        retriever = VerseRetriever(store)
        result = retriever.retrieve_verses("How can I overcome fear?", 5)
        result.references  # ["2.56", "4.10", ...]
    """

    def __init__(
        self,
        store: VerseStoreProtocol,
        extractor: KeywordExtractor | None = None,
        matcher: VerseMatcher | None = None,
        default_max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        self._store = store
        self._extractor = extractor or KeywordExtractor()
        self._matcher = matcher or VerseMatcher()
        self._default_limit = self._matcher.effective_limit(default_max_results)

    @property
    def store(self) -> VerseStoreProtocol:
        return self._store

    @property
    def hard_ceiling(self) -> int:
        return self._matcher.hard_ceiling

    @property
    def default_max_results(self) -> int:
        """Limit used when a caller passes no max_results."""
        return self._default_limit

    def check_limit(self, max_results: int | None) -> int:
        """Resolve a requested limit against the default and the ceiling.

        Unlike retrieve_verses, values above the ceiling are rejected
        rather than clamped, so request validation can report them.

        Raises:
            ValueError: If max_results is below 1 or above the ceiling
        """
        if max_results is None:
            return self._default_limit
        if max_results > self.hard_ceiling:
            raise ValueError(
                f"max_results must be at most {self.hard_ceiling}, got {max_results}"
            )
        return self._matcher.effective_limit(max_results)

    def extract_keywords(self, query: str) -> list[str]:
        """Keywords the retriever would search for (diagnostics helper)."""
        return self._extractor.extract(query)

    def _snapshot(self) -> Sequence[Verse]:
        try:
            verses = self._store.all_verses()
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Verse store could not be read: {e}") from e
        if not verses:
            raise StoreUnavailableError("Verse store holds no verses")
        return verses

    def retrieve_verses(
        self,
        query: str,
        max_results: int | None = None,
    ) -> RetrievalResult:
        """Retrieve verses relevant to a query.

        Args:
            query: Free-text question
            max_results: Result cap, clamped to the matcher's hard ceiling;
                None uses default_max_results

        Returns:
            RetrievalResult ordered by (chapter, verse)

        Raises:
            InvalidQueryError: If query is empty or whitespace-only
            StoreUnavailableError: If the store cannot be read or is empty
            ValueError: If max_results is not positive
        """
        if query is None or not query.strip():
            raise InvalidQueryError("Query must not be empty")
        limit = (
            self._default_limit
            if max_results is None
            else self._matcher.effective_limit(max_results)
        )

        with tracer.start_as_current_span("verse_retrieval") as span:
            verses = self._snapshot()
            keywords = self._extractor.extract(query)
            matches = self._matcher.match(keywords, verses, limit)

            result = RetrievalResult(
                query=query,
                keywords=tuple(keywords),
                matches=matches,
                max_results=limit,
            )
            span.set_attribute("retrieval.keywords", len(keywords))
            span.set_attribute("retrieval.matches", len(matches))
            span.set_attribute("retrieval.status", result.status.value)

        logger.debug(
            "verses_retrieved",
            keywords=list(keywords),
            references=result.references,
            status=result.status.value,
        )
        return result
