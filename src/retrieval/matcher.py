"""
Verse Matcher

Selects verses whose text contains any of the query keywords.

Matching rule: a verse matches when ANY keyword is a case-insensitive
substring of its translation, commentary or word meanings. Results are
ordered by (chapter, verse) ascending and truncated; no relevance scoring
is performed. One full scan per call.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from src.retrieval.models import Verse, VerseMatch

# =============================================================================
# Module Constants
# =============================================================================

DEFAULT_MAX_RESULTS: int = 5
HARD_MAX_RESULTS: int = 50


class VerseMatcher:
    """Stateless keyword-substring matcher over a verse snapshot.

    Attributes:
        hard_ceiling: Upper bound applied to every max_results value
    """

    def __init__(self, hard_ceiling: int = HARD_MAX_RESULTS) -> None:
        if hard_ceiling < 1:
            raise ValueError("hard_ceiling must be a positive integer")
        self.hard_ceiling = hard_ceiling

    def effective_limit(self, max_results: int) -> int:
        """Clamp max_results to the hard ceiling.

        Raises:
            ValueError: If max_results is not a positive integer
        """
        if max_results < 1:
            raise ValueError(f"max_results must be a positive integer, got {max_results}")
        return min(max_results, self.hard_ceiling)

    def match(
        self,
        keywords: Sequence[str],
        verses: Iterable[Verse],
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> tuple[VerseMatch, ...]:
        """Return matching verses in (chapter, verse) order.

        Args:
            keywords: Ordered keywords from the extractor
            verses: Verse snapshot to scan
            max_results: Maximum number of matches returned

        Returns:
            Up to min(max_results, hard_ceiling) matches; empty when
            keywords is empty
        """
        limit = self.effective_limit(max_results)
        needles = [k.lower() for k in keywords if k]
        if not needles:
            return ()

        matches: list[VerseMatch] = []
        for verse in verses:
            text = verse.searchable_text
            hits = tuple(k for k in needles if k in text)
            if hits:
                matches.append(VerseMatch(verse=verse, matched_keywords=hits))

        matches.sort(key=lambda m: m.verse.sort_key)
        return tuple(matches[:limit])
