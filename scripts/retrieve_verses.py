#!/usr/bin/env python3
"""
Verse Retrieval Diagnostics

Shows which keywords a question produces and which verses they select,
without calling the LLM. With --stats, prints verse data coverage instead.

Usage:
    python scripts/retrieve_verses.py "How can I overcome fear?" [--max-results N]
    python scripts/retrieve_verses.py --stats [--verses data/verses.json]
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.core.exceptions import SarthiServiceError  # noqa: E402
from src.retrieval import VerseRetriever, load_verses  # noqa: E402

DEFAULT_VERSES_PATH = Path(__file__).resolve().parent.parent / "data" / "verses.json"


def positive_int(value: str) -> int:
    """argparse type for --max-results."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def print_stats(verses_path: Path) -> int:
    store = load_verses(verses_path)
    stats = store.stats()
    print("=" * 70)
    print("VERSE DATA")
    print("=" * 70)
    print(f"File: {verses_path}")
    print(f"Total verses: {stats['total_verses']}")
    for chapter, count in stats["verses_per_chapter"].items():
        print(f"  Chapter {chapter:>2}: {count} verses")
    if stats["missing_chapters"]:
        print(f"⚠️  Missing chapters: {stats['missing_chapters']}")
        return 1
    print("✅ All 18 chapters present")
    return 0


def print_retrieval(verses_path: Path, query: str, max_results: int | None) -> int:
    retriever = VerseRetriever(load_verses(verses_path))
    result = retriever.retrieve_verses(query, max_results)

    print(f"Query:    {query}")
    print(f"Keywords: {', '.join(result.keywords) or '(none)'}")
    print(f"Status:   {result.status.value}")
    print()
    for match in result.matches:
        print(f"[{match.reference}] matched: {', '.join(match.matched_keywords)}")
        print(f"    {match.verse.translation}")
    return 0 if result else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect keyword verse retrieval")
    parser.add_argument("query", nargs="?", help="Question to retrieve verses for")
    parser.add_argument("--verses", type=Path, default=DEFAULT_VERSES_PATH, help="Verse data JSON file")
    parser.add_argument(
        "--max-results",
        type=positive_int,
        default=None,
        help="Maximum verses returned (default 5, at most 50)",
    )
    parser.add_argument("--stats", action="store_true", help="Print verse data statistics")
    args = parser.parse_args()

    try:
        if args.stats:
            return print_stats(args.verses)
        if not args.query:
            parser.error("a query is required unless --stats is given")
        return print_retrieval(args.verses, args.query, args.max_results)
    except SarthiServiceError as e:
        print(f"❌ {type(e).__name__}: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
