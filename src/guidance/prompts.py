"""
Guidance prompt construction.

Formats retrieved verses as labeled context blocks and wraps them with the
user's question. Result size is bounded by the retriever's max_results and
by commentary truncation.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.retrieval.models import Verse

COMMENTARY_MAX_CHARS: int = 600
VERSE_SEPARATOR: str = "\n\n---\n\n"

GUIDANCE_SYSTEM_PROMPT: str = """
Summarize and explain ONLY the teachings found in the verses provided.

Rules:
- Cite verses as chapter.verse
- Do not add new interpretations
- Be concise and neutral
""".strip()

SPIRITUAL_GUIDE_SYSTEM_PROMPT: str = """
You are a wise spiritual guide deeply versed in the teachings of the Bhagavad Gita.
Provide thoughtful, compassionate guidance based on its wisdom.

Key principles to follow:
1. Draw upon the core teachings of the Bhagavad Gita: dharma (righteous duty),
   karma yoga, bhakti yoga, jnana yoga, the nature of the self (atman),
   detachment from results, equanimity and inner peace.
2. Offer practical wisdom that applies to modern life.
3. Be compassionate, non-judgmental and encouraging.
4. Reference specific verses or concepts when relevant.
5. Encourage self-reflection and inner growth.
6. Respect all spiritual paths while staying true to the Gita's teachings.
""".strip()

FALLBACK_GUIDANCE: str = (
    "I found relevant verses for your question, but I'm having trouble "
    "generating a detailed response right now. Please review the verses "
    "below for guidance."
)


def truncate(text: str, max_chars: int) -> str:
    """Cut text to max_chars on a word boundary, appending an ellipsis."""
    text = text.strip()
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    cut = text[:max_chars].rsplit(" ", 1)[0].rstrip(" ,;:.")
    return f"{cut}..."


def format_verse_block(verse: Verse, commentary_max_chars: int = COMMENTARY_MAX_CHARS) -> str:
    lines = [f"[BHAGAVAD GITA {verse.reference}]", verse.translation]
    commentary = truncate(verse.commentary, commentary_max_chars)
    if commentary:
        lines.append(commentary)
    return "\n".join(lines)


def build_verse_context(
    verses: Sequence[Verse],
    commentary_max_chars: int = COMMENTARY_MAX_CHARS,
) -> str:
    return VERSE_SEPARATOR.join(
        format_verse_block(v, commentary_max_chars) for v in verses
    )


def build_guidance_prompt(
    query: str,
    verses: Sequence[Verse],
    commentary_max_chars: int = COMMENTARY_MAX_CHARS,
) -> str:
    """Prompt sent to the LLM: verse context followed by the question."""
    context = build_verse_context(verses, commentary_max_chars)
    return f"Verses:\n{context}\n\nQuestion: {query.strip()}"


def build_question_prompt(question: str, context: str | None = None) -> str:
    """Prompt for free-form questions, optionally prefixed by user context."""
    question = question.strip()
    if context and context.strip():
        return f"Context: {context.strip()}\n\nQuestion: {question}"
    return question
