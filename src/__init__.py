"""Sarthi Guidance Service.

Answers questions with guidance grounded in Bhagavad Gita verses:
- Keyword extraction from free-text questions
- Deterministic verse retrieval over an in-memory verse store
- LLM generation (Gemini or Ollama) constrained to the retrieved verses
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
