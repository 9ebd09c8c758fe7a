"""Guidance composition: verse-grounded prompts and LLM generation."""

from src.guidance.composer import GuidanceComposer, GuidanceResult

__all__ = ["GuidanceComposer", "GuidanceResult"]
