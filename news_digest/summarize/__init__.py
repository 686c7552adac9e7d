"""Summary acquisition: provider calls with retry, plus extractive fallback."""

from .extractive import extract_leading_sentences
from .summarizer import Summarizer

__all__ = ["Summarizer", "extract_leading_sentences"]
