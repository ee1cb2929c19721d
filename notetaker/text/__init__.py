"""Text normalization for dictated transcripts."""

from .lexicons import Lexicons, DEFAULT_LEXICONS
from .analyzer import TextAnalyzer, analyze, quick_analyze

__all__ = [
    "Lexicons",
    "DEFAULT_LEXICONS",
    "TextAnalyzer",
    "analyze",
    "quick_analyze",
]
