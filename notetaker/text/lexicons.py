"""Word tables that drive the punctuation heuristics.

The defaults are English-only and were tuned on dictated notes, not on a
broader corpus. Any table can be replaced from configuration.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

if TYPE_CHECKING:
    from ..config import NoteTakerConfig

logger = logging.getLogger(__name__)


DEFAULT_SENTENCE_ENDERS = (
    "yes", "no", "okay", "ok", "thanks", "thank you", "goodbye", "bye", "please",
)

DEFAULT_QUESTION_WORDS = (
    "who", "what", "when", "where", "why", "how", "which", "whose", "whom",
    "can", "could", "would", "should", "is", "are", "do", "does", "did",
)

DEFAULT_EXCLAMATION_WORDS = (
    "wow", "amazing", "awesome", "great", "fantastic", "excellent", "wonderful",
    "terrible", "horrible", "stop", "help", "hurry", "wait",
)


def _normalize_entries(entries: Iterable[str]) -> Tuple[str, ...]:
    normalized = []
    for entry in entries:
        words = str(entry).lower().split()
        if words:
            normalized.append(" ".join(words))
    return tuple(normalized)


@dataclass(frozen=True)
class Lexicons:
    """Closed word lists used by TextAnalyzer."""
    sentence_enders: Tuple[str, ...] = DEFAULT_SENTENCE_ENDERS
    question_words: Tuple[str, ...] = DEFAULT_QUESTION_WORDS
    exclamation_words: Tuple[str, ...] = DEFAULT_EXCLAMATION_WORDS

    def __post_init__(self):
        object.__setattr__(self, "sentence_enders", _normalize_entries(self.sentence_enders))
        object.__setattr__(self, "question_words", _normalize_entries(self.question_words))
        object.__setattr__(self, "exclamation_words", _normalize_entries(self.exclamation_words))

    @property
    def sentence_ender_phrases(self) -> Tuple[Tuple[str, ...], ...]:
        """Sentence enders split into words, longest first."""
        phrases = {tuple(entry.split()) for entry in self.sentence_enders}
        return tuple(sorted(phrases, key=len, reverse=True))

    @classmethod
    def from_config(cls, config: Optional["NoteTakerConfig"]) -> "Lexicons":
        """Build lexicons from ``text_analysis.*`` keys, falling back to defaults."""
        if config is None:
            return cls()

        lexicons = cls(
            sentence_enders=config.get("text_analysis.sentence_enders", DEFAULT_SENTENCE_ENDERS),
            question_words=config.get("text_analysis.question_words", DEFAULT_QUESTION_WORDS),
            exclamation_words=config.get("text_analysis.exclamation_words", DEFAULT_EXCLAMATION_WORDS),
        )
        logger.debug(
            f"Lexicons loaded: {len(lexicons.sentence_enders)} enders, "
            f"{len(lexicons.question_words)} question words, "
            f"{len(lexicons.exclamation_words)} exclamation words"
        )
        return lexicons


DEFAULT_LEXICONS = Lexicons()
