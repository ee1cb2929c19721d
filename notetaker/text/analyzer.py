"""Heuristic punctuation and capitalization for dictated text.

``TextAnalyzer.analyze`` runs four passes in a fixed order:

1. split the text into sentences after acknowledgement words ("okay", "thanks", ...)
2. close every sentence with ``?``, ``!`` or ``.``
3. capitalize the first letter of the text and of every sentence
4. normalize spacing around punctuation

Spacing is also normalized before the first pass so that the word tokens
seen by the sentence splitter are the same ones a second run would see.
That keeps ``analyze`` a fixed point on its own output.

Both entry points are pure: an analyzer holds nothing but its lexicons.
"""

import logging
import re
from typing import List, Optional

from .lexicons import DEFAULT_LEXICONS, Lexicons

logger = logging.getLogger(__name__)

TERMINAL_PUNCTUATION = (".", "!", "?")

_WHITESPACE_RE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT_RE = re.compile(r" +([.,!?])")
_PUNCT_BEFORE_LETTER_RE = re.compile(r"([.,!?])([^\W\d_])")


class TextAnalyzer:
    """Normalizes raw recognizer text into readable sentences."""

    def __init__(self, lexicons: Optional[Lexicons] = None):
        """Initialize text analyzer.

        Args:
            lexicons: Word tables for the heuristics. Defaults to the English tables.
        """
        self.lexicons = lexicons or DEFAULT_LEXICONS
        self._ender_phrases = self.lexicons.sentence_ender_phrases

    def analyze(self, text: str) -> str:
        """Segment, punctuate, capitalize and clean up text."""
        if not text:
            return text

        result = self.cleanup_spaces(text)
        result = self.add_punctuation(result)
        result = self.fix_capitalization(result)
        result = self.cleanup_spaces(result)
        return result

    def quick_analyze(self, text: str) -> str:
        """Collapse whitespace and capitalize the first character."""
        if not text:
            return text

        result = _WHITESPACE_RE.sub(" ", text).strip()
        if result and result[0].islower():
            result = result[0].upper() + result[1:]
        return result

    def split_sentences(self, text: str) -> List[str]:
        """Split text after every sentence-ending acknowledgement."""
        sentences = []
        current: List[str] = []

        for word in text.split():
            current.append(word)
            if self._ends_sentence(current):
                sentences.append(" ".join(current))
                current = []

        if current:
            sentences.append(" ".join(current))
        return sentences

    def add_punctuation(self, text: str) -> str:
        """Close every sentence with terminal punctuation."""
        punctuated = []
        for sentence in self.split_sentences(text):
            sentence = sentence.strip()
            if not sentence:
                continue
            punctuated.append(self.punctuate_sentence(sentence))
        return " ".join(punctuated)

    def punctuate_sentence(self, sentence: str) -> str:
        if sentence.endswith(TERMINAL_PUNCTUATION):
            return sentence
        if self.is_question(sentence):
            return sentence + "?"
        if self.is_exclamation(sentence):
            return sentence + "!"
        return sentence + "."

    def fix_capitalization(self, text: str) -> str:
        """Uppercase the first letter of the text and after each ``.``, ``!`` or ``?``."""
        chars = []
        capitalize_next = True

        for char in text:
            if capitalize_next and char.isalpha():
                chars.append(char.upper())
                capitalize_next = False
            else:
                chars.append(char)

            if char in TERMINAL_PUNCTUATION:
                capitalize_next = True

        return "".join(chars)

    def cleanup_spaces(self, text: str) -> str:
        """Normalize spacing around punctuation and trim the ends."""
        result = _WHITESPACE_RE.sub(" ", text)
        result = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", result)
        result = _PUNCT_BEFORE_LETTER_RE.sub(r"\1 \2", result)
        return result.strip()

    def is_question(self, sentence: str) -> bool:
        lowered = sentence.lower()
        return any(lowered.startswith(word + " ") for word in self.lexicons.question_words)

    def is_exclamation(self, sentence: str) -> bool:
        # Substring match: "greatly" and "waiting" count as well.
        lowered = sentence.lower()
        return any(word in lowered for word in self.lexicons.exclamation_words)

    def _ends_sentence(self, words: List[str]) -> bool:
        for phrase in self._ender_phrases:
            if len(words) < len(phrase):
                continue
            tail = words[-len(phrase):]
            if all(word.lower() == expected for word, expected in zip(tail, phrase)):
                return True
        return False


_default_analyzer = TextAnalyzer()


def analyze(text: str) -> str:
    """Module-level shortcut using the default lexicons."""
    return _default_analyzer.analyze(text)


def quick_analyze(text: str) -> str:
    """Module-level shortcut using the default lexicons."""
    return _default_analyzer.quick_analyze(text)
