"""Unit tests for TextAnalyzer."""

import pytest

from notetaker.text import Lexicons, TextAnalyzer, analyze, quick_analyze


@pytest.mark.unit
class TestAnalyze:
    """Test cases for the full normalization pipeline."""

    def test_default_punctuation(self):
        assert analyze("the sky is blue") == "The sky is blue."

    def test_question_heuristic(self):
        assert analyze("what time is it") == "What time is it?"
        assert analyze("can you help me") == "Can you help me?"

    def test_exclamation_heuristic(self):
        assert analyze("that is amazing") == "That is amazing!"

    def test_exclamation_matches_inside_words(self):
        assert analyze("i am waiting") == "I am waiting!"

    def test_empty_input(self):
        assert analyze("") == ""

    def test_splits_after_sentence_enders(self):
        assert analyze("okay let's go thanks see you") == "Okay. Let's go thanks. See you."

    def test_multi_word_sentence_ender(self):
        assert analyze("yes what time is it thank you") == "Yes. What time is it thank you?"

    def test_collapses_whitespace(self):
        assert analyze("  hello   world  ") == "Hello world."

    def test_removes_space_before_punctuation(self):
        assert analyze("hello , world") == "Hello, world."

    def test_keeps_existing_terminal_punctuation(self):
        assert analyze("The sky is blue.") == "The sky is blue."
        assert analyze("is it raining?") == "Is it raining?"

    def test_capitalizes_after_terminal_punctuation(self):
        assert analyze("hello.world") == "Hello. World."

    def test_capitalization_skips_digits(self):
        assert analyze("yes 5 apples") == "Yes. 5 Apples."

    @pytest.mark.parametrize("text", [
        "the sky is blue",
        "what time is it",
        "that is amazing",
        "okay let's go thanks see you",
        "yes what time is it thank you",
        "yes no",
        "no",
        "ok.",
        "wow yes",
        "hello , world",
        "hello.world",
        "hello,",
        "  spaced   out   words  ",
        "yes 5 apples",
        "e.g. this one",
        "Already Capitalized Sentence!",
        "please stop thank you okay",
        "where is it ? i don't know",
        "3.5 percent growth",
    ])
    def test_fixed_point(self, text):
        once = analyze(text)
        assert analyze(once) == once

    def test_deterministic(self):
        analyzer = TextAnalyzer()
        assert analyzer.analyze("thanks bye") == analyzer.analyze("thanks bye")


@pytest.mark.unit
class TestQuickAnalyze:
    """Test cases for the lightweight normalization."""

    def test_collapses_whitespace_and_capitalizes(self):
        assert quick_analyze("  hello   there ") == "Hello there"

    def test_does_not_punctuate(self):
        assert quick_analyze("what time is it") == "What time is it"

    def test_empty_input(self):
        assert quick_analyze("") == ""

    def test_leading_digit_untouched(self):
        assert quick_analyze("3 apples") == "3 apples"


@pytest.mark.unit
class TestLexicons:
    """Test cases for swappable lexicons."""

    def test_custom_sentence_enders(self):
        analyzer = TextAnalyzer(Lexicons(sentence_enders=("over",)))
        assert analyzer.analyze("copy that over roger") == "Copy that over. Roger."

    def test_entries_are_normalized(self):
        lexicons = Lexicons(sentence_enders=("  Thank   You ", "OK"))
        assert lexicons.sentence_enders == ("thank you", "ok")
        assert lexicons.sentence_ender_phrases == (("thank", "you"), ("ok",))

    def test_from_config_overrides(self, config):
        config.set("text_analysis.question_words", ["shall"])
        lexicons = Lexicons.from_config(config)

        assert lexicons.question_words == ("shall",)
        analyzer = TextAnalyzer(lexicons)
        assert analyzer.analyze("shall we go") == "Shall we go?"
        assert analyzer.analyze("what time is it") == "What time is it."

    def test_from_config_none_uses_defaults(self):
        assert Lexicons.from_config(None) == Lexicons()
