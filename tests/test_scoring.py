"""Tests for language and confidence scoring."""

import pytest

from cipherscope.models.schemas import ConfidenceLevel
from cipherscope.services.analysis.scoring import ConfidenceScorer, LanguageScorer


class TestLanguageScorer:
    """Test suite for the English-likeness score."""

    @pytest.fixture
    def scorer(self):
        return LanguageScorer()

    @pytest.fixture
    def english(self):
        return (
            "It was the best of times and it was the worst of times. There were "
            "many people in the city that had come from all over the country."
        )

    def test_empty_and_letterless_input(self, scorer):
        assert scorer.language_score("") == 0.0
        assert scorer.language_score("12345 !!") == 0.0

    def test_english_beats_gibberish(self, scorer, english):
        assert scorer.language_score(english) > scorer.language_score("xqzj vkwp qqzx jjvk")

    def test_english_beats_its_rot13(self, scorer, english):
        rot13 = english.translate(str.maketrans(
            "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
            "NOPQRSTUVWXYZABCDEFGHIJKLMnopqrstuvwxyzabcdefghijklm",
        ))
        assert scorer.language_score(english) > scorer.language_score(rot13) + 20

    def test_score_is_bounded(self, scorer, english):
        for text in (english, english * 20, "a", "THE THE THE THE"):
            assert 0.0 <= scorer.language_score(text) <= 100.0

    def test_english_word_ratio(self, scorer):
        assert scorer.english_word_ratio("the cat and the dog") == pytest.approx(0.6)
        assert scorer.english_word_ratio("") == 0.0


class TestConfidenceScorer:
    """Test suite for the shared confidence formula."""

    @pytest.fixture
    def scorer(self):
        return ConfidenceScorer()

    def test_all_signals_clamp_to_100(self, scorer):
        assert scorer.confidence(True, 4.0, 80.0, True) == 100.0

    def test_noise_penalty_clamps_to_zero(self, scorer):
        assert scorer.confidence(False, 7.9, 0.0, False) == 0.0

    def test_pattern_and_valid_text(self, scorer):
        # 40 + 30, entropy outside every band, no language bonus
        assert scorer.confidence(True, 0.5, 0.0, True) == 70.0

    def test_synergy_requires_language(self, scorer):
        # Entropy outside every band keeps both below the clamp
        with_language = scorer.confidence(True, 0.5, 45.0, True)
        without_language = scorer.confidence(True, 0.5, 35.0, True)
        assert with_language == 88.0
        assert without_language == 78.0
        assert scorer.confidence(True, 0.5, 45.0, False) == 38.0

    @pytest.mark.parametrize("valid", [True, False])
    @pytest.mark.parametrize("entropy", [0.0, 1.5, 3.0, 4.0, 6.5, 7.8, 8.0])
    @pytest.mark.parametrize("language", [0.0, 20.0, 55.0, 100.0])
    @pytest.mark.parametrize("matched", [True, False])
    def test_always_in_range(self, scorer, valid, entropy, language, matched):
        assert 0.0 <= scorer.confidence(valid, entropy, language, matched) <= 100.0

    def test_levels(self, scorer):
        assert scorer.level(70.0) is ConfidenceLevel.HIGH
        assert scorer.level(40.0) is ConfidenceLevel.MEDIUM
        assert scorer.level(39.9) is ConfidenceLevel.LOW

    def test_clamp(self, scorer):
        assert scorer.clamp(150.0) == 100.0
        assert scorer.clamp(-5.0) == 0.0

    def test_profile_of_plain_text(self, scorer):
        profile = scorer.profile("Hello there, this is a perfectly normal sentence.")
        assert profile.is_valid_text
        assert profile.entropy > 0
        assert 0.0 <= profile.confidence <= 100.0
