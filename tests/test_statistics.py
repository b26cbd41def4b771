"""Tests for the statistical primitives."""

import math

import pytest

from cipherscope.services.analysis.statistics import StatisticalAnalyzer


ENGLISH = (
    "CRYPTOGRAPHY IS THE STUDY OF SECURE COMMUNICATION IN THE PRESENCE "
    "OF ADVERSARIES. LONG BEFORE COMPUTERS EXISTED PEOPLE INVENTED CIPHERS "
    "TO HIDE MEANING FROM UNAUTHORIZED READERS. SOME METHODS RELIED ON SIMPLE "
    "SUBSTITUTION WHILE OTHERS USED TRANSPOSITION OR PERIODIC KEYS."
)


class TestEntropy:
    """Shannon entropy over characters and bytes."""

    @pytest.fixture
    def analyzer(self):
        return StatisticalAnalyzer()

    def test_empty_input_is_zero(self, analyzer):
        assert analyzer.entropy("") == 0.0
        assert analyzer.entropy(b"") == 0.0

    def test_single_symbol_is_zero(self, analyzer):
        assert analyzer.entropy("aaaa") == 0.0

    def test_two_equal_symbols_is_one_bit(self, analyzer):
        assert analyzer.entropy("ab") == pytest.approx(1.0)

    def test_uniform_bytes_reach_eight_bits(self, analyzer):
        assert analyzer.entropy(bytes(range(256))) == pytest.approx(8.0)

    def test_entropy_is_bounded_by_alphabet_size(self, analyzer):
        text = "the quick brown fox"
        assert 0 < analyzer.entropy(text) <= math.log2(len(set(text)))


class TestIndexOfCoincidence:

    @pytest.fixture
    def analyzer(self):
        return StatisticalAnalyzer()

    def test_short_input_is_zero(self, analyzer):
        assert analyzer.index_of_coincidence("") == 0.0
        assert analyzer.index_of_coincidence("A") == 0.0

    def test_repeated_letter_is_one(self, analyzer):
        assert analyzer.index_of_coincidence("AAAA") == 1.0

    def test_english_is_close_to_expected(self, analyzer):
        assert 0.055 < analyzer.index_of_coincidence(ENGLISH) < 0.08

    def test_ignores_case_and_non_letters(self, analyzer):
        assert analyzer.index_of_coincidence("a a, A!") == analyzer.index_of_coincidence("AAA")


class TestFrequencyAnalysis:

    @pytest.fixture
    def analyzer(self):
        return StatisticalAnalyzer()

    def test_counts_letters_only(self, analyzer):
        result = analyzer.frequency_analysis("Hello, 123!")
        assert result.total_letters == 5
        assert result.letter_frequency["L"] == pytest.approx(40.0)
        assert result.most_common[0] == "L"

    def test_empty_text(self, analyzer):
        result = analyzer.frequency_analysis("")
        assert result.total_letters == 0
        assert result.most_common == []
        assert result.chi_squared == 0.0

    def test_english_fits_better_than_skewed_text(self, analyzer):
        assert analyzer.chi_squared(ENGLISH) < analyzer.chi_squared("ZZZZQQQQXXXXJJJJ")

    def test_chi_squared_without_letters_is_infinite(self, analyzer):
        assert analyzer.chi_squared("123 !?") == float("inf")

    def test_bigrams_are_ranked(self, analyzer):
        result = analyzer.frequency_analysis("THE THE THE")
        assert next(iter(result.bigrams)) in ("TH", "HE")
        assert result.trigrams["THE"] == 3


class TestTextChecks:

    @pytest.fixture
    def analyzer(self):
        return StatisticalAnalyzer()

    def test_valid_text_allows_common_whitespace(self, analyzer):
        assert analyzer.is_valid_text("a\tb\nc\r\n")
        assert analyzer.is_valid_text("page\x0cbreak\x0bvertical")

    def test_replacement_character_is_invalid(self, analyzer):
        assert not analyzer.is_valid_text("bad � byte")

    def test_control_characters_are_invalid(self, analyzer):
        assert not analyzer.is_valid_text("nul\x00here")

    def test_character_classes(self, analyzer):
        classes = analyzer.character_classes("ab1 !")
        assert classes == {
            "alpha": pytest.approx(0.4),
            "digit": pytest.approx(0.2),
            "whitespace": pytest.approx(0.2),
            "symbol": pytest.approx(0.2),
        }

    def test_max_char_share(self, analyzer):
        assert analyzer.max_char_share("aab") == pytest.approx(2 / 3)
        assert analyzer.max_char_share("") == 0.0
