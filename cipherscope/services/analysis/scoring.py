import re
from typing import ClassVar

from cipherscope.models.schemas import ConfidenceLevel, ScoreProfile
from cipherscope.services.analysis.statistics import StatisticalAnalyzer


class LanguageScorer:
    """
    Scores how much a text resembles natural English on a 0-100 scale.

    Combines four normalized sub-scores:
    - Chi-squared fit of letter frequencies (weight 0.25)
    - Common-word hits, favouring longer words (weight 0.35)
    - Common bigram/trigram density (weight 0.25)
    - Structural ratios: spaces, vowels, mean word length (weight 0.15)
    """

    FREQUENCY_WEIGHT: ClassVar[float] = 0.25
    WORD_WEIGHT: ClassVar[float] = 0.35
    NGRAM_WEIGHT: ClassVar[float] = 0.25
    STRUCTURE_WEIGHT: ClassVar[float] = 0.15

    WORD_CAP: ClassVar[float] = 60.0
    NGRAM_CAP: ClassVar[float] = 40.0
    STRUCTURE_MAX: ClassVar[float] = 35.0

    COMMON_WORDS: ClassVar[frozenset[str]] = frozenset({
        "THE", "AND", "TO", "OF", "A", "IN", "IS", "IT", "YOU", "THAT",
        "HE", "WAS", "FOR", "ON", "ARE", "AS", "WITH", "HIS", "THEY", "I",
        "AT", "BE", "THIS", "HAVE", "FROM", "OR", "ONE", "HAD", "BY", "WORD",
        "BUT", "NOT", "WHAT", "ALL", "WERE", "WE", "WHEN", "YOUR", "CAN", "SAID",
        "EACH", "WHICH", "WILL", "HOW", "THERE", "PEOPLE", "IF", "UP", "OUT", "MANY",
        "TIME", "THEM", "THESE", "SO", "SOME", "HER", "WOULD", "MAKE", "LIKE", "INTO",
        "HIM", "HAS", "TWO",
    })

    COMMON_BIGRAMS: ClassVar[dict[str, float]] = {
        "TH": 2.71, "HE": 2.33, "IN": 2.03, "ER": 1.78, "AN": 1.61, "RE": 1.41,
        "ED": 1.17, "ND": 1.07, "ON": 1.05, "EN": 1.13, "AT": 1.49, "OU": 1.06,
        "IT": 1.34, "IS": 1.06, "OR": 1.28, "TI": 1.34, "HI": 1.13, "ST": 1.25,
        "AR": 1.24, "NE": 1.17, "SE": 1.14, "HA": 1.04, "AS": 1.24, "LE": 1.13,
        "TE": 1.20, "TO": 1.13, "NT": 1.05, "ES": 1.15, "VE": 1.13, "AL": 1.09,
    }

    COMMON_TRIGRAMS: ClassVar[dict[str, float]] = {
        "THE": 1.81, "AND": 0.73, "ING": 0.72, "HER": 0.33, "HAT": 0.21,
        "HIS": 0.21, "THA": 0.21, "ERE": 0.17, "FOR": 0.17, "ENT": 0.17,
        "ION": 0.17, "TER": 0.16, "WAS": 0.16, "YOU": 0.16, "ITH": 0.15,
        "VER": 0.15, "ALL": 0.15, "WIT": 0.14, "THI": 0.14, "TIO": 0.14,
    }

    WORD_RE: ClassVar[re.Pattern[str]] = re.compile(r"[A-Z]+")

    def __init__(self):
        self.analyzer = StatisticalAnalyzer()

    def language_score(self, text: str) -> float:
        """
        Composite English-likeness score.

        Args:
            text: Candidate plaintext

        Returns:
            Score between 0 and 100
        """
        if not text:
            return 0.0

        letters = self.analyzer.letters_only(text)
        if not letters:
            return 0.0

        score = (
            self.frequency_score(letters) * self.FREQUENCY_WEIGHT
            + self.word_score(text) * self.WORD_WEIGHT
            + self.ngram_score(text) * self.NGRAM_WEIGHT
            + self.structure_score(text) * self.STRUCTURE_WEIGHT
        )
        return min(100.0, max(0.0, score))

    def frequency_score(self, letters: str) -> float:
        """Inverted chi-squared, 100 for a perfect fit."""
        n = len(letters)
        if n == 0:
            return 0.0
        chi_sq = self.analyzer.chi_squared(letters)
        max_chi = n * 2
        return max(0.0, 100 - (chi_sq / max_chi) * 100)

    def word_score(self, text: str) -> float:
        """Common-word hits weighted by word length, normalized to 0-100."""
        raw = 0.0
        for word in self.WORD_RE.findall(text.upper()):
            if len(word) < 2:
                continue
            length_factor = min(len(word) / 5, 1.0)
            if word in self.COMMON_WORDS:
                raw += 10 * length_factor
            elif len(word) >= 3:
                raw += 2 * length_factor
        return min(raw, self.WORD_CAP) / self.WORD_CAP * 100

    def ngram_score(self, text: str) -> float:
        """Weighted bigram/trigram hits, normalized to 0-100."""
        upper = text.upper()
        raw = 0.0
        for i in range(len(upper) - 1):
            raw += self.COMMON_BIGRAMS.get(upper[i:i + 2], 0.0) * 3
        for i in range(len(upper) - 2):
            raw += self.COMMON_TRIGRAMS.get(upper[i:i + 3], 0.0) * 5
        return min(raw, self.NGRAM_CAP) / self.NGRAM_CAP * 100

    def structure_score(self, text: str) -> float:
        """Space ratio, vowel ratio and mean word length, normalized to 0-100."""
        raw = 0.0

        space_ratio = sum(1 for c in text if c.isspace()) / len(text)
        if 0.12 <= space_ratio <= 0.25:
            raw += 15
        elif 0.08 <= space_ratio <= 0.35:
            raw += 8

        letters = self.analyzer.letters_only(text)
        vowels = sum(1 for c in letters if c in "AEIOU")
        if len(letters) > vowels:
            vowel_ratio = vowels / len(letters)
            if 0.30 <= vowel_ratio <= 0.45:
                raw += 12
            elif 0.25 <= vowel_ratio <= 0.50:
                raw += 6

        words = self.WORD_RE.findall(text.upper())
        if words:
            mean_length = sum(len(w) for w in words) / len(words)
            if 3.5 <= mean_length <= 6.5:
                raw += 8

        return raw / self.STRUCTURE_MAX * 100

    def english_word_ratio(self, text: str) -> float:
        """Share of whitespace tokens that are common English words."""
        tokens = [t for t in text.upper().split() if len(t) >= 2]
        if not tokens:
            return 0.0
        hits = sum(1 for t in tokens if t.strip(".,;:!?'\"()") in self.COMMON_WORDS)
        return hits / len(tokens)


class ConfidenceScorer:
    """
    The single authority for 0-100 confidence values.

    Every component that reports a confidence routes through
    `confidence()` and applies its own adjustments afterwards.
    """

    PATTERN_MATCH_BASE: ClassVar[float] = 40.0
    VALID_TEXT_BONUS: ClassVar[float] = 30.0
    SYNERGY_BONUS: ClassVar[float] = 10.0
    NOISE_PENALTY: ClassVar[float] = 15.0

    # (low, high, bonus) checked in order
    ENTROPY_BANDS: ClassVar[list[tuple[float, float, float]]] = [
        (3.5, 5.5, 25.0),
        (2.0, 7.0, 15.0),
        (1.0, 8.0, 8.0),
    ]

    # (minimum language score, bonus) checked in order
    LANGUAGE_BANDS: ClassVar[list[tuple[float, float]]] = [
        (70.0, 15.0),
        (50.0, 12.0),
        (30.0, 8.0),
        (15.0, 4.0),
    ]

    def __init__(self):
        self.analyzer = StatisticalAnalyzer()
        self.language = LanguageScorer()

    def confidence(
        self,
        is_valid_text: bool,
        entropy: float,
        language_score: float,
        pattern_matched: bool,
    ) -> float:
        """
        Combine the four detection signals.

        Args:
            is_valid_text: Output decodes as well-formed text
            entropy: Output entropy in bits/symbol
            language_score: Output language score (0-100)
            pattern_matched: A pattern accepted the input

        Returns:
            Confidence clamped to [0, 100]
        """
        confidence = 0.0

        if pattern_matched:
            confidence += self.PATTERN_MATCH_BASE
        if is_valid_text:
            confidence += self.VALID_TEXT_BONUS

        for low, high, bonus in self.ENTROPY_BANDS:
            if low <= entropy <= high:
                confidence += bonus
                break

        for minimum, bonus in self.LANGUAGE_BANDS:
            if language_score >= minimum:
                confidence += bonus
                break

        if is_valid_text and pattern_matched and language_score > 40:
            confidence += self.SYNERGY_BONUS

        if not is_valid_text and entropy > 7.5:
            confidence -= self.NOISE_PENALTY

        return self.clamp(confidence)

    def profile(self, text: str, pattern_matched: bool = True) -> ScoreProfile:
        """Compute the full ScoreProfile of a decoded candidate."""
        entropy = self.analyzer.entropy(text)
        language_score = self.language.language_score(text)
        is_valid = self.analyzer.is_valid_text(text)
        return ScoreProfile(
            entropy=entropy,
            language_score=language_score,
            is_valid_text=is_valid,
            confidence=self.confidence(is_valid, entropy, language_score, pattern_matched),
        )

    @staticmethod
    def clamp(value: float) -> float:
        return min(100.0, max(0.0, value))

    @staticmethod
    def level(confidence: float) -> ConfidenceLevel:
        """Map a confidence to its coarse label."""
        if confidence >= 70:
            return ConfidenceLevel.HIGH
        if confidence >= 40:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW
