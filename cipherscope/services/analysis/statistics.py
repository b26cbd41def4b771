import string
from collections import Counter
from typing import ClassVar

from scipy import stats

from cipherscope.models.schemas import FrequencyAnalysis


class StatisticalAnalyzer:
    """
    Core statistics used by every detector.

    Computes:
    - Shannon entropy over the observed symbol distribution
    - Index of Coincidence (IOC) over letters
    - Letter, bigram and trigram frequency tables
    - Chi-squared against English letter frequencies
    - Character-class ratios and text validity
    """

    ALPHABET: ClassVar[str] = string.ascii_uppercase

    # English letter frequencies (percentage)
    ENGLISH_FREQ: ClassVar[dict[str, float]] = {
        "E": 12.7, "T": 9.1, "A": 8.2, "O": 7.5, "I": 7.0,
        "N": 6.7, "S": 6.3, "H": 6.1, "R": 6.0, "D": 4.3,
        "L": 4.0, "C": 2.8, "U": 2.8, "M": 2.4, "W": 2.4,
        "F": 2.2, "G": 2.0, "Y": 2.0, "P": 1.9, "B": 1.3,
        "V": 1.0, "K": 0.8, "J": 0.15, "X": 0.15, "Q": 0.10,
        "Z": 0.07,
    }

    # ASCII whitespace, including vertical tab and form feed
    ALLOWED_CONTROL: ClassVar[frozenset[str]] = frozenset(string.whitespace)

    def entropy(self, data: str | bytes) -> float:
        """
        Calculate Shannon entropy in bits per symbol.

        Works on characters for text and on byte values for bytes.
        Empty input yields 0.
        """
        if not data:
            return 0.0

        counts = list(Counter(data).values())
        if len(counts) == 1:
            return 0.0

        return float(stats.entropy(counts, base=2))

    def letters_only(self, text: str) -> str:
        """Uppercase ASCII letters of text, in order."""
        return "".join(c for c in text.upper() if c in self.ALPHABET)

    def index_of_coincidence(self, text: str) -> float:
        """
        Calculate Index of Coincidence over the letters of text.

        - English text: ~0.066
        - Random / polyalphabetic text: ~0.038-0.045
        """
        letters = self.letters_only(text)
        n = len(letters)
        if n <= 1:
            return 0.0

        counter = Counter(letters)
        numerator = sum(f * (f - 1) for f in counter.values())
        return numerator / (n * (n - 1))

    def chi_squared(self, text: str) -> float:
        """
        Chi-squared of observed letter counts against English.

        Lower = closer to English. Returns inf when text has no letters.
        """
        letters = self.letters_only(text)
        n = len(letters)
        if n == 0:
            return float("inf")

        counter = Counter(letters)
        chi_sq = 0.0
        for letter, percent in self.ENGLISH_FREQ.items():
            expected = percent / 100 * n
            chi_sq += (counter.get(letter, 0) - expected) ** 2 / expected
        return chi_sq

    def frequency_analysis(self, text: str) -> FrequencyAnalysis:
        """
        Build the full frequency profile used by the cipher breakers.

        Args:
            text: Any text; only letters are counted

        Returns:
            FrequencyAnalysis with percentages, top n-grams and IOC
        """
        letters = self.letters_only(text)
        total = len(letters)
        counter = Counter(letters)

        letter_frequency = {
            letter: (counter.get(letter, 0) / total * 100 if total else 0.0)
            for letter in self.ALPHABET
        }
        ranked = sorted(self.ALPHABET, key=lambda c: (-letter_frequency[c], c))
        present = [c for c in ranked if counter.get(c, 0) > 0]

        return FrequencyAnalysis(
            letter_frequency=letter_frequency,
            bigrams=self.ngram_counts(letters, 2),
            trigrams=self.ngram_counts(letters, 3),
            most_common=present[:5],
            least_common=present[-5:][::-1] if present else [],
            chi_squared=self.chi_squared(letters) if total else 0.0,
            index_of_coincidence=self.index_of_coincidence(letters),
            total_letters=total,
        )

    def ngram_counts(self, letters: str, n: int, top: int = 20) -> dict[str, int]:
        """Most common n-grams of a letters-only string."""
        if len(letters) < n:
            return {}
        counter = Counter(letters[i:i + n] for i in range(len(letters) - n + 1))
        return dict(sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))[:top])

    def is_valid_text(self, text: str) -> bool:
        """
        Check that text is well-formed printable text.

        Rejects the Unicode replacement character and any control
        character other than ASCII whitespace.
        """
        if "\ufffd" in text:
            return False
        return all(c.isprintable() or c in self.ALLOWED_CONTROL for c in text)

    def printable_ratio(self, text: str) -> float:
        """Share of characters that are printable or common whitespace."""
        if not text:
            return 0.0
        printable = sum(1 for c in text if c.isprintable() or c in self.ALLOWED_CONTROL)
        return printable / len(text)

    def character_classes(self, text: str) -> dict[str, float]:
        """Ratios of letters, digits, whitespace and symbols in text."""
        n = len(text)
        if n == 0:
            return {"alpha": 0.0, "digit": 0.0, "whitespace": 0.0, "symbol": 0.0}

        alpha = sum(1 for c in text if c.isalpha())
        digit = sum(1 for c in text if c.isdigit())
        space = sum(1 for c in text if c.isspace())
        return {
            "alpha": alpha / n,
            "digit": digit / n,
            "whitespace": space / n,
            "symbol": (n - alpha - digit - space) / n,
        }

    def max_char_share(self, text: str) -> float:
        """Frequency of the most common character."""
        if not text:
            return 0.0
        return Counter(text).most_common(1)[0][1] / len(text)

    def chunk_entropy_variance(self, text: str, chunk: int = 16) -> float:
        """Variance of per-chunk entropy; low for uniformly encoded data."""
        chunks = [text[i:i + chunk] for i in range(0, len(text), chunk)]
        chunks = [c for c in chunks if len(c) == chunk]
        if len(chunks) < 2:
            return 0.0
        values = [self.entropy(c) for c in chunks]
        mean = sum(values) / len(values)
        return sum((v - mean) ** 2 for v in values) / len(values)

