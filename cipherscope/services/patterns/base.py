import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from cipherscope.core.exceptions import PatternError
from cipherscope.models.schemas import PatternCategory
from cipherscope.services.analysis.scoring import LanguageScorer
from cipherscope.services.analysis.statistics import StatisticalAnalyzer


def bytes_to_text(data: bytes) -> str:
    """Decode bytes as UTF-8, falling back to Latin-1 so every byte survives."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def text_to_bytes(text: str) -> bytes:
    """Inverse of bytes_to_text for raw-byte content carried in a str."""
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError:
        return text.encode("utf-8")


def shift_letters(text: str, shift: int) -> str:
    """Rotate ASCII letters by shift, preserving case and everything else."""
    result = []
    for char in text:
        if "A" <= char <= "Z":
            result.append(chr((ord(char) - 65 + shift) % 26 + 65))
        elif "a" <= char <= "z":
            result.append(chr((ord(char) - 97 + shift) % 26 + 97))
        else:
            result.append(char)
    return "".join(result)


class DetectionPattern(ABC):
    """
    Abstract base class for every registry entry.

    Each pattern provides:
    - quick_filter(): Cheap structural test (character class, length)
    - validate(): Optional stricter acceptance test, time-boxed by the detector
    - decode(): Pure function returning decoded text or None for "no match"
    - accept(): Post-decode plausibility test (e.g. readability must improve)
    - encode(): Inverse of decode, for reversible patterns only
    - adjust_confidence(): Pattern-specific tweak applied after the shared score

    Patterns hold no mutable state; a single instance is shared by every
    detection call and every worker thread.
    """

    name: str
    category: PatternCategory
    description: str

    # Reversible patterns implement encode()
    reversible: ClassVar[bool] = False

    # Regex used by the default quick_filter
    FILTER_RE: ClassVar[re.Pattern[str] | None] = None

    analyzer: ClassVar[StatisticalAnalyzer] = StatisticalAnalyzer()
    language: ClassVar[LanguageScorer] = LanguageScorer()

    def quick_filter(self, text: str) -> bool:
        """
        Cheap structural test run before anything else.

        Args:
            text: Candidate input

        Returns:
            True if the pattern could possibly apply
        """
        if self.FILTER_RE is None:
            return bool(text)
        return bool(self.FILTER_RE.search(text))

    def validate(self, text: str) -> bool:
        """Stricter acceptance test. Patterns without one accept everything."""
        return True

    @abstractmethod
    def decode(self, text: str, **params: Any) -> str | None:
        """
        Decode the input.

        Args:
            text: Input that passed quick_filter and validate
            **params: Pattern parameters such as a known shift

        Returns:
            Decoded text, or None when the input does not decode
        """
        pass

    def accept(self, source: str, decoded: str) -> bool:
        """Whether a decode is plausible enough to report."""
        return True

    def encode(self, text: str, **params: Any) -> str:
        """
        Encode text so that decode() recovers it.

        Raises:
            PatternError: If the pattern is detect-only
        """
        raise PatternError(self.name, "encoding not supported")

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        """Pattern-specific adjustment of the shared confidence."""
        return confidence

    def warnings(self, source: str, decoded: str) -> list[str]:
        """Non-fatal caveats about a successful decode."""
        return []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
