import string
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from cipherscope.core.exceptions import DecryptionError
from cipherscope.models.schemas import (
    CipherFamily,
    CipherType,
    FrequencyAnalysis,
    PlaintextCandidate,
)
from cipherscope.services.analysis.scoring import LanguageScorer
from cipherscope.services.analysis.statistics import StatisticalAnalyzer


@dataclass
class DecryptionResult:
    """Result of a decryption operation."""

    plaintext: str
    key: str
    confidence: float
    explanation: str


def shift_letter(char: str, shift: int) -> str:
    """Shift one ASCII letter, preserving case; other characters pass through."""
    if "A" <= char <= "Z":
        return chr((ord(char) - 65 + shift) % 26 + 65)
    if "a" <= char <= "z":
        return chr((ord(char) - 97 + shift) % 26 + 97)
    return char


class CipherEngine(ABC):
    """
    One classical cipher: a keyless breaker plus keyed encrypt/decrypt.

    CipherAnalyzer first asks detect() whether the letter statistics fit,
    then takes the best attempt_decrypt() candidate. Candidates are scored
    with score(), the shared language/word-ratio composite, so engines stay
    comparable. Keys are strings or dicts such as {"shift": 3}.
    """

    # Cipher metadata
    name: str
    cipher_type: CipherType
    cipher_family: CipherFamily
    description: str

    ALPHABET: ClassVar[str] = string.ascii_uppercase

    # Composite score weights
    LANGUAGE_WEIGHT: ClassVar[float] = 0.7
    WORD_RATIO_WEIGHT: ClassVar[float] = 0.3

    analyzer: ClassVar[StatisticalAnalyzer] = StatisticalAnalyzer()
    language: ClassVar[LanguageScorer] = LanguageScorer()

    @abstractmethod
    def detect(self, frequency: FrequencyAnalysis) -> float:
        """
        Rough likelihood in [0, 1] from the ciphertext's letter profile.

        0 means the engine is skipped.
        """
        pass

    @abstractmethod
    def attempt_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any],
    ) -> list[PlaintextCandidate]:
        """
        Search keys without knowing the right one.

        Args:
            ciphertext: Text to break
            options: Engine-specific search limits, e.g. max_rails

        Returns:
            Plaintext candidates, best first
        """
        pass

    @abstractmethod
    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        """
        Decrypt with a known key.

        Args:
            ciphertext: The ciphertext to decrypt
            key: The decryption key

        Returns:
            DecryptionResult with plaintext and metadata
        """
        pass

    def find_key_and_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any] | None = None,
    ) -> DecryptionResult:
        """
        Find the best key and decrypt.

        Raises:
            DecryptionError: If no candidate key was found
        """
        candidates = self.attempt_decrypt(ciphertext, options or {})
        if not candidates:
            raise DecryptionError(f"{self.name}: could not decrypt ciphertext")

        best = candidates[0]
        return DecryptionResult(
            plaintext=best.plaintext,
            key=best.key,
            confidence=best.confidence,
            explanation=self.explain(ciphertext, best.plaintext, best.key),
        )

    @abstractmethod
    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        """
        Encrypt plaintext with the given key.

        Args:
            plaintext: The plaintext to encrypt
            key: The encryption key

        Returns:
            Ciphertext
        """
        pass

    @abstractmethod
    def validate_key(self, key: str | dict[str, Any]) -> bool:
        """Validate that a key is valid for this cipher."""
        pass

    @abstractmethod
    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        """Generate human-readable explanation of the decryption."""
        pass

    def score(self, plaintext: str) -> float:
        """
        Composite plaintext score on a 0-100 scale (higher is better).

        Blends the language score with the share of common English words.
        """
        language_score = self.language.language_score(plaintext)
        word_ratio = self.language.english_word_ratio(plaintext)
        return min(100.0, self.LANGUAGE_WEIGHT * language_score + self.WORD_RATIO_WEIGHT * word_ratio * 100)

    def candidate(
        self,
        plaintext: str,
        key: str,
        method: str,
        score: float | None = None,
        confidence: float | None = None,
    ) -> PlaintextCandidate:
        """Build a candidate; confidence defaults to the composite score."""
        if score is None:
            score = self.score(plaintext)
        if confidence is None:
            confidence = score
        return PlaintextCandidate(
            plaintext=plaintext,
            score=score,
            confidence=max(0.0, min(100.0, confidence)),
            cipher_type=self.cipher_type,
            key=key,
            method=method,
        )

    def _key_value(self, key: str | dict[str, Any], *names: str, default: Any = "") -> Any:
        """Pull a key out of a dict form such as {"shift": 3}."""
        if isinstance(key, dict):
            for name in names:
                if name in key:
                    return key[name]
            return key.get("key", default)
        return key
