from collections import Counter
from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class SimpleSubstitutionEngine(CipherEngine):
    """
    Simple Substitution cipher engine.

    Each letter is replaced with another letter according to a fixed permutation
    of the alphabet, giving 26! possible keys.

    Breaking starts from a frequency-rank mapping and refines it with a
    deterministic hill climb over letter swaps.
    """

    name = "Simple Substitution Cipher"
    cipher_type = CipherType.SIMPLE_SUBSTITUTION
    cipher_family = CipherFamily.MONOALPHABETIC
    description = (
        "Each letter is mapped to a different letter using a random permutation. "
        "With 26! (about 4 x 10^26) possible keys, brute force is impossible. "
        "Solved using frequency analysis and hill-climbing optimization."
    )

    # English letters from most to least frequent
    ENGLISH_ORDER: ClassVar[str] = "ETAOINSHRDLCUMWFGYPBVKJXQZ"

    # Hill climbing scores a prefix of the ciphertext
    SAMPLE_CHARS: ClassVar[int] = 300
    MAX_PASSES: ClassVar[int] = 2

    CONFIDENCE_BONUS: ClassVar[float] = 10.0
    CONFIDENCE_CAP: ClassVar[float] = 85.0

    def detect(self, frequency: FrequencyAnalysis) -> float:
        """
        High IOC suggests monoalphabetic substitution.

        A high chi-squared on top of that means the letters were not just
        shifted, which favours a general substitution over Caesar.
        """
        ioc = frequency.index_of_coincidence
        if ioc > 0.06:
            return 0.8 if frequency.chi_squared > 100 else 0.5
        elif ioc > 0.05:
            return 0.3
        return 0.1

    def attempt_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any],
    ) -> list[PlaintextCandidate]:
        """
        Frequency mapping followed by hill climbing.

        Args:
            ciphertext: The ciphertext to decrypt
            options: "max_passes" bounds the hill climb

        Returns:
            A single candidate, or an empty list when the text has no letters
        """
        letters = self.analyzer.letters_only(ciphertext)
        if not letters:
            return []

        mapping = self._frequency_mapping(letters)
        mapping = self._hill_climb(ciphertext, mapping, options.get("max_passes", self.MAX_PASSES))

        plaintext = self._apply(ciphertext, mapping)
        if plaintext == ciphertext:
            return []

        score = self.score(plaintext)
        return [self.candidate(
            plaintext,
            self._mapping_to_key(mapping),
            "Frequency analysis substitution with hill climbing",
            score=score,
            confidence=min(score + self.CONFIDENCE_BONUS, self.CONFIDENCE_CAP),
        )]

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        """Decrypt with a known substitution key."""
        key_str = self._parse_key(key)
        if not self.validate_key(key_str):
            raise ValueError("Invalid key: must be a 26-letter permutation")

        plaintext = self._decrypt(ciphertext, key_str)
        return DecryptionResult(
            plaintext=plaintext,
            key=key_str,
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, key_str),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        """Encrypt using the substitution key."""
        key_str = self._parse_key(key)
        if not self.validate_key(key_str):
            raise ValueError("Invalid key: must be a 26-letter permutation")

        mapping = dict(zip(self.ALPHABET, key_str))
        return self._apply(plaintext, mapping)

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        """Validate that key is a valid 26-letter permutation."""
        try:
            key_str = self._parse_key(key)
        except (ValueError, TypeError):
            return False
        return len(key_str) == 26 and set(key_str) == set(self.ALPHABET)

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        """Generate human-readable explanation."""
        key_str = self._parse_key(key)
        sample_mappings = ", ".join(
            f"{self.ALPHABET[i]}->{key_str[i]}"
            for i in range(min(5, len(key_str)))
        )
        return (
            f"Simple substitution cipher with key: {key_str}. "
            f"The alphabet is mapped as: {sample_mappings}, etc. "
            f"This was solved using frequency analysis and hill climbing."
        )

    def _parse_key(self, key: str | dict[str, Any]) -> str:
        return str(self._key_value(key, "permutation")).upper()

    def _frequency_mapping(self, letters: str) -> dict[str, str]:
        """Map cipher letters to plaintext letters by frequency rank."""
        counts = Counter(letters)
        ranked = sorted(self.ALPHABET, key=lambda c: (-counts.get(c, 0), c))
        return dict(zip(ranked, self.ENGLISH_ORDER))

    def _hill_climb(self, ciphertext: str, mapping: dict[str, str], max_passes: int) -> dict[str, str]:
        """
        Swap pairs of plaintext assignments while the score improves.

        Only letters present in the ciphertext are swapped; swapping absent
        letters cannot change the result.
        """
        sample = ciphertext[:self.SAMPLE_CHARS]
        present = sorted(set(self.analyzer.letters_only(sample)))
        best_score = self.score(self._apply(sample, mapping))

        for _ in range(max_passes):
            improved = False
            for i, a in enumerate(present):
                for b in present[i + 1:]:
                    mapping[a], mapping[b] = mapping[b], mapping[a]
                    score = self.score(self._apply(sample, mapping))
                    if score > best_score:
                        best_score = score
                        improved = True
                    else:
                        mapping[a], mapping[b] = mapping[b], mapping[a]
            if not improved:
                break

        return mapping

    def _mapping_to_key(self, mapping: dict[str, str]) -> str:
        """Turn a cipher->plain mapping into the plain->cipher key string."""
        inverse = {plain: cipher for cipher, plain in mapping.items()}
        return "".join(inverse[letter] for letter in self.ALPHABET)

    def _decrypt(self, ciphertext: str, key: str) -> str:
        inverse = {cipher: plain for plain, cipher in zip(self.ALPHABET, key)}
        return self._apply(ciphertext, inverse)

    @staticmethod
    def _apply(text: str, mapping: dict[str, str]) -> str:
        """Substitute letters through an uppercase mapping, preserving case."""
        result = []
        for char in text:
            upper = char.upper()
            if upper in mapping and char.isascii():
                substituted = mapping[upper]
                result.append(substituted if char.isupper() else substituted.lower())
            else:
                result.append(char)
        return "".join(result)
