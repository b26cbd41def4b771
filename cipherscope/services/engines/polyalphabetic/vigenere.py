from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult, shift_letter
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class VigenereEngine(CipherEngine):
    """
    Vigenère cipher engine.

    A polyalphabetic substitution cipher that uses a keyword to determine
    the shift for each letter. Each letter of the keyword represents a
    different Caesar shift applied in sequence.

    Breaking involves:
    1. Ranking key lengths by the average IOC of their columns
    2. Solving each column as an independent Caesar shift
    """

    name = "Vigenère Cipher"
    cipher_type = CipherType.VIGENERE
    cipher_family = CipherFamily.POLYALPHABETIC
    description = (
        "A polyalphabetic cipher where each letter is shifted by a different amount "
        "based on a repeating keyword. More secure than Caesar but vulnerable to "
        "frequency analysis per key position."
    )

    ENGLISH_IOC: ClassVar[float] = 0.067
    MIN_KEY_LENGTH: ClassVar[int] = 2
    MAX_KEY_LENGTH: ClassVar[int] = 15
    LENGTHS_TRIED: ClassVar[int] = 5
    CONFIDENCE_CAP: ClassVar[float] = 90.0

    def detect(self, frequency: FrequencyAnalysis) -> float:
        """
        Low IOC suggests polyalphabetic.

        Text with an English-like IOC is monoalphabetic or plain, and text
        below 0.030 is closer to random than to a keyed shift.
        """
        ioc = frequency.index_of_coincidence
        if ioc < 0.030 or ioc > 0.060:
            return 0.0
        if ioc < 0.05:
            return 0.8
        elif ioc < 0.055:
            return 0.6
        return 0.4

    def attempt_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any],
    ) -> list[PlaintextCandidate]:
        """
        Attempt to break Vigenère cipher.

        Args:
            ciphertext: The ciphertext to decrypt
            options: "max_key_length" bounds the key length search

        Returns:
            Candidates for the most likely key lengths, best first
        """
        letters = self.analyzer.letters_only(ciphertext)
        if len(letters) < 10:
            return []

        max_key_length = options.get("max_key_length", self.MAX_KEY_LENGTH)
        candidates = []
        seen_keys = set()

        for key_length in self._estimate_key_lengths(letters, max_key_length)[:self.LENGTHS_TRIED]:
            key = self._reduce_key(self._find_key(letters, key_length))
            if key in seen_keys:
                continue
            seen_keys.add(key)

            plaintext = self._decrypt(ciphertext, key)
            score = self.score(plaintext)
            candidates.append(self.candidate(
                plaintext,
                key,
                f"Vigenère cipher with key length {len(key)}",
                score=score,
                confidence=min(score, self.CONFIDENCE_CAP),
            ))

        # Best score first; equal scores prefer the shorter key
        candidates.sort(key=lambda c: (-c.score, len(c.key)))
        return candidates

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        """Decrypt with a known keyword."""
        key_str = self._parse_key(key)
        if not self.validate_key(key_str):
            raise ValueError("Invalid key: must be alphabetic")

        plaintext = self._decrypt(ciphertext, key_str)
        return DecryptionResult(
            plaintext=plaintext,
            key=key_str,
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, key_str),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        """Encrypt using the keyword."""
        key_str = self._parse_key(key)
        if not self.validate_key(key_str):
            raise ValueError("Invalid key: must be alphabetic")

        return self._apply(plaintext, [self.ALPHABET.index(c) for c in key_str])

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        """Validate that key is alphabetic."""
        try:
            key_str = self._parse_key(key)
        except (ValueError, TypeError):
            return False
        return len(key_str) > 0 and all(c in self.ALPHABET for c in key_str)

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        """Generate human-readable explanation."""
        key_str = self._parse_key(key)
        shift_desc = ", ".join(f"{c}={self.ALPHABET.index(c)}" for c in key_str)
        return (
            f"Vigenère cipher with keyword '{key_str}' (length {len(key_str)}). "
            f"Letter shifts: {shift_desc}. "
            f"Each letter of the ciphertext is shifted back by the corresponding "
            f"key letter's position in the alphabet."
        )

    def _parse_key(self, key: str | dict[str, Any]) -> str:
        return str(self._key_value(key, "keyword")).upper()

    def _estimate_key_lengths(self, letters: str, max_length: int) -> list[int]:
        """
        Rank key lengths by how close the average column IOC is to English.

        Ties keep the shorter length first.
        """
        upper = min(max_length, len(letters) // 2)
        ranked = []
        for length in range(self.MIN_KEY_LENGTH, upper + 1):
            columns = [letters[i::length] for i in range(length)]
            iocs = [self.analyzer.index_of_coincidence(col) for col in columns if len(col) > 1]
            if iocs:
                average = sum(iocs) / len(iocs)
                ranked.append((abs(average - self.ENGLISH_IOC), length))

        ranked.sort()
        return [length for _, length in ranked]

    def _find_key(self, letters: str, key_length: int) -> str:
        """Solve each column as a Caesar shift by minimum chi-squared."""
        key = []
        for i in range(key_length):
            column = letters[i::key_length]
            best_shift = min(
                range(26),
                key=lambda shift: self.analyzer.chi_squared(
                    "".join(shift_letter(c, -shift) for c in column)
                ),
            )
            key.append(self.ALPHABET[best_shift])
        return "".join(key)

    @staticmethod
    def _reduce_key(key: str) -> str:
        """Collapse a repeated key such as 'KEYKEY' to its period 'KEY'."""
        for period in range(1, len(key)):
            if len(key) % period == 0 and key == key[:period] * (len(key) // period):
                return key[:period]
        return key

    def _decrypt(self, ciphertext: str, key: str) -> str:
        return self._apply(ciphertext, [-self.ALPHABET.index(c) for c in key])

    @staticmethod
    def _apply(text: str, shifts: list[int]) -> str:
        """Shift letters by the repeating key; non-letters do not consume key positions."""
        result = []
        key_idx = 0
        for char in text:
            if char.isascii() and char.isalpha():
                result.append(shift_letter(char, shifts[key_idx % len(shifts)]))
                key_idx += 1
            else:
                result.append(char)
        return "".join(result)
