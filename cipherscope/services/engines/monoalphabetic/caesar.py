from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult, shift_letter
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class CaesarEngine(CipherEngine):
    """
    Caesar cipher engine.

    The Caesar cipher is a simple substitution cipher that shifts each letter
    by a fixed amount. With only 25 non-trivial keys, it can be broken by
    trying all shifts and scoring each result.
    """

    name = "Caesar Cipher"
    cipher_type = CipherType.CAESAR
    cipher_family = CipherFamily.MONOALPHABETIC
    description = (
        "A substitution cipher where each letter is shifted by a fixed amount. "
        "Named after Julius Caesar who used it for military communications."
    )

    COMMON_SHIFTS: ClassVar[frozenset[int]] = frozenset({1, 2, 3, 23, 24, 25})
    CONFIDENCE_CAP: ClassVar[float] = 95.0

    def detect(self, frequency: FrequencyAnalysis) -> float:
        """
        Caesar preserves letter frequencies, so a high IOC makes it a candidate.
        """
        ioc = frequency.index_of_coincidence
        if ioc > 0.06:
            return 0.7
        elif ioc > 0.05:
            return 0.4
        return 0.1

    def attempt_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any],
    ) -> list[PlaintextCandidate]:
        """
        Try all 25 shifts and return the top candidates.

        The best candidate's confidence is adjusted: readable output and
        commonly used shifts raise it, a close runner-up lowers it.
        """
        scored = []
        for shift in range(1, 26):
            plaintext = self._decrypt(ciphertext, shift)
            scored.append((self.score(plaintext), shift, plaintext))

        # Highest score first; equal scores keep the smaller shift
        scored.sort(key=lambda item: (-item[0], item[1]))
        best_score, best_shift, best_plaintext = scored[0]

        confidence = best_score
        language_score = self.language.language_score(best_plaintext)
        if language_score > 60:
            confidence += 15
        if best_score > 70 and language_score > 40:
            confidence += 10
        if best_shift == 13:
            confidence += 5
        if best_shift in self.COMMON_SHIFTS:
            confidence += 3
        if scored[1][0] > best_score * 0.9:
            confidence -= 10

        candidates = [
            self.candidate(
                best_plaintext,
                str(best_shift),
                f"Caesar shift with key {best_shift}",
                score=best_score,
                confidence=min(confidence, self.CONFIDENCE_CAP),
            )
        ]
        for score, shift, plaintext in scored[1:5]:
            candidates.append(self.candidate(
                plaintext, str(shift), f"Caesar shift with key {shift}", score=score,
            ))
        return candidates

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        """Decrypt with a known shift value."""
        shift = self._parse_key(key)
        plaintext = self._decrypt(ciphertext, shift)

        return DecryptionResult(
            plaintext=plaintext,
            key=str(shift),
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, str(shift)),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        """Encrypt plaintext with the given shift."""
        return self._encrypt(plaintext, self._parse_key(key))

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        """Validate that key is a valid shift (0-25)."""
        try:
            return 0 <= int(self._key_value(key, "shift")) <= 25
        except (ValueError, TypeError):
            return False

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        """Generate human-readable explanation."""
        shift = self._parse_key(key)
        return (
            f"Caesar cipher with shift of {shift}. "
            f"Each letter was shifted back {shift} positions in the alphabet. "
            f"For example, the first ciphertext letter '{ciphertext[0] if ciphertext else 'N/A'}' "
            f"becomes '{plaintext[0] if plaintext else 'N/A'}'."
        )

    def _parse_key(self, key: str | dict[str, Any]) -> int:
        """Parse key to integer shift value."""
        return int(self._key_value(key, "shift", default=0)) % 26

    def _encrypt(self, plaintext: str, shift: int) -> str:
        return "".join(shift_letter(c, shift) for c in plaintext)

    def _decrypt(self, ciphertext: str, shift: int) -> str:
        """Decrypt by shifting in reverse."""
        return self._encrypt(ciphertext, -shift)
