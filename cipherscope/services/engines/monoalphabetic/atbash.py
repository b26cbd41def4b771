import string
from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class AtbashEngine(CipherEngine):
    """
    Atbash cipher engine.

    Atbash is a monoalphabetic substitution cipher where the alphabet is reversed:
    A -> Z, B -> Y, C -> X, etc.

    Originally used for the Hebrew alphabet, it's self-reciprocal like ROT13.
    """

    name = "Atbash Cipher"
    cipher_type = CipherType.ATBASH
    cipher_family = CipherFamily.MONOALPHABETIC
    description = (
        "A substitution cipher where the alphabet is reversed. "
        "A becomes Z, B becomes Y, etc. "
        "Self-reciprocal: applying twice returns the original text."
    )

    REVERSED: ClassVar[str] = string.ascii_uppercase[::-1]
    TABLE: ClassVar[dict[int, int]] = str.maketrans(
        string.ascii_uppercase + string.ascii_lowercase,
        string.ascii_uppercase[::-1] + string.ascii_lowercase[::-1],
    )

    CONFIDENCE_BONUS: ClassVar[float] = 15.0
    CONFIDENCE_CAP: ClassVar[float] = 90.0

    def detect(self, frequency: FrequencyAnalysis) -> float:
        """Atbash is one specific substitution, so confidence stays low."""
        ioc = frequency.index_of_coincidence
        if ioc > 0.06:
            return 0.2
        elif ioc > 0.05:
            return 0.1
        return 0.05

    def attempt_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any],
    ) -> list[PlaintextCandidate]:
        plaintext = self._transform(ciphertext)
        if plaintext == ciphertext:
            return []

        score = self.score(plaintext)
        return [self.candidate(
            plaintext,
            self.REVERSED,
            "Atbash substitution (A<->Z, B<->Y, ...)",
            score=score,
            confidence=min(score + self.CONFIDENCE_BONUS, self.CONFIDENCE_CAP),
        )]

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        """Atbash has no key; the reversed alphabet is reported instead."""
        plaintext = self._transform(ciphertext)
        return DecryptionResult(
            plaintext=plaintext,
            key=self.REVERSED,
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, self.REVERSED),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        return self._transform(plaintext)

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        return str(self._key_value(key)).upper() in ("", self.REVERSED)

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        return (
            "Atbash cipher: the alphabet is reversed, so A and Z swap, "
            "B and Y swap, and so on. Applying it twice restores the text."
        )

    def _transform(self, text: str) -> str:
        return text.translate(self.TABLE)
