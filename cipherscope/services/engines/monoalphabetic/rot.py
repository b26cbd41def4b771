from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult, shift_letter
from cipherscope.services.engines.registry import EngineRegistry


class RotationEngine(CipherEngine):
    """
    Fixed rotation ciphers.

    Each variant is its own inverse, so encryption and decryption are the
    same operation and the key is fixed.
    """

    cipher_family = CipherFamily.MONOALPHABETIC

    ROTATION: ClassVar[int]
    CONFIDENCE_BONUS: ClassVar[float] = 10.0
    CONFIDENCE_CAP: ClassVar[float] = 90.0

    def detect(self, frequency: FrequencyAnalysis) -> float:
        """A fixed rotation is one specific case among many substitutions."""
        if frequency.index_of_coincidence > 0.06:
            return 0.3
        elif frequency.index_of_coincidence > 0.05:
            return 0.15
        return 0.05

    def attempt_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any],
    ) -> list[PlaintextCandidate]:
        """There is only one possibility; it is dropped when it changes nothing."""
        plaintext = self.transform(ciphertext)
        if plaintext == ciphertext:
            return []

        score = self.score(plaintext)
        return [self.candidate(
            plaintext,
            str(self.ROTATION),
            f"ROT{self.ROTATION} rotation cipher",
            score=score,
            confidence=min(score + self.CONFIDENCE_BONUS, self.CONFIDENCE_CAP),
        )]

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        plaintext = self.transform(ciphertext)
        return DecryptionResult(
            plaintext=plaintext,
            key=str(self.ROTATION),
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, key),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        return self.transform(plaintext)

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        """Only the empty key or the fixed rotation itself are accepted."""
        return str(self._key_value(key, "rotation")) in ("", str(self.ROTATION))

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        return (
            f"{self.name}: {self.description} "
            f"Applying it again restores the original text."
        )

    def transform(self, text: str) -> str:
        raise NotImplementedError


@EngineRegistry.register
class ROT5Engine(RotationEngine):
    name = "ROT5 Cipher"
    cipher_type = CipherType.ROT5
    description = "Rotates each digit by 5; letters are unchanged."
    ROTATION = 5

    def transform(self, text: str) -> str:
        return "".join(
            chr((ord(c) - 48 + 5) % 10 + 48) if "0" <= c <= "9" else c
            for c in text
        )


@EngineRegistry.register
class ROT13Engine(RotationEngine):
    """
    ROT13 is a special case of the Caesar cipher with a fixed shift of 13.

    Since 13 is exactly half of 26, applying ROT13 twice returns the
    original text.
    """

    name = "ROT13 Cipher"
    cipher_type = CipherType.ROT13
    description = "Rotates each letter by 13 positions."
    ROTATION = 13

    def transform(self, text: str) -> str:
        return "".join(shift_letter(c, 13) for c in text)


@EngineRegistry.register
class ROT18Engine(RotationEngine):
    name = "ROT18 Cipher"
    cipher_type = CipherType.ROT18
    description = "ROT13 on letters combined with ROT5 on digits."
    ROTATION = 18

    def transform(self, text: str) -> str:
        return ROT5Engine().transform(ROT13Engine().transform(text))


@EngineRegistry.register
class ROT47Engine(RotationEngine):
    name = "ROT47 Cipher"
    cipher_type = CipherType.ROT47
    description = "Rotates every printable ASCII character from '!' to '~' by 47."
    ROTATION = 47

    def transform(self, text: str) -> str:
        return "".join(
            chr(33 + (ord(c) - 33 + 47) % 94) if 33 <= ord(c) <= 126 else c
            for c in text
        )

