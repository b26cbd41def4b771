from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class RailFenceEngine(CipherEngine):
    """
    Rail fence transposition.

    Characters are laid out on a zigzag over N rails and the rails are
    concatenated top to bottom. With 3 rails, WEAREDISCOVERED becomes

        W . . . E . . . C . . . R . .
        . E . R . D . S . O . E . E .
        . . A . . . I . . . V . . . D

    and reads WECR ERDSOEE AIVD. Every character moves, including spaces
    and punctuation; the rail count is the whole key.
    """

    name = "Rail Fence Cipher"
    cipher_type = CipherType.RAIL_FENCE
    cipher_family = CipherFamily.TRANSPOSITION
    description = "Zigzag transposition across a number of rails, read back one rail at a time."

    MAX_RAILS: ClassVar[int] = 10
    CONFIDENCE_CAP: ClassVar[float] = 80.0

    def detect(self, frequency: FrequencyAnalysis) -> float:
        # Letters are only moved, so the IoC stays at the plaintext's level
        ioc = frequency.index_of_coincidence
        if ioc > 0.065:
            return 0.5
        if ioc > 0.06:
            return 0.3
        return 0.1

    def attempt_decrypt(self, ciphertext: str, options: dict[str, Any]) -> list[PlaintextCandidate]:
        """Score every rail count from 2 to max_rails (default 10)."""
        max_rails = min(options.get("max_rails", self.MAX_RAILS), len(ciphertext) // 2)
        candidates = []
        for rails in range(2, max_rails + 1):
            plaintext = self._decrypt(ciphertext, rails)
            if plaintext == ciphertext:
                continue
            score = self.score(plaintext)
            candidates.append(self.candidate(
                plaintext,
                str(rails),
                f"Rail fence cipher with {rails} rails",
                score=score,
                confidence=min(score, self.CONFIDENCE_CAP),
            ))

        candidates.sort(key=lambda c: (-c.score, int(c.key)))
        return candidates

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        if not self.validate_key(key):
            raise ValueError("Invalid key: rails must be >= 2")
        rails = self._parse_key(key)
        plaintext = self._decrypt(ciphertext, rails)
        return DecryptionResult(
            plaintext=plaintext,
            key=str(rails),
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, str(rails)),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        if not self.validate_key(key):
            raise ValueError("Invalid key: rails must be >= 2")
        return self._encrypt(plaintext, self._parse_key(key))

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        try:
            return self._parse_key(key) >= 2
        except (ValueError, TypeError):
            return False

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        rails = self._parse_key(key)
        return (
            f"Rail fence with {rails} rails: the ciphertext was cut into {rails} runs, "
            "one per rail, and read back along the zigzag."
        )

    def _parse_key(self, key: str | dict[str, Any]) -> int:
        return int(self._key_value(key, "rails", default=2))

    @staticmethod
    def _zigzag(n: int, rails: int) -> list[int]:
        """Rail index of each position in the zigzag."""
        pattern = []
        rail = 0
        direction = 1
        for _ in range(n):
            pattern.append(rail)
            if rail == 0:
                direction = 1
            elif rail == rails - 1:
                direction = -1
            rail += direction
        return pattern

    def _encrypt(self, plaintext: str, rails: int) -> str:
        """Write along the zigzag, read rail by rail."""
        if rails <= 1 or rails >= len(plaintext):
            return plaintext

        fence = [[] for _ in range(rails)]
        for char, rail in zip(plaintext, self._zigzag(len(plaintext), rails)):
            fence[rail].append(char)

        return "".join("".join(row) for row in fence)

    def _decrypt(self, ciphertext: str, rails: int) -> str:
        """Refill each rail with its share of the ciphertext, then walk the zigzag."""
        n = len(ciphertext)
        if rails <= 1 or rails >= n:
            return ciphertext

        pattern = self._zigzag(n, rails)

        # Split ciphertext into rails by how many positions each rail holds
        fence = []
        idx = 0
        for rail in range(rails):
            length = pattern.count(rail)
            fence.append(iter(ciphertext[idx:idx + length]))
            idx += length

        return "".join(next(fence[rail]) for rail in pattern)
