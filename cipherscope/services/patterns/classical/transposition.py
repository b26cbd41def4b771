import re
from typing import Any, ClassVar

from cipherscope.services.patterns.classical.substitution import ClassicalCipherPattern
from cipherscope.services.patterns.registry import PatternRegistry


@PatternRegistry.register
class RailFence2Pattern(ClassicalCipherPattern):
    """
    Two-rail fence.

    Characters at even positions are written first, then those at odd
    positions. Every character moves, spaces included, so the top rail
    holds the extra character of an odd-length text.
    """

    name = "Rail Fence Cipher (2-Rail)"
    description = "Zig-zag transposition over two rails."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[a-zA-Z\s]+$")
    MIN_IMPROVEMENT: ClassVar[float] = 3.0

    def validate(self, text: str) -> bool:
        return len(text) > 4

    def decode(self, text: str, **params: Any) -> str | None:
        if not text:
            return None

        middle = (len(text) + 1) // 2
        top, bottom = text[:middle], text[middle:]
        return "".join(a + b for a, b in zip(top, bottom)) + top[len(bottom):]

    def encode(self, text: str, **params: Any) -> str:
        return text[0::2] + text[1::2]

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        return confidence
