import re
from typing import Any, ClassVar

from cipherscope.models.schemas import PatternCategory
from cipherscope.services.patterns.base import DetectionPattern, bytes_to_text
from cipherscope.services.patterns.registry import PatternRegistry


@PatternRegistry.register
class HexPattern(DetectionPattern):
    """Hexadecimal bytes, optionally separated by whitespace, ':', '.' or '-'."""

    name = "Hexadecimal"
    category = PatternCategory.BASE_ENCODING
    description = "Each byte written as two hexadecimal digits."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F\s:.-]*$")
    SEPARATORS_RE: ClassVar[re.Pattern[str]] = re.compile(r"[\s:.-]")
    PURE_HEX_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]+$")

    def quick_filter(self, text: str) -> bool:
        return bool(text) and bool(self.FILTER_RE.match(text))

    def validate(self, text: str) -> bool:
        cleaned = self.SEPARATORS_RE.sub("", text)
        if len(cleaned) < 2 or len(cleaned) % 2 != 0:
            return False
        if not self.PURE_HEX_RE.match(cleaned):
            return False

        # Long runs need both digits and letters
        if len(cleaned) > 20:
            if not re.search(r"[0-9]", cleaned) or not re.search(r"[a-fA-F]", cleaned):
                return False

        if len(set(cleaned.lower())) < 2 and len(cleaned) > 4:
            return False
        return True

    def decode(self, text: str, **params: Any) -> str | None:
        cleaned = self.SEPARATORS_RE.sub("", text)
        try:
            raw = bytes.fromhex(cleaned)
        except ValueError:
            return None
        return bytes_to_text(raw) if raw else None

    def encode(self, text: str, **params: Any) -> str:
        separator = params.get("separator", "")
        return separator.join(f"{b:02x}" for b in text.encode("utf-8"))

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        if " " in decoded or re.search(r"[a-zA-Z]{3,}", decoded):
            confidence += 10
        if self.PURE_HEX_RE.match(source) and len(source) >= 4:
            confidence += 15
        return confidence


@PatternRegistry.register
class BinaryPattern(DetectionPattern):
    """8-bit binary octets, optionally separated by whitespace."""

    name = "Binary"
    category = PatternCategory.BASE_ENCODING
    description = "Each byte written as eight binary digits."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[01\s]+$")
    SEPARATORS_RE: ClassVar[re.Pattern[str]] = re.compile(r"[\s.-]")

    def validate(self, text: str) -> bool:
        cleaned = self.SEPARATORS_RE.sub("", text)
        if len(cleaned) < 8 or len(cleaned) % 8 != 0:
            return False
        return bool(re.match(r"^[01]+$", cleaned))

    def decode(self, text: str, **params: Any) -> str | None:
        cleaned = self.SEPARATORS_RE.sub("", text)
        raw = bytes(int(cleaned[i:i + 8], 2) for i in range(0, len(cleaned), 8))
        return bytes_to_text(raw) if raw else None

    def encode(self, text: str, **params: Any) -> str:
        separator = params.get("separator", " ")
        return separator.join(f"{b:08b}" for b in text.encode("utf-8"))

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        if len(re.sub(r"\s", "", source)) >= 8:
            confidence += 20
        return confidence
