import base64
import binascii
import re
from typing import Any, ClassVar

from cipherscope.models.schemas import PatternCategory
from cipherscope.services.patterns.base import DetectionPattern, bytes_to_text
from cipherscope.services.patterns.registry import PatternRegistry


STRUCTURED_START_RE = re.compile(r"^\s*[{\[<]|^\s*[A-Za-z0-9_-]+[:=]")


def decode_text_strict(data: bytes) -> str | None:
    """Decode bytes that must form readable UTF-8 text."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    return text if DetectionPattern.analyzer.is_valid_text(text) else None


@PatternRegistry.register
class Base64Pattern(DetectionPattern):
    """
    Standard Base64 (RFC 4648).

    Its alphabet is a superset of hex, binary, Base32 and Base58, so the
    validator carries an explicit negative check for each of them.
    """

    name = "Base64"
    category = PatternCategory.BASE_ENCODING
    description = "Binary-to-text encoding using 64 printable characters."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

    HEX_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]+$")
    BINARY_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[01]+$")
    BASE32_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Z2-7]+=*$")
    BASE58_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")
    WORD_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\w+$")

    def quick_filter(self, text: str) -> bool:
        return bool(self.FILTER_RE.match(text.strip()))

    def validate(self, text: str) -> bool:
        clean = text.strip()
        if len(clean) < 8 or len(clean) % 4 != 0:
            return False

        padding = clean.count("=")
        if padding > 2:
            return False
        if padding and clean.index("=") != len(clean) - padding:
            return False

        chars = clean.rstrip("=")
        unique = len(set(chars))

        if len(chars) > 16:
            # The alphabet has 64 symbols, so long payloads saturate
            if unique < 0.25 * min(64, len(chars)):
                return False
            classes = [
                sum(1 for c in chars if c.isupper()),
                sum(1 for c in chars if c.islower()),
                sum(1 for c in chars if c.isdigit()),
                sum(1 for c in chars if c in "+/"),
            ]
            if max(classes) / len(chars) > 0.8:
                return False
            if sum(1 for count in classes if count) < 2:
                return False

        if self.HEX_RE.match(chars) and len(chars) % 2 == 0:
            return False
        if self.BINARY_RE.match(chars) and len(chars) % 8 == 0:
            return False
        if self.BASE32_RE.match(clean):
            return False
        if self.BASE58_RE.match(chars) and self._decodes_to_text(clean) is None:
            return False
        if self.WORD_RE.match(chars) and len(chars) < 50 and unique < 5:
            return False

        if len(chars) > 32:
            entropy = self.analyzer.entropy(chars)
            if entropy < 2.5 or entropy > 7.0:
                return False

        return True

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            raw = base64.b64decode(text.strip(), validate=True)
        except (binascii.Error, ValueError):
            return None
        if not raw:
            return None

        result = bytes_to_text(raw)
        if len(result) > 10 and self.analyzer.printable_ratio(result) < 0.5:
            try:
                raw.decode("utf-8")
            except UnicodeDecodeError:
                if not STRUCTURED_START_RE.match(result):
                    return None
        return result

    def encode(self, text: str, **params: Any) -> str:
        return base64.b64encode(text.encode("utf-8")).decode("ascii")

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        if decoded and all(" " <= c <= "~" for c in decoded):
            confidence += 5
        if self.HEX_RE.match(source.replace("=", "")):
            confidence -= 20
        if re.match(r"^[01\s]+$", source):
            confidence -= 30
        if len(source) < 16:
            confidence -= 15
        return confidence

    def _decodes_to_text(self, text: str) -> str | None:
        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError):
            return None
        return decode_text_strict(raw)


@PatternRegistry.register
class Base32Pattern(DetectionPattern):
    """RFC 4648 Base32, upper-case alphabet with '=' padding."""

    name = "Base32"
    category = PatternCategory.BASE_ENCODING
    description = "Binary-to-text encoding using A-Z and 2-7."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Z2-7]+=*$")

    def validate(self, text: str) -> bool:
        if len(text) < 8 or len(text) % 8 != 0:
            return False
        return bool(re.match(r"^[A-Z2-7]+$", text.rstrip("=")))

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            raw = base64.b32decode(text)
        except (binascii.Error, ValueError):
            return None
        return bytes_to_text(raw) if raw else None

    def encode(self, text: str, **params: Any) -> str:
        return base64.b32encode(text.encode("utf-8")).decode("ascii")


@PatternRegistry.register
class Base58Pattern(DetectionPattern):
    """
    Bitcoin-style Base58.

    The alphabet drops 0, O, I and l. Leading '1' characters stand for
    leading zero bytes. Only decodes that form readable text are reported.
    """

    name = "Base58"
    category = PatternCategory.BASE_ENCODING
    description = "Base58 as used by Bitcoin addresses and IPFS hashes."
    reversible = True

    ALPHABET: ClassVar[str] = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")

    def validate(self, text: str) -> bool:
        return len(text) >= 4

    def decode(self, text: str, **params: Any) -> str | None:
        raw = self.to_bytes(text)
        if not raw:
            return None
        return decode_text_strict(raw)

    def to_bytes(self, text: str) -> bytes | None:
        """Raw bytes behind a Base58 string, one zero byte per leading '1'."""
        value = 0
        for char in text:
            index = self.ALPHABET.find(char)
            if index < 0:
                return None
            value = value * 58 + index

        leading = len(text) - len(text.lstrip("1"))
        body = value.to_bytes((value.bit_length() + 7) // 8, "big") if value else b""
        return b"\x00" * leading + body

    def encode(self, text: str, **params: Any) -> str:
        raw = text.encode("utf-8")
        value = int.from_bytes(raw, "big")
        encoded = ""
        while value:
            value, remainder = divmod(value, 58)
            encoded = self.ALPHABET[remainder] + encoded
        leading = len(raw) - len(raw.lstrip(b"\x00"))
        return "1" * leading + encoded


@PatternRegistry.register
class Base91Pattern(DetectionPattern):
    """basE91, a denser alphabet that uses most printable ASCII."""

    name = "Base91"
    category = PatternCategory.BASE_ENCODING
    description = "Binary-to-text encoding using 91 printable characters."
    reversible = True

    ALPHABET: ClassVar[str] = (
        "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
        "!#$%&()*+,./:;<=>?@[]^_`{|}~\""
    )
    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^[A-Za-z0-9!#$%&()*+,./:;<=>?@\[\]^_`{|}~\"]+$"
    )
    DECODE_TABLE: ClassVar[dict[str, int]] = {c: i for i, c in enumerate(ALPHABET)}

    def validate(self, text: str) -> bool:
        # Strings that already read as Base64 are left to Base64
        if len(text) < 4 or Base64Pattern.FILTER_RE.match(text):
            return False
        return all(c in self.DECODE_TABLE for c in text)

    def decode(self, text: str, **params: Any) -> str | None:
        value = -1
        buffer = 0
        bits = 0
        output = bytearray()

        for char in text:
            digit = self.DECODE_TABLE.get(char)
            if digit is None:
                return None
            if value < 0:
                value = digit
                continue
            value += digit * 91
            buffer |= value << bits
            bits += 13 if (value & 8191) > 88 else 14
            while bits > 7:
                output.append(buffer & 255)
                buffer >>= 8
                bits -= 8
            value = -1

        if value >= 0:
            output.append((buffer | value << bits) & 255)

        return decode_text_strict(bytes(output)) if output else None

    def encode(self, text: str, **params: Any) -> str:
        buffer = 0
        bits = 0
        output = []

        for byte in text.encode("utf-8"):
            buffer |= byte << bits
            bits += 8
            if bits > 13:
                value = buffer & 8191
                if value > 88:
                    buffer >>= 13
                    bits -= 13
                else:
                    value = buffer & 16383
                    buffer >>= 14
                    bits -= 14
                output.append(self.ALPHABET[value % 91])
                output.append(self.ALPHABET[value // 91])

        if bits:
            output.append(self.ALPHABET[buffer % 91])
            if bits > 7 or buffer > 90:
                output.append(self.ALPHABET[buffer // 91])

        return "".join(output)


@PatternRegistry.register
class Ascii85Pattern(DetectionPattern):
    """Adobe ASCII85, framed by '<~' and '~>'."""

    name = "ASCII85"
    category = PatternCategory.BASE_ENCODING
    description = "Adobe's Base85 variant used in PostScript and PDF."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^<~[\s\S]*~>$")

    def quick_filter(self, text: str) -> bool:
        return bool(self.FILTER_RE.match(text.strip()))

    def validate(self, text: str) -> bool:
        content = text.strip()[2:-2]
        return bool(content) and bool(re.match(r"^[!-uz\s]+$", content))

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            raw = base64.a85decode(text.strip(), adobe=True)
        except (binascii.Error, ValueError):
            return None
        raw = raw.rstrip(b"\x00")
        return bytes_to_text(raw) if raw else None

    def encode(self, text: str, **params: Any) -> str:
        return base64.a85encode(text.encode("utf-8"), adobe=True).decode("ascii")
