import binascii
import quopri
import re
from typing import Any, ClassVar

from cipherscope.models.schemas import PatternCategory
from cipherscope.services.patterns.base import DetectionPattern, bytes_to_text, text_to_bytes
from cipherscope.services.patterns.registry import PatternRegistry


@PatternRegistry.register
class Utf16Pattern(DetectionPattern):
    """
    UTF-16 text carried as raw bytes.

    Recognized by a byte order mark, or by ASCII-range text where every
    other byte is zero.
    """

    name = "UTF-16"
    category = PatternCategory.UNICODE
    description = "Two-byte Unicode encoding, little or big endian."
    reversible = True

    BOMS: ClassVar[tuple[bytes, bytes]] = (b"\xff\xfe", b"\xfe\xff")
    SAMPLE: ClassVar[int] = 100

    def quick_filter(self, text: str) -> bool:
        return text.startswith(("\xff\xfe", "\xfe\xff")) or "\x00" in text

    def validate(self, text: str) -> bool:
        raw = text_to_bytes(text)
        if len(raw) < 4:
            return False
        if raw.startswith(self.BOMS):
            return True
        if len(raw) % 2 != 0:
            return False

        even_nulls, odd_nulls = self._null_counts(raw)
        pairs = min(len(raw), self.SAMPLE) / 2
        dominant = max(even_nulls, odd_nulls) / pairs
        other = min(even_nulls, odd_nulls) / pairs
        return dominant > 0.3 and other < 0.1

    def decode(self, text: str, **params: Any) -> str | None:
        raw = text_to_bytes(text)
        try:
            if raw.startswith(self.BOMS):
                return raw.decode("utf-16")
            even_nulls, odd_nulls = self._null_counts(raw)
            if odd_nulls > even_nulls:
                return raw.decode("utf-16-le")
            if even_nulls > odd_nulls:
                return raw.decode("utf-16-be")
        except UnicodeDecodeError:
            return None
        return None

    def encode(self, text: str, **params: Any) -> str:
        return text.encode("utf-16").decode("latin-1")

    def _null_counts(self, raw: bytes) -> tuple[int, int]:
        sample = raw[:self.SAMPLE]
        even = sum(1 for i in range(0, len(sample), 2) if sample[i] == 0)
        odd = sum(1 for i in range(1, len(sample), 2) if sample[i] == 0)
        return even, odd


@PatternRegistry.register
class Iso88591Pattern(DetectionPattern):
    """
    UTF-8 text that was read as ISO-8859-1.

    Every character is a Latin-1 code point and the underlying bytes form
    valid multi-byte UTF-8 ("cafÃ©" for "café").
    """

    name = "ISO-8859-1"
    category = PatternCategory.LEGACY
    description = "Latin-1 mojibake of UTF-8 text."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"[\x80-\xff]")

    def validate(self, text: str) -> bool:
        return all(ord(c) <= 0xFF for c in text)

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            return text.encode("latin-1").decode("utf-8")
        except UnicodeError:
            return None

    def encode(self, text: str, **params: Any) -> str:
        return text.encode("utf-8").decode("latin-1")


@PatternRegistry.register
class Windows1252Pattern(DetectionPattern):
    """
    Windows-1252 artefacts.

    Repairs UTF-8 text that was read as Windows-1252 ("â€™" for a right
    quote), and maps stray C1 control bytes to their Windows-1252 glyphs.
    """

    name = "Windows-1252"
    category = PatternCategory.LEGACY
    description = "Windows Western European code page artefacts."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(
        "[\x80-\x9f€‚ƒ„…†‡ˆ‰Š‹"
        "ŒŽ‘’“”•–—˜™š"
        "›œžŸ]"
    )

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            return text.encode("cp1252").decode("utf-8")
        except UnicodeError:
            pass

        if not all(ord(c) <= 0xFF for c in text):
            return None
        try:
            return text.encode("latin-1").decode("cp1252")
        except UnicodeDecodeError:
            return None

    def accept(self, source: str, decoded: str) -> bool:
        return self.analyzer.is_valid_text(decoded)


@PatternRegistry.register
class UuencodePattern(DetectionPattern):
    """Unix-to-Unix encoding with a 'begin <mode> <name>' header."""

    name = "UUEncode"
    category = PatternCategory.LEGACY
    description = "Classic Unix binary-to-text encoding for mail and news."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^begin \d{3} .+$", re.MULTILINE)
    LINE_BYTES: ClassVar[int] = 45

    def validate(self, text: str) -> bool:
        return "`" in text and "end" in text

    def decode(self, text: str, **params: Any) -> str | None:
        output = bytearray()
        in_data = False

        for line in text.splitlines():
            if line.startswith("begin "):
                in_data = True
                continue
            if line.strip() == "end":
                break
            if not in_data or not line:
                continue
            try:
                output += binascii.a2b_uu(line)
            except binascii.Error:
                return None

        return bytes_to_text(bytes(output)) if output else None

    def encode(self, text: str, **params: Any) -> str:
        raw = text.encode("utf-8")
        lines = [f"begin 644 {params.get('filename', 'data.txt')}"]
        for i in range(0, len(raw), self.LINE_BYTES):
            lines.append(binascii.b2a_uu(raw[i:i + self.LINE_BYTES], backtick=True).decode("ascii").rstrip("\n"))
        lines.extend(["`", "end"])
        return "\n".join(lines)


@PatternRegistry.register
class YencPattern(DetectionPattern):
    """yEnc, the 8-bit Usenet encoding."""

    name = "yEnc"
    category = PatternCategory.LEGACY
    description = "Usenet binary encoding offsetting each byte by 42."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"=ybegin")
    CRITICAL: ClassVar[frozenset[int]] = frozenset({0x00, 0x0A, 0x0D, 0x3D})

    def validate(self, text: str) -> bool:
        return "=yend" in text

    def decode(self, text: str, **params: Any) -> str | None:
        output = bytearray()
        in_data = False

        for line in text.split("\n"):
            line = line.rstrip("\r")
            if line.startswith("=ybegin"):
                in_data = True
                continue
            if line.startswith("=yend"):
                break
            if not in_data or line.startswith("=ypart"):
                continue

            escaped = False
            for char in line:
                code = ord(char)
                if code > 0xFF:
                    return None
                if escaped:
                    output.append((code - 64 - 42) % 256)
                    escaped = False
                elif char == "=":
                    escaped = True
                else:
                    output.append((code - 42) % 256)

        return bytes_to_text(bytes(output)) if output else None

    def encode(self, text: str, **params: Any) -> str:
        raw = text.encode("utf-8")
        encoded = []
        for byte in raw:
            value = (byte + 42) % 256
            if value in self.CRITICAL:
                encoded.append("=" + chr((value + 64) % 256))
            else:
                encoded.append(chr(value))
        name = params.get("filename", "data.txt")
        return (
            f"=ybegin line=128 size={len(raw)} name={name}\n"
            f"{''.join(encoded)}\n"
            f"=yend size={len(raw)}"
        )


@PatternRegistry.register
class QuotedPrintablePattern(DetectionPattern):
    """MIME quoted-printable (RFC 2045)."""

    name = "Quoted-Printable"
    category = PatternCategory.LEGACY
    description = "Non-ASCII bytes written as =XX, with '=' soft line breaks."
    reversible = True

    # A trailing '=' alone is Base64 padding far more often than a soft break
    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"=[0-9A-F]{2}")

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            raw = text.encode("latin-1")
        except UnicodeEncodeError:
            raw = text.encode("utf-8")
        return bytes_to_text(quopri.decodestring(raw))

    def encode(self, text: str, **params: Any) -> str:
        return quopri.encodestring(text.encode("utf-8")).decode("ascii")
