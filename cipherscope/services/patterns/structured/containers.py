from typing import Any, ClassVar

from cipherscope.models.schemas import PatternCategory
from cipherscope.services.patterns.base import DetectionPattern
from cipherscope.services.patterns.registry import PatternRegistry


class ContainerPattern(DetectionPattern):
    """
    Archive and compression formats, recognized by magic bytes only.

    Contents are never extracted or decompressed; the decode result is a
    fixed description and the confidence is fixed per format.
    """

    category = PatternCategory.CONTAINER

    CONFIDENCE: ClassVar[float] = 85.0
    LABEL: ClassVar[str]

    def quick_filter(self, text: str) -> bool:
        # Raw bytes arrive as Latin-1 text
        try:
            raw = text.encode("latin-1")
        except UnicodeEncodeError:
            return False
        return self.matches(raw)

    def matches(self, raw: bytes) -> bool:
        raise NotImplementedError

    def decode(self, text: str, **params: Any) -> str | None:
        return f"{self.LABEL} detected - cannot extract"

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        return self.CONFIDENCE

    def warnings(self, source: str, decoded: str) -> list[str]:
        return [f"{self.name} content was not extracted"]


@PatternRegistry.register
class ZipPattern(ContainerPattern):
    name = "ZIP Archive"
    description = "PKZIP archive (local file header or empty archive)."
    LABEL = "ZIP Archive"

    def matches(self, raw: bytes) -> bool:
        return raw.startswith((b"PK\x03\x04", b"PK\x05\x06"))


@PatternRegistry.register
class GzipPattern(ContainerPattern):
    name = "GZIP"
    description = "GNU zip compressed stream."
    LABEL = "GZIP compressed data"

    def matches(self, raw: bytes) -> bool:
        return raw.startswith(b"\x1f\x8b")


@PatternRegistry.register
class ZlibPattern(ContainerPattern):
    name = "ZLIB"
    description = "zlib stream (deflate with a two-byte header)."
    LABEL = "ZLIB compressed data"
    CONFIDENCE = 70.0

    def matches(self, raw: bytes) -> bool:
        return len(raw) >= 2 and raw[0] == 0x78 and raw[1] in (0x01, 0x9C, 0xDA)


@PatternRegistry.register
class TarPattern(ContainerPattern):
    name = "TAR Archive"
    description = "POSIX ustar archive."
    LABEL = "TAR Archive"

    def matches(self, raw: bytes) -> bool:
        return len(raw) > 262 and raw[257:262] == b"ustar"


@PatternRegistry.register
class BrotliPattern(ContainerPattern):
    """Brotli streams wrapped in the framing format, which starts with a fixed magic."""

    name = "Brotli"
    description = "Brotli compressed stream in framing format."
    LABEL = "Brotli compressed data"

    MAGIC: ClassVar[bytes] = b"\xce\xb2\xcf\x81"

    def matches(self, raw: bytes) -> bool:
        return raw.startswith(self.MAGIC)
