import base64
import binascii
import html
import json
import re
from email.errors import HeaderParseError
from email.header import Header, decode_header, make_header
from typing import Any, ClassVar
from urllib.parse import quote, unquote

from cipherscope.models.schemas import PatternCategory
from cipherscope.services.patterns.base import DetectionPattern
from cipherscope.services.patterns.registry import PatternRegistry


@PatternRegistry.register
class UrlEncodingPattern(DetectionPattern):
    """Percent-encoding as produced by encodeURIComponent."""

    name = "URL Encoding"
    category = PatternCategory.WEB
    description = "Reserved and non-ASCII bytes written as %XX."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"%[0-9a-fA-F]{2}")

    def validate(self, text: str) -> bool:
        percent = text.count("%")
        return percent > 0 and percent == len(self.FILTER_RE.findall(text))

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            return unquote(text, errors="strict")
        except UnicodeDecodeError:
            return None

    def encode(self, text: str, **params: Any) -> str:
        return quote(text, safe=params.get("safe", ""))

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        return confidence + 20 if "%" in source else confidence


@PatternRegistry.register
class HtmlEntitiesPattern(DetectionPattern):
    """Named and numeric HTML character references."""

    name = "HTML Entities"
    category = PatternCategory.WEB
    description = "Characters written as &name; or &#NNN; references."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"&[a-zA-Z0-9#]+;")

    def decode(self, text: str, **params: Any) -> str | None:
        return html.unescape(text)

    def encode(self, text: str, **params: Any) -> str:
        if params.get("numeric"):
            return "".join(f"&#{ord(c)};" for c in text)
        return html.escape(text, quote=True)

    def warnings(self, source: str, decoded: str) -> list[str]:
        if re.search(r"<\s*(script|iframe)", decoded, re.IGNORECASE):
            return ["Decoded markup contains active content"]
        return []


@PatternRegistry.register
class UnicodeEscapePattern(DetectionPattern):
    """Backslash escapes: \\uXXXX, \\UXXXXXXXX and \\xXX."""

    name = "Unicode Escape"
    category = PatternCategory.UNICODE
    description = "Code points written as backslash escape sequences."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\\u[0-9a-fA-F]{4}|\\U[0-9a-fA-F]{8}|\\x[0-9a-fA-F]{2}"
    )
    ESCAPE_RE: ClassVar[re.Pattern[str]] = re.compile(r"\\[uUx][0-9a-fA-F]+")

    def validate(self, text: str) -> bool:
        escapes = len(self.ESCAPE_RE.findall(text))
        return escapes >= 1 and escapes / len(text) > 0.05

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            result = self.FILTER_RE.sub(lambda m: chr(int(m.group(0)[2:], 16)), text)
            # Re-join surrogate pairs written as two \\u escapes
            return result.encode("utf-16", "surrogatepass").decode("utf-16")
        except (ValueError, UnicodeDecodeError):
            return None

    def encode(self, text: str, **params: Any) -> str:
        parts = []
        for char in text:
            code = ord(char)
            parts.append(f"\\U{code:08x}" if code > 0xFFFF else f"\\u{code:04x}")
        return "".join(parts)


@PatternRegistry.register
class PunycodePattern(DetectionPattern):
    """IDNA Punycode labels (xn--...)."""

    name = "Punycode Domain"
    category = PatternCategory.UNICODE
    description = "Internationalized domain labels in ASCII-compatible encoding."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"xn--[a-z0-9-]+", re.IGNORECASE)
    DOMAIN_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^(https?://)?(www\.)?[a-z0-9-]*xn--[a-z0-9-]+\.[a-z]{2,}(/.*)?$", re.IGNORECASE
    )
    LABEL_RE: ClassVar[re.Pattern[str]] = re.compile(r"^xn--[a-z0-9-]+$")

    def validate(self, text: str) -> bool:
        return bool(self.DOMAIN_RE.match(text) or self.LABEL_RE.match(text))

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            return self.FILTER_RE.sub(
                lambda m: m.group(0)[4:].encode("ascii").decode("punycode"), text
            )
        except UnicodeError:
            return None

    def encode(self, text: str, **params: Any) -> str:
        labels = []
        for label in text.split("."):
            if label.isascii():
                labels.append(label)
            else:
                labels.append("xn--" + label.encode("punycode").decode("ascii"))
        return ".".join(labels)


@PatternRegistry.register
class MimeEncodedPattern(DetectionPattern):
    """RFC 2047 encoded words: =?charset?B|Q?data?=."""

    name = "MIME Encoded"
    category = PatternCategory.WEB
    description = "Mail header encoded words in Base64 (B) or quoted-printable (Q)."
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"=\?[^?]+\?[BbQq]\?[^?]+\?=")
    STRICT_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"=\?[a-z0-9-]+\?[BbQq]\?[A-Za-z0-9+/=_.-]+\?=", re.IGNORECASE
    )

    def validate(self, text: str) -> bool:
        return bool(self.STRICT_RE.search(text))

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            return str(make_header(decode_header(text)))
        except (HeaderParseError, LookupError, UnicodeDecodeError, binascii.Error):
            return None

    def encode(self, text: str, **params: Any) -> str:
        return Header(text, params.get("charset", "utf-8")).encode()


@PatternRegistry.register
class JwtPattern(DetectionPattern):
    """
    JSON Web Token.

    Header and payload are Base64URL JSON objects. The signature is reported
    as-is and never verified.
    """

    name = "JWT Token"
    category = PatternCategory.WEB
    description = "Three Base64URL segments: header, payload and signature."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*$"
    )

    def quick_filter(self, text: str) -> bool:
        return bool(self.FILTER_RE.match(text.strip()))

    def validate(self, text: str) -> bool:
        parts = text.strip().split(".")
        if len(parts) != 3:
            return False
        return all(part and len(part) % 4 != 1 for part in parts)

    def decode(self, text: str, **params: Any) -> str | None:
        parts = text.strip().split(".")
        try:
            header = json.loads(self._b64url(parts[0]))
            payload = json.loads(self._b64url(parts[1]))
        except (binascii.Error, ValueError):
            return None
        if not isinstance(header, dict):
            return None

        return json.dumps(
            {"header": header, "payload": payload, "signature": parts[2] or "No signature"},
            indent=2,
        )

    def warnings(self, source: str, decoded: str) -> list[str]:
        return ["JWT signature was not verified"]

    @staticmethod
    def _b64url(segment: str) -> bytes:
        return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
