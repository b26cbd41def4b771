import base64
import binascii
import csv
import io
import json
import re
from typing import Any, ClassVar
from xml.dom import minidom
from xml.parsers.expat import ExpatError

from cipherscope.models.schemas import PatternCategory
from cipherscope.services.patterns.base import DetectionPattern
from cipherscope.services.patterns.registry import PatternRegistry


def describe_payload(raw: bytes, limit: int = 500) -> str:
    """Readable text as-is, anything else as a short hex preview."""
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = None
    if text is not None and DetectionPattern.analyzer.is_valid_text(text):
        return text[:limit] + ("..." if len(text) > limit else "")
    preview = raw[:32].hex(" ")
    return f"{len(raw)} bytes of binary data: {preview}{' ...' if len(raw) > 32 else ''}"


@PatternRegistry.register
class PemPattern(DetectionPattern):
    """PEM armour: Base64 DER between BEGIN/END lines."""

    name = "PEM"
    category = PatternCategory.STRUCTURED
    description = "Privacy-Enhanced Mail container for keys and certificates."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"-----BEGIN [A-Z0-9 ]+-----")
    BLOCK_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"-----BEGIN ([A-Z0-9 ]+)-----([\s\S]*?)-----END \1-----"
    )

    def validate(self, text: str) -> bool:
        return bool(re.search(r"-----END [A-Z0-9 ]+-----", text))

    def decode(self, text: str, **params: Any) -> str | None:
        match = self.BLOCK_RE.search(text)
        if match is None:
            return None
        label, body = match.group(1), re.sub(r"\s", "", match.group(2))
        try:
            raw = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            return None
        return f"PEM {label}:\n{describe_payload(raw)}"

    def warnings(self, source: str, decoded: str) -> list[str]:
        if "PRIVATE KEY" in source:
            return ["Input contains private key material"]
        return []


@PatternRegistry.register
class DataUrlPattern(DetectionPattern):
    """RFC 2397 data URL with Base64 payload."""

    name = "Data URL"
    category = PatternCategory.STRUCTURED
    description = "Inline resource: data:<mime>;base64,<payload>."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^data:[^;]+;base64,")
    FULL_RE: ClassVar[re.Pattern[str]] = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)

    def decode(self, text: str, **params: Any) -> str | None:
        match = self.FULL_RE.match(text.strip())
        if match is None:
            return None
        try:
            raw = base64.b64decode(match.group(2), validate=True)
        except (binascii.Error, ValueError):
            return None
        return f"Data URL ({match.group(1)}):\n{describe_payload(raw)}"


@PatternRegistry.register
class JsonPattern(DetectionPattern):
    """JSON object or array, re-indented."""

    name = "JSON"
    category = PatternCategory.STRUCTURED
    description = "JavaScript Object Notation document."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\s*[\[{]")

    def validate(self, text: str) -> bool:
        return self.analyzer.is_valid_text(text)

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            parsed = json.loads(text.strip())
        except ValueError:
            return None
        return json.dumps(parsed, indent=2, ensure_ascii=False)


@PatternRegistry.register
class XmlPattern(DetectionPattern):
    """Well-formed XML, pretty-printed. HTML documents are left alone."""

    name = "XML"
    category = PatternCategory.STRUCTURED
    description = "Extensible Markup Language document."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\s*<")

    def validate(self, text: str) -> bool:
        trimmed = text.strip()
        if not self.analyzer.is_valid_text(trimmed):
            return False
        return ">" in trimmed and not trimmed.lower().startswith("<!doctype html")

    def decode(self, text: str, **params: Any) -> str | None:
        try:
            document = minidom.parseString(text.strip())
        except ExpatError:
            return None
        pretty = document.toprettyxml(indent="  ")
        return "\n".join(line for line in pretty.splitlines() if line.strip())


@PatternRegistry.register
class YamlPattern(DetectionPattern):
    """Block-style YAML, normalized (tabs expanded, trailing space removed)."""

    name = "YAML"
    category = PatternCategory.STRUCTURED
    description = "YAML document with key: value mappings."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^[a-zA-Z_][a-zA-Z0-9_]*:\s", re.MULTILINE
    )

    def validate(self, text: str) -> bool:
        if not self.analyzer.is_valid_text(text):
            return False
        return text.lstrip().startswith("---") or len(self.FILTER_RE.findall(text)) >= 2

    def decode(self, text: str, **params: Any) -> str | None:
        lines = [line.replace("\t", "  ").rstrip() for line in text.strip("\n").split("\n")]
        return "\n".join(lines)


@PatternRegistry.register
class CsvPattern(DetectionPattern):
    """Comma-separated rows, rendered tab-separated."""

    name = "CSV"
    category = PatternCategory.STRUCTURED
    description = "Comma-separated values with a consistent column count."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[^,\n]*,[^\n]*$", re.MULTILINE)

    def validate(self, text: str) -> bool:
        if not self.analyzer.is_valid_text(text):
            return False
        rows = self._rows(text)
        if rows is None or len(rows) < 2:
            return False
        width = len(rows[0])
        return width > 1 and all(len(row) == width for row in rows[1:3])

    def decode(self, text: str, **params: Any) -> str | None:
        rows = self._rows(text)
        if rows is None:
            return None
        return "\n".join("\t".join(cell.strip() for cell in row) for row in rows)

    @staticmethod
    def _rows(text: str) -> list[list[str]] | None:
        try:
            return [row for row in csv.reader(io.StringIO(text)) if any(c.strip() for c in row)]
        except csv.Error:
            return None
