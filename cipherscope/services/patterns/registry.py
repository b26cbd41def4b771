import logging
from typing import ClassVar, Type

from cipherscope.core.exceptions import PatternNotFoundError, RegistryFrozenError
from cipherscope.models.schemas import ContentHints, PatternInfo
from cipherscope.services.patterns.base import DetectionPattern

logger = logging.getLogger(__name__)


class PatternRegistry:
    """
    Registry of detection patterns.

    Patterns are registered once at import time and the registry is frozen
    afterwards. Detection order is fixed by PRIORITY, not by import or
    registration order: lower numbers are checked first, and ties in
    confidence go to the lower number.
    """

    # Most specific first, most permissive (Base64) last
    PRIORITY: ClassVar[tuple[tuple[int, str], ...]] = (
        # Structured and framed formats
        (1, "PEM"),
        (2, "Data URL"),
        (3, "JSON"),
        (4, "XML"),
        (5, "YAML"),
        (6, "CSV"),
        # Character set repairs
        (7, "UTF-16"),
        (8, "ISO-8859-1"),
        (9, "Windows-1252"),
        # Framed legacy encodings
        (10, "UUEncode"),
        (11, "yEnc"),
        (12, "Quoted-Printable"),
        (13, "Base91"),
        # Containers, detect only
        (14, "ZIP Archive"),
        (15, "GZIP"),
        (16, "ZLIB"),
        (17, "TAR Archive"),
        (18, "Brotli"),
        # Header and domain encodings
        (19, "MIME Encoded"),
        (20, "Punycode Domain"),
        # Highly specific web formats
        (21, "JWT Token"),
        (22, "URL Encoding"),
        (23, "HTML Entities"),
        (24, "Morse Code"),
        # Restricted alphabets
        (25, "Binary"),
        (26, "Hexadecimal"),
        (27, "Base32"),
        (28, "Base58"),
        (29, "ASCII85"),
        (30, "Unicode Escape"),
        # Classical ciphers
        (31, "ROT13"),
        (32, "Caesar Cipher"),
        (33, "Atbash Cipher"),
        (34, "A1Z26 (Numbers to Letters)"),
        (35, "Bacon Cipher"),
        (36, "Polybius Square"),
        (37, "Rail Fence Cipher (2-Rail)"),
        # Most permissive alphabet, always last
        (38, "Base64"),
    )

    CLASSICAL: ClassVar[frozenset[str]] = frozenset({
        "ROT13", "Caesar Cipher", "Atbash Cipher", "A1Z26 (Numbers to Letters)",
        "Bacon Cipher", "Polybius Square", "Rail Fence Cipher (2-Rail)",
    })

    _patterns: ClassVar[dict[str, Type[DetectionPattern]]] = {}
    _instances: ClassVar[dict[str, DetectionPattern]] = {}
    _frozen: ClassVar[bool] = False

    @classmethod
    def register(cls, pattern_class: Type[DetectionPattern]) -> Type[DetectionPattern]:
        """
        Register a detection pattern class.

        Can be used as a decorator:
            @PatternRegistry.register
            class Base64Pattern(DetectionPattern):
                ...

        Args:
            pattern_class: The pattern class to register

        Returns:
            The pattern class (for decorator usage)

        Raises:
            RegistryFrozenError: If called after startup
        """
        if cls._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{pattern_class.name}': registry is frozen",
                {"pattern_name": pattern_class.name},
            )
        if pattern_class.name not in cls.priorities():
            raise ValueError(f"Pattern '{pattern_class.name}' has no priority slot")

        cls._patterns[pattern_class.name] = pattern_class
        cls._instances[pattern_class.name] = pattern_class()
        return pattern_class

    @classmethod
    def freeze(cls) -> None:
        """Refuse further registration."""
        missing = [name for _, name in cls.PRIORITY if name not in cls._patterns]
        if missing:
            logger.warning("Priority slots without a pattern: %s", ", ".join(missing))
        cls._frozen = True

    @classmethod
    def is_frozen(cls) -> bool:
        return cls._frozen

    @classmethod
    def priorities(cls) -> dict[str, int]:
        """Map of pattern name to priority number."""
        return {name: number for number, name in cls.PRIORITY}

    def get(self, name: str) -> DetectionPattern:
        """
        Get the pattern registered under name.

        Raises:
            PatternNotFoundError: If no such pattern exists
        """
        pattern = self._instances.get(name)
        if pattern is None:
            raise PatternNotFoundError(name)
        return pattern

    def ordered(self) -> list[DetectionPattern]:
        """All patterns in priority order."""
        return [
            self._instances[name]
            for _, name in self.PRIORITY
            if name in self._instances
        ]

    def prioritized(self, hints: ContentHints, depth: int = 0) -> list[DetectionPattern]:
        """
        Patterns reordered by cheap content hints.

        Boosted patterns move to the front, keeping their relative priority.
        Base64 is never boosted, so it stays behind the restricted alphabets.

        Args:
            hints: Character-class hints of the current content
            depth: Layer depth; ciphers are favoured below the surface

        Returns:
            Reordered pattern list
        """
        boosted: set[str] = set()
        if hints.likely_url:
            boosted.add("URL Encoding")
        if hints.likely_binary:
            boosted.add("Binary")
        if hints.likely_hex:
            boosted.add("Hexadecimal")
        if hints.likely_cipher and depth >= 1:
            boosted |= self.CLASSICAL

        ordered = self.ordered()
        if not boosted:
            return ordered

        front = [p for p in ordered if p.name in boosted]
        back = [p for p in ordered if p.name not in boosted]
        return front + back

    @classmethod
    def list_registered(cls) -> list[PatternInfo]:
        """Describe every registered pattern in priority order."""
        return [
            PatternInfo(
                priority=number,
                name=name,
                category=cls._patterns[name].category,
                reversible=cls._patterns[name].reversible,
            )
            for number, name in cls.PRIORITY
            if name in cls._patterns
        ]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._patterns


# Import patterns to trigger registration
def _load_patterns() -> None:
    """Load all pattern modules, then freeze the registry."""
    from cipherscope.services.patterns.classical import substitution, transposition  # noqa: F401
    from cipherscope.services.patterns.encoding import base_n, hex_binary, legacy, web  # noqa: F401
    from cipherscope.services.patterns.structured import containers, formats  # noqa: F401

    PatternRegistry.freeze()


# Load patterns when module is imported
_load_patterns()
