import re
from typing import ClassVar

from cipherscope.models.schemas import ContentHints


class ContentHintAnalyzer:
    """
    Cheap character-class hints used to reorder patterns between layers.

    Hints only change the order in which patterns are tried; they never
    add or remove candidates.
    """

    BASE64_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")
    HEX_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F\s:]+$")
    BINARY_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[01\s]+$")
    URL_RE: ClassVar[re.Pattern[str]] = re.compile(r"%[0-9a-fA-F]{2}")
    CIPHER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[a-zA-Z\s.,;:!?'\"-]+$")
    HEX_DIGEST_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]+$")
    CRYPT_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\$(2[abxy]?|argon2(id|i|d)|pbkdf2[\w-]*|1|5|6)\$")

    DIGEST_LENGTHS: ClassVar[frozenset[int]] = frozenset({8, 16, 32, 40, 56, 64, 96, 128})

    def hints(self, text: str) -> ContentHints:
        """
        Compute hints for a piece of content.

        Args:
            text: Current content

        Returns:
            ContentHints with each flag set independently
        """
        stripped = text.strip()
        if not stripped:
            return ContentHints()

        compact = re.sub(r"\s", "", stripped)
        letters = sum(1 for c in stripped if c.isascii() and c.isalpha())

        return ContentHints(
            likely_base64=(
                len(stripped) >= 8
                and len(stripped) % 4 == 0
                and bool(self.BASE64_RE.match(stripped))
            ),
            likely_hex=(
                len(compact) >= 2
                and len(compact) % 2 == 0
                and bool(self.HEX_RE.match(stripped))
            ),
            likely_binary=len(compact) >= 8 and bool(self.BINARY_RE.match(stripped)),
            likely_url=bool(self.URL_RE.search(stripped)),
            likely_cipher=(
                bool(self.CIPHER_RE.match(stripped))
                and letters / len(stripped) > 0.6
            ),
            likely_hash=(
                (len(stripped) in self.DIGEST_LENGTHS and bool(self.HEX_DIGEST_RE.match(stripped)))
                or bool(self.CRYPT_RE.match(stripped))
            ),
        )
