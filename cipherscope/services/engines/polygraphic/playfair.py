from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class PlayfairEngine(CipherEngine):
    """
    Playfair digraph cipher over a 5x5 square (I and J share a cell).

    The square is the keyword's distinct letters followed by the rest of
    the alphabet. Each pair is replaced by shifting along a shared row,
    down a shared column, or by swapping the columns of its rectangle.
    A doubled letter or a trailing odd letter is paired with X, so
    "BALLOON" splits as BA LX LO ON. Output is uppercase letters only.
    """

    name = "Playfair Cipher"
    cipher_type = CipherType.PLAYFAIR
    cipher_family = CipherFamily.POLYGRAPHIC
    description = (
        "Letter pairs substituted through a 5x5 keyword square, "
        "with I and J merged into one cell."
    )

    ALPHABET: ClassVar[str] = "ABCDEFGHIKLMNOPQRSTUVWXYZ"  # 25 letters, I=J
    COMMON_KEYS: ClassVar[list[str]] = [
        "PLAYFAIR", "SECRET", "KEYWORD", "CIPHER", "MONARCHY",
        "EXAMPLE", "CRYPTO", "HIDDEN", "SECURE", "SQUARE",
    ]

    # Structural preconditions for a speculative report
    MIN_SPECULATIVE_LENGTH: ClassVar[int] = 20
    SPECULATIVE_CONFIDENCE: ClassVar[float] = 20.0
    SPECULATIVE_PLAINTEXT: ClassVar[str] = "[Playfair decryption requires key]"

    def detect(self, frequency: FrequencyAnalysis) -> float:
        """
        Determine if this could be Playfair-encrypted.

        Playfair ciphertext has an even letter count, never contains J,
        and sits between monoalphabetic and polyalphabetic IOC.
        """
        if not self.is_plausible(frequency):
            return 0.0

        ioc = frequency.index_of_coincidence
        if 0.045 < ioc < 0.065:
            return 0.4
        elif ioc > 0.06:
            return 0.2
        return 0.1

    def is_plausible(self, frequency: FrequencyAnalysis) -> bool:
        """Even letter count with no J."""
        return (
            frequency.total_letters > 0
            and frequency.total_letters % 2 == 0
            and frequency.letter_frequency.get("J", 0) == 0
        )

    def speculative(self, frequency: FrequencyAnalysis) -> PlaintextCandidate | None:
        """A keyless "possible Playfair" report when the structure fits."""
        if not self.is_plausible(frequency) or frequency.total_letters <= self.MIN_SPECULATIVE_LENGTH:
            return None
        return PlaintextCandidate(
            plaintext=self.SPECULATIVE_PLAINTEXT,
            score=0.0,
            confidence=self.SPECULATIVE_CONFIDENCE,
            cipher_type=self.cipher_type,
            key="",
            method="Playfair cipher (possible)",
        )

    def attempt_decrypt(self, ciphertext: str, options: dict[str, Any]) -> list[PlaintextCandidate]:
        """Dictionary attack over common keywords plus the bare alphabet square."""
        letters = self._filter(ciphertext)
        if not letters or len(letters) % 2:
            return []

        candidates = []
        for keyword in self.COMMON_KEYS + [""]:
            label = keyword or "(standard)"
            candidates.append(self.candidate(
                self._decrypt(letters, keyword),
                label,
                f"Playfair cipher, keyword '{label}'",
            ))

        candidates.sort(key=lambda c: -c.score)
        return candidates

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        if not self.validate_key(key):
            raise ValueError("Invalid key: must be alphabetic")

        keyword = self._parse_key(key)
        plaintext = self._decrypt(ciphertext, keyword)
        return DecryptionResult(
            plaintext=plaintext,
            key=keyword,
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, keyword),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        if not self.validate_key(key):
            raise ValueError("Invalid key: must be alphabetic")
        return self._encrypt(plaintext, self._parse_key(key))

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        """Validate that key is alphabetic."""
        try:
            key_str = self._parse_key(key)
        except (ValueError, TypeError):
            return False
        return all(c in self.ALPHABET for c in key_str)

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        keyword = "" if key == "(standard)" else self._parse_key(key)
        rows = "\n".join(" ".join(row) for row in self._build_key_square(keyword))
        return (
            f"Playfair cipher, keyword '{keyword or '(none)'}'. Key square:\n{rows}\n"
            "Each ciphertext pair was mapped back through the row, column and rectangle rules."
        )

    def _parse_key(self, key: str | dict[str, Any]) -> str:
        """Parse key to string."""
        return str(self._key_value(key, "keyword")).upper().replace("J", "I")

    def _filter(self, text: str) -> str:
        return "".join(c for c in text.upper().replace("J", "I") if c in self.ALPHABET)

    def _build_key_square(self, keyword: str) -> list[list[str]]:
        """Build the 5x5 key square from a keyword."""
        # Keyword letters first without duplicates, then the rest of the alphabet
        key_letters = list(dict.fromkeys(
            c for c in keyword.upper().replace("J", "I") + self.ALPHABET if c in self.ALPHABET
        ))
        return [key_letters[i * 5:(i + 1) * 5] for i in range(5)]

    @staticmethod
    def _positions(square: list[list[str]]) -> dict[str, tuple[int, int]]:
        return {char: (row, col) for row, line in enumerate(square) for col, char in enumerate(line)}

    def _prepare_digraphs(self, text: str) -> list[tuple[str, str]]:
        """Split into pairs, breaking doubled letters and padding the tail with X."""
        letters = self._filter(text)
        pairs = []
        pending = ""
        for char in letters:
            if not pending:
                pending = char
            elif pending == char:
                pairs.append((pending, "X"))
                pending = char
            else:
                pairs.append((pending, char))
                pending = ""
        if pending:
            pairs.append((pending, "X"))
        return pairs

    def _encrypt(self, plaintext: str, keyword: str) -> str:
        """Encrypt using Playfair cipher."""
        return self._transform(self._prepare_digraphs(plaintext), keyword, 1)

    def _decrypt(self, ciphertext: str, keyword: str) -> str:
        """Decrypt using Playfair cipher."""
        filtered = self._filter(ciphertext)
        if len(filtered) % 2 != 0:
            filtered += "X"
        digraphs = [(filtered[i], filtered[i + 1]) for i in range(0, len(filtered), 2)]
        return self._transform(digraphs, keyword, -1)

    def _transform(self, digraphs: list[tuple[str, str]], keyword: str, step: int) -> str:
        """Apply the row/column/rectangle rules; step is 1 to encrypt, -1 to decrypt."""
        square = self._build_key_square(keyword)
        positions = self._positions(square)

        result = []
        for a, b in digraphs:
            row_a, col_a = positions[a]
            row_b, col_b = positions[b]

            if row_a == row_b:
                result.append(square[row_a][(col_a + step) % 5])
                result.append(square[row_b][(col_b + step) % 5])
            elif col_a == col_b:
                result.append(square[(row_a + step) % 5][col_a])
                result.append(square[(row_b + step) % 5][col_b])
            else:
                # Rectangle: swap columns
                result.append(square[row_a][col_b])
                result.append(square[row_b][col_a])

        return "".join(result)
