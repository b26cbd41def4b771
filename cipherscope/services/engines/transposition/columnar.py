from itertools import permutations
from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class ColumnarEngine(CipherEngine):
    """
    Columnar transposition.

    Text fills a grid row by row, one column per key position, and the
    columns are emitted in the key's alphabetical order. ZEBRAS numbers its
    columns 6 3 2 4 1 5:

        Z E B R A S
        W E A R E D
        I S C O V E
        R E D F L E
        E A T O N C
        E

    giving EVLN ACDT ESEA ROFO DEEC WIREE. Keys may also be a numeric
    order such as "2,1,3". All characters are moved and the last row stays
    short rather than padded.
    """

    name = "Columnar Transposition Cipher"
    cipher_type = CipherType.COLUMNAR
    cipher_family = CipherFamily.TRANSPOSITION
    description = "Grid transposition: rows in, columns out in the keyword's alphabetical order."

    MAX_COLUMNS: ClassVar[int] = 20
    # Every ordering is tried up to this many columns
    MAX_PERMUTED_COLUMNS: ClassVar[int] = 5
    CONFIDENCE_CAP: ClassVar[float] = 80.0

    def detect(self, frequency: FrequencyAnalysis) -> float:
        ioc = frequency.index_of_coincidence
        if ioc > 0.065:
            return 0.6
        if ioc > 0.06:
            return 0.4
        return 0.1

    def attempt_decrypt(
        self,
        ciphertext: str,
        options: dict[str, Any],
    ) -> list[PlaintextCandidate]:
        """
        Try different column counts and orderings.

        Each column count contributes its best ordering; small counts try
        every permutation, larger ones only the natural order.
        """
        n = len(ciphertext)
        max_columns = min(options.get("max_columns", self.MAX_COLUMNS), n // 3)
        candidates = []

        for columns in range(2, max_columns + 1):
            if columns <= self.MAX_PERMUTED_COLUMNS:
                orders = [list(perm) for perm in permutations(range(1, columns + 1))]
            else:
                orders = [list(range(1, columns + 1))]

            best = None
            for order in orders:
                plaintext = self._decrypt_with_order(ciphertext, order)
                if plaintext == ciphertext:
                    continue
                score = self.score(plaintext)
                if best is None or score > best[0]:
                    best = (score, order, plaintext)

            if best is None:
                continue

            score, order, plaintext = best
            candidates.append(self.candidate(
                plaintext,
                ",".join(map(str, order)),
                f"Columnar transposition with {columns} columns",
                score=score,
                confidence=min(score, self.CONFIDENCE_CAP),
            ))

        candidates.sort(key=lambda c: (-c.score, len(c.key)))
        return candidates

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        if not self.validate_key(key):
            raise ValueError("Invalid key: need a keyword or an ordering of at least 2 columns")

        order = self._order(key)
        plaintext = self._decrypt_with_order(ciphertext, order)
        key_display = ",".join(map(str, order))
        return DecryptionResult(
            plaintext=plaintext,
            key=key_display,
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, key_display),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        if not self.validate_key(key):
            raise ValueError("Invalid key: need a keyword or an ordering of at least 2 columns")
        return self._encrypt_with_order(plaintext, self._order(key))

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        """A keyword of 2+ letters, or a permutation of 1..n with n >= 2."""
        try:
            key_parsed = self._parse_key(key)
        except (ValueError, TypeError, IndexError):
            return False
        if isinstance(key_parsed, str):
            return len(key_parsed) >= 2 and key_parsed.isalpha()
        return len(key_parsed) >= 2 and sorted(key_parsed) == list(range(1, len(key_parsed) + 1))

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        key_parsed = self._parse_key(key)
        if isinstance(key_parsed, str):
            order = ",".join(map(str, self._keyword_to_order(key_parsed)))
            return (
                f"Columnar transposition, keyword '{key_parsed}' (column order {order}). "
                "Columns were refilled in that order and the grid read back row by row."
            )
        return (
            f"Columnar transposition, column order {','.join(map(str, key_parsed))}. "
            "Columns were refilled in that order and the grid read back row by row."
        )

    def _parse_key(self, key: str | dict[str, Any]) -> str | list[int]:
        """Keyword string, or a numeric order given as "2,1,3" or a list."""
        key = self._key_value(key, "keyword", "order")

        if isinstance(key, list):
            return [int(x) for x in key]

        key_str = str(key)

        # Numeric ordering like "3,1,4,2"
        if "," in key_str or key_str[0].isdigit():
            return [int(x) for x in key_str.replace(" ", "").split(",")]

        return key_str.upper()

    def _order(self, key: str | dict[str, Any]) -> list[int]:
        key_parsed = self._parse_key(key)
        if isinstance(key_parsed, str):
            return self._keyword_to_order(key_parsed)
        return key_parsed

    @staticmethod
    def _keyword_to_order(keyword: str) -> list[int]:
        """Rank of each keyword letter; repeated letters rank left to right."""
        ranked = sorted(range(len(keyword)), key=lambda i: keyword[i].upper())
        order = [0] * len(keyword)
        for rank, position in enumerate(ranked, start=1):
            order[position] = rank
        return order

    @staticmethod
    def _encrypt_with_order(plaintext: str, order: list[int]) -> str:
        """Rows in, columns out in order."""
        width = len(order)
        by_rank = sorted(range(width), key=lambda position: order[position])
        return "".join(plaintext[position::width] for position in by_rank)

    @staticmethod
    def _decrypt_with_order(ciphertext: str, order: list[int]) -> str:
        """Cut the ciphertext into columns of the right lengths, then read rows."""
        width = len(order)
        rows, remainder = divmod(len(ciphertext), width)

        # The first `remainder` columns hold one extra character
        columns = [""] * width
        start = 0
        for position in sorted(range(width), key=lambda p: order[p]):
            length = rows + (1 if position < remainder else 0)
            columns[position] = ciphertext[start:start + length]
            start += length

        return "".join(
            column[row]
            for row in range(rows + 1)
            for column in columns
            if row < len(column)
        )
