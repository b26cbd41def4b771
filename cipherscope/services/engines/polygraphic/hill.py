from math import gcd
from typing import Any, ClassVar

from cipherscope.models.schemas import CipherFamily, CipherType, FrequencyAnalysis, PlaintextCandidate
from cipherscope.services.engines.base import CipherEngine, DecryptionResult
from cipherscope.services.engines.registry import EngineRegistry


@EngineRegistry.register
class HillEngine(CipherEngine):
    """
    Hill cipher: letters are taken n at a time as vectors over Z/26 and
    multiplied by an n x n key matrix (n is 2 or 3).

        [a b] [p1]   [a*p1 + b*p2]
        [c d] [p2] = [c*p1 + d*p2]   (mod 26)

    Keys are 4 or 9 letters read row by row, or {"matrix": [[...], ...]}.
    The determinant must be coprime with 26. Output is uppercase letters,
    X-padded to a whole block.

    There is no ciphertext-only attack here. attempt_decrypt only tries a
    handful of textbook 2x2 keys, and speculative() flags text whose shape
    fits a Hill cipher.
    """

    name = "Hill Cipher"
    cipher_type = CipherType.HILL
    cipher_family = CipherFamily.POLYGRAPHIC
    description = (
        "Linear algebra over the alphabet: each block of 2 or 3 letters is "
        "multiplied by a key matrix modulo 26, and decryption multiplies by its inverse."
    )

    TEXTBOOK_KEYS: ClassVar[list[list[list[int]]]] = [
        [[3, 3], [2, 5]],    # DDCF
        [[6, 24], [1, 13]],  # GYBN
        [[5, 8], [17, 3]],   # FIRD
        [[2, 3], [1, 4]],    # CDBE
        [[9, 4], [5, 7]],    # JEFH
    ]

    SPECULATIVE_IOC: ClassVar[tuple[float, float]] = (0.030, 0.050)
    SPECULATIVE_CONFIDENCE: ClassVar[float] = 25.0
    SPECULATIVE_PLAINTEXT: ClassVar[str] = "[Hill cipher decryption requires key matrix]"

    def detect(self, frequency: FrequencyAnalysis) -> float:
        """Likelihood from a flattened IoC and a letter count that fills whole blocks."""
        ioc = frequency.index_of_coincidence
        whole_blocks = frequency.total_letters % 2 == 0 or frequency.total_letters % 3 == 0

        if ioc > 0.055:
            likelihood = 0.1
        elif ioc > 0.04:
            likelihood = 0.3
        else:
            likelihood = 0.2
        if whole_blocks:
            likelihood += 0.05
        return likelihood

    def speculative(self, frequency: FrequencyAnalysis) -> PlaintextCandidate | None:
        """A keyless "possible Hill" report for block-sized, flattened text."""
        low, high = self.SPECULATIVE_IOC
        length = frequency.total_letters
        if not (low < frequency.index_of_coincidence < high) or length == 0:
            return None
        if length % 2 != 0 and length % 3 != 0:
            return None
        return PlaintextCandidate(
            plaintext=self.SPECULATIVE_PLAINTEXT,
            score=0.0,
            confidence=self.SPECULATIVE_CONFIDENCE,
            cipher_type=self.cipher_type,
            key="",
            method="Hill cipher (possible)",
        )

    def attempt_decrypt(self, ciphertext: str, options: dict[str, Any]) -> list[PlaintextCandidate]:
        letters = self._filter(ciphertext)
        if not letters or len(letters) % 2:
            return []

        candidates = []
        for matrix in self.TEXTBOOK_KEYS:
            inverse = self._matrix_inverse_mod26(matrix)
            if inverse is None:
                continue
            key_str = self._matrix_to_string(matrix)
            candidates.append(self.candidate(
                self._apply_matrix(letters, inverse),
                key_str,
                f"Hill cipher, textbook 2x2 key {key_str}",
            ))

        candidates.sort(key=lambda c: -c.score)
        return candidates

    def decrypt_with_key(self, ciphertext: str, key: str | dict[str, Any]) -> DecryptionResult:
        matrix = self._parse_key(key)
        inverse = self._matrix_inverse_mod26(matrix)
        if inverse is None:
            raise ValueError("Key matrix is not invertible mod 26")

        plaintext = self._apply_matrix(ciphertext, inverse)
        key_str = self._matrix_to_string(matrix)
        return DecryptionResult(
            plaintext=plaintext,
            key=key_str,
            confidence=100.0,
            explanation=self.explain(ciphertext, plaintext, key_str),
        )

    def encrypt(self, plaintext: str, key: str | dict[str, Any]) -> str:
        matrix = self._parse_key(key)
        if self._matrix_inverse_mod26(matrix) is None:
            raise ValueError("Key matrix is not invertible mod 26")
        return self._apply_matrix(plaintext, matrix)

    def validate_key(self, key: str | dict[str, Any]) -> bool:
        try:
            return self._matrix_inverse_mod26(self._parse_key(key)) is not None
        except (ValueError, TypeError):
            return False

    def explain(self, ciphertext: str, plaintext: str, key: str | dict[str, Any]) -> str:
        matrix = self._parse_key(key)
        n = len(matrix)
        rows = "\n".join("  " + " ".join(f"{value:2d}" for value in row) for row in matrix)
        return (
            f"Hill cipher, {n}x{n} key matrix ({self._matrix_to_string(matrix)}):\n{rows}\n"
            f"Blocks of {n} letters were multiplied by the inverse of this matrix mod 26."
        )

    def _parse_key(self, key: str | dict[str, Any] | list[list[int]]) -> list[list[int]]:
        """Parse key to matrix; 4 letters give a 2x2 matrix and 9 letters a 3x3."""
        if isinstance(key, list):
            return key

        key = self._key_value(key, "matrix")
        if isinstance(key, list):
            return key

        key_str = str(key).upper()
        if len(key_str) not in (4, 9) or not all(c in self.ALPHABET for c in key_str):
            raise ValueError("Invalid key format: expected 4 or 9 letters")

        n = 2 if len(key_str) == 4 else 3
        values = [self.ALPHABET.index(c) for c in key_str]
        return [values[i * n:(i + 1) * n] for i in range(n)]

    def _matrix_to_string(self, matrix: list[list[int]]) -> str:
        """Convert matrix to string representation."""
        return "".join(self.ALPHABET[x % 26] for row in matrix for x in row)

    def _filter(self, text: str) -> str:
        return "".join(c for c in text.upper() if c in self.ALPHABET)

    @staticmethod
    def _mod_inverse(a: int, m: int = 26) -> int | None:
        """Calculate modular multiplicative inverse."""
        if gcd(a % m, m) != 1:
            return None
        return pow(a % m, -1, m)

    def _matrix_inverse_mod26(self, matrix: list[list[int]]) -> list[list[int]] | None:
        """Inverse modulo 26 via the adjugate, or None when the determinant has no inverse."""
        n = len(matrix)
        if n not in (2, 3):
            raise ValueError("Only 2x2 and 3x3 matrices supported")

        det = sum(matrix[0][j] * self._cofactor(matrix, 0, j) for j in range(n))
        det_inv = self._mod_inverse(det % 26)
        if det_inv is None:
            return None

        # adj(M)[i][j] is the (j, i) cofactor
        return [
            [(self._cofactor(matrix, j, i) * det_inv) % 26 for j in range(n)]
            for i in range(n)
        ]

    @staticmethod
    def _cofactor(m: list[list[int]], row: int, col: int) -> int:
        minor = [
            [value for c, value in enumerate(line) if c != col]
            for r, line in enumerate(m) if r != row
        ]
        if len(minor) == 1:
            det = minor[0][0]
        else:
            det = minor[0][0] * minor[1][1] - minor[0][1] * minor[1][0]
        return -det if (row + col) % 2 else det

    def _apply_matrix(self, text: str, matrix: list[list[int]]) -> str:
        """Multiply each padded block of letters by the matrix."""
        letters = self._filter(text)
        n = len(matrix)

        # Pad to multiple of block size
        if len(letters) % n:
            letters += "X" * (n - len(letters) % n)

        result = []
        for i in range(0, len(letters), n):
            block = [self.ALPHABET.index(c) for c in letters[i:i + n]]
            for row in matrix:
                result.append(self.ALPHABET[sum(row[j] * block[j] for j in range(n)) % 26])

        return "".join(result)
