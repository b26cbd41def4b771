import re
import string
from collections import Counter
from typing import Any, ClassVar

from cipherscope.models.schemas import PatternCategory
from cipherscope.services.patterns.base import DetectionPattern, shift_letters
from cipherscope.services.patterns.registry import PatternRegistry


CIPHER_TEXT_RE = re.compile(r"^[a-zA-Z\s.,;:!?\-'\"()\[\]{}0-9]*$")


def letter_shares(text: str) -> dict[str, float]:
    """Lower-case letter frequencies as fractions of all letters."""
    letters = [c for c in text.lower() if "a" <= c <= "z"]
    if not letters:
        return {}
    counts = Counter(letters)
    return {letter: count / len(letters) for letter, count in counts.items()}


def alpha_count(text: str) -> int:
    return sum(1 for c in text if c.isascii() and c.isalpha())


BASE64_TOKEN_RE = re.compile(r"^[A-Za-z0-9+/]{8,}={0,2}$")


def is_base64_token(text: str) -> bool:
    """
    A single unbroken token shaped like Base64.

    Needs a length that is a multiple of 4, both letter cases and a digit,
    '+', '/' or '=' somewhere; prose never looks like this.
    """
    text = text.strip()
    if len(text) % 4 != 0 or not BASE64_TOKEN_RE.match(text):
        return False
    if not (any(c.isupper() for c in text) and any(c.islower() for c in text)):
        return False
    return any(c.isdigit() or c in "+/=" for c in text)


class ClassicalCipherPattern(DetectionPattern):
    """Shared behaviour of the fixed-rule classical ciphers."""

    category = PatternCategory.CLASSICAL_CIPHER
    reversible = True

    FILTER_RE: ClassVar[re.Pattern[str]] = CIPHER_TEXT_RE

    # Extra language score the decode must gain over the input
    MIN_IMPROVEMENT: ClassVar[float] = 0.0

    def quick_filter(self, text: str) -> bool:
        return bool(text) and bool(self.FILTER_RE.match(text))

    def accept(self, source: str, decoded: str) -> bool:
        return (
            self.language.language_score(decoded)
            > self.language.language_score(source) + self.MIN_IMPROVEMENT
        )

    def adjust_confidence(self, source: str, decoded: str, confidence: float) -> float:
        if self.language.language_score(decoded) > 30:
            confidence += 15
        return confidence


@PatternRegistry.register
class Rot13Pattern(ClassicalCipherPattern):
    """ROT13: Caesar shift by 13, its own inverse."""

    name = "ROT13"
    description = "Letters rotated 13 places; applying it twice restores the text."

    MIN_IMPROVEMENT: ClassVar[float] = 5.0
    MIN_READABILITY: ClassVar[float] = 15.0

    # ROT13 images of e, t, a, o, i, n, s, h, r
    ENCODED_COMMON: ClassVar[str] = "rgnbvafue"

    def validate(self, text: str) -> bool:
        if len(text) < 3 or is_base64_token(text):
            return False
        letters = alpha_count(text)
        if letters < 3:
            return False
        shares = letter_shares(text)
        encoded = sum(1 for letter in self.ENCODED_COMMON if shares.get(letter, 0) > 0)
        return encoded >= 3 or letters / len(text) > 0.7

    def decode(self, text: str, **params: Any) -> str | None:
        return shift_letters(text, 13)

    def accept(self, source: str, decoded: str) -> bool:
        return (
            self.language.language_score(decoded) >= self.MIN_READABILITY
            and super().accept(source, decoded)
        )

    def encode(self, text: str, **params: Any) -> str:
        return shift_letters(text, 13)


@PatternRegistry.register
class CaesarPattern(ClassicalCipherPattern):
    """
    Caesar shift with an unknown key.

    Without a shift parameter, decode() tries all 25 shifts and keeps the most
    English-looking one. Shifts are encryption shifts: key 3 maps A to D.
    """

    name = "Caesar Cipher"
    description = "Every letter shifted by the same amount."

    COMMON_LETTERS: ClassVar[str] = "etaoinshr"
    MIN_COMPOSITE: ClassVar[float] = 30.0

    def validate(self, text: str) -> bool:
        if len(text) < 4 or alpha_count(text) < 4 or is_base64_token(text):
            return False

        entropy = self.analyzer.entropy(text)
        if entropy < 2.0 or entropy > 6.0:
            return False

        # Plain English already shows its common letters
        shares = letter_shares(text)
        common = sum(1 for letter in self.COMMON_LETTERS if shares.get(letter, 0) > 0.05)
        return common < 4

    def decode(self, text: str, **params: Any) -> str | None:
        if "shift" in params:
            return shift_letters(text, -int(params["shift"]))
        _, plaintext, composite = self.best_shift(text)
        return plaintext if composite > self.MIN_COMPOSITE else None

    def accept(self, source: str, decoded: str) -> bool:
        return True

    def encode(self, text: str, **params: Any) -> str:
        return shift_letters(text, int(params.get("shift", 3)))

    def best_shift(self, text: str) -> tuple[int, str, float]:
        """
        Try every shift.

        Returns:
            Tuple of (encryption shift, plaintext, composite score)
        """
        best = (0, text, 0.0)
        for shift in range(1, 26):
            candidate = shift_letters(text, -shift)
            entropy = self.analyzer.entropy(candidate)
            composite = self.language.language_score(candidate) * 0.8
            if 3.5 <= entropy <= 5.5:
                composite += 20 * 0.2
            if composite > best[2]:
                best = (shift, candidate, composite)
        return best

    def warnings(self, source: str, decoded: str) -> list[str]:
        if self.language.language_score(decoded) < 15:
            return ["Low language score - may not be English text"]
        return []


@PatternRegistry.register
class AtbashPattern(ClassicalCipherPattern):
    """Atbash: the alphabet mirrored, A<->Z, B<->Y."""

    name = "Atbash Cipher"
    description = "Each letter replaced by its mirror in the alphabet."

    MIN_IMPROVEMENT: ClassVar[float] = 10.0

    COMMON: ClassVar[str] = "etaoi"
    MIRRORED: ClassVar[str] = "vgzlr"

    TABLE: ClassVar[dict[int, int]] = str.maketrans(
        string.ascii_letters,
        string.ascii_lowercase[::-1] + string.ascii_uppercase[::-1],
    )

    def validate(self, text: str) -> bool:
        if len(text) < 4 or is_base64_token(text):
            return False
        letters = alpha_count(text)
        if letters < 4:
            return False

        shares = letter_shares(text)
        inversions = sum(
            1
            for common, mirrored in zip(self.COMMON, self.MIRRORED)
            if shares.get(mirrored, 0) > shares.get(common, 0)
        )
        return inversions >= 2 or letters / len(text) > 0.8

    def decode(self, text: str, **params: Any) -> str | None:
        return text.translate(self.TABLE)

    def encode(self, text: str, **params: Any) -> str:
        return text.translate(self.TABLE)


@PatternRegistry.register
class A1Z26Pattern(DetectionPattern):
    """Letters as their alphabet positions, A=1 to Z=26."""

    name = "A1Z26 (Numbers to Letters)"
    category = PatternCategory.CLASSICAL_CIPHER
    reversible = True
    description = "Each letter written as its position in the alphabet."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9\s,-]+$")
    SPLIT_RE: ClassVar[re.Pattern[str]] = re.compile(r"[\s,-]+")

    def validate(self, text: str) -> bool:
        numbers = [n for n in self.SPLIT_RE.split(text) if n]
        return len(numbers) >= 2 and all(1 <= int(n) <= 26 for n in numbers)

    def decode(self, text: str, **params: Any) -> str | None:
        numbers = [int(n) for n in self.SPLIT_RE.split(text) if n]
        if not numbers or not all(1 <= n <= 26 for n in numbers):
            return None
        return "".join(chr(64 + n) for n in numbers)

    def encode(self, text: str, **params: Any) -> str:
        words = []
        for word in text.upper().split():
            numbers = [str(ord(c) - 64) for c in word if "A" <= c <= "Z"]
            if numbers:
                words.append("-".join(numbers))
        return " ".join(words)


@PatternRegistry.register
class BaconPattern(DetectionPattern):
    """Bacon's biliteral cipher, 26-letter variant."""

    name = "Bacon Cipher"
    category = PatternCategory.CLASSICAL_CIPHER
    reversible = True
    description = "Each letter written as a five-symbol group of A and B."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[ABab\s]+$")

    CODES: ClassVar[dict[str, str]] = {
        letter: format(index, "05b").replace("0", "A").replace("1", "B")
        for index, letter in enumerate(string.ascii_uppercase)
    }
    LETTERS: ClassVar[dict[str, str]] = {code: letter for letter, code in CODES.items()}

    def validate(self, text: str) -> bool:
        cleaned = re.sub(r"\s", "", text).upper()
        return len(cleaned) >= 5 and len(cleaned) % 5 == 0

    def decode(self, text: str, **params: Any) -> str | None:
        cleaned = re.sub(r"\s", "", text).upper()
        letters = []
        for i in range(0, len(cleaned), 5):
            letter = self.LETTERS.get(cleaned[i:i + 5])
            if letter is None:
                return None
            letters.append(letter)
        return "".join(letters) or None

    def encode(self, text: str, **params: Any) -> str:
        return " ".join(self.CODES[c] for c in text.upper() if c in self.CODES)


@PatternRegistry.register
class PolybiusPattern(DetectionPattern):
    """5x5 Polybius square with I and J sharing a cell."""

    name = "Polybius Square"
    category = PatternCategory.CLASSICAL_CIPHER
    reversible = True
    description = "Each letter written as its row and column in a 5x5 grid."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[1-5\s]+$")
    GRID: ClassVar[str] = "ABCDEFGHIKLMNOPQRSTUVWXYZ"

    def validate(self, text: str) -> bool:
        digits = re.sub(r"\s", "", text)
        return len(digits) >= 2 and len(digits) % 2 == 0

    def decode(self, text: str, **params: Any) -> str | None:
        digits = re.sub(r"\s", "", text)
        letters = []
        for i in range(0, len(digits) - 1, 2):
            row, col = int(digits[i]) - 1, int(digits[i + 1]) - 1
            if not (0 <= row < 5 and 0 <= col < 5):
                return None
            letters.append(self.GRID[row * 5 + col])
        return "".join(letters) or None

    def encode(self, text: str, **params: Any) -> str:
        pairs = []
        for char in text.upper().replace("J", "I"):
            index = self.GRID.find(char)
            if index >= 0:
                pairs.append(f"{index // 5 + 1}{index % 5 + 1}")
        return " ".join(pairs)


@PatternRegistry.register
class MorsePattern(DetectionPattern):
    """International Morse code; letters split by spaces, words by '/' or 3+ spaces."""

    name = "Morse Code"
    category = PatternCategory.LEGACY
    reversible = True
    description = "Letters written as dots and dashes."

    FILTER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[.\-\s/]+$")
    WORD_SPLIT_RE: ClassVar[re.Pattern[str]] = re.compile(r"\s{3,}|/")

    CODES: ClassVar[dict[str, str]] = {
        "A": ".-", "B": "-...", "C": "-.-.", "D": "-..", "E": ".",
        "F": "..-.", "G": "--.", "H": "....", "I": "..", "J": ".---",
        "K": "-.-", "L": ".-..", "M": "--", "N": "-.", "O": "---",
        "P": ".--.", "Q": "--.-", "R": ".-.", "S": "...", "T": "-",
        "U": "..-", "V": "...-", "W": ".--", "X": "-..-", "Y": "-.--",
        "Z": "--..", "1": ".----", "2": "..---", "3": "...--", "4": "....-",
        "5": ".....", "6": "-....", "7": "--...", "8": "---..", "9": "----.",
        "0": "-----", ",": "--..--", ".": ".-.-.-", "?": "..--..", "'": ".----.",
        "!": "-.-.--", "/": "-..-.", "(": "-.--.", ")": "-.--.-", "&": ".-...",
        ":": "---...", ";": "-.-.-.", "=": "-...-", "+": ".-.-.", "-": "-....-",
        "_": "..--.-", '"': ".-..-.", "$": "...-..-", "@": ".--.-.",
    }
    LETTERS: ClassVar[dict[str, str]] = {code: char for char, code in CODES.items()}

    def validate(self, text: str) -> bool:
        return len(text) > 2 and ("." in text or "-" in text)

    def decode(self, text: str, **params: Any) -> str | None:
        words = []
        for word in self.WORD_SPLIT_RE.split(text):
            letters = []
            for code in word.split():
                char = self.LETTERS.get(code)
                if char is None:
                    return None
                letters.append(char)
            if letters:
                words.append("".join(letters))
        return " ".join(words) or None

    def encode(self, text: str, **params: Any) -> str:
        words = []
        for word in text.upper().split():
            codes = [self.CODES[c] for c in word if c in self.CODES]
            if codes:
                words.append(" ".join(codes))
        return " / ".join(words)
