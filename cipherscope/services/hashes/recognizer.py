"""
Hash recognition.

Identification only: a digest is matched against the signature table and
scored, never reversed.
"""

import logging
import re
from typing import ClassVar

from cipherscope.core.config import Settings, get_settings
from cipherscope.core.exceptions import InvalidInputError
from cipherscope.models.schemas import (
    HashAnalysis,
    HashCharacteristics,
    HashCharset,
    HashStrength,
    SecurityAssessment,
)
from cipherscope.services.analysis.statistics import StatisticalAnalyzer
from cipherscope.services.hashes.signatures import QUICK_SHAPES, SIGNATURES, SIGNATURES_BY_NAME, HashSignature

logger = logging.getLogger(__name__)


class HashRecognizer:
    """
    Ranks hash signatures against an input string.

    Scoring combines a fixed pattern-match weight, entropy closeness to the
    ideal hex band, character-distribution balance and per-algorithm bonuses.
    """

    HEX_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[a-fA-F0-9]+$")
    BASE64_CHARS_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9+/=]+$")
    DES_CHARS_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9./]+$")

    COMMON_LENGTHS: ClassVar[frozenset[int]] = frozenset({32, 40, 56, 64, 96, 128})
    # Bonus for the most widespread algorithm at its length
    POPULAR: ClassVar[dict[str, float]] = {"MD5": 12.0, "SHA-256": 15.0, "SHA-1": 10.0}

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.analyzer = StatisticalAnalyzer()

    def analyze(self, text: str) -> list[HashAnalysis]:
        """
        Identify which hash formats text could be.

        Args:
            text: Candidate digest; surrounding whitespace is ignored

        Returns:
            Up to hash_max_results analyses, most likely first

        Raises:
            InvalidInputError: If text is empty
        """
        digest = text.strip()
        if not digest:
            raise InvalidInputError("Please provide a hash to analyze")

        entropy = self.analyzer.entropy(digest)
        max_share = self.analyzer.max_char_share(digest.lower())

        ranked: list[tuple[float, HashAnalysis]] = []
        for signature in SIGNATURES:
            if not signature.matches(digest):
                continue

            raw = self.base_score(digest, signature)
            raw += self.bonus(digest, signature, entropy, max_share)
            if raw <= self.settings.hash_min_confidence:
                continue

            analysis = self._build(digest, signature, min(raw, 100.0), entropy)
            sort_score = raw
            if analysis.characteristics.salt_detected:
                sort_score += 5
            if signature.strength is HashStrength.VERY_STRONG:
                sort_score += 3
            ranked.append((sort_score, analysis))

        # Stable sort keeps table order among equal scores
        ranked.sort(key=lambda item: -item[0])
        logger.debug("Hash recognition matched %d signatures", len(ranked))
        return [analysis for _, analysis in ranked[:self.settings.hash_max_results]]

    def quick_match(self, text: str) -> str | None:
        """Name of the first well-known hash shape text has, if any."""
        digest = text.strip()
        for name, pattern in QUICK_SHAPES:
            if pattern.match(digest):
                return name
        return None

    def digest_name(self, text: str) -> str | None:
        """
        Like quick_match(), but hex that decodes to printable ASCII is
        left to the hex decoder.
        """
        name = self.quick_match(text)
        if name is None or self.hex_reads_as_text(text.strip()):
            return None
        return name

    def hex_reads_as_text(self, text: str) -> bool:
        """Whether a hex-shaped input is really hex-encoded language."""
        try:
            raw = bytes.fromhex(text)
        except ValueError:
            return False
        # Random digests are almost never entirely printable ASCII
        decoded = raw.decode("latin-1")
        return decoded.isascii() and self.analyzer.printable_ratio(decoded) == 1.0

    def base_score(self, digest: str, signature: HashSignature) -> float:
        """Pattern, length and charset agreement, capped at 100."""
        score = 60.0 + 20.0

        if signature.charset is HashCharset.HEX and self.HEX_RE.match(digest):
            score += 15
        elif signature.charset in (HashCharset.BASE64, HashCharset.BASE64_VARIANT) and self.BASE64_CHARS_RE.match(digest):
            score += 15
        elif signature.charset is HashCharset.DES_CRYPT and self.DES_CHARS_RE.match(digest):
            score += 15

        algorithm = signature.algorithm
        if algorithm == "bcrypt" and digest.startswith("$2"):
            score += 10
        if "Argon2" in algorithm and "$argon2" in digest:
            score += 10
        if "PBKDF2" in algorithm and "pbkdf2" in digest:
            score += 10
        if "crypt" in algorithm and "$" in digest:
            score += 10

        if signature.strength is HashStrength.VERY_STRONG:
            score += 5
        elif signature.strength is HashStrength.WEAK:
            score -= 5

        return min(score, 100.0)

    def bonus(self, digest: str, signature: HashSignature, entropy: float, max_share: float) -> float:
        """Statistical and popularity bonuses; these may push the raw score past 100."""
        bonus = 0.0
        if 3.8 <= entropy <= 4.2:
            bonus += 15
        elif 3.5 <= entropy <= 4.5:
            bonus += 8

        if max_share < 0.15:
            bonus += 10
        elif max_share < 0.2:
            bonus += 5

        bonus += self.POPULAR.get(signature.name, 0.0)

        has_upper = re.search(r"[A-F]", digest) is not None
        has_lower = re.search(r"[a-f]", digest) is not None
        if has_upper and has_lower:
            bonus += 8
        elif has_upper or has_lower:
            bonus += 3

        if len(digest) in self.COMMON_LENGTHS:
            bonus += 5
        return bonus

    def get_hash_info(self, hash_type: str) -> HashSignature | None:
        return SIGNATURES_BY_NAME.get(hash_type)

    def validate_hash_format(self, text: str, expected_type: str) -> bool:
        signature = SIGNATURES_BY_NAME.get(expected_type)
        return signature is not None and signature.matches(text.strip())

    def find_hash_variants(self, hash_type: str) -> list[str]:
        """Known renderings or sibling variants of a hash type."""
        variants = []
        if "SHA" in hash_type:
            variants.extend(["Uppercase hex", "Lowercase hex"])
        if "bcrypt" in hash_type:
            variants.extend([
                "$2a$ (original)", "$2b$ (bug fix)", "$2x$ (sign extension bug)", "$2y$ (correct)",
            ])
        if "Argon2" in hash_type:
            variants.extend([
                "Argon2d (data-dependent)", "Argon2i (data-independent)", "Argon2id (hybrid)",
            ])
        if "PBKDF2" in hash_type:
            variants.extend(["PBKDF2-SHA1", "PBKDF2-SHA256", "PBKDF2-SHA512"])
        return variants

    def suggest_hash_migration(self, hash_type: str) -> list[str]:
        """Migration advice for weak and moderate algorithms."""
        signature = SIGNATURES_BY_NAME.get(hash_type)
        if signature is None:
            return []

        if signature.strength is HashStrength.WEAK:
            return [
                "Migrate to SHA-256 for general hashing",
                "Use bcrypt or Argon2id for password hashing",
                "Consider SHA-3 for future-proofing",
            ]
        if signature.strength is HashStrength.MODERATE:
            return [
                "Consider Argon2id for password hashing",
                "Evaluate SHA-3 for new applications",
            ]
        return []

    def assess_security(self, digest: str, signature: HashSignature) -> SecurityAssessment:
        vulnerabilities = list(signature.vulnerabilities)
        recommendations = []

        if signature.strength is HashStrength.WEAK:
            recommendations.append("Consider migrating to SHA-256 or stronger")
            recommendations.append("Add salt if not present")

        if signature.algorithm in ("MD5", "SHA-1"):
            recommendations.append("URGENT: Migrate to SHA-256 or SHA-3 immediately")
            vulnerabilities.append("Cryptographically broken")

        if signature.algorithm == "NTLM":
            recommendations.append("Implement NTLMv2 or modern authentication")
            recommendations.append("Enable account lockout policies")

        if "crypt" in signature.algorithm and not self.detect_salt(digest, signature):
            vulnerabilities.append("No salt detected - vulnerable to rainbow table attacks")
            recommendations.append("Always use salted hashes")

        if signature.algorithm == "bcrypt" or "Argon2" in signature.algorithm:
            recommendations.append("Consider increasing cost factor for better security")

        return SecurityAssessment(
            strength=signature.strength,
            vulnerabilities=vulnerabilities,
            recommendations=recommendations,
            cracking_difficulty=self.cracking_difficulty(digest, signature),
        )

    def cracking_difficulty(self, digest: str, signature: HashSignature) -> str:
        rounds = self.detect_rounds(digest, signature)
        algorithm = signature.algorithm

        if signature.strength is HashStrength.WEAK:
            return "Easy - Can be cracked quickly with modern hardware"

        if algorithm == "bcrypt":
            if rounds is not None and rounds >= 12:
                return "Very Hard - High cost factor provides strong protection"
            elif rounds is not None and rounds >= 10:
                return "Hard - Adequate protection for most use cases"
            return "Moderate - Consider increasing cost factor"

        if "Argon2" in algorithm:
            return "Very Hard - Modern memory-hard function"

        if "PBKDF2" in algorithm:
            if rounds is not None and rounds >= 100_000:
                return "Hard - High iteration count"
            return "Moderate - Consider increasing iterations"

        if signature.strength is HashStrength.VERY_STRONG:
            return "Very Hard - Cryptographically secure with current technology"
        if signature.strength is HashStrength.STRONG:
            return "Hard - Secure against current attack methods"
        return "Moderate - Provides reasonable security"

    def detect_format(self, digest: str, signature: HashSignature) -> str:
        algorithm = signature.algorithm
        lower = digest.lower()

        if algorithm == "bcrypt":
            for prefix, label in (
                ("$2a$", "bcrypt 2a (original implementation)"),
                ("$2b$", "bcrypt 2b (bug-fixed version)"),
                ("$2x$", "bcrypt 2x (sign extension bug)"),
                ("$2y$", "bcrypt 2y (correct handling)"),
                ("$2$", "bcrypt 2 (legacy)"),
            ):
                if digest.startswith(prefix):
                    return label
            return "bcrypt (unknown variant)"

        if "Argon2" in algorithm:
            for marker, label in (
                ("$argon2id$", "Argon2id (hybrid mode)"),
                ("$argon2i$", "Argon2i (data-independent)"),
                ("$argon2d$", "Argon2d (data-dependent)"),
            ):
                if marker in lower:
                    return label
            return "Argon2 (non-standard format)"

        if "PBKDF2" in algorithm:
            for marker, label in (
                ("$pbkdf2-sha256$", "PBKDF2-SHA256"),
                ("$pbkdf2-sha512$", "PBKDF2-SHA512"),
                ("$pbkdf2$", "PBKDF2 (algorithm unspecified)"),
                ("pbkdf2_sha256$", "PBKDF2-SHA256 (Django)"),
            ):
                if marker in lower:
                    return label
            return "PBKDF2 (custom format)"

        if "crypt" in algorithm:
            for prefix, label in (
                ("$1$", "MD5-crypt ($1$)"),
                ("$apr1$", "Apache MD5-crypt ($apr1$)"),
                ("$5$", "SHA256-crypt ($5$)"),
                ("$6$", "SHA512-crypt ($6$)"),
                ("$P$", "phpass portable ($P$)"),
                ("$H$", "phpass portable ($H$)"),
            ):
                if digest.startswith(prefix):
                    return label
            if re.match(r"^[a-zA-Z0-9./]{13}$", digest):
                return "DES-crypt (traditional)"
            return "Unix crypt (unknown variant)"

        if ":" in digest:
            return f"{signature.name} (colon-separated)"

        if self.HEX_RE.match(digest):
            variety = len(set(lower))
            if variety < 6:
                return "Hexadecimal (low entropy)"
            if variety > 12:
                return "Hexadecimal (high entropy)"
            return "Hexadecimal (standard)"

        if "$" in digest:
            parts = digest.split("$")
            if len(parts) >= 4:
                return "Modular Crypt Format (MCF)"
            return "Dollar-separated format"

        return "Custom/Unknown format"

    def detect_salt(self, digest: str, signature: HashSignature) -> bool:
        if "$" in digest:
            parts = digest.split("$")
            # $algorithm$params$salt$hash
            if len(parts) >= 4:
                return True
            if signature.algorithm == "bcrypt":
                return re.match(r"^\$2[abxy]?\$[0-9]{2}\$", digest) is not None
            if "$argon2" in digest or "pbkdf2" in digest:
                return True

        if ":" in digest:
            parts = digest.split(":")
            if len(parts) == 2 and len(parts[0]) >= 16 and len(parts[1]) >= 4:
                return True
            if len(parts) >= 3:
                return True

        if signature.length is not None and len(digest) > signature.length * 1.5:
            return True
        return False

    def detect_rounds(self, digest: str, signature: HashSignature) -> int | None:
        """Cost factor, iteration count or time cost, when the format carries one."""
        algorithm = signature.algorithm
        if algorithm == "bcrypt":
            match = re.match(r"^\$2[abxy]?\$([0-9]{2})\$", digest)
        elif "Argon2" in algorithm:
            match = re.search(r"t=([0-9]+)", digest)
        elif "PBKDF2" in algorithm:
            match = re.search(r"\$([0-9]+)\$", digest)
        elif "crypt" in algorithm:
            match = re.search(r"\$rounds=([0-9]+)\$", digest)
        else:
            match = None
        return int(match.group(1)) if match else None

    def _build(self, digest: str, signature: HashSignature, confidence: float, entropy: float) -> HashAnalysis:
        return HashAnalysis(
            hash_type=signature.name,
            confidence=confidence,
            algorithm=signature.algorithm,
            output_size=signature.output_size,
            variants=self.find_hash_variants(signature.name),
            characteristics=HashCharacteristics(
                length=len(digest),
                charset=signature.charset,
                format=self.detect_format(digest, signature),
                entropy=entropy,
                salt_detected=self.detect_salt(digest, signature),
                rounds_detected=self.detect_rounds(digest, signature),
            ),
            security_assessment=self.assess_security(digest, signature),
            uses=list(signature.uses),
        )
