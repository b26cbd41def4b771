"""
Cross-check ensemble.

Independent strategies analyze the same input. Their candidates are merged
and ranked by confidence, and the number of candidates gives the consensus
strength. A failing strategy is logged and left out; the others still run.
"""

import base64
import binascii
import logging
import re
from abc import ABC, abstractmethod
from typing import ClassVar

from cipherscope.core.config import Settings, get_settings
from cipherscope.core.exceptions import InvalidInputError
from cipherscope.models.schemas import ConsensusStrength, CrossCheckResult, DecodingResult, HashAnalysis
from cipherscope.services.analysis.scoring import ConfidenceScorer, LanguageScorer
from cipherscope.services.analysis.statistics import StatisticalAnalyzer
from cipherscope.services.detection.detector import SingleLayerDetector
from cipherscope.services.engines.analyzer import CipherAnalyzer
from cipherscope.services.hashes.recognizer import HashRecognizer
from cipherscope.services.patterns.base import bytes_to_text

logger = logging.getLogger(__name__)


class DetectionStrategy(ABC):
    """One independent way of proposing candidates."""

    name: ClassVar[str]
    limit: ClassVar[int] = 5

    @abstractmethod
    def analyze(self, text: str) -> list[DecodingResult]:
        """Return candidates for text, best first."""
        pass


class RegistryStrategy(DetectionStrategy):
    """Strict validators of the pattern registry."""

    name = "Regex Patterns"
    limit = 5

    # Exact matching alone never claims certainty
    CONFIDENCE_CAP: ClassVar[float] = 95.0

    def __init__(self, detector: SingleLayerDetector, hash_recognizer: HashRecognizer | None = None):
        self.detector = detector
        self.hash_recognizer = hash_recognizer or HashRecognizer(detector.settings)

    def analyze(self, text: str) -> list[DecodingResult]:
        # Digests are left to the hash strategy
        if self.hash_recognizer.digest_name(text) is not None:
            return []
        outcome = self.detector.detect(text)
        return [
            candidate.model_copy(update={
                "confidence": min(candidate.confidence, self.CONFIDENCE_CAP),
                "strategy": self.name,
            })
            for candidate in outcome.candidates[:self.limit]
        ]


class EntropyStrategy(DetectionStrategy):
    """
    Statistical Base64 detection.

    Accepts on global entropy, character-class balance and chunk entropy
    uniformity instead of the strict validator.
    """

    name = "Entropy Analysis"
    limit = 8

    BASE64_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
    MIN_VALIDATION: ClassVar[float] = 0.6

    def __init__(self):
        self.analyzer = StatisticalAnalyzer()
        self.language = LanguageScorer()
        self.scorer = ConfidenceScorer()

    def analyze(self, text: str) -> list[DecodingResult]:
        entropy = self.analyzer.entropy(text)
        if not 4.5 <= entropy <= 6.5:
            return []
        if len(text) < 8 or len(text) % 4 != 0 or not self.BASE64_RE.match(text):
            return []

        balance = self.character_balance(text)
        validation = self.validation_score(text, entropy, balance)
        if validation <= self.MIN_VALIDATION:
            return []

        try:
            decoded = bytes_to_text(base64.b64decode(text, validate=True))
        except (binascii.Error, ValueError):
            return []

        profile = self.scorer.profile(decoded)
        confidence = 75 + validation * 20
        confidence += self.quality_bonus(decoded, profile.entropy, profile.language_score)

        return [DecodingResult(
            type="Base64 (Advanced Entropy)",
            result=decoded,
            confidence=min(98.0, confidence),
            score_profile=profile,
            steps=["Advanced Entropy Analysis", "Base64 Validation", "Base64 Decoding"],
            strategy=self.name,
        )]

    def character_balance(self, text: str) -> float:
        """1.0 when upper, lower, digit and +/ shares are even, lower when skewed."""
        body = text.rstrip("=")
        if not body:
            return 0.0
        counts = [
            sum(1 for c in body if c.isupper()),
            sum(1 for c in body if c.islower()),
            sum(1 for c in body if c.isdigit()),
            sum(1 for c in body if c in "+/"),
        ]
        ratios = [count / len(body) for count in counts]
        mean = sum(ratios) / len(ratios)
        variance = sum((r - mean) ** 2 for r in ratios) / len(ratios)
        return max(0.0, 1 - variance * 4)

    def validation_score(self, text: str, entropy: float, balance: float) -> float:
        score = 0.0
        if 4.5 <= entropy <= 6.2:
            score += 0.3
        chunk = max(10, len(text) // 10)
        if self.analyzer.chunk_entropy_variance(text, chunk) < 0.5:
            score += 0.2
        score += balance * 0.3
        if len(text) % 4 == 0:
            score += 0.2
        return min(1.0, score)

    @staticmethod
    def quality_bonus(decoded: str, entropy: float, language_score: float) -> float:
        bonus = 0.0
        if language_score > 70:
            bonus += 15
        elif language_score > 50:
            bonus += 10
        elif language_score > 30:
            bonus += 5

        if 3.5 <= entropy <= 5.5:
            bonus += 8
        elif 2.5 <= entropy <= 6.5:
            bonus += 4

        if 10 < len(decoded) < 10_000:
            bonus += 3
        return bonus


class HashStrategy(DetectionStrategy):
    """Hash identification; proposes digests, never plaintext."""

    name = "Hash Recognition"
    limit = 3

    def __init__(self, recognizer: HashRecognizer):
        self.recognizer = recognizer
        self.scorer = ConfidenceScorer()

    def analyze(self, text: str) -> list[DecodingResult]:
        try:
            analyses = self.recognizer.analyze(text)[:self.limit]
        except InvalidInputError:
            return []
        if not analyses:
            return []

        profile = self.scorer.profile(text)
        return [
            DecodingResult(
                type=f"{analysis.hash_type} Hash",
                result=self.describe(analysis),
                confidence=analysis.confidence,
                score_profile=profile,
                steps=[self.name, analysis.hash_type],
                warnings=["Hashes cannot be reversed to original data"],
                strategy=self.name,
            )
            for analysis in analyses
        ]

    @staticmethod
    def describe(analysis: HashAnalysis) -> str:
        if analysis.output_size:
            return f"{analysis.algorithm} digest ({analysis.output_size} bits)"
        return f"{analysis.algorithm} digest (variable size)"


class CipherStrategy(DetectionStrategy):
    """Classical cryptanalysis over every supported cipher family."""

    name = "Cipher Analysis"
    limit = 3

    def __init__(self, cipher_analyzer: CipherAnalyzer):
        self.cipher_analyzer = cipher_analyzer
        self.scorer = ConfidenceScorer()

    def analyze(self, text: str) -> list[DecodingResult]:
        try:
            analyses = self.cipher_analyzer.analyze(text)
        except InvalidInputError:
            # Too few letters to say anything about a cipher
            return []

        results = []
        for analysis in analyses[:self.limit]:
            label = CipherAnalyzer.display_name(analysis.cipher_type)
            steps = [self.name, analysis.method]
            if analysis.key_candidate:
                steps.append(f"key={analysis.key_candidate}")
            results.append(DecodingResult(
                type=label,
                result=analysis.plaintext,
                confidence=analysis.confidence,
                score_profile=self.scorer.profile(analysis.plaintext),
                steps=steps,
                strategy=self.name,
            ))
        return results


class CrossCheckEngine:
    """Runs every strategy and merges their candidates."""

    def __init__(
        self,
        settings: Settings | None = None,
        detector: SingleLayerDetector | None = None,
        strategies: list[DetectionStrategy] | None = None,
        hash_recognizer: HashRecognizer | None = None,
    ):
        self.settings = settings or get_settings()
        self.scorer = ConfidenceScorer()
        if strategies is None:
            detector = detector or SingleLayerDetector(self.settings)
            hash_recognizer = hash_recognizer or HashRecognizer(self.settings)
            strategies = [
                RegistryStrategy(detector, hash_recognizer),
                EntropyStrategy(),
                HashStrategy(hash_recognizer),
                CipherStrategy(CipherAnalyzer(self.settings)),
            ]
        self.strategies = strategies

    def cross_check(self, text: str) -> CrossCheckResult:
        """
        Run all strategies against text.

        Args:
            text: Input content

        Returns:
            CrossCheckResult with merged candidates and consensus strength
        """
        candidates: list[DecodingResult] = []
        strategies_used: list[str] = []

        for strategy in self.strategies:
            try:
                produced = strategy.analyze(text)
            except Exception as exc:
                logger.warning("Strategy %s failed: %s", strategy.name, exc)
                continue
            candidates.extend(produced)
            strategies_used.append(strategy.name)

        # Stable sort keeps strategy order among equal confidences
        candidates.sort(key=lambda r: -r.confidence)

        if candidates:
            best = candidates[0]
        else:
            best = DecodingResult(
                type="Unknown",
                result=text,
                confidence=0.0,
                score_profile=self.scorer.profile(text, pattern_matched=False),
                steps=["No detection strategies succeeded"],
            )

        if len(candidates) > 1:
            confidence = min(best.confidence + 10, 100.0)
        else:
            confidence = best.confidence

        return CrossCheckResult(
            best_match=best,
            alternatives=candidates[1:1 + self.settings.cross_check_max_alternatives],
            strategies_used=strategies_used,
            consensus_strength=self.consensus(len(candidates)),
            cross_check_confidence=confidence,
        )

    @staticmethod
    def consensus(count: int) -> ConsensusStrength:
        if count > 3:
            return ConsensusStrength.STRONG
        if count > 1:
            return ConsensusStrength.MODERATE
        return ConsensusStrength.WEAK
