"""
Multi-layer decoding.

Peels nested encodings one layer at a time with an explicit loop:
1. Detect the best single-layer candidate for the current content
2. Stop if it is missing, weak, or repeats the previous encoding
3. Record the layer and advance
4. Stop once entropy stops dropping, the text reads as language,
   the content becomes too small, or it has the shape of a hash digest
"""

import logging
import re
import time
from typing import ClassVar

from cipherscope.core.config import Settings, get_settings
from cipherscope.models.schemas import (
    ContentAnalysis,
    LayerAnalysis,
    MultiLayerResult,
    RiskLevel,
)
from cipherscope.services.analysis.scoring import ConfidenceScorer
from cipherscope.services.analysis.statistics import StatisticalAnalyzer
from cipherscope.services.detection.detector import SingleLayerDetector
from cipherscope.services.hashes.recognizer import HashRecognizer

logger = logging.getLogger(__name__)


class MultiLayerDecoder:
    """
    Decodes chains such as Base64(ROT13(text)).

    Depth is bounded by max_depth and every accepted layer must differ
    from the one before it, so the loop always terminates.
    """

    # Later layers weigh more in the overall confidence
    LAYER_WEIGHT: ClassVar[float] = 1.2

    PRINTABLE_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[\x20-\x7e\s]*$")
    SCRIPT_MARKERS: ClassVar[tuple[str, ...]] = ("function", "var ", "const ")

    def __init__(
        self,
        settings: Settings | None = None,
        detector: SingleLayerDetector | None = None,
        hash_recognizer: HashRecognizer | None = None,
    ):
        self.settings = settings or get_settings()
        self.detector = detector or SingleLayerDetector(self.settings)
        self.hash_recognizer = hash_recognizer or HashRecognizer(self.settings)
        self.analyzer = StatisticalAnalyzer()

    def decode(
        self,
        text: str,
        max_depth: int | None = None,
        min_confidence: float | None = None,
        parallel: bool | None = None,
    ) -> MultiLayerResult:
        """
        Decode as many layers as the content supports.

        Args:
            text: Input content
            max_depth: Override for settings.max_depth
            min_confidence: Override for settings.min_confidence
            parallel: Override for settings.enable_parallel

        Returns:
            MultiLayerResult with the layer chain and its terminal state
        """
        max_depth = max_depth or self.settings.max_depth
        if min_confidence is None:
            min_confidence = self.settings.min_confidence

        started = time.perf_counter()
        layers: list[LayerAnalysis] = []
        current = text
        previous_entropy = self.analyzer.entropy(text[:SingleLayerDetector.PROFILE_SAMPLE])
        stop_reason = f"Maximum depth {max_depth} reached"
        final_hash = None

        while len(layers) < max_depth:
            # Digests look like hex but decode to noise
            final_hash = self.hash_recognizer.digest_name(current)
            if final_hash is not None:
                stop_reason = f"{final_hash} hash reached; hashes cannot be decoded further"
                break

            layer_started = time.perf_counter()
            outcome = self.detector.detect(current, depth=len(layers), parallel=parallel)
            best = outcome.best

            if best is None:
                stop_reason = "No further encoding detected"
                break
            if best.confidence < min_confidence:
                stop_reason = (
                    f"{best.type} confidence {best.confidence:.1f} "
                    f"below threshold {min_confidence:.1f}"
                )
                break
            if layers and layers[-1].encoding == best.type:
                stop_reason = f"Cycle detected: {best.type} repeated"
                break

            profile = best.score_profile
            layer = LayerAnalysis(
                depth=len(layers) + 1,
                encoding=best.type,
                confidence=best.confidence,
                score_profile=profile,
                decoded_content=best.result,
                byte_size=len(best.result.encode("utf-8", errors="replace")),
                confidence_level=ConfidenceScorer.level(best.confidence),
                processing_time=time.perf_counter() - layer_started,
            )
            layers.append(layer)
            current = best.result
            logger.debug(
                "Layer %d: %s (confidence %.1f)", layer.depth, layer.encoding, layer.confidence
            )

            if previous_entropy - profile.entropy < self.settings.entropy_epsilon:
                stop_reason = "Entropy did not drop significantly"
                break
            if profile.language_score > self.settings.language_stop_score:
                stop_reason = "Readable content reached"
                break
            if len(current) < self.settings.min_layer_bytes:
                stop_reason = "Decoded content too small to decode further"
                break
            previous_entropy = profile.entropy

        final_content = layers[-1].decoded_content if layers else text

        return MultiLayerResult(
            layers=layers,
            final_content=final_content,
            total_layers=len(layers),
            overall_confidence=self.overall_confidence(layers),
            content_analysis=self.analyze_content(final_content, layers),
            optimization_suggestions=self.suggestions(layers),
            stop_reason=stop_reason,
            final_hash=final_hash,
            total_processing_time=time.perf_counter() - started,
        )

    def overall_confidence(self, layers: list[LayerAnalysis]) -> float:
        """Exponentially weighted mean of layer confidences, later layers heavier."""
        if not layers:
            return 0.0
        weights = [self.LAYER_WEIGHT ** index for index in range(len(layers))]
        weighted = sum(layer.confidence * w for layer, w in zip(layers, weights))
        return float(round(weighted / sum(weights)))

    def analyze_content(self, content: str, layers: list[LayerAnalysis]) -> ContentAnalysis:
        """Classify the content a chain ends on."""
        if layers:
            last = layers[-1].score_profile
            likely_original = last.language_score > 60 and last.entropy < 6
        else:
            likely_original = True

        if not self.PRINTABLE_RE.match(content):
            content_type, risk = "Binary/Encoded", RiskLevel.MEDIUM
        elif "<" in content and ">" in content:
            content_type = "HTML/XML"
            risk = RiskLevel.HIGH if "<script" in content.lower() else RiskLevel.LOW
        elif content.startswith(("{", "[")):
            content_type, risk = "JSON", RiskLevel.LOW
        elif any(marker in content for marker in self.SCRIPT_MARKERS):
            content_type, risk = "JavaScript", RiskLevel.HIGH
        else:
            content_type, risk = "Plain Text", RiskLevel.LOW

        return ContentAnalysis(
            content_type=content_type,
            security_risk=risk,
            likely_original_content=likely_original,
        )

    @staticmethod
    def suggestions(layers: list[LayerAnalysis]) -> list[str]:
        if not layers:
            return []

        chain = [layer.encoding for layer in layers]
        suggestions = []
        if len(layers) > 5:
            suggestions.append("Consider reducing encoding chain complexity for better performance")
        if "Base64" in chain and "URL Encoding" in chain:
            suggestions.append("Base64 and URL encoding combination detected - consider using only one")
        if any(layer.confidence < 80 for layer in layers):
            suggestions.append("Some layers have low confidence - manual verification recommended")
        if sum(layer.confidence for layer in layers) / len(layers) > 90:
            suggestions.append("High confidence decoding chain - result likely accurate")
        return suggestions
