"""
Classical cryptanalysis across all registered cipher engines.

Each engine runs its own bounded key search; only the best candidate per
engine is reported, and only when its composite score clears the minimum.
"""

import logging
from typing import ClassVar

from cipherscope.core.config import Settings, get_settings
from cipherscope.core.exceptions import InvalidInputError
from cipherscope.models.schemas import CipherAnalysis, CipherType, FrequencyAnalysis
from cipherscope.services.analysis.statistics import StatisticalAnalyzer
from cipherscope.services.engines.registry import EngineRegistry
from cipherscope.services.engines.polygraphic import HillEngine, PlayfairEngine

logger = logging.getLogger(__name__)


class CipherAnalyzer:
    """Runs every engine against one ciphertext and ranks the results."""

    DISPLAY_NAMES: ClassVar[dict[CipherType, str]] = {
        CipherType.CAESAR: "Caesar Cipher",
        CipherType.ROT5: "ROT5",
        CipherType.ROT13: "ROT13",
        CipherType.ROT18: "ROT18",
        CipherType.ROT47: "ROT47",
        CipherType.ATBASH: "Atbash Cipher",
        CipherType.SIMPLE_SUBSTITUTION: "Simple Substitution",
        CipherType.VIGENERE: "Vigenère Cipher",
        CipherType.COLUMNAR: "Columnar Transposition",
        CipherType.RAIL_FENCE: "Rail Fence Cipher",
        CipherType.PLAYFAIR: "Playfair Cipher",
        CipherType.HILL: "Hill Cipher",
    }

    def __init__(self, settings: Settings | None = None, registry: EngineRegistry | None = None):
        self.settings = settings or get_settings()
        self.registry = registry or EngineRegistry()
        self.statistics = StatisticalAnalyzer()

    def analyze(self, text: str, include_speculative: bool = False) -> list[CipherAnalysis]:
        """
        Break text with every engine.

        Args:
            text: Suspected ciphertext
            include_speculative: Also report keyless "possible Playfair/Hill"
                results when the letter structure fits

        Returns:
            At most one CipherAnalysis per engine, highest confidence first

        Raises:
            InvalidInputError: If text has fewer letters than cipher_min_letters
        """
        frequency = self.statistics.frequency_analysis(text)
        if frequency.total_letters < self.settings.cipher_min_letters:
            raise InvalidInputError(
                f"Input too short for cipher analysis "
                f"(minimum {self.settings.cipher_min_letters} letters)"
            )

        results: list[CipherAnalysis] = []
        for engine in self.registry.get_all_engines():
            if engine.detect(frequency) <= 0:
                logger.debug("Skipping %s: letter statistics rule it out", engine.name)
                continue

            try:
                candidates = engine.attempt_decrypt(text, {})
            except Exception as exc:
                logger.warning("Cipher engine %s failed: %s", engine.name, exc)
                continue

            best = next(
                (c for c in candidates if c.plaintext != text and c.score > self.settings.cipher_min_score),
                None,
            )
            if best is None:
                continue

            results.append(CipherAnalysis(
                cipher_type=best.cipher_type,
                confidence=best.confidence,
                method=best.method,
                key_candidate=best.key or None,
                plaintext=best.plaintext,
                frequency_analysis=frequency,
            ))

        if include_speculative:
            results.extend(self._speculative(frequency, {r.cipher_type for r in results}))

        # Stable sort keeps registration order among equal confidences
        results.sort(key=lambda r: -r.confidence)
        return results

    def _speculative(self, frequency: FrequencyAnalysis, found: set[CipherType]) -> list[CipherAnalysis]:
        reports = []
        for engine_class in (PlayfairEngine, HillEngine):
            if engine_class.cipher_type in found:
                continue
            candidate = self.registry.get_engine(engine_class.cipher_type).speculative(frequency)
            if candidate is not None:
                reports.append(CipherAnalysis(
                    cipher_type=candidate.cipher_type,
                    confidence=candidate.confidence,
                    method=candidate.method,
                    key_candidate=None,
                    plaintext=candidate.plaintext,
                    frequency_analysis=frequency,
                ))
        return reports

    @classmethod
    def display_name(cls, cipher_type: CipherType) -> str:
        return cls.DISPLAY_NAMES.get(cipher_type, cipher_type.value)
