"""
Analysis facade.

Ties the detection components together behind the entry points callers use:
1. detect: hash short-circuit, chunked first pass, single-layer detection,
   optional multi-layer promotion, plain-text fallback
2. cross_check: every independent strategy over the same input
3. analyze_cipher / analyze_hash: the narrower cryptanalysis entry points
4. decrypt_cipher / encrypt_cipher: one named cipher, with or without a key
5. encode_text / list_patterns: registry access for round trips
"""

import logging
import time
from collections import Counter
from typing import Any, ClassVar

from cipherscope.core.config import Settings, get_settings
from cipherscope.core.exceptions import (
    DetectionError,
    InputTooLargeError,
    InvalidInputError,
    InvalidKeyError,
    PatternError,
)
from cipherscope.models.schemas import (
    AnalysisResult,
    CipherAnalysis,
    CipherType,
    CrossCheckResult,
    DecodingResult,
    DetectOptions,
    HashAnalysis,
    InputAnalysis,
    MultiLayerResult,
    PatternInfo,
    ProgressCallback,
)
from cipherscope.services.analysis.scoring import ConfidenceScorer, LanguageScorer
from cipherscope.services.analysis.statistics import StatisticalAnalyzer
from cipherscope.services.cache import AnalysisCache
from cipherscope.services.detection.detector import DetectionOutcome, SingleLayerDetector
from cipherscope.services.detection.hints import ContentHintAnalyzer
from cipherscope.services.engines.analyzer import CipherAnalyzer
from cipherscope.services.engines.base import DecryptionResult
from cipherscope.services.hashes.recognizer import HashRecognizer
from cipherscope.services.patterns.base import bytes_to_text
from cipherscope.services.patterns.registry import PatternRegistry
from cipherscope.services.pipeline.cross_check import CrossCheckEngine, HashStrategy
from cipherscope.services.pipeline.multi_layer import MultiLayerDecoder
from cipherscope.services.security.validator import InputSecurityValidator, SecurityReport

logger = logging.getLogger(__name__)


class EncodingAnalyzer:
    """
    Entry point for encoding, cipher and hash detection.

    Every collaborator can be injected; the defaults share one Settings
    instance. The cache is owned by this object and only ever saves time.
    """

    HASH_CONFIDENCE: ClassVar[float] = 98.0

    # A chunk winner must be at least this confident to steer the full pass
    CHUNK_MIN_CONFIDENCE: ClassVar[float] = 60.0

    # A multi-layer chain replaces the single-layer best above this
    PROMOTION_CONFIDENCE: ClassVar[float] = 70.0

    PROFILE_SAMPLE: ClassVar[int] = SingleLayerDetector.PROFILE_SAMPLE

    # ASCII whitespace only; binary headers such as \x1f must survive
    TRIM: ClassVar[str] = " \t\r\n\f\v"

    def __init__(
        self,
        settings: Settings | None = None,
        cache: AnalysisCache[AnalysisResult] | None = None,
        detector: SingleLayerDetector | None = None,
        multi_layer: MultiLayerDecoder | None = None,
        cross_check_engine: CrossCheckEngine | None = None,
        cipher_analyzer: CipherAnalyzer | None = None,
        hash_recognizer: HashRecognizer | None = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else AnalysisCache(self.settings.cache_size)
        self.registry = PatternRegistry()
        self.detector = detector or SingleLayerDetector(self.settings, self.registry)
        self.hash_recognizer = hash_recognizer or HashRecognizer(self.settings)
        self.multi_layer = multi_layer or MultiLayerDecoder(
            self.settings, self.detector, self.hash_recognizer
        )
        self.cipher_analyzer = cipher_analyzer or CipherAnalyzer(self.settings)
        self.cross_check_engine = cross_check_engine or CrossCheckEngine(
            self.settings, self.detector, hash_recognizer=self.hash_recognizer
        )
        self.security = InputSecurityValidator(self.settings)
        self.statistics = StatisticalAnalyzer()
        self.language = LanguageScorer()
        self.scorer = ConfidenceScorer()
        self.hint_analyzer = ContentHintAnalyzer()

    # ------------------------------------------------------------------
    # detect
    # ------------------------------------------------------------------

    def detect(self, data: str | bytes, options: DetectOptions | None = None) -> AnalysisResult:
        """
        Detect how data is encoded and decode it.

        Args:
            data: Text, or raw bytes decoded as UTF-8 with a Latin-1 fallback
            options: Per-call overrides of the configured defaults

        Returns:
            AnalysisResult with the best match, ranked alternatives and
            metrics of the input

        Raises:
            SecurityRejectedError: If the input fails the security pre-check
            InputTooLargeError: If the input exceeds max_input_size
            InvalidInputError: If data is neither str nor bytes
        """
        options = options or DetectOptions()
        progress = options.progress_callback
        started = time.perf_counter()

        self._report(progress, 5, "Validating input")
        text = self._as_text(data)
        report = self.security.validate(text)

        size = len(text.encode("utf-8", errors="surrogatepass"))
        if size > self.settings.max_input_size:
            logger.info("Rejected input of %d bytes (limit %d)", size, self.settings.max_input_size)
            raise InputTooLargeError(size, self.settings.max_input_size)

        text = text.strip(self.TRIM)
        cache_key = self.cache.fingerprint(text, options.cache_key())
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._report(progress, 100, "Retrieved from cache")
            return cached

        input_analysis = self.analyze_input(text, report)

        self._report(progress, 20, "Scanning for hash formats")
        hash_result = self._hash_short_circuit(text, input_analysis, started)
        if hash_result is not None:
            self.cache.put(cache_key, hash_result)
            self._report(progress, 100, "Hash detected")
            return hash_result

        self._report(progress, 40, "Scanning patterns")
        parallel = options.enable_parallel
        outcome = self._chunked_pass(text, options)
        if outcome is None:
            outcome = self.detector.detect(text, parallel=parallel)

        chain: MultiLayerResult | None = None
        candidates = list(outcome.candidates)
        if options.enable_multi_layer and candidates:
            self._report(progress, 60, "Decoding layers")
            chain = self.multi_layer.decode(
                text,
                max_depth=options.max_depth,
                min_confidence=options.min_confidence,
                parallel=parallel,
            )
            if chain.total_layers > 1 and chain.overall_confidence > self.PROMOTION_CONFIDENCE:
                candidates.insert(0, self.chain_result(chain))

        self._report(progress, 90, "Finalizing")
        if candidates:
            best = candidates[0]
        else:
            best = self.detector.plain_text_result(text)
        if chain is not None and chain.final_hash and best.result == chain.final_content:
            best = best.model_copy(update={
                "warnings": [
                    *best.warnings,
                    f"Decoded content is a {chain.final_hash} hash and cannot be reversed",
                ],
            })
        best = self._with_skipped(best, outcome.skipped)

        result = AnalysisResult(
            best_match=best,
            alternatives=candidates[1:1 + self.settings.max_alternatives],
            input_analysis=input_analysis,
            multi_layer=chain,
            processing_time=time.perf_counter() - started,
        )
        self.cache.put(cache_key, result)
        self._report(progress, 100, "Analysis complete")
        return result

    def analyze_input(self, text: str, report: SecurityReport | None = None) -> InputAnalysis:
        """Metrics and hints of the raw input."""
        sample = text[:self.PROFILE_SAMPLE]
        classes = self.statistics.character_classes(sample)
        report = report or SecurityReport()
        return InputAnalysis(
            length=len(text),
            byte_size=len(text.encode("utf-8", errors="surrogatepass")),
            entropy=self.statistics.entropy(sample),
            language_score=self.language.language_score(sample),
            alpha_ratio=classes["alpha"],
            digit_ratio=classes["digit"],
            whitespace_ratio=classes["whitespace"],
            symbol_ratio=classes["symbol"],
            hints=self.hint_analyzer.hints(sample),
            risk_level=report.risk_level,
            security_warnings=report.warnings,
        )

    @staticmethod
    def chain_result(chain: MultiLayerResult) -> DecodingResult:
        """Represent a multi-layer chain as a single candidate."""
        steps = chain.steps
        return DecodingResult(
            type=f"Multi-Layer ({' -> '.join(steps)})",
            result=chain.final_content,
            confidence=chain.overall_confidence,
            score_profile=chain.layers[-1].score_profile,
            steps=steps,
            warnings=list(chain.optimization_suggestions),
            layers=chain.layers,
        )

    # ------------------------------------------------------------------
    # Narrower entry points
    # ------------------------------------------------------------------

    def cross_check(self, data: str | bytes) -> CrossCheckResult:
        """Run every independent strategy against data."""
        text = self._checked(data)
        return self.cross_check_engine.cross_check(text.strip(self.TRIM))

    def analyze_cipher(self, data: str | bytes, include_speculative: bool = False) -> list[CipherAnalysis]:
        """Classical cryptanalysis, results sorted by confidence."""
        text = self._checked(data)
        return self.cipher_analyzer.analyze(text, include_speculative=include_speculative)

    def analyze_hash(self, data: str | bytes) -> list[HashAnalysis]:
        """Ranked hash identification."""
        text = self._checked(data)
        return self.hash_recognizer.analyze(text)

    def decrypt_cipher(
        self,
        cipher_type: CipherType,
        data: str | bytes,
        key: str | dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> DecryptionResult:
        """
        Decrypt with one named cipher.

        With a key the engine applies it directly. Without one the engine
        searches for the best key, as analyze_cipher() does for every engine.

        Args:
            cipher_type: Cipher to use
            data: Ciphertext
            key: Known key, e.g. "3" or {"shift": 3}
            options: Engine search limits used when no key is given

        Raises:
            EngineNotFoundError: If no engine handles cipher_type
            InvalidKeyError: If the engine rejects the key
            DecryptionError: If the key search finds nothing
        """
        text = self._checked(data).strip(self.TRIM)
        engine = self.cipher_analyzer.registry.get_engine(cipher_type)
        if key is None:
            return engine.find_key_and_decrypt(text, options)
        try:
            return engine.decrypt_with_key(text, key)
        except (TypeError, ValueError) as exc:
            raise InvalidKeyError(engine.name, str(exc)) from exc

    def encrypt_cipher(
        self,
        cipher_type: CipherType,
        data: str | bytes,
        key: str | dict[str, Any],
    ) -> str:
        """
        Encrypt with one named cipher, mainly to build test ciphertexts.

        Raises:
            EngineNotFoundError: If no engine handles cipher_type
            InvalidKeyError: If the engine rejects the key
        """
        text = self._checked(data)
        engine = self.cipher_analyzer.registry.get_engine(cipher_type)
        try:
            return engine.encrypt(text, key)
        except (TypeError, ValueError) as exc:
            raise InvalidKeyError(engine.name, str(exc)) from exc

    def encode_text(self, pattern_name: str, text: str, **params: Any) -> str:
        """
        Encode text with a reversible pattern.

        Raises:
            PatternNotFoundError: If no pattern has that name
            PatternError: If the pattern is detect-only
        """
        pattern = self.registry.get(pattern_name)
        if not pattern.reversible:
            raise PatternError(pattern_name, "encoding not supported")
        return pattern.encode(text, **params)

    def list_patterns(self) -> list[PatternInfo]:
        return self.registry.list_registered()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _hash_short_circuit(
        self, text: str, input_analysis: InputAnalysis, started: float
    ) -> AnalysisResult | None:
        name = self.hash_recognizer.digest_name(text)
        if name is None:
            return None

        logger.debug("Input matches %s hash shape", name)
        best = DecodingResult(
            type=f"{name} Hash",
            result=text,
            confidence=self.HASH_CONFIDENCE,
            score_profile=self.scorer.profile(text),
            steps=[name],
            warnings=["Hashes cannot be reversed to original data"],
        )
        alternatives = [
            candidate
            for candidate in HashStrategy(self.hash_recognizer).analyze(text)
            if candidate.type != best.type
        ]
        return AnalysisResult(
            best_match=best,
            alternatives=alternatives[:self.settings.max_alternatives],
            input_analysis=input_analysis,
            processing_time=time.perf_counter() - started,
        )

    def _chunked_pass(self, text: str, options: DetectOptions) -> DetectionOutcome | None:
        """
        Coarse scan of leading chunks of a long input.

        The most frequent confident chunk winner is re-run on the full input.
        Returns None when chunking does not apply or finds nothing usable.
        """
        enabled = options.enable_chunking
        if enabled is None:
            enabled = self.settings.enable_chunking
        size = self.settings.chunk_size
        if not enabled or len(text) <= size:
            return None

        chunks = [text[i:i + size] for i in range(0, len(text), size)][:self.settings.max_chunks]
        winners: Counter[str] = Counter()
        for index, chunk in enumerate(chunks, start=1):
            best = self.detector.detect(chunk, parallel=options.enable_parallel).best
            if best is not None and best.confidence > self.CHUNK_MIN_CONFIDENCE:
                winners[best.type] += 1
            logger.debug("Chunk %d/%d: %s", index, len(chunks), best.type if best else "no match")

        if not winners:
            return None

        # Counter.most_common keeps first-seen order among equal counts
        name = winners.most_common(1)[0][0]
        try:
            result = self.detector.evaluate(self.registry.get(name), text)
        except DetectionError as exc:
            logger.warning("Full-input decode with %s failed: %s", name, exc.message)
            return None
        if result is None:
            return None

        full = result.model_copy(update={
            "type": f"{name} (Full Input)",
            "steps": [name, "Full input processing"],
        })
        return DetectionOutcome(candidates=[full])

    @staticmethod
    def _with_skipped(best: DecodingResult, skipped: list[str]) -> DecodingResult:
        if not skipped:
            return best
        return best.model_copy(update={"warnings": best.warnings + skipped})

    def _checked(self, data: str | bytes) -> str:
        text = self._as_text(data)
        self.security.validate(text)
        size = len(text.encode("utf-8", errors="surrogatepass"))
        if size > self.settings.max_input_size:
            raise InputTooLargeError(size, self.settings.max_input_size)
        return text

    @staticmethod
    def _as_text(data: str | bytes) -> str:
        if isinstance(data, (bytes, bytearray)):
            return bytes_to_text(bytes(data))
        if isinstance(data, str):
            return data
        raise InvalidInputError(f"Unsupported input type: {type(data).__name__}")

    @staticmethod
    def _report(progress: ProgressCallback | None, percent: int, status: str) -> None:
        if progress is not None:
            progress(percent, status)
