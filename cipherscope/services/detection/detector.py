"""
Single-layer detection.

Every registered pattern is tried against the same input, optionally on a
bounded thread pool. All results are collected before one is chosen, so the
outcome never depends on worker count or completion order.
"""

import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import ClassVar

from cipherscope.core.config import Settings, get_settings
from cipherscope.core.exceptions import DetectionError, PatternError, TimeoutExceededError
from cipherscope.models.schemas import DecodingResult
from cipherscope.services.analysis.scoring import ConfidenceScorer
from cipherscope.services.detection.hints import ContentHintAnalyzer
from cipherscope.services.patterns.base import DetectionPattern
from cipherscope.services.patterns.registry import PatternRegistry

logger = logging.getLogger(__name__)


@dataclass
class DetectionOutcome:
    """All accepted candidates of one detection pass, best first."""

    candidates: list[DecodingResult] = field(default_factory=list)

    # Messages for patterns skipped after an error or timeout
    skipped: list[str] = field(default_factory=list)

    @property
    def best(self) -> DecodingResult | None:
        return self.candidates[0] if self.candidates else None


class SingleLayerDetector:
    """
    Runs the pattern registry against one piece of content.

    For each pattern: quick_filter, then validate (time-boxed), then decode.
    A decode is accepted only if it differs from the input and passes the
    pattern's own plausibility check. The winner is the highest confidence;
    ties go to the pattern tried first.
    """

    # Metrics are computed on a prefix of very long decodes
    PROFILE_SAMPLE: ClassVar[int] = 4096

    PLAIN_TEXT: ClassVar[str] = "Plain Text"
    PLAIN_TEXT_DISPLAY: ClassVar[int] = 2000

    def __init__(
        self,
        settings: Settings | None = None,
        registry: PatternRegistry | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or PatternRegistry()
        self.scorer = ConfidenceScorer()
        self.hint_analyzer = ContentHintAnalyzer()

    def detect(
        self,
        text: str,
        depth: int = 0,
        parallel: bool | None = None,
    ) -> DetectionOutcome:
        """
        Detect the encoding of text.

        Args:
            text: Content to analyze
            depth: Layer depth, used to re-prioritize patterns
            parallel: Override for settings.enable_parallel

        Returns:
            DetectionOutcome with candidates sorted best first
        """
        hints = self.hint_analyzer.hints(text)
        patterns = self.registry.prioritized(hints, depth)
        rank = {pattern.name: index for index, pattern in enumerate(patterns)}

        if parallel is None:
            parallel = self.settings.enable_parallel

        if parallel and len(patterns) > 1:
            results = self._run_parallel(patterns, text)
        else:
            results = self._run_sequential(patterns, text)

        outcome = DetectionOutcome()
        for pattern in patterns:
            result = results.get(pattern.name)
            if isinstance(result, DetectionError):
                logger.warning("Skipping pattern %s: %s", pattern.name, result.message)
                outcome.skipped.append(result.message)
            elif result is not None:
                outcome.candidates.append(result)

        outcome.candidates.sort(key=lambda r: (-r.confidence, rank[r.type]))
        return outcome

    def evaluate(
        self, pattern: DetectionPattern, text: str, deadline: float | None = None
    ) -> DecodingResult | None:
        """
        Evaluate one pattern against text.

        Args:
            pattern: Pattern to try
            text: Content to analyze
            deadline: perf_counter() value the layer budget runs out at

        Returns:
            DecodingResult, or None when the pattern does not apply

        Raises:
            TimeoutExceededError: If the validator overruns its budget
        """
        if not pattern.quick_filter(text):
            return None

        if not self._validate(pattern, text, deadline):
            return None

        decoded = pattern.decode(text)
        if decoded is None or len(decoded) < 2 or decoded.strip() == text.strip():
            return None
        if not pattern.accept(text, decoded):
            return None

        profile = self.scorer.profile(decoded[:self.PROFILE_SAMPLE])
        confidence = self.scorer.clamp(
            pattern.adjust_confidence(text, decoded, profile.confidence)
        )

        warnings = list(pattern.warnings(text, decoded))
        if not profile.is_valid_text:
            warnings.append("Invalid UTF-8 or control characters in decoded output")
        if profile.entropy > 7.5:
            warnings.append("High entropy suggests encrypted or compressed data")

        return DecodingResult(
            type=pattern.name,
            result=decoded,
            confidence=confidence,
            score_profile=profile,
            steps=[pattern.name],
            warnings=warnings,
        )

    def plain_text_result(self, text: str) -> DecodingResult:
        """Fallback result when no pattern matched."""
        profile = self.scorer.profile(text[:self.PROFILE_SAMPLE], pattern_matched=False)
        confidence = min(50 + profile.language_score * 0.5, 80)

        warnings = []
        if profile.entropy > 7:
            warnings.append("High entropy suggests this may be encoded/encrypted data")
        if len(text) > 10_000:
            warnings.append("Large input - results may be truncated for performance")

        display = text
        if len(text) > self.PLAIN_TEXT_DISPLAY:
            display = text[:self.PLAIN_TEXT_DISPLAY] + "...[truncated]"

        return DecodingResult(
            type=self.PLAIN_TEXT,
            result=display,
            confidence=confidence,
            score_profile=profile,
            steps=["No encoding detected"],
            warnings=warnings,
        )

    def _validate(self, pattern: DetectionPattern, text: str, deadline: float | None) -> bool:
        """
        Run the validator on its own thread and wait at most
        validator_timeout_seconds, or less when the layer budget is nearly spent.

        Raises:
            TimeoutExceededError: If the validator has not returned in time
        """
        timeout = self.settings.validator_timeout_seconds
        if deadline is not None:
            timeout = max(0.0, min(timeout, deadline - time.perf_counter()))

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cipherscope-validate")
        future = executor.submit(pattern.validate, text)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            raise TimeoutExceededError(f"{pattern.name} validator", round(timeout, 3)) from None
        finally:
            # An overrunning validator is abandoned, never joined
            executor.shutdown(wait=False, cancel_futures=True)

    def _guarded(
        self, pattern: DetectionPattern, text: str, deadline: float | None = None
    ) -> DecodingResult | DetectionError | None:
        try:
            return self.evaluate(pattern, text, deadline)
        except DetectionError as exc:
            return exc
        except Exception as exc:
            return PatternError(pattern.name, f"{type(exc).__name__}: {exc}")

    def _run_sequential(
        self, patterns: list[DetectionPattern], text: str
    ) -> dict[str, DecodingResult | DetectionError | None]:
        budget = self.settings.layer_timeout_seconds
        deadline = time.perf_counter() + budget
        results: dict[str, DecodingResult | DetectionError | None] = {}

        # Decoders run to completion; only validators are cut short
        for pattern in patterns:
            if time.perf_counter() >= deadline:
                results[pattern.name] = TimeoutExceededError(pattern.name, budget)
                continue
            results[pattern.name] = self._guarded(pattern, text, deadline)
        return results

    def _run_parallel(
        self, patterns: list[DetectionPattern], text: str
    ) -> dict[str, DecodingResult | DetectionError | None]:
        budget = self.settings.layer_timeout_seconds
        executor = ThreadPoolExecutor(
            max_workers=self._worker_count(),
            thread_name_prefix="cipherscope-detect",
        )
        futures: dict[str, Future] = {
            pattern.name: executor.submit(self._guarded, pattern, text)
            for pattern in patterns
        }
        wait(futures.values(), timeout=budget)

        results: dict[str, DecodingResult | DetectionError | None] = {}
        for name, future in futures.items():
            if future.done():
                results[name] = future.result()
            else:
                results[name] = TimeoutExceededError(name, budget)

        # Overrunning workers are abandoned, never joined
        executor.shutdown(wait=False, cancel_futures=True)
        return results

    def _worker_count(self) -> int:
        available = os.cpu_count() or 1
        requested = self.settings.max_workers or available
        return max(1, min(requested, available))
