"""Tests for single-layer detection."""

import time

import pytest

from cipherscope.core.config import Settings
from cipherscope.models.schemas import PatternCategory
from cipherscope.services.detection.detector import SingleLayerDetector
from cipherscope.services.patterns import DetectionPattern, PatternRegistry


class BrokenPattern(DetectionPattern):
    name = "Broken"
    category = PatternCategory.BASE_ENCODING
    description = "Always fails to decode."

    def decode(self, text, **params):
        raise RuntimeError("boom")


class EchoPattern(DetectionPattern):
    name = "Echo"
    category = PatternCategory.BASE_ENCODING
    description = "Returns its input unchanged."

    def decode(self, text, **params):
        return text


class SlowPattern(DetectionPattern):
    name = "Slow"
    category = PatternCategory.BASE_ENCODING
    description = "Validator that takes half a second."

    def validate(self, text):
        time.sleep(0.5)
        return True

    def decode(self, text, **params):
        return text.upper()


class StubRegistry:
    """Registry stand-in serving a fixed pattern list."""

    def __init__(self, patterns):
        self.patterns = patterns

    def prioritized(self, hints, depth=0):
        return list(self.patterns)


class TestSingleLayerDetector:
    """Test suite for SingleLayerDetector."""

    @pytest.fixture
    def detector(self):
        return SingleLayerDetector(Settings(enable_parallel=False))

    def test_base64_known_vector(self, detector):
        outcome = detector.detect("SGVsbG8gV29ybGQh")
        assert outcome.best is not None
        assert outcome.best.type == "Base64"
        assert outcome.best.result == "Hello World!"
        assert outcome.best.steps == ["Base64"]

    def test_hex_detected(self, detector):
        outcome = detector.detect("48656c6c6f20576f726c64")
        assert outcome.best.type == "Hexadecimal"
        assert outcome.best.result == "Hello World"

    def test_candidates_sorted_by_confidence(self, detector):
        outcome = detector.detect("SGVsbG8gV29ybGQh")
        confidences = [c.confidence for c in outcome.candidates]
        assert confidences == sorted(confidences, reverse=True)

    def test_empty_input_has_no_candidates(self, detector):
        outcome = detector.detect("")
        assert outcome.candidates == []
        assert outcome.best is None

    def test_parallel_matches_sequential(self):
        settings = Settings(enable_parallel=True, max_workers=4)
        detector = SingleLayerDetector(settings)
        for text in ("SGVsbG8gV29ybGQh", "Hello%20World", "Uryyb Jbeyq"):
            sequential = detector.detect(text, parallel=False)
            parallel = detector.detect(text, parallel=True)
            assert [(c.type, c.confidence) for c in sequential.candidates] == [
                (c.type, c.confidence) for c in parallel.candidates
            ]

    def test_failing_pattern_is_skipped(self):
        registry = StubRegistry([BrokenPattern(), PatternRegistry().get("Base64")])
        detector = SingleLayerDetector(Settings(enable_parallel=False), registry)

        outcome = detector.detect("SGVsbG8gV29ybGQh")

        assert len(outcome.skipped) == 1
        assert "Broken" in outcome.skipped[0]
        assert [c.type for c in outcome.candidates] == ["Base64"]

    def test_identity_decode_is_rejected(self):
        registry = StubRegistry([EchoPattern()])
        detector = SingleLayerDetector(Settings(enable_parallel=False), registry)
        assert detector.detect("unchanged text").candidates == []

    def test_evaluate_returns_none_when_filter_fails(self, detector):
        pattern = PatternRegistry().get("Binary")
        assert detector.evaluate(pattern, "not binary at all") is None

    def test_plain_text_result(self, detector):
        result = detector.plain_text_result("just some ordinary words here")
        assert result.type == "Plain Text"
        assert 50.0 <= result.confidence <= 80.0
        assert result.steps == ["No encoding detected"]

    def test_plain_text_result_truncates_long_input(self, detector):
        result = detector.plain_text_result("a" * 3000)
        assert result.result.endswith("...[truncated]")
        assert len(result.result) == 2000 + len("...[truncated]")


class TestTimeBudgets:

    @pytest.fixture
    def base64(self):
        return PatternRegistry().get("Base64")

    def test_slow_validator_is_cut_short(self, base64):
        settings = Settings(enable_parallel=False, validator_timeout_seconds=0.05)
        detector = SingleLayerDetector(settings, StubRegistry([SlowPattern(), base64]))

        started = time.perf_counter()
        outcome = detector.detect("SGVsbG8gV29ybGQh")

        assert time.perf_counter() - started < 0.4
        assert [c.type for c in outcome.candidates] == ["Base64"]
        assert outcome.skipped == ["'Slow validator' timed out after 0.05s"]

    def test_slow_validator_times_out_in_parallel(self, base64):
        settings = Settings(enable_parallel=True, max_workers=2, validator_timeout_seconds=0.05)
        detector = SingleLayerDetector(settings, StubRegistry([SlowPattern(), base64]))

        outcome = detector.detect("SGVsbG8gV29ybGQh")

        assert [c.type for c in outcome.candidates] == ["Base64"]
        assert "Slow validator" in outcome.skipped[0]

    def test_layer_budget_skips_remaining_patterns(self, base64):
        settings = Settings(
            enable_parallel=False, validator_timeout_seconds=5.0, layer_timeout_seconds=0.1,
        )
        detector = SingleLayerDetector(settings, StubRegistry([base64, SlowPattern(), EchoPattern()]))

        started = time.perf_counter()
        outcome = detector.detect("SGVsbG8gV29ybGQh")

        assert time.perf_counter() - started < 0.4
        assert [c.type for c in outcome.candidates] == ["Base64"]
        assert len(outcome.skipped) == 2
        assert "Slow validator" in outcome.skipped[0]
        assert outcome.skipped[1].startswith("'Echo' timed out")
