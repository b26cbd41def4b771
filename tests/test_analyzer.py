"""Tests for the EncodingAnalyzer entry points."""

import base64
import hashlib
import time

import pytest

from cipherscope.core.config import Settings
from cipherscope.core.exceptions import (
    InputTooLargeError,
    InvalidInputError,
    InvalidKeyError,
    PatternError,
    PatternNotFoundError,
    SecurityRejectedError,
)
from cipherscope.models.schemas import CipherType, DetectOptions, PatternCategory, RiskLevel
from cipherscope.services.analyzer import EncodingAnalyzer
from cipherscope.services.detection.detector import SingleLayerDetector
from cipherscope.services.patterns import DetectionPattern, PatternRegistry


MD5_HELLO = "5d41402abc4b2a76b9719d911017c592"

PASSAGE = (
    "The archive was opened in the spring and the letters inside were read "
    "aloud for the first time in many years. Each page told of a long journey "
    "across the mountains and of the people who helped along the way."
)


class BrokenPattern(DetectionPattern):
    name = "Broken"
    category = PatternCategory.BASE_ENCODING
    description = "Always fails to decode."

    def decode(self, text, **params):
        raise RuntimeError("boom")


class SlowPattern(DetectionPattern):
    name = "Slow"
    category = PatternCategory.BASE_ENCODING
    description = "Validator that outlives the layer budget."

    def validate(self, text):
        time.sleep(0.5)
        return True

    def decode(self, text, **params):
        return text.upper()


class StubRegistry:

    def __init__(self, patterns):
        self.patterns = patterns

    def prioritized(self, hints, depth=0):
        return list(self.patterns)


class TestDetect:
    """Test suite for EncodingAnalyzer.detect."""

    @pytest.fixture
    def settings(self):
        return Settings(enable_parallel=False)

    @pytest.fixture
    def analyzer(self, settings):
        return EncodingAnalyzer(settings)

    def test_base64(self, analyzer):
        result = analyzer.detect("SGVsbG8gV29ybGQh")
        assert result.best_match.type == "Base64"
        assert result.best_match.result == "Hello World!"
        assert result.input_analysis.length == 16

    def test_multi_layer_promotion(self, analyzer):
        result = analyzer.detect("VXJ5eWIgSmJleXE=")

        assert result.best_match.type == "Multi-Layer (Base64 -> ROT13)"
        assert result.best_match.result == "Hello World"
        assert result.best_match.steps == ["Base64", "ROT13"]
        assert len(result.best_match.layers) == 2
        assert result.alternatives[0].type == "Base64"
        assert result.multi_layer is not None
        assert result.multi_layer.total_layers == 2

    def test_multi_layer_disabled(self, analyzer):
        result = analyzer.detect("VXJ5eWIgSmJleXE=", DetectOptions(enable_multi_layer=False))
        assert result.best_match.type == "Base64"
        assert result.best_match.result == "Uryyb Jbeyq"
        assert result.multi_layer is None

    def test_hash_short_circuit(self, analyzer):
        result = analyzer.detect(MD5_HELLO)

        assert result.best_match.type == "MD5 Hash"
        assert result.best_match.confidence == 98.0
        assert result.best_match.result == MD5_HELLO
        assert result.best_match.steps == ["MD5"]
        assert "Hashes cannot be reversed to original data" in result.best_match.warnings
        assert all(alt.type != "MD5 Hash" for alt in result.alternatives)
        assert result.multi_layer is None

    def test_long_base64_is_not_taken_for_a_classical_cipher(self, analyzer):
        encoded = base64.b64encode(PASSAGE.encode()).decode()
        assert len(encoded) > 256

        result = analyzer.detect(encoded, DetectOptions(enable_multi_layer=False, enable_chunking=False))

        assert result.best_match.type == "Base64"
        assert result.best_match.result == PASSAGE
        assert all(alt.type != "ROT13" for alt in result.alternatives)

    def test_hash_inside_chain_is_reported(self, analyzer):
        digest = hashlib.sha256(b"x").hexdigest()

        result = analyzer.detect(base64.b64encode(digest.encode()).decode())

        assert result.best_match.type == "Base64"
        assert result.best_match.result == digest
        assert result.multi_layer.final_hash == "SHA-256"
        assert any("SHA-256 hash" in warning for warning in result.best_match.warnings)

    def test_hex_text_is_not_mistaken_for_hash(self, analyzer):
        encoded = "48656c6c6f20576f726c642068657265"
        assert len(encoded) == 32

        result = analyzer.detect(encoded)

        assert result.best_match.type == "Hexadecimal"
        assert result.best_match.result == "Hello World here"

    def test_empty_input_is_plain_text(self, analyzer):
        result = analyzer.detect("")
        assert result.best_match.type == "Plain Text"
        assert result.best_match.confidence == 50.0
        assert result.alternatives == []

    def test_surrounding_whitespace_is_trimmed(self, analyzer):
        result = analyzer.detect("  SGVsbG8gV29ybGQh\n")
        assert result.best_match.result == "Hello World!"

    def test_bytes_input(self, analyzer):
        result = analyzer.detect(b"SGVsbG8gV29ybGQh")
        assert result.best_match.type == "Base64"

    def test_gzip_bytes(self, analyzer):
        result = analyzer.detect(b"\x1f\x8b\x08\x08compressed payload bytes")
        types = [result.best_match.type] + [alt.type for alt in result.alternatives]
        assert "GZIP" in types

    def test_unsupported_input_type(self, analyzer):
        with pytest.raises(InvalidInputError):
            analyzer.detect(12345)

    def test_input_too_large(self):
        analyzer = EncodingAnalyzer(Settings(max_input_size=10, enable_parallel=False))
        with pytest.raises(InputTooLargeError) as exc_info:
            analyzer.detect("x" * 11)
        assert exc_info.value.details == {"size": 11, "max_size": 10}

    def test_security_hard_limit(self):
        analyzer = EncodingAnalyzer(Settings(security_hard_limit=5, enable_parallel=False))
        with pytest.raises(SecurityRejectedError):
            analyzer.detect("x" * 6)

    def test_threats_are_reported_not_rejected(self, analyzer):
        result = analyzer.detect("<script>alert(1)</script>")
        assert result.input_analysis.risk_level is RiskLevel.HIGH
        assert result.input_analysis.security_warnings

    def test_progress_callback(self, analyzer):
        events = []
        analyzer.detect("SGVsbG8gV29ybGQh", DetectOptions(
            progress_callback=lambda percent, status: events.append((percent, status)),
        ))

        percents = [percent for percent, _ in events]
        assert percents[0] == 5
        assert percents[-1] == 100
        assert percents == sorted(percents)
        assert events[-1][1] == "Analysis complete"

    def test_cache_hit(self, analyzer):
        first = analyzer.detect("SGVsbG8gV29ybGQh")
        events = []
        second = analyzer.detect("SGVsbG8gV29ybGQh", DetectOptions(
            progress_callback=lambda percent, status: events.append((percent, status)),
        ))

        assert second is first
        assert analyzer.cache.stats.hits == 1
        assert events[-1] == (100, "Retrieved from cache")

    def test_cache_key_includes_options(self, analyzer):
        first = analyzer.detect("VXJ5eWIgSmJleXE=")
        second = analyzer.detect("VXJ5eWIgSmJleXE=", DetectOptions(enable_multi_layer=False))
        assert first.best_match.type != second.best_match.type

    def test_skipped_patterns_become_warnings(self, settings):
        registry = StubRegistry([BrokenPattern(), PatternRegistry().get("Base64")])
        detector = SingleLayerDetector(settings, registry)
        analyzer = EncodingAnalyzer(settings, detector=detector)

        result = analyzer.detect("SGVsbG8gV29ybGQh")

        assert result.best_match.type == "Base64"
        assert any("Broken" in warning for warning in result.best_match.warnings)

    def test_exhausted_layer_budget_is_reported(self):
        settings = Settings(
            enable_parallel=False, validator_timeout_seconds=5.0, layer_timeout_seconds=0.1,
        )
        registry = StubRegistry([PatternRegistry().get("Base64"), SlowPattern()])
        detector = SingleLayerDetector(settings, registry)
        analyzer = EncodingAnalyzer(settings, detector=detector)

        result = analyzer.detect("SGVsbG8gV29ybGQh", DetectOptions(enable_multi_layer=False))

        assert result.best_match.type == "Base64"
        assert any("Slow validator" in warning for warning in result.best_match.warnings)

    def test_alternatives_are_capped(self, analyzer):
        result = analyzer.detect("SGVsbG8gV29ybGQh")
        assert len(result.alternatives) <= 7


class TestChunkedDetection:

    def test_long_input_uses_chunk_winner(self):
        settings = Settings(chunk_size=64, max_chunks=2, enable_parallel=False)
        analyzer = EncodingAnalyzer(settings)
        encoded = base64.b64encode(PASSAGE.encode()).decode()
        assert len(encoded) > 64

        result = analyzer.detect(encoded)

        assert result.best_match.type == "Base64 (Full Input)"
        assert result.best_match.steps == ["Base64", "Full input processing"]
        assert result.best_match.result == PASSAGE

    def test_chunking_can_be_disabled(self):
        settings = Settings(chunk_size=64, max_chunks=2, enable_parallel=False)
        analyzer = EncodingAnalyzer(settings)
        encoded = base64.b64encode(PASSAGE.encode()).decode()

        result = analyzer.detect(encoded, DetectOptions(enable_chunking=False))

        assert result.best_match.type == "Base64"
        assert result.best_match.result == PASSAGE


class TestOtherEntryPoints:

    @pytest.fixture
    def analyzer(self):
        return EncodingAnalyzer(Settings(enable_parallel=False))

    def test_cross_check(self, analyzer):
        result = analyzer.cross_check("SGVsbG8gV29ybGQh")
        assert result.best_match.result == "Hello World!"
        assert len(result.strategies_used) == 4

    def test_analyze_cipher_short_input(self, analyzer):
        with pytest.raises(InvalidInputError):
            analyzer.analyze_cipher("abc")

    def test_analyze_hash(self, analyzer):
        assert analyzer.analyze_hash(MD5_HELLO)[0].hash_type == "MD5"

    def test_decrypt_cipher_with_key(self, analyzer):
        result = analyzer.decrypt_cipher(CipherType.CAESAR, "Olssv, Dvysk!", {"shift": 7})
        assert result.plaintext == "Hello, World!"
        assert result.key == "7"
        assert result.explanation

    def test_decrypt_cipher_finds_key(self, analyzer):
        ciphertext = analyzer.encrypt_cipher(CipherType.CAESAR, PASSAGE, "5")
        result = analyzer.decrypt_cipher(CipherType.CAESAR, ciphertext)
        assert result.key == "5"
        assert result.plaintext == PASSAGE

    def test_playfair_round_trip(self, analyzer):
        ciphertext = analyzer.encrypt_cipher(
            CipherType.PLAYFAIR, "HIDE THE GOLD IN THE TREE STUMP", "PLAYFAIREXAMPLE"
        )
        assert ciphertext == "BMODZBXDNABEKUDMUIXMMOUVIF"
        result = analyzer.decrypt_cipher(CipherType.PLAYFAIR, ciphertext, "PLAYFAIREXAMPLE")
        assert result.plaintext == "HIDETHEGOLDINTHETREXESTUMP"
        assert "Key square" in result.explanation

    def test_invalid_key(self, analyzer):
        with pytest.raises(InvalidKeyError):
            analyzer.decrypt_cipher(CipherType.VIGENERE, "some ciphertext", "k3y")
        with pytest.raises(InvalidKeyError):
            analyzer.encrypt_cipher(CipherType.HILL, "attack", "AAAA")

    def test_encode_text(self, analyzer):
        assert analyzer.encode_text("Base64", "hi") == "aGk="
        assert analyzer.encode_text("Hexadecimal", "hi", separator=":") == "68:69"

    def test_encode_detect_only_pattern(self, analyzer):
        with pytest.raises(PatternError):
            analyzer.encode_text("GZIP", "data")

    def test_encode_unknown_pattern(self, analyzer):
        with pytest.raises(PatternNotFoundError):
            analyzer.encode_text("Base65", "data")

    def test_list_patterns(self, analyzer):
        patterns = analyzer.list_patterns()
        assert len(patterns) == 38
        assert patterns[-1].name == "Base64"
