"""Tests for the cross-check ensemble."""

import base64
import hashlib

import pytest

from cipherscope.core.config import Settings
from cipherscope.models.schemas import ConsensusStrength, DecodingResult, ScoreProfile
from cipherscope.services.detection.detector import SingleLayerDetector
from cipherscope.services.hashes.recognizer import HashRecognizer
from cipherscope.services.pipeline.cross_check import (
    CrossCheckEngine,
    DetectionStrategy,
    EntropyStrategy,
    HashStrategy,
    RegistryStrategy,
)


def make_result(name, confidence):
    return DecodingResult(
        type=name,
        result=name.lower(),
        confidence=confidence,
        score_profile=ScoreProfile(
            entropy=3.0, language_score=10.0, is_valid_text=True, confidence=confidence,
        ),
        steps=[name],
    )


class FixedStrategy(DetectionStrategy):
    name = "Fixed"

    def __init__(self, results):
        self.results = results

    def analyze(self, text):
        return list(self.results)


class FailingStrategy(DetectionStrategy):
    name = "Failing"

    def analyze(self, text):
        raise RuntimeError("strategy exploded")


class TestCrossCheckEngine:
    """Test suite for CrossCheckEngine."""

    @pytest.fixture
    def settings(self):
        return Settings(enable_parallel=False)

    @pytest.fixture
    def engine(self, settings):
        return CrossCheckEngine(settings)

    def test_runs_every_strategy(self, engine):
        result = engine.cross_check("SGVsbG8gV29ybGQh")
        assert result.strategies_used == [
            "Regex Patterns", "Entropy Analysis", "Hash Recognition", "Cipher Analysis",
        ]

    def test_base64_wins(self, engine):
        result = engine.cross_check("SGVsbG8gV29ybGQh")
        assert result.best_match.type == "Base64"
        assert result.best_match.result == "Hello World!"
        assert result.best_match.strategy == "Regex Patterns"
        assert result.best_match.confidence <= 95.0

    def test_failing_strategy_is_left_out(self, settings):
        engine = CrossCheckEngine(settings, strategies=[
            FailingStrategy(),
            FixedStrategy([make_result("Only", 50.0)]),
        ])
        result = engine.cross_check("anything")
        assert result.strategies_used == ["Fixed"]
        assert result.best_match.type == "Only"
        assert result.consensus_strength is ConsensusStrength.WEAK
        assert result.cross_check_confidence == 50.0

    def test_agreement_bonus(self, settings):
        engine = CrossCheckEngine(settings, strategies=[
            FixedStrategy([make_result("A", 50.0), make_result("B", 40.0)]),
        ])
        result = engine.cross_check("anything")
        assert result.best_match.type == "A"
        assert [alt.type for alt in result.alternatives] == ["B"]
        assert result.cross_check_confidence == 60.0
        assert result.consensus_strength is ConsensusStrength.MODERATE

    def test_no_candidates(self, settings):
        engine = CrossCheckEngine(settings, strategies=[FixedStrategy([])])
        result = engine.cross_check("mystery")
        assert result.best_match.type == "Unknown"
        assert result.best_match.confidence == 0.0
        assert result.best_match.result == "mystery"

    def test_digest_is_not_decoded_as_hex(self, engine):
        digest = hashlib.sha256(b"x").hexdigest()
        result = engine.cross_check(digest)
        found = [result.best_match, *result.alternatives]
        assert all(candidate.type != "Hexadecimal" for candidate in found)
        assert "SHA-256 Hash" in [candidate.type for candidate in found]

    @pytest.mark.parametrize(
        "count, expected",
        [
            (0, ConsensusStrength.WEAK),
            (1, ConsensusStrength.WEAK),
            (2, ConsensusStrength.MODERATE),
            (3, ConsensusStrength.MODERATE),
            (4, ConsensusStrength.STRONG),
        ],
    )
    def test_consensus(self, count, expected):
        assert CrossCheckEngine.consensus(count) is expected


class TestEntropyStrategy:

    @pytest.fixture
    def strategy(self):
        return EntropyStrategy()

    def test_character_balance(self, strategy):
        # ratios [1, 0, 0, 0]: variance 0.1875
        assert strategy.character_balance("AAAA") == pytest.approx(0.25)
        assert strategy.character_balance("") == 0.0

    def test_rejects_low_entropy(self, strategy):
        assert strategy.analyze("AAAAAAAA") == []

    def test_decodes_long_base64(self, strategy):
        encoded = base64.b64encode(
            b"Statistical detection looks at the shape of the alphabet rather than "
            b"at strict padding rules, which lets it recover longer payloads."
        ).decode()
        results = strategy.analyze(encoded)
        assert len(results) == 1
        assert results[0].type == "Base64 (Advanced Entropy)"
        assert results[0].result.startswith("Statistical detection")
        assert results[0].confidence <= 98.0


class TestHashStrategy:

    @pytest.fixture
    def strategy(self):
        return HashStrategy(HashRecognizer(Settings()))

    def test_md5(self, strategy):
        results = strategy.analyze("5d41402abc4b2a76b9719d911017c592")
        assert results[0].type == "MD5 Hash"
        assert results[0].result == "MD5 digest (128 bits)"
        assert len(results) <= 3

    def test_empty_input_gives_nothing(self, strategy):
        assert strategy.analyze("   ") == []


class TestRegistryStrategy:

    @pytest.fixture
    def strategy(self):
        return RegistryStrategy(SingleLayerDetector(Settings(enable_parallel=False)))

    def test_caps_confidence(self, strategy):
        results = strategy.analyze("SGVsbG8gV29ybGQh")
        assert results[0].type == "Base64"
        assert all(result.confidence <= 95.0 for result in results)

    def test_skips_hash_digests(self, strategy):
        assert strategy.analyze(hashlib.sha1(b"x").hexdigest()) == []

    def test_hex_text_still_decodes(self, strategy):
        results = strategy.analyze("48656c6c6f20576f726c642068657265")
        assert results[0].type == "Hexadecimal"
