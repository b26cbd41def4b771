"""Tests for hash recognition."""

import pytest

from cipherscope.core.config import Settings
from cipherscope.core.exceptions import InvalidInputError
from cipherscope.models.schemas import HashCharset, HashStrength
from cipherscope.services.hashes.recognizer import HashRecognizer


MD5_HELLO = "5d41402abc4b2a76b9719d911017c592"
SHA1_HELLO = "aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"
SHA256_HELLO = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
BCRYPT = "$2a$10$N9qo8uLOickgx2ZMRZoMyeIjZAgcfl7p92ldGxad68LJZdL17lhWy"


class TestHashRecognizer:
    """Test suite for HashRecognizer."""

    @pytest.fixture
    def recognizer(self):
        return HashRecognizer(Settings())

    @pytest.mark.parametrize(
        "digest, expected",
        [
            (MD5_HELLO, "MD5"),
            (SHA1_HELLO, "SHA-1"),
            (SHA256_HELLO, "SHA-256"),
            (BCRYPT, "bcrypt"),
        ],
    )
    def test_known_digests_rank_first(self, recognizer, digest, expected):
        results = recognizer.analyze(digest)
        assert results[0].hash_type == expected

    def test_sha256_ranks_above_sha3(self, recognizer):
        names = [r.hash_type for r in recognizer.analyze(SHA256_HELLO)]
        assert names.index("SHA-256") < names.index("SHA3-256")

    def test_results_are_capped(self, recognizer):
        assert len(recognizer.analyze(SHA256_HELLO)) <= 8

    def test_confidence_range(self, recognizer):
        for result in recognizer.analyze(MD5_HELLO):
            assert 45.0 < result.confidence <= 100.0

    def test_md5_metadata(self, recognizer):
        md5 = recognizer.analyze(MD5_HELLO)[0]
        assert md5.output_size == 128
        assert md5.characteristics.charset is HashCharset.HEX
        assert md5.characteristics.length == 32
        assert md5.security_assessment.strength is HashStrength.WEAK
        assert "Cryptographically broken" in md5.security_assessment.vulnerabilities

    def test_bcrypt_characteristics(self, recognizer):
        bcrypt = recognizer.analyze(BCRYPT)[0]
        assert bcrypt.characteristics.rounds_detected == 10
        assert bcrypt.characteristics.salt_detected
        assert bcrypt.characteristics.format == "bcrypt 2a (original implementation)"
        assert bcrypt.security_assessment.cracking_difficulty.startswith("Hard")
        assert "$2y$ (correct)" in bcrypt.variants

    def test_surrounding_whitespace_is_ignored(self, recognizer):
        assert recognizer.analyze(f"  {MD5_HELLO}\n")[0].hash_type == "MD5"

    def test_empty_input(self, recognizer):
        with pytest.raises(InvalidInputError):
            recognizer.analyze("   ")

    def test_non_hash(self, recognizer):
        assert recognizer.analyze("not a hash!") == []


class TestHashHelpers:

    @pytest.fixture
    def recognizer(self):
        return HashRecognizer(Settings())

    def test_quick_match(self, recognizer):
        assert recognizer.quick_match(SHA256_HELLO) == "SHA-256"
        assert recognizer.quick_match(BCRYPT) == "bcrypt"

    def test_quick_match_ignores_short_checksums(self, recognizer):
        assert recognizer.quick_match("deadbeef") is None
        assert recognizer.quick_match("0123456789abcdef") is None

    def test_digest_name(self, recognizer):
        assert recognizer.digest_name(SHA256_HELLO) == "SHA-256"
        assert recognizer.digest_name(f"  {MD5_HELLO}\n") == "MD5"

    def test_digest_name_leaves_hex_text_alone(self, recognizer):
        # 32 hex digits, but they spell "Hello World here"
        assert recognizer.quick_match("48656c6c6f20576f726c642068657265") == "MD5"
        assert recognizer.digest_name("48656c6c6f20576f726c642068657265") is None

    def test_get_hash_info(self, recognizer):
        assert recognizer.get_hash_info("SHA-512").output_size == 512
        assert recognizer.get_hash_info("NoSuchHash") is None

    def test_validate_hash_format(self, recognizer):
        assert recognizer.validate_hash_format(MD5_HELLO, "MD5")
        assert not recognizer.validate_hash_format(MD5_HELLO, "SHA-1")
        assert not recognizer.validate_hash_format(MD5_HELLO, "NoSuchHash")

    def test_migration_advice(self, recognizer):
        assert recognizer.suggest_hash_migration("MD5")
        assert recognizer.suggest_hash_migration("SHA-256") == []

    def test_bcrypt_variants(self, recognizer):
        assert len(recognizer.find_hash_variants("bcrypt")) == 4
