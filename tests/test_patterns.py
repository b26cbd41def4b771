"""Tests for the pattern registry and individual detection patterns."""

import base64
import string

import pytest

from cipherscope.core.exceptions import PatternError, PatternNotFoundError, RegistryFrozenError
from cipherscope.models.schemas import ContentHints, PatternCategory
from cipherscope.services.detection.hints import ContentHintAnalyzer
from cipherscope.services.patterns import DetectionPattern, PatternRegistry


SAMPLES = [
    "Hello, World!",
    "The quick brown fox jumps over the lazy dog 123",
    "~!@#$%^&*()_+{}|:<>?",
]

LONG_TEXT = (
    "Classical ciphers were broken by counting letters long before computers existed. "
    "Frequency tables for English make the most common symbols stand out quickly. "
    "Modern encodings such as Base64 hide nothing and only change the alphabet in use. "
    "Detection therefore starts with the cheap structural checks and ends with scoring."
)


class TestPatternRegistry:
    """Test suite for priority order and registration rules."""

    @pytest.fixture
    def registry(self):
        return PatternRegistry()

    def test_every_priority_slot_is_filled(self, registry):
        names = [info.name for info in registry.list_registered()]
        assert names == [name for _, name in PatternRegistry.PRIORITY]
        assert len(names) == 38

    def test_order_is_fixed_by_priority(self, registry):
        ordered = registry.ordered()
        assert ordered[0].name == "PEM"
        assert ordered[-1].name == "Base64"

    def test_list_registered_is_numbered(self, registry):
        infos = registry.list_registered()
        assert [info.priority for info in infos] == list(range(1, 39))
        gzip = next(info for info in infos if info.name == "GZIP")
        assert gzip.category is PatternCategory.CONTAINER
        assert not gzip.reversible

    def test_get_unknown_pattern(self, registry):
        with pytest.raises(PatternNotFoundError):
            registry.get("Base65")

    def test_registry_is_frozen_after_import(self):
        class LatePattern(DetectionPattern):
            name = "Base64"
            category = PatternCategory.BASE_ENCODING
            description = "Registered too late."

            def decode(self, text, **params):
                return text

        assert PatternRegistry.is_frozen()
        with pytest.raises(RegistryFrozenError):
            PatternRegistry.register(LatePattern)

    def test_hints_boost_hex_to_front(self, registry):
        ordered = registry.prioritized(ContentHints(likely_hex=True))
        assert ordered[0].name == "Hexadecimal"

    def test_base64_is_never_boosted(self, registry):
        ordered = registry.prioritized(ContentHints(likely_base64=True, likely_url=True))
        assert ordered[0].name == "URL Encoding"
        assert ordered[-1].name == "Base64"

    def test_ciphers_boosted_only_below_surface(self, registry):
        hints = ContentHints(likely_cipher=True)
        assert registry.prioritized(hints, depth=0)[0].name == "PEM"
        assert registry.prioritized(hints, depth=1)[0].name == "ROT13"


class TestContentHints:

    @pytest.fixture
    def analyzer(self):
        return ContentHintAnalyzer()

    def test_hex(self, analyzer):
        hints = analyzer.hints("48656c6c6f")
        assert hints.likely_hex
        assert not hints.likely_url

    def test_url(self, analyzer):
        assert analyzer.hints("Hello%20World").likely_url

    def test_binary(self, analyzer):
        assert analyzer.hints("01001000 01101001").likely_binary

    def test_cipher_text(self, analyzer):
        assert analyzer.hints("Uryyb Jbeyq").likely_cipher

    def test_hash_shape(self, analyzer):
        assert analyzer.hints("5d41402abc4b2a76b9719d911017c592").likely_hash

    def test_empty(self, analyzer):
        assert analyzer.hints("   ") == ContentHints()


class TestReversiblePatterns:
    """Encode followed by decode restores the input."""

    @pytest.fixture
    def registry(self):
        return PatternRegistry()

    @pytest.mark.parametrize(
        "name",
        ["Base64", "Base32", "Hexadecimal", "URL Encoding", "ROT13", "Atbash Cipher"],
    )
    @pytest.mark.parametrize("text", SAMPLES)
    def test_round_trip(self, registry, name, text):
        pattern = registry.get(name)
        assert pattern.decode(pattern.encode(text)) == text

    @pytest.mark.parametrize("shift", [1, 3, 13, 25])
    def test_caesar_round_trip_with_shift(self, registry, shift):
        pattern = registry.get("Caesar Cipher")
        text = "Attack at Dawn!"
        assert pattern.decode(pattern.encode(text, shift=shift), shift=shift) == text

    def test_detect_only_pattern_refuses_encode(self, registry):
        with pytest.raises(PatternError):
            registry.get("GZIP").encode("data")


class TestKnownVectors:

    @pytest.fixture
    def registry(self):
        return PatternRegistry()

    def test_base64(self, registry):
        assert registry.get("Base64").decode("SGVsbG8gV29ybGQh") == "Hello World!"

    def test_rot13(self, registry):
        assert registry.get("ROT13").decode("Uryyb Jbeyq") == "Hello World"

    def test_hex_with_separator(self, registry):
        pattern = registry.get("Hexadecimal")
        assert pattern.encode("Hi", separator=" ") == "48 69"
        assert pattern.decode("48:69") == "Hi"

    def test_binary(self, registry):
        pattern = registry.get("Binary")
        assert pattern.encode("Hi") == "01001000 01101001"
        assert pattern.decode("0100100001101001") == "Hi"

    def test_url(self, registry):
        assert registry.get("URL Encoding").encode("a b/c") == "a%20b%2Fc"

    def test_caesar_default_shift(self, registry):
        assert registry.get("Caesar Cipher").encode("abc") == "def"

    def test_atbash(self, registry):
        assert registry.get("Atbash Cipher").decode("Zgyzhs") == "Atbash"

    @pytest.mark.parametrize("name", ["Base58", "Base91"])
    def test_all_printable_ascii_round_trips(self, registry, name):
        pattern = registry.get(name)
        assert pattern.decode(pattern.encode(string.printable)) == string.printable

    @pytest.mark.parametrize("text", ["hello world", "attack at dawn", "a"])
    def test_two_rail_fence_keeps_every_character(self, registry, text):
        pattern = registry.get("Rail Fence Cipher (2-Rail)")
        assert pattern.decode(pattern.encode(text)) == text

    def test_two_rail_fence_known_vector(self, registry):
        assert registry.get("Rail Fence Cipher (2-Rail)").encode("hello world") == "hlowrdel ol"

    def test_base58_leading_zero_bytes(self, registry):
        pattern = registry.get("Base58")
        encoded = pattern.encode("\x00hi")
        assert encoded.startswith("1")
        assert pattern.to_bytes(encoded) == b"\x00hi"
        assert pattern.to_bytes("1" + pattern.encode("hi")) == b"\x00hi"


class TestValidators:

    @pytest.fixture
    def registry(self):
        return PatternRegistry()

    def test_base64_rejects_pure_hex(self, registry):
        assert not registry.get("Base64").validate("deadbeefcafebabe")

    def test_base64_rejects_bad_padding(self, registry):
        assert not registry.get("Base64").validate("SGV=sbG8gV29y")

    def test_base64_accepts_real_payload(self, registry):
        assert registry.get("Base64").validate("SGVsbG8gV29ybGQh")

    def test_hex_requires_even_length(self, registry):
        assert not registry.get("Hexadecimal").validate("abc")

    def test_url_requires_well_formed_escapes(self, registry):
        pattern = registry.get("URL Encoding")
        assert pattern.validate("a%20b")
        assert not pattern.validate("100% sure %20")

    def test_gzip_magic_bytes(self, registry):
        pattern = registry.get("GZIP")
        assert pattern.quick_filter("\x1f\x8b\x08\x00rest")
        assert not pattern.quick_filter("plain text")

    def test_base64_accepts_payload_longer_than_alphabet(self, registry):
        payload = base64.b64encode(LONG_TEXT.encode()).decode()
        assert len(payload) > 256
        assert registry.get("Base64").validate(payload)

    @pytest.mark.parametrize("name", ["ROT13", "Caesar Cipher", "Atbash Cipher"])
    def test_classical_ciphers_reject_base64_tokens(self, registry, name):
        payload = base64.b64encode(LONG_TEXT.encode()).decode()
        pattern = registry.get(name)
        assert not pattern.validate(payload)
        assert not pattern.validate("SGVsbG8gV29ybGQh")

    def test_classical_ciphers_keep_prose(self, registry):
        assert registry.get("ROT13").validate("Uryyb Jbeyq")
        assert registry.get("Atbash Cipher").validate("Gsv jfrxp yildm ulc")
