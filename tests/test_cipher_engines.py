"""Tests for the classical cipher engines and the cipher analyzer."""

import pytest

from cipherscope.core.config import Settings
from cipherscope.core.exceptions import EngineNotFoundError, InvalidInputError
from cipherscope.models.schemas import CipherFamily, CipherType
from cipherscope.services.engines import EngineRegistry
from cipherscope.services.engines.analyzer import CipherAnalyzer
from cipherscope.services.engines.monoalphabetic import AtbashEngine, CaesarEngine, ROT13Engine
from cipherscope.services.engines.polyalphabetic import VigenereEngine
from cipherscope.services.engines.polygraphic import HillEngine, PlayfairEngine
from cipherscope.services.engines.transposition import ColumnarEngine, RailFenceEngine


LONG_PLAINTEXT = (
    "Cryptography is the study of secure communication in the presence of "
    "adversaries. Long before computers existed people invented ciphers to hide "
    "meaning from unauthorized readers. Some methods relied on simple substitution "
    "while others used transposition or periodic keys. The history of these "
    "methods shows that every cipher which keeps the shape of the language will "
    "sooner or later be broken by a patient analyst who counts the letters."
)


class TestCaesarEngine:
    """Test suite for Caesar cipher engine."""

    @pytest.fixture
    def engine(self):
        return CaesarEngine()

    def test_known_vector(self, engine):
        """The textbook pangram under shift 3."""
        candidates = engine.attempt_decrypt("Wkh txlfn eurzq ira mxpsv ryhu wkh odcb grj", {})
        assert candidates[0].key == "3"
        assert candidates[0].plaintext == "The quick brown fox jumps over the lazy dog"

    def test_encrypt_shift_7(self, engine):
        assert engine.encrypt("HELLO", "7") == "OLSSV"

    def test_decrypt_preserves_case(self, engine):
        assert engine.decrypt_with_key("Olssv, Dvysk!", "7").plaintext == "Hello, World!"

    def test_find_key_and_decrypt(self, engine):
        ciphertext = engine.encrypt(LONG_PLAINTEXT, "13")
        result = engine.find_key_and_decrypt(ciphertext)
        assert result.key == "13"
        assert result.plaintext == LONG_PLAINTEXT

    def test_confidence_is_capped(self, engine):
        ciphertext = engine.encrypt(LONG_PLAINTEXT, "3")
        assert engine.attempt_decrypt(ciphertext, {})[0].confidence <= 95.0


class TestRotationEngines:

    def test_rot13_is_involution(self):
        engine = ROT13Engine()
        text = "Hello World"
        assert engine.encrypt(engine.encrypt(text, "13"), "13") == text

    def test_atbash_known_vector(self):
        engine = AtbashEngine()
        assert engine.encrypt("Hello", "") == "Svool"


class TestVigenereEngine:
    """Test suite for Vigenère cipher engine."""

    @pytest.fixture
    def engine(self):
        return VigenereEngine()

    def test_encrypt_known_vector(self, engine):
        assert engine.encrypt("ATTACKATDAWN", "LEMON") == "LXFOPVEFRNHR"

    def test_non_letters_do_not_consume_key(self, engine):
        assert engine.encrypt("AT TA", "KEY") == "KX RK"

    def test_breaks_key(self, engine):
        ciphertext = engine.encrypt(LONG_PLAINTEXT, "KEY")
        best = engine.attempt_decrypt(ciphertext, {})[0]
        assert best.key == "KEY"
        assert best.plaintext == LONG_PLAINTEXT
        assert best.confidence <= 90.0

    def test_decrypt_with_key(self, engine):
        ciphertext = engine.encrypt(LONG_PLAINTEXT, "LEMON")
        assert engine.decrypt_with_key(ciphertext, "lemon").plaintext == LONG_PLAINTEXT

    def test_invalid_key(self, engine):
        with pytest.raises(ValueError):
            engine.encrypt("TEXT", "K3Y")


class TestTranspositionEngines:

    def test_columnar_known_vector(self):
        engine = ColumnarEngine()
        assert engine.encrypt("HELLOWORLD", "BAC") == "EORHLODLWL"
        result = engine.decrypt_with_key("EORHLODLWL", "2,1,3")
        assert result.plaintext == "HELLOWORLD"
        assert result.key == "2,1,3"

    def test_columnar_keyword_order(self):
        engine = ColumnarEngine()
        result = engine.decrypt_with_key(engine.encrypt("WEAREDISCOVERED", "ZEBRAS"), "ZEBRAS")
        assert result.key == "6,3,2,4,1,5"
        assert result.plaintext == "WEAREDISCOVERED"

    def test_columnar_irregular_grid_round_trip(self):
        engine = ColumnarEngine()
        plaintext = "THISMESSAGEHASANODDLENGTH"
        for key in ("3,1,2", "4,2,1,3", "SECRET"):
            assert engine.decrypt_with_key(engine.encrypt(plaintext, key), key).plaintext == plaintext

    def test_rail_fence_known_vector(self):
        engine = RailFenceEngine()
        assert engine.encrypt("WEAREDISCOVEREDFLEEATONCE", "3") == "WECRLTEERDSOEEFEAOCAIVDEN"
        assert engine.decrypt_with_key("WECRLTEERDSOEEFEAOCAIVDEN", "3").plaintext == (
            "WEAREDISCOVEREDFLEEATONCE"
        )

    def test_rail_fence_rejects_one_rail(self):
        with pytest.raises(ValueError):
            RailFenceEngine().encrypt("TEXT", "1")


class TestPolygraphicEngines:

    def test_playfair_known_vector(self):
        engine = PlayfairEngine()
        ciphertext = engine.encrypt("HIDE THE GOLD IN THE TREE STUMP", "PLAYFAIREXAMPLE")
        assert ciphertext == "BMODZBXDNABEKUDMUIXMMOUVIF"
        assert engine.decrypt_with_key(ciphertext, "PLAYFAIREXAMPLE").plaintext == (
            "HIDETHEGOLDINTHETREXESTUMP"
        )

    def test_hill_2x2_known_vector(self):
        engine = HillEngine()
        assert engine.encrypt("HELP", {"matrix": [[3, 3], [2, 5]]}) == "HIAT"
        assert engine.decrypt_with_key("HIAT", "DDCF").plaintext == "HELP"

    def test_hill_3x3_known_vector(self):
        engine = HillEngine()
        assert engine.encrypt("ACT", "GYBNQKURP") == "POH"
        assert engine.decrypt_with_key("POH", "GYBNQKURP").plaintext == "ACT"

    def test_hill_rejects_singular_matrix(self):
        engine = HillEngine()
        assert not engine.validate_key("AAAA")
        with pytest.raises(ValueError):
            engine.encrypt("HELP", "AAAA")


class TestEngineRegistry:

    @pytest.fixture
    def registry(self):
        return EngineRegistry()

    def test_every_cipher_type_has_an_engine(self, registry):
        for cipher_type in CipherType:
            assert registry.get_engine(cipher_type).cipher_type is cipher_type

    def test_engines_by_family(self, registry):
        names = {engine.name for engine in registry.get_engines_by_family(CipherFamily.TRANSPOSITION)}
        assert names == {RailFenceEngine.name, ColumnarEngine.name}

    def test_unknown_engine(self, registry, monkeypatch):
        monkeypatch.setattr(EngineRegistry, "_engines", {})
        with pytest.raises(EngineNotFoundError):
            registry.get_engine(CipherType.CAESAR)


class TestCipherAnalyzer:
    """Test suite for multi-engine cryptanalysis."""

    @pytest.fixture
    def analyzer(self):
        return CipherAnalyzer(Settings())

    def test_short_input_is_rejected(self, analyzer):
        with pytest.raises(InvalidInputError):
            analyzer.analyze("abc def")

    def test_caesar_is_found(self, analyzer):
        ciphertext = CaesarEngine().encrypt(LONG_PLAINTEXT, "3")
        results = analyzer.analyze(ciphertext)

        caesar = [r for r in results if r.cipher_type is CipherType.CAESAR]
        assert caesar
        assert caesar[0].key_candidate == "3"
        assert caesar[0].plaintext == LONG_PLAINTEXT

    def test_results_sorted_by_confidence(self, analyzer):
        results = analyzer.analyze(CaesarEngine().encrypt(LONG_PLAINTEXT, "5"))
        confidences = [r.confidence for r in results]
        assert confidences == sorted(confidences, reverse=True)

    def test_one_result_per_engine(self, analyzer):
        results = analyzer.analyze(VigenereEngine().encrypt(LONG_PLAINTEXT, "KEY"))
        types = [r.cipher_type for r in results]
        assert len(types) == len(set(types))

    def test_display_name(self):
        assert CipherAnalyzer.display_name(CipherType.VIGENERE) == "Vigenère Cipher"
