"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from cipherscope.core.config import Settings
from cipherscope.dependencies import get_analyzer
from cipherscope.main import create_app
from cipherscope.services.analyzer import EncodingAnalyzer


MD5_HELLO = "5d41402abc4b2a76b9719d911017c592"


def make_client(settings):
    app = create_app()
    app.dependency_overrides[get_analyzer] = lambda: EncodingAnalyzer(settings)
    return TestClient(app)


class TestAPI:
    """Test suite for the v1 endpoints."""

    @pytest.fixture
    def client(self):
        return make_client(Settings(enable_parallel=False))

    def test_detect(self, client):
        response = client.post("/api/v1/detect", json={"text": "SGVsbG8gV29ybGQh"})
        assert response.status_code == 200
        body = response.json()
        assert body["best_match"]["type"] == "Base64"
        assert body["best_match"]["result"] == "Hello World!"

    def test_detect_without_multi_layer(self, client):
        response = client.post(
            "/api/v1/detect",
            json={"text": "VXJ5eWIgSmJleXE=", "enable_multi_layer": False},
        )
        assert response.status_code == 200
        assert response.json()["best_match"]["result"] == "Uryyb Jbeyq"

    def test_detect_rejects_invalid_depth(self, client):
        response = client.post("/api/v1/detect", json={"text": "abc", "max_depth": 0})
        assert response.status_code == 422

    def test_detect_too_large(self):
        client = make_client(Settings(max_input_size=10, enable_parallel=False))
        response = client.post("/api/v1/detect", json={"text": "x" * 11})
        assert response.status_code == 413
        body = response.json()
        assert body["error"] == "InputTooLargeError"
        assert body["details"] == {"size": 11, "max_size": 10}

    def test_cross_check(self, client):
        response = client.post("/api/v1/cross-check", json={"text": "SGVsbG8gV29ybGQh"})
        assert response.status_code == 200
        assert response.json()["best_match"]["result"] == "Hello World!"

    def test_cipher_short_input(self, client):
        response = client.post("/api/v1/cipher", json={"text": "abc"})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInputError"

    def test_cipher_decrypt_with_key(self, client):
        response = client.post(
            "/api/v1/cipher/decrypt",
            json={"ciphertext": "Olssv, Dvysk!", "cipher_type": "caesar", "key": "7"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["plaintext"] == "Hello, World!"
        assert body["key_used"] == "7"
        assert body["cipher_type"] == "caesar"
        assert body["explanation"]

    def test_cipher_decrypt_invalid_key(self, client):
        response = client.post(
            "/api/v1/cipher/decrypt",
            json={"ciphertext": "LXFOPVEFRNHR", "cipher_type": "vigenere", "key": "l3mon"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidKeyError"

    def test_cipher_decrypt_unknown_type(self, client):
        response = client.post(
            "/api/v1/cipher/decrypt",
            json={"ciphertext": "abc", "cipher_type": "enigma"},
        )
        assert response.status_code == 422

    def test_cipher_encrypt(self, client):
        response = client.post(
            "/api/v1/cipher/encrypt",
            json={"plaintext": "ATTACKATDAWN", "cipher_type": "vigenere", "key": "LEMON"},
        )
        assert response.status_code == 200
        assert response.json() == {
            "ciphertext": "LXFOPVEFRNHR", "cipher_type": "vigenere", "key_used": "LEMON",
        }

    def test_cipher_encrypt_requires_key(self, client):
        response = client.post(
            "/api/v1/cipher/encrypt",
            json={"plaintext": "ATTACKATDAWN", "cipher_type": "vigenere"},
        )
        assert response.status_code == 422

    def test_hash(self, client):
        response = client.post("/api/v1/hash", json={"text": MD5_HELLO})
        assert response.status_code == 200
        assert response.json()[0]["hash_type"] == "MD5"

    def test_hash_empty_text(self, client):
        response = client.post("/api/v1/hash", json={"text": ""})
        assert response.status_code == 422

    def test_encode(self, client):
        response = client.post("/api/v1/encode", json={"pattern": "Base64", "text": "hi"})
        assert response.status_code == 200
        assert response.json() == {"pattern": "Base64", "encoded": "aGk="}

    def test_encode_with_params(self, client):
        response = client.post(
            "/api/v1/encode",
            json={"pattern": "Caesar Cipher", "text": "abc", "params": {"shift": 1}},
        )
        assert response.status_code == 200
        assert response.json()["encoded"] == "bcd"

    def test_encode_bad_params(self, client):
        response = client.post(
            "/api/v1/encode",
            json={"pattern": "Caesar Cipher", "text": "abc", "params": {"shift": "x"}},
        )
        assert response.status_code == 400

    def test_encode_detect_only_pattern(self, client):
        response = client.post("/api/v1/encode", json={"pattern": "GZIP", "text": "data"})
        assert response.status_code == 400
        assert "detail" in response.json()

    def test_encode_unknown_pattern(self, client):
        response = client.post("/api/v1/encode", json={"pattern": "Base65", "text": "data"})
        assert response.status_code == 404
        assert response.json()["error"] == "PatternNotFoundError"

    def test_patterns(self, client):
        response = client.get("/api/v1/patterns")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 38
        assert body["patterns"][0]["priority"] == 1
