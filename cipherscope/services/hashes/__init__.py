"""Hash signature table and recognizer."""

from cipherscope.services.hashes.recognizer import HashRecognizer
from cipherscope.services.hashes.signatures import SIGNATURES, HashSignature

__all__ = [
    "HashRecognizer",
    "HashSignature",
    "SIGNATURES",
]
