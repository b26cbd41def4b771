"""Polyalphabetic cipher engines."""

from cipherscope.services.engines.polyalphabetic.vigenere import VigenereEngine

__all__ = [
    "VigenereEngine",
]
