"""Classical cipher engines and their registry."""

from cipherscope.services.engines.base import CipherEngine, DecryptionResult
from cipherscope.services.engines.registry import EngineRegistry

__all__ = [
    "CipherEngine",
    "DecryptionResult",
    "EngineRegistry",
]
