"""Monoalphabetic cipher engines."""

from cipherscope.services.engines.monoalphabetic.caesar import CaesarEngine
from cipherscope.services.engines.monoalphabetic.rot import ROT5Engine, ROT13Engine, ROT18Engine, ROT47Engine
from cipherscope.services.engines.monoalphabetic.atbash import AtbashEngine
from cipherscope.services.engines.monoalphabetic.simple_substitution import SimpleSubstitutionEngine

__all__ = [
    "CaesarEngine",
    "ROT5Engine",
    "ROT13Engine",
    "ROT18Engine",
    "ROT47Engine",
    "AtbashEngine",
    "SimpleSubstitutionEngine",
]
