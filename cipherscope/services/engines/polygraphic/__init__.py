"""Polygraphic cipher engines."""

from cipherscope.services.engines.polygraphic.playfair import PlayfairEngine
from cipherscope.services.engines.polygraphic.hill import HillEngine

__all__ = [
    "PlayfairEngine",
    "HillEngine",
]
