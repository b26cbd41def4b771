from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from cipherscope.core.config import get_settings
from cipherscope.services.analyzer import EncodingAnalyzer


@lru_cache
def get_analyzer() -> EncodingAnalyzer:
    """Get the shared analyzer; it owns the result cache."""
    return EncodingAnalyzer(get_settings())


# Analyzer dependency
AnalyzerDep = Annotated[EncodingAnalyzer, Depends(get_analyzer)]
