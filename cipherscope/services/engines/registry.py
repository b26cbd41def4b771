from typing import Type

from cipherscope.core.exceptions import EngineNotFoundError
from cipherscope.models.schemas import CipherFamily, CipherType
from cipherscope.services.engines.base import CipherEngine


class EngineRegistry:
    """
    Cipher engines keyed by CipherType.

    Engine modules add themselves with the @EngineRegistry.register
    decorator when _load_engines() imports them. CipherAnalyzer walks the
    engines in registration order, so the import order below is also the
    order of its results before sorting.
    """

    _engines: dict[CipherType, Type[CipherEngine]] = {}
    _instances: dict[CipherType, CipherEngine] = {}

    @classmethod
    def register(cls, engine_class: Type[CipherEngine]) -> Type[CipherEngine]:
        cls._engines[engine_class.cipher_type] = engine_class
        return engine_class

    def get_engine(self, cipher_type: CipherType) -> CipherEngine:
        """
        Shared engine instance for cipher_type, created on first use.

        Raises:
            EngineNotFoundError: If no engine handles cipher_type
        """
        engine_class = self._engines.get(cipher_type)
        if engine_class is None:
            raise EngineNotFoundError(str(cipher_type.value))

        if cipher_type not in self._instances:
            self._instances[cipher_type] = engine_class()
        return self._instances[cipher_type]

    def get_engines_by_family(self, family: CipherFamily) -> list[CipherEngine]:
        return [
            self.get_engine(cipher_type)
            for cipher_type, engine_class in self._engines.items()
            if engine_class.cipher_family == family
        ]

    def get_all_engines(self) -> list[CipherEngine]:
        return [self.get_engine(cipher_type) for cipher_type in self._engines]


def _load_engines() -> None:
    from cipherscope.services.engines.monoalphabetic import caesar, rot, atbash, simple_substitution  # noqa: F401
    from cipherscope.services.engines.polyalphabetic import vigenere  # noqa: F401
    from cipherscope.services.engines.transposition import columnar, rail_fence  # noqa: F401
    from cipherscope.services.engines.polygraphic import playfair, hill  # noqa: F401


_load_engines()
