from typing import Any


class CipherscopeError(Exception):
    """Base exception for all detection and analysis errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CipherscopeError):
    """Raised when input validation fails."""

    pass


class InputTooLargeError(ValidationError):
    """Raised when input exceeds the configured maximum size."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"Input size {size} bytes exceeds maximum {max_size} bytes",
            {"size": size, "max_size": max_size},
        )


class SecurityRejectedError(ValidationError):
    """Raised when the security pre-check refuses the input."""

    def __init__(self, reason: str, threats: list[str] | None = None):
        super().__init__(
            f"Input rejected: {reason}",
            {"reason": reason, "threats": threats or []},
        )


class InvalidInputError(ValidationError):
    """Raised when input cannot be interpreted as text or bytes."""

    pass


class DetectionError(CipherscopeError):
    """Base exception for errors raised inside the detection loop."""

    pass


class PatternError(DetectionError):
    """Raised when a pattern's validator or decoder fails."""

    def __init__(self, pattern_name: str, cause: str):
        super().__init__(
            f"Pattern '{pattern_name}' failed: {cause}",
            {"pattern_name": pattern_name, "cause": cause},
        )


class PatternNotFoundError(DetectionError):
    """Raised when a requested pattern is not registered."""

    def __init__(self, pattern_name: str):
        super().__init__(
            f"Pattern '{pattern_name}' not found",
            {"pattern_name": pattern_name},
        )


class TimeoutExceededError(DetectionError):
    """Raised when a validator or layer exceeds its time budget."""

    def __init__(self, scope: str, timeout: float):
        super().__init__(
            f"'{scope}' timed out after {timeout}s",
            {"scope": scope, "timeout": timeout},
        )


class RegistryFrozenError(DetectionError):
    """Raised when registration is attempted after startup."""

    pass


class EngineError(CipherscopeError):
    """Base exception for cipher engine errors."""

    pass


class EngineNotFoundError(EngineError):
    """Raised when requested cipher engine is not found."""

    def __init__(self, engine_name: str):
        super().__init__(
            f"Cipher engine '{engine_name}' not found",
            {"engine_name": engine_name},
        )


class DecryptionError(EngineError):
    """Raised when decryption fails."""

    pass


class InvalidKeyError(ValidationError):
    """Raised when a cipher engine rejects a key."""

    def __init__(self, engine_name: str, reason: str):
        super().__init__(
            f"Invalid key for {engine_name}: {reason}",
            {"engine_name": engine_name, "reason": reason},
        )
