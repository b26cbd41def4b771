from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class PatternCategory(str, Enum):
    """Families of detection patterns."""

    BASE_ENCODING = "base_encoding"
    WEB = "web"
    UNICODE = "unicode"
    CLASSICAL_CIPHER = "classical_cipher"
    STRUCTURED = "structured"
    LEGACY = "legacy"
    CONTAINER = "container"


class ConfidenceLevel(str, Enum):
    """Coarse confidence labels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConsensusStrength(str, Enum):
    """How many independent candidates the ensemble produced."""

    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


class CipherFamily(str, Enum):
    """Supported cipher families."""

    MONOALPHABETIC = "monoalphabetic"
    POLYALPHABETIC = "polyalphabetic"
    TRANSPOSITION = "transposition"
    POLYGRAPHIC = "polygraphic"


class CipherType(str, Enum):
    """Specific cipher types."""

    CAESAR = "caesar"
    ROT5 = "rot5"
    ROT13 = "rot13"
    ROT18 = "rot18"
    ROT47 = "rot47"
    ATBASH = "atbash"
    SIMPLE_SUBSTITUTION = "simple_substitution"
    VIGENERE = "vigenere"
    COLUMNAR = "columnar"
    RAIL_FENCE = "rail_fence"
    PLAYFAIR = "playfair"
    HILL = "hill"


class HashStrength(str, Enum):
    """Security tier of a hash algorithm."""

    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very-strong"


class HashCharset(str, Enum):
    """Character set a hash digest is rendered in."""

    HEX = "hex"
    BASE64 = "base64"
    BASE64_VARIANT = "base64-variant"
    DES_CRYPT = "des-crypt"
    HEX_WITH_SEPARATOR = "hex-with-separator"


class RiskLevel(str, Enum):
    """Risk level of an input or decoded payload."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ============================================================================
# Scoring Schemas
# ============================================================================


class ScoreProfile(BaseModel):
    """Per-candidate metrics."""

    entropy: float = Field(ge=0.0)
    language_score: float = Field(ge=0.0, le=100.0)
    is_valid_text: bool
    confidence: float = Field(ge=0.0, le=100.0)


class ContentHints(BaseModel):
    """Cheap character-class hints about a piece of content."""

    likely_base64: bool = False
    likely_hex: bool = False
    likely_binary: bool = False
    likely_url: bool = False
    likely_cipher: bool = False
    likely_hash: bool = False


# ============================================================================
# Detection Schemas
# ============================================================================


class LayerAnalysis(BaseModel):
    """One step inside a multi-layer chain."""

    depth: int = Field(ge=1)
    encoding: str
    confidence: float = Field(ge=0.0, le=100.0)
    score_profile: ScoreProfile
    decoded_content: str
    byte_size: int = Field(ge=0)
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    processing_time: float = 0.0


class DecodingResult(BaseModel):
    """One candidate interpretation of the input."""

    type: str
    result: str
    confidence: float = Field(ge=0.0, le=100.0)
    score_profile: ScoreProfile
    steps: list[str] = Field(min_length=1)
    warnings: list[str] = Field(default_factory=list)
    strategy: str | None = None
    layers: list[LayerAnalysis] = Field(default_factory=list)


class ContentAnalysis(BaseModel):
    """Classification of the content a chain ends on."""

    content_type: str
    security_risk: RiskLevel
    likely_original_content: bool


class MultiLayerResult(BaseModel):
    """Terminal state of a multi-layer decode."""

    layers: list[LayerAnalysis]
    final_content: str
    total_layers: int
    overall_confidence: float = Field(ge=0.0, le=100.0)
    content_analysis: ContentAnalysis
    optimization_suggestions: list[str] = Field(default_factory=list)
    stop_reason: str
    # Hash shape the chain stopped on, if any
    final_hash: str | None = None
    total_processing_time: float = 0.0

    @property
    def steps(self) -> list[str]:
        return [layer.encoding for layer in self.layers]


class InputAnalysis(BaseModel):
    """Metrics of the raw input."""

    length: int
    byte_size: int
    entropy: float
    language_score: float
    alpha_ratio: float
    digit_ratio: float
    whitespace_ratio: float
    symbol_ratio: float
    hints: ContentHints
    risk_level: RiskLevel = RiskLevel.LOW
    security_warnings: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Result of the detect entry point."""

    best_match: DecodingResult
    alternatives: list[DecodingResult] = Field(default_factory=list)
    input_analysis: InputAnalysis
    multi_layer: MultiLayerResult | None = None
    processing_time: float = 0.0


class CrossCheckResult(BaseModel):
    """Result of the cross-check ensemble."""

    best_match: DecodingResult
    alternatives: list[DecodingResult] = Field(default_factory=list)
    strategies_used: list[str]
    consensus_strength: ConsensusStrength
    cross_check_confidence: float = Field(ge=0.0, le=100.0)


# ============================================================================
# Cipher Schemas
# ============================================================================


class FrequencyAnalysis(BaseModel):
    """Letter, bigram and trigram statistics of a text."""

    letter_frequency: dict[str, float]
    bigrams: dict[str, int]
    trigrams: dict[str, int]
    most_common: list[str]
    least_common: list[str]
    chi_squared: float
    index_of_coincidence: float
    total_letters: int


class PlaintextCandidate(BaseModel):
    """A candidate plaintext produced by one cipher engine."""

    plaintext: str
    score: float = Field(ge=0.0, le=100.0)
    confidence: float = Field(ge=0.0, le=100.0)
    cipher_type: CipherType
    key: str
    method: str


class CipherAnalysis(BaseModel):
    """Result of classical cryptanalysis for one cipher family."""

    cipher_type: CipherType
    confidence: float = Field(ge=0.0, le=100.0)
    method: str
    key_candidate: str | None = None
    plaintext: str
    frequency_analysis: FrequencyAnalysis


# ============================================================================
# Hash Schemas
# ============================================================================


class HashCharacteristics(BaseModel):
    """Observed properties of a hash string."""

    length: int
    charset: HashCharset
    format: str
    entropy: float
    salt_detected: bool = False
    rounds_detected: int | None = None


class SecurityAssessment(BaseModel):
    """Static security lookup for a hash algorithm."""

    strength: HashStrength
    vulnerabilities: list[str]
    recommendations: list[str]
    cracking_difficulty: str


class HashAnalysis(BaseModel):
    """Ranked hash identification."""

    hash_type: str
    confidence: float = Field(ge=0.0, le=100.0)
    algorithm: str
    output_size: int | None = None
    variants: list[str] = Field(default_factory=list)
    characteristics: HashCharacteristics
    security_assessment: SecurityAssessment
    uses: list[str] = Field(default_factory=list)


# ============================================================================
# Option Schemas
# ============================================================================


ProgressCallback = Callable[[int, str], None]


class DetectOptions(BaseModel):
    """Per-call overrides for detection."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    enable_multi_layer: bool = True
    max_depth: int | None = Field(default=None, ge=1, le=50)
    min_confidence: float | None = Field(default=None, ge=0.0, le=100.0)
    enable_chunking: bool | None = None
    enable_parallel: bool | None = None
    progress_callback: ProgressCallback | None = Field(default=None, exclude=True)

    def cache_key(self) -> str:
        return (
            f"{self.enable_multi_layer}:{self.max_depth}:{self.min_confidence}:"
            f"{self.enable_chunking}:{self.enable_parallel}"
        )


# ============================================================================
# Request Schemas
# ============================================================================


class DetectRequest(BaseModel):
    """Request schema for /detect endpoint."""

    text: str = Field(max_length=10_485_760)
    enable_multi_layer: bool = True
    max_depth: int | None = Field(default=None, ge=1, le=50)
    min_confidence: float | None = Field(default=None, ge=0.0, le=100.0)

    def to_options(self) -> DetectOptions:
        return DetectOptions(
            enable_multi_layer=self.enable_multi_layer,
            max_depth=self.max_depth,
            min_confidence=self.min_confidence,
        )


class TextRequest(BaseModel):
    """Request schema for endpoints that take a single text."""

    text: str = Field(min_length=1, max_length=10_485_760)


class CipherRequest(TextRequest):
    """Request schema for /cipher endpoint."""

    include_speculative: bool = False


class DecryptRequest(BaseModel):
    """Request schema for /cipher/decrypt endpoint."""

    ciphertext: str = Field(min_length=1, max_length=100_000)
    cipher_type: CipherType
    key: str | dict[str, Any] | None = None
    options: dict[str, Any] = Field(default_factory=dict)


class EncryptRequest(BaseModel):
    """Request schema for /cipher/encrypt endpoint."""

    plaintext: str = Field(min_length=1, max_length=100_000)
    cipher_type: CipherType
    key: str | dict[str, Any]


class EncodeRequest(BaseModel):
    """Request schema for /encode endpoint."""

    pattern: str
    text: str = Field(min_length=1, max_length=1_048_576)
    params: dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Response Schemas
# ============================================================================


class PatternInfo(BaseModel):
    """Registry entry as exposed to callers."""

    priority: int
    name: str
    category: PatternCategory
    reversible: bool


class PatternListResponse(BaseModel):
    """Response schema for /patterns endpoint."""

    patterns: list[PatternInfo]
    total: int


class EncodeResponse(BaseModel):
    """Response schema for /encode endpoint."""

    pattern: str
    encoded: str


class DecryptResponse(BaseModel):
    """Response schema for /cipher/decrypt endpoint."""

    cipher_type: CipherType
    plaintext: str
    confidence: float
    key_used: str
    explanation: str


class EncryptResponse(BaseModel):
    """Response schema for /cipher/encrypt endpoint."""

    ciphertext: str
    cipher_type: CipherType
    key_used: str | dict[str, Any]


# ============================================================================
# Error Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
