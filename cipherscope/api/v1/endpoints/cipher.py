from fastapi import APIRouter

from cipherscope.dependencies import AnalyzerDep
from cipherscope.models.schemas import (
    CipherAnalysis,
    CipherRequest,
    DecryptRequest,
    DecryptResponse,
    EncryptRequest,
    EncryptResponse,
    ErrorResponse,
)

router = APIRouter()


@router.post(
    "",
    response_model=list[CipherAnalysis],
    responses={
        400: {"model": ErrorResponse, "description": "Input too short or invalid"},
    },
    summary="Break classical ciphers",
    description=(
        "Frequency analysis and key recovery across monoalphabetic, "
        "polyalphabetic, transposition and polygraphic ciphers."
    ),
)
async def analyze_cipher(
    request: CipherRequest,
    analyzer: AnalyzerDep,
) -> list[CipherAnalysis]:
    """
    Attempt every supported cipher family.

    Results are sorted by confidence. Playfair and Hill reports without
    key recovery are included only when include_speculative is set.
    """
    return analyzer.analyze_cipher(request.text, include_speculative=request.include_speculative)


@router.post(
    "/decrypt",
    response_model=DecryptResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or key"},
        404: {"model": ErrorResponse, "description": "Cipher type not supported"},
        422: {"model": ErrorResponse, "description": "No key could be found"},
    },
    summary="Decrypt ciphertext",
    description="Decrypt ciphertext using a specified cipher type and optional key.",
)
async def decrypt_ciphertext(
    request: DecryptRequest,
    analyzer: AnalyzerDep,
) -> DecryptResponse:
    """
    Decrypt ciphertext with a forced cipher type.

    If no key is provided, the engine searches for the most
    English-looking key.
    """
    result = analyzer.decrypt_cipher(
        request.cipher_type, request.ciphertext, request.key, request.options
    )
    return DecryptResponse(
        cipher_type=request.cipher_type,
        plaintext=result.plaintext,
        confidence=result.confidence,
        key_used=result.key,
        explanation=result.explanation,
    )


@router.post(
    "/encrypt",
    response_model=EncryptResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or key"},
        404: {"model": ErrorResponse, "description": "Cipher type not supported"},
    },
    summary="Encrypt plaintext",
    description="Encrypt plaintext with a specified cipher type and key. Useful for generating test inputs.",
)
async def encrypt_plaintext(
    request: EncryptRequest,
    analyzer: AnalyzerDep,
) -> EncryptResponse:
    ciphertext = analyzer.encrypt_cipher(request.cipher_type, request.plaintext, request.key)
    return EncryptResponse(
        ciphertext=ciphertext,
        cipher_type=request.cipher_type,
        key_used=request.key,
    )
