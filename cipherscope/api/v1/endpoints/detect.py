from fastapi import APIRouter

from cipherscope.dependencies import AnalyzerDep
from cipherscope.models.schemas import AnalysisResult, DetectRequest, ErrorResponse

router = APIRouter()


@router.post(
    "",
    response_model=AnalysisResult,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        413: {"model": ErrorResponse, "description": "Input too large"},
    },
    summary="Detect encoding",
    description=(
        "Detect how the input is encoded, decode it, and peel nested "
        "encodings when multi-layer decoding is enabled."
    ),
)
async def detect_encoding(
    request: DetectRequest,
    analyzer: AnalyzerDep,
) -> AnalysisResult:
    """
    Detect and decode the input.

    The pipeline:
    1. Security pre-check and size limit
    2. Hash shape short-circuit
    3. Pattern registry scan
    4. Multi-layer decoding
    """
    return analyzer.detect(request.text, request.to_options())
