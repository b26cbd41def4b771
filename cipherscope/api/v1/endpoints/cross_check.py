from fastapi import APIRouter

from cipherscope.dependencies import AnalyzerDep
from cipherscope.models.schemas import CrossCheckResult, ErrorResponse, TextRequest

router = APIRouter()


@router.post(
    "",
    response_model=CrossCheckResult,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        413: {"model": ErrorResponse, "description": "Input too large"},
    },
    summary="Cross-check detection",
    description="Run every independent detection strategy and merge their candidates.",
)
async def cross_check(
    request: TextRequest,
    analyzer: AnalyzerDep,
) -> CrossCheckResult:
    return analyzer.cross_check(request.text)
