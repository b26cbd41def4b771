from fastapi import APIRouter

from cipherscope.dependencies import AnalyzerDep
from cipherscope.models.schemas import ErrorResponse, HashAnalysis, TextRequest

router = APIRouter()


@router.post(
    "",
    response_model=list[HashAnalysis],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
    },
    summary="Identify hash",
    description="Rank the hash algorithms a digest could come from, with a security assessment.",
)
async def identify_hash(
    request: TextRequest,
    analyzer: AnalyzerDep,
) -> list[HashAnalysis]:
    return analyzer.analyze_hash(request.text)
