from fastapi import APIRouter

from cipherscope.dependencies import AnalyzerDep
from cipherscope.models.schemas import PatternListResponse

router = APIRouter()


@router.get(
    "",
    response_model=PatternListResponse,
    summary="List detection patterns",
    description="All registered patterns in the order detection tries them.",
)
async def list_patterns(analyzer: AnalyzerDep) -> PatternListResponse:
    patterns = analyzer.list_patterns()
    return PatternListResponse(patterns=patterns, total=len(patterns))
