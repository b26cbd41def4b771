from fastapi import APIRouter, HTTPException, status

from cipherscope.core.exceptions import PatternError
from cipherscope.dependencies import AnalyzerDep
from cipherscope.models.schemas import EncodeRequest, EncodeResponse, ErrorResponse

router = APIRouter()


@router.post(
    "",
    response_model=EncodeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Pattern cannot encode"},
        404: {"model": ErrorResponse, "description": "Pattern not found"},
    },
    summary="Encode text",
    description="Encode text with a reversible pattern. Useful for generating test inputs.",
)
async def encode_text(
    request: EncodeRequest,
    analyzer: AnalyzerDep,
) -> EncodeResponse:
    try:
        encoded = analyzer.encode_text(request.pattern, request.text, **request.params)
    except PatternError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except (TypeError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid parameters for {request.pattern}: {e}",
        )

    return EncodeResponse(pattern=request.pattern, encoded=encoded)
