from fastapi import APIRouter

from cipherscope.api.v1.endpoints import cipher, cross_check, detect, encode, hash, patterns

api_router = APIRouter()

api_router.include_router(
    detect.router,
    prefix="/detect",
    tags=["Detection"],
)

api_router.include_router(
    cross_check.router,
    prefix="/cross-check",
    tags=["Detection"],
)

api_router.include_router(
    cipher.router,
    prefix="/cipher",
    tags=["Cryptanalysis"],
)

api_router.include_router(
    hash.router,
    prefix="/hash",
    tags=["Cryptanalysis"],
)

api_router.include_router(
    encode.router,
    prefix="/encode",
    tags=["Encoding"],
)

api_router.include_router(
    patterns.router,
    prefix="/patterns",
    tags=["Encoding"],
)
