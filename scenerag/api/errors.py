from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from scenerag.exceptions import (
    ConversationConflictError,
    DataIntegrityError,
    MaxIterationsExceeded,
    ProviderException,
    ResourceNotFoundException,
    RetrievalError,
    SceneRAGException,
    UnknownFunctionError,
    ValidationException,
)

# Most specific first
STATUS_CODES = [
    (ResourceNotFoundException, 404),
    (ValidationException, 400),
    (ConversationConflictError, 409),
    (MaxIterationsExceeded, 502),
    (UnknownFunctionError, 502),
    (DataIntegrityError, 500),
    (RetrievalError, 500),
    (ProviderException, 503),
]


def status_for(exc: SceneRAGException) -> int:
    for exc_type, status in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status
    return 500


async def scenerag_exception_handler(request: Request, exc: SceneRAGException) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed with {exc.error_code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status} {exc.error_code}")
    return JSONResponse(
        status_code=status,
        content={"error": {"code": exc.error_code, "message": exc.message, "details": exc.details}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SceneRAGException, scenerag_exception_handler)
