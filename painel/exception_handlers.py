from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from painel.exceptions import PainelError, RateLimited

logger = logging.getLogger(__name__)


async def painel_error_handler(request: Request, exc: PainelError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    headers = {}
    if isinstance(exc, RateLimited) and exc.retry_after is not None:
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PainelError, painel_error_handler)
