"""Mapping of evalconf exceptions to HTTP responses.

Library code stays HTTP-agnostic; the handlers registered here translate its
exceptions at the boundary:

- EvalConfigValidationError -> 422 with every issue
- EvalConfigDecodeError     -> 400 with the decode issues (if any)
- other EvalConfigError     -> 400
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from evalconf.exceptions import EvalConfigDecodeError, EvalConfigError, EvalConfigValidationError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register evalconf exception handlers on the provided FastAPI app."""

    @app.exception_handler(EvalConfigValidationError)
    async def _validation_error(request: Request, exc: EvalConfigValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Invalid evaluation config", "issues": [i.to_dict() for i in exc.issues]},
        )

    @app.exception_handler(EvalConfigDecodeError)
    async def _decode_error(request: Request, exc: EvalConfigDecodeError) -> JSONResponse:
        logger.info("decode failed on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc), "issues": [i.to_dict() for i in exc.issues]},
        )

    @app.exception_handler(EvalConfigError)
    async def _config_error(request: Request, exc: EvalConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})
