"""HTTP mapping for domain errors.

Protean's handlers cover ValidationError (400) and ObjectNotFoundError
(404). Permission and conflict errors subclass ValidationError and get their
own status codes here; Starlette picks the most specific handler.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from product_reviews.errors import ConflictError, ForbiddenError


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"error": exc.messages})

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"error": exc.messages})
