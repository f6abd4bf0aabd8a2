"""Product Reviews FastAPI application.

Processes review commands synchronously via HTTP. Every request runs inside
the product_reviews domain context with its correlation id bound to the log
context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from product_reviews.domain import reviews
from product_reviews.utils.logging import bind_correlation_id, clear_context

reviews.init()

CORRELATION_HEADER = "X-Correlation-ID"

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Product Reviews API",
    description="Product reviews, helpfulness votes and rating rollups",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the domain context and bind the request's correlation id."""
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    request.state.correlation_id = correlation_id
    bind_correlation_id(correlation_id, path=request.url.path)
    try:
        with reviews.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from product_reviews.api import register_error_handlers, review_router  # noqa: E402

app.include_router(review_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": reviews.name})
