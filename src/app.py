"""Shoe ordering FastAPI application.

Processes catalog, cart and order commands synchronously over HTTP. Every
request runs inside the ordering domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay from domain.toml:
#   - unset / "test" → in-memory database
#   - "production"   → SQLite database
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering  # noqa: E402
from ordering.utils.logging import clear_context  # noqa: E402

ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Shoe Ordering API",
    description="Shoe catalog, shopping cart, order lifecycle and sales reports",
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
    """Push the ordering domain context for each request."""
    with ordering.domain_context():
        try:
            response = await call_next(request)
        finally:
            clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from ordering.api.errors import register_error_handlers  # noqa: E402
from ordering.api.routes import cart_router, order_router, product_router, report_router  # noqa: E402

app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(report_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"ordering": {"name": ordering.name}},
        }
    )
