"""Storefront checkout FastAPI application.

Web server for the cart → order → payment → delivery path. Every request
is processed synchronously inside the ordering domain's context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering
from ordering.utils.logging import add_context, clear_context, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied (see domain.toml).
ordering.init()

_DOMAIN_FREE_PATHS = ("/health", "/docs", "/openapi.json", "/redoc")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Checkout API",
    description="Cart, order placement, payment reconciliation and delivery",
    lifespan=lifespan,
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
    """Push the ordering domain context for each API request."""
    if request.url.path.startswith(_DOMAIN_FREE_PATHS):
        return await call_next(request)
    clear_context()
    add_context(path=request.url.path, user_id=request.headers.get("x-user-id"))
    with ordering.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from ordering.api import cart_router, customer_router, order_router  # noqa: E402
from ordering.api.errors import register_error_handlers  # noqa: E402
from payments.api.routes import payment_router  # noqa: E402

app.include_router(cart_router)
app.include_router(customer_router)
app.include_router(order_router)
app.include_router(payment_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domains": {"ordering": {"name": ordering.name}}})
