"""
BrandStore API - FastAPI application.

Store handles (SQLAlchemy engine, object store and payment gateway HTTP
clients) are created once in the lifespan, kept on ``app.state`` for the
routers, and closed on shutdown. Tests pass their own handles to
``create_app``; handles passed in are not closed by the app.
"""
import traceback
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brandstore import __version__
from brandstore.accounts.admins import AdminAccounts
from brandstore.accounts.customers import CustomerAccounts
from brandstore.api.routes import admins, customers, orders, payments, stock
from brandstore.api.routes.catalog import catalog_routers
from brandstore.auth.tokens import TokenIssuer
from brandstore.catalog.lifecycle import CatalogLifecycle
from brandstore.core.config import StoreConfig, get_config
from brandstore.core.errors import BrandStoreError, ValidationFailed
from brandstore.data.database import build_engine, create_tables
from brandstore.data.relational_store import RelationalStore
from brandstore.inventory.stock import StockLedger
from brandstore.orders.aggregation import OrderService
from brandstore.payments.razorpay import RazorpayGateway
from brandstore.storage.object_store import ObjectStore, SupabaseObjectStore
from brandstore.utils.logger import get_logger, set_level

logger = get_logger("api.server")


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(
    config: Optional[StoreConfig] = None,
    relational_store: Optional[RelationalStore] = None,
    object_store: Optional[ObjectStore] = None,
    payment_gateway: Optional[RazorpayGateway] = None,
) -> FastAPI:
    config = config or get_config()
    set_level(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = []
        store = relational_store
        if store is None:
            store = RelationalStore(build_engine(config.database_url, config.database_echo))
            owned.append(store)
        objects = object_store
        if objects is None:
            objects = SupabaseObjectStore(
                config.supabase_url,
                config.supabase_key,
                config.storage_bucket,
                timeout=config.storage_timeout,
            )
            owned.append(objects)
        gateway = payment_gateway
        if gateway is None:
            gateway = RazorpayGateway(
                config.razorpay_key_id,
                config.razorpay_key_secret,
                base_url=config.razorpay_base_url,
                currency=config.payment_currency,
            )
            owned.append(gateway)

        # Create tables if they don't exist; in production, use migrations instead
        try:
            create_tables(store.engine)
        except Exception as e:
            logger.warning(f"Could not create tables: {e}. Tables should already exist.")

        tokens = TokenIssuer(config.jwt_secret, config.jwt_algorithm)
        lifecycle = CatalogLifecycle(store, objects)
        app.state.config = config
        app.state.relational_store = store
        app.state.object_store = objects
        app.state.payment_gateway = gateway
        app.state.tokens = tokens
        app.state.lifecycle = lifecycle
        app.state.customers = CustomerAccounts(lifecycle, tokens, timedelta(days=config.customer_token_days))
        app.state.admins = AdminAccounts(store, tokens, timedelta(hours=config.admin_token_hours))
        app.state.orders = OrderService(store)
        app.state.stock = StockLedger(store)
        logger.info("BrandStore API started")

        yield

        for handle in owned:
            if isinstance(handle, RelationalStore):
                handle.dispose()
            else:
                await handle.aclose()
        logger.info("BrandStore API stopped")

    app = FastAPI(
        title="BrandStore API",
        description="Catalog, customer, order, stock and payment back office",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in catalog_routers:
        app.include_router(router)
    app.include_router(customers.router)
    app.include_router(admins.router)
    app.include_router(orders.router)
    app.include_router(payments.router)
    app.include_router(stock.router)

    @app.exception_handler(BrandStoreError)
    async def brandstore_error_handler(request: Request, exc: BrandStoreError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.kind} {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationFailed(_validation_message(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Log unhandled exceptions with traceback and return 500."""
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "INTERNAL_ERROR", "message": "Internal server error"},
        )

    @app.get("/")
    def root():
        return {"service": "BrandStore API", "version": __version__, "status": "running"}

    @app.get("/health")
    def health_check(request: Request):
        """Database connectivity check."""
        healthy = request.app.state.relational_store.ping()
        return {
            "service": "healthy",
            "database": "healthy" if healthy else "unhealthy",
        }

    return app


def main() -> None:
    config = get_config()
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
