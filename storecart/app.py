"""
storecart - FastAPI Application

Exposes the cart session to the storefront page. Run with:
    uvicorn storecart.app:app
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storecart.errors import CheckoutValidationError, InvalidIndex, StorageFailure
from storecart.logging import get_logger
from storecart.notifications import NotificationBuffer
from storecart.routers import cart_router, checkout_router
from storecart.routers.deps import drain_notifications, get_session, set_session
from storecart.scheduler import Scheduler
from storecart.session import CartSession

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the cart and start timers on the serving loop."""
    session = get_session()
    session.attach_scheduler(Scheduler(asyncio.get_running_loop()))
    session.start()
    yield
    session.shutdown()


def create_app(
    session: Optional[CartSession] = None,
    notifications: Optional[NotificationBuffer] = None,
) -> FastAPI:
    """
    Build the API app.

    Args:
        session: Session to serve; created from the environment when omitted
        notifications: Buffer the session notifies into
    """
    if session is not None:
        if notifications is None and isinstance(session.notify, NotificationBuffer):
            notifications = session.notify
        set_session(session, notifications)

    app = FastAPI(
        title="storecart",
        description="Storefront cart and checkout API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(cart_router)
    app.include_router(checkout_router)

    @app.exception_handler(CheckoutValidationError)
    async def checkout_validation_handler(request: Request, exc: CheckoutValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": exc.kind.value,
                "field": exc.field,
                "message": exc.message,
                "notifications": drain_notifications(),
            },
        )

    @app.exception_handler(InvalidIndex)
    async def invalid_index_handler(request: Request, exc: InvalidIndex):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        logger.error(f"Storage failure on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content={"error": str(exc), "notifications": drain_notifications()},
        )

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok", "service": "storecart"}

    return app


app = create_app()
