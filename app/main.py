from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
import logging
import os
import uvicorn

from . import routers
from .database import Database, create_supabase_client
from .schemas.common import ResponseFactory

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
API_VERSION = "1.0.0"

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None, supabase_client=None) -> FastAPI:
    """Build the API around one store handle and one access gate client"""

    app = FastAPI(
        title="Campus Events API",
        description="Campus event approval, registration and budget tracking",
        version=API_VERSION,
    )
    app.state.database = database or Database()
    app.state.supabase = (
        supabase_client if supabase_client is not None else create_supabase_client()
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting Campus Events API")
        app.state.database.init_db()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Stopping Campus Events API")
        app.state.database.dispose()

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": ResponseFactory.error(
                    "Invalid request data",
                    error_code="ValidationError",
                    details=jsonable_encoder(exc.errors()),
                )
            },
        )

    # Include routers
    app.include_router(
        routers.auth.router, prefix="/api/auth", tags=["authentication"]
    )
    app.include_router(routers.event.router, prefix="/api/events", tags=["events"])
    app.include_router(
        routers.registrations.router,
        prefix="/api/registrations",
        tags=["registrations"],
    )
    app.include_router(
        routers.expenses.router, prefix="/api/expenses", tags=["expenses"]
    )

    @app.get("/")
    async def root():
        return {"message": "Welcome to Campus Events API", "status": "running"}

    @app.get("/health")
    async def health_check():
        database_ok = app.state.database.check_connection()
        return JSONResponse(
            status_code=(
                status.HTTP_200_OK
                if database_ok
                else status.HTTP_503_SERVICE_UNAVAILABLE
            ),
            content={
                "status": "healthy" if database_ok else "degraded",
                "service": "campus-events-api",
                "version": API_VERSION,
                "database": "connected" if database_ok else "unavailable",
            },
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
