from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, settings as default_settings
from app.core.logging import configure_logging
from app.core.templating import render_error
from app.database.connection import Base, create_db_engine, create_session_factory
from app.middleware.request_logging import RequestLoggingMiddleware
from app.models.product import Product  # noqa: F401  registers the table on Base
from app.routes import system
from app.routes.products import ERROR_MESSAGES, router as product_router

STATIC_DIR = Path(__file__).resolve().parent / "static"


def _endpoint_name(request: Request) -> Optional[str]:
    endpoint = request.scope.get("endpoint")
    return getattr(endpoint, "__name__", None)


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # a known path with the wrong method is still a page that does not exist
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return render_error(
                request, status.HTTP_404_NOT_FOUND,
                "Page not found", "The page you are looking for does not exist.",
            )
        return render_error(request, exc.status_code, "Error", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # a path id that is not an integer cannot name an existing product
        if any(error.get("loc", ("",))[0] == "path" for error in exc.errors()):
            return render_error(request, status.HTTP_404_NOT_FOUND, "Error", "Product not found")
        logger.info("Rejected form on {} {}: {}", request.method, request.url.path, exc.errors())
        return render_error(request, status.HTTP_400_BAD_REQUEST, "Error", "Invalid product data")

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        message = ERROR_MESSAGES.get(_endpoint_name(request), "A database error occurred.")
        logger.opt(exception=exc).error(
            "{} while handling {} {}", message, request.method, request.url.path
        )
        return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Error", message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(
            "Unhandled error on {} {}", request.method, request.url.path
        )
        return render_error(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Server error", "An error occurred on the server.",
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_db_engine(settings)
        Base.metadata.create_all(bind=engine)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        app.state.start_time = datetime.utcnow()
        logger.info("Connected to {}", engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            engine.dispose()
            logger.info("Database pool disposed")

    app = FastAPI(title="Product Catalog", lifespan=lifespan)

    app.add_middleware(RequestLoggingMiddleware)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url="/products", status_code=status.HTTP_302_FOUND)

    app.include_router(product_router)
    app.include_router(system.router)

    register_exception_handlers(app)
    return app


app = create_app()
