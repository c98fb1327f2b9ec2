import logging
import uuid
from contextlib import asynccontextmanager
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Path, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .db import Database, get_session, run_migrations
from .models import MAX_INT, Book, BookPayload
from .otel import configure_logging, configure_otel
from .service import BookNotFound, BookService

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("book_inventory.requests")

BookId = Annotated[int, Path(ge=1, le=MAX_INT)]


def get_book_service(session: Session = Depends(get_session)) -> BookService:
    return BookService(session)


router = APIRouter()


@router.get("/", response_class=PlainTextResponse, tags=["meta"])
def index() -> str:
    return "hello world"


@router.get("/health", tags=["meta"])
def health() -> dict:
    return {"status": "ok"}


@router.get("/books", response_model=List[Book], tags=["books"])
def list_books(service: BookService = Depends(get_book_service)) -> List[Book]:
    return service.list()


@router.post("/books", response_model=Book, status_code=status.HTTP_201_CREATED, tags=["books"])
def create_book(payload: BookPayload, service: BookService = Depends(get_book_service)) -> Book:
    return service.create(payload)


@router.get("/books/{book_id}", response_model=Book, tags=["books"])
def get_book(book_id: BookId, service: BookService = Depends(get_book_service)) -> Book:
    try:
        return service.get(book_id)
    except BookNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found") from exc


@router.put("/books/{book_id}", response_model=Book, tags=["books"])
def update_book(book_id: BookId, payload: BookPayload, service: BookService = Depends(get_book_service)) -> Book:
    try:
        return service.update(book_id, payload)
    except BookNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found") from exc


@router.delete("/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["books"])
def delete_book(book_id: BookId, service: BookService = Depends(get_book_service)) -> None:
    try:
        service.delete(book_id)
    except BookNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found") from exc


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def persistence_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(
        "persistence.error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


async def request_logging_middleware(request: Request, call_next):
    request_logger.info("request.start", extra={"path": request.url.path, "method": request.method})
    response = await call_next(request)
    request_logger.info(
        "request.end",
        extra={"path": request.url.path, "method": request.method, "status": response.status_code},
    )
    return response


async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def install_openapi(app: FastAPI) -> None:
    """Advertise validation failures under 400, the status they are answered with."""

    def openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = FastAPI.openapi(app)
        for path_item in schema.get("paths", {}).values():
            for operation in path_item.values():
                responses = operation.get("responses", {})
                if "422" in responses:
                    responses["400"] = responses.pop("422")
        app.openapi_schema = schema
        return schema

    app.openapi = openapi


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    database = Database(
        settings.database_url,
        pool_size=settings.pool_size,
        pool_timeout=settings.pool_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.migrate_on_startup:
            run_migrations(settings.database_url)
        logger.info("startup.complete", extra={"pool_size": settings.pool_size})
        yield
        database.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="A minimal book inventory API with relational persistence.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    app.include_router(router)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)
    install_openapi(app)
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(request_id_middleware)

    if settings.otel_enabled:
        configure_otel(app)
    return app
