import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import github, pinned, session
from app.config import Settings, load_settings
from app.errors import PinServiceError
from app.models.store import KeyValueStore, build_kv_store
from app.schemas.pinned import DiscoveryResponse
from app.services.github import GitHubClient
from app.services.pin_client import PinServiceClient
from app.services.pinned import PinStore

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,HEAD,POST,OPTIONS,PUT,DELETE",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
}

ENDPOINTS = [
    "/user/{username}/pinned",
    "/user/{username}/reorder",
    "/api/pinned",
    "/api/pin",
    "/api/reorder",
    "/api/repos",
    "/api/github/user/{username}",
    "/api/github/orgs/{username}",
    "/api/github/topics/{username}",
    "/api/github/readme/{username}",
    "/health",
]


def error_response(status_code: int, body: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=CORS_HEADERS)


def create_app(
    settings: Optional[Settings] = None,
    kv_store: Optional[KeyValueStore] = None,
    pin_client: Optional[PinServiceClient] = None,
    github_client: Optional[GitHubClient] = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.pin_client.close()
        app.state.github_client.close()

    app = FastAPI(title="Extended Pins API", version="0.1.0", lifespan=lifespan)
    app.state.pin_store = PinStore(kv_store or build_kv_store(settings), key_prefix=settings.key_prefix)
    app.state.pin_client = pin_client or PinServiceClient(
        settings.pin_service_url, timeout=settings.http_timeout_seconds
    )
    app.state.github_client = github_client or GitHubClient(
        settings.github_api_url, timeout=settings.http_timeout_seconds, raw_url=settings.github_raw_url
    )

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(PinServiceError)
    async def pin_service_error(request: Request, exc: PinServiceError):
        return error_response(exc.status_code, exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return error_response(400, {"error": "Invalid request", "details": str(exc.errors())})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, {"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, {"error": "Internal server error", "details": str(exc)})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # Routers
    app.include_router(pinned.router)
    app.include_router(session.router)
    app.include_router(github.router)

    # Catch-all discovery document, must stay the last route.
    @app.api_route(
        "/{path:path}",
        methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
        response_model=DiscoveryResponse,
        include_in_schema=False,
    )
    def discovery(path: str):
        return DiscoveryResponse(message="GitHub Extended Profile API", endpoints=ENDPOINTS)

    return app


app = create_app()
