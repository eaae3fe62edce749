from __future__ import annotations

import hmac
import logging
from typing import Any, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ai_news_ingest.api.models import SubscribeRequest, is_valid_email
from ai_news_ingest.api.rate_limit import (
    IpRateLimiter,
    admin_rate_limiter,
    newsletter_rate_limiter,
    resolve_request_ip,
)
from ai_news_ingest.core.config import ServerSettings
from ai_news_ingest.core.errors import DuplicateSubscriberError, IngestionInProgressError
from ai_news_ingest.models import RunMetrics
from ai_news_ingest.processing.service import IngestionService

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, error: str, **extra: Any) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.extra = extra


def _error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


def _rate_limit_dependency(limiter: IpRateLimiter) -> Callable[[Request], None]:
    def _check(request: Request) -> None:
        if not limiter.hit(resolve_request_ip(request)):
            raise ApiError(429, limiter.error_message)

    return _check


def _admin_key_dependency(admin_api_key: str) -> Callable[[Request], None]:
    expected = admin_api_key.encode("utf-8")

    def _check(request: Request) -> None:
        provided = request.headers.get("x-api-key", "")
        if not provided or not hmac.compare_digest(provided.encode("utf-8"), expected):
            logger.warning(
                "Unauthorized access attempt blocked for route %s from IP %s",
                request.url.path,
                resolve_request_ip(request),
            )
            raise ApiError(401, "Unauthorized")

    return _check


def create_app(
    *,
    settings: ServerSettings,
    service: IngestionService,
    subscriber_store: Any,
    admin_limiter: IpRateLimiter | None = None,
    newsletter_limiter: IpRateLimiter | None = None,
) -> FastAPI:
    app = FastAPI(title="AI News Ingest API", version="0.1.0")
    allowed_origins = list(settings.allowed_origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin not in allowed_origins:
            logger.warning("Blocked CORS request from origin: %s", origin)
            return _error_response(403, "Origin not allowed")
        return await call_next(request)

    @app.exception_handler(ApiError)
    async def _api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
        return _error_response(exc.status_code, exc.error, **exc.extra)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(_request: Request, _exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, "Invalid request body.")

    admin_limit = Depends(_rate_limit_dependency(admin_limiter or admin_rate_limiter()))
    newsletter_limit = Depends(_rate_limit_dependency(newsletter_limiter or newsletter_rate_limiter()))
    require_admin = Depends(_admin_key_dependency(settings.admin_api_key))

    @app.get("/healthz", tags=["system"])
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/fetch-news", dependencies=[admin_limit, require_admin])
    def fetch_news(request: Request) -> dict[str, Any]:
        self_test = request.headers.get("x-self-test") == "true"
        metrics = RunMetrics()
        try:
            return service.run(self_test=self_test, metrics=metrics)
        except IngestionInProgressError as exc:
            raise ApiError(409, str(exc), debug=service.debug_info(metrics)) from exc
        except Exception as exc:
            logger.exception("Fetch news failed")
            raise ApiError(500, str(exc) or type(exc).__name__, debug=service.debug_info(metrics)) from exc

    @app.post("/api/admin/authenticate", dependencies=[admin_limit, require_admin])
    def authenticate() -> dict[str, bool]:
        return {"success": True}

    @app.post("/api/newsletter/subscribe", dependencies=[newsletter_limit])
    def subscribe(payload: SubscribeRequest | None = None) -> dict[str, Any]:
        payload = payload or SubscribeRequest()
        raw_email = payload.normalized_email()
        if not raw_email:
            raise ApiError(400, "Email is required.")
        email = raw_email.lower()
        if not is_valid_email(email):
            raise ApiError(400, "Please provide a valid email address.")

        try:
            row = subscriber_store.subscribe(email, payload.normalized_source())
        except DuplicateSubscriberError as exc:
            raise ApiError(409, "Looks like you are already subscribed.") from exc
        except Exception as exc:
            logger.exception("Newsletter subscription error")
            raise ApiError(500, "Unable to complete subscription right now. Please try again later.") from exc

        return {
            "success": True,
            "data": {"id": row.get("id"), "created_at": row.get("created_at")},
            "message": "Thanks for subscribing!",
        }

    @app.get("/api/admin/newsletter/stats", dependencies=[admin_limit, require_admin])
    def newsletter_stats() -> dict[str, Any]:
        try:
            count = subscriber_store.subscriber_count()
        except Exception as exc:
            logger.exception("Newsletter stats error")
            raise ApiError(500, "Unable to fetch stats right now.") from exc
        return {"success": True, "data": {"subscriberCount": count}}

    return app
