"""HTTP server - OAuth token refresh, API proxy and AI endpoints."""

import logging
import secrets
import time
from contextlib import asynccontextmanager

import requests
from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from .adapters.ai_providers import verify_api_key
from .adapters.oauth import (
    AuthenticationError,
    MissingCredentialsError,
    ReauthorizationRequired,
    refresh_tokens,
)
from .config import Config
from .errors import ValidationError
from .ports.document_store import DocumentStore
from .stores.users import UserStore
from .workflows import analyze_text, get_document_store, open_workspace

logger = logging.getLogger(__name__)

# Headers that describe the incoming connection rather than the proxied request
PROXY_SKIP_HEADERS = {"host", "origin", "referer", "content-length"}
PROXY_TIMEOUT = 30


class RefreshRequest(BaseModel):
    refreshToken: str | None = None
    provider: str = "google"
    email: str | None = None


class AnalyzeRequest(BaseModel):
    providerId: str | None = None
    text: str | None = None


class TestIntegrationRequest(BaseModel):
    provider: str | None = None
    apiKey: str | None = None


class TokenVerifier:
    """
    Resolves a bearer token to a user id.

    The configured API token maps to the configured user. With the Firestore
    backend, Firebase ID tokens are verified too.
    """

    def __init__(self, config: Config):
        self.config = config
        self._bearer = HTTPBearer(auto_error=False)

    def verify(self, token: str) -> str | None:
        if self.config.api_token and secrets.compare_digest(token, self.config.api_token):
            return self.config.user_id
        if self.config.store_backend == "firestore":
            from firebase_admin import auth

            try:
                return auth.verify_id_token(token)["uid"]
            except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError) as e:
                logger.warning(f"Rejected Firebase ID token: {e}")
        return None

    async def __call__(self, request: Request) -> str:
        credentials: HTTPAuthorizationCredentials | None = await self._bearer(request)
        if credentials is None or credentials.scheme.lower() != "bearer":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
        user_id = self.verify(credentials.credentials)
        if user_id is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return user_id


def start_refresh_scheduler(config: Config, db: DocumentStore):
    """Run the data refresh for the configured user every refresh_interval_minutes."""
    from apscheduler.schedulers.background import BackgroundScheduler
    from apscheduler.triggers.interval import IntervalTrigger

    refresher = open_workspace(config, db).refresher()
    scheduler = BackgroundScheduler(timezone=config.timezone or "UTC")
    scheduler.add_job(
        refresher.refresh_all,
        IntervalTrigger(minutes=config.refresh_interval_minutes),
        id="data_refresh",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Scheduled data refresh every {config.refresh_interval_minutes} minutes")
    return scheduler


def create_app(
    config: Config,
    db: DocumentStore | None = None,
    session: requests.Session | None = None,
    ai_service_factory=None,
) -> FastAPI:
    db = db or get_document_store(config)
    http = session or requests.Session()
    verifier = TokenVerifier(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.refresh_interval_minutes > 0:
            app.state.scheduler = start_refresh_scheduler(config, db)
        try:
            yield
        finally:
            if app.state.scheduler is not None:
                app.state.scheduler.shutdown(wait=False)
                app.state.scheduler = None

    app = FastAPI(title="Organizer", description="Personal organizer backend", lifespan=lifespan)
    app.state.config = config
    app.state.db = db
    app.state.scheduler = None

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
        )
        return response

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/auth/refresh")
    def refresh_token(body: RefreshRequest):
        if not body.refreshToken:
            return JSONResponse(status_code=400, content={"error": "Refresh token is required"})

        logger.info(f"Token refresh requested for {body.email or 'unknown'} ({body.provider})")
        try:
            return refresh_tokens(body.provider, body.refreshToken, config, http)
        except ValueError:
            return JSONResponse(
                status_code=400, content={"error": f"Unsupported provider: {body.provider}"}
            )
        except MissingCredentialsError as e:
            return JSONResponse(status_code=500, content={"error": str(e)})
        except ReauthorizationRequired as e:
            return JSONResponse(
                status_code=e.status or 400,
                content={"error": "invalid_grant", "error_description": str(e)},
            )
        except AuthenticationError as e:
            if e.status is None:
                logger.error(f"Token refresh failed for {body.provider}: {e}")
                return JSONResponse(
                    status_code=500,
                    content={"error": "Internal server error during token refresh"},
                )
            return JSONResponse(
                status_code=e.status, content={"error": str(e), "details": e.details}
            )

    @app.api_route("/api/proxy", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def proxy(request: Request, url: str | None = None):
        if not url:
            raise HTTPException(status_code=400, detail="Missing required url parameter")

        headers = {
            key: value
            for key, value in request.headers.items()
            if key.lower() not in PROXY_SKIP_HEADERS
        }
        body = None
        if request.method in ("POST", "PUT", "PATCH"):
            body = await request.body() or None

        try:
            upstream = await run_in_threadpool(
                http.request, request.method, url, headers=headers, data=body, timeout=PROXY_TIMEOUT
            )
        except requests.RequestException as e:
            logger.error(f"API proxy error for {url}: {e}")
            raise HTTPException(status_code=502, detail=str(e))

        if not upstream.ok:
            return JSONResponse(
                status_code=upstream.status_code,
                content={"error": upstream.reason, "data": upstream.text},
            )
        try:
            return JSONResponse(content=upstream.json())
        except ValueError:
            return Response(content=upstream.text, media_type="text/plain")

    @app.post("/api/ai/analyze")
    def analyze(body: AnalyzeRequest, user_id: str = Depends(verifier)):
        users = UserStore(db, user_id)
        kwargs = {"service_factory": ai_service_factory} if ai_service_factory else {}
        try:
            result = analyze_text(users, body.providerId or "", body.text or "", **kwargs)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"AI analysis failed for {body.providerId}: {e}")
            raise HTTPException(status_code=502, detail=f"Failed to analyze text: {e}")
        return result.to_dict()

    @app.post("/api/ai/test-integration")
    def test_integration(body: TestIntegrationRequest) -> dict:
        if not body.provider or not body.apiKey:
            return {"success": False, "error": "Missing required fields: provider and apiKey"}
        try:
            ok = verify_api_key(body.provider, body.apiKey, http)
        except ValueError:
            return {"success": False, "error": f"Unsupported provider: {body.provider}"}
        return {
            "success": ok,
            "error": None if ok else "Could not connect with the provided API key",
        }

    return app


def run(config: Config) -> None:
    import uvicorn

    uvicorn.run(create_app(config), host=config.server_host, port=config.server_port)
