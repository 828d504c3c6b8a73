"""acelink — FastAPI connector application.

Validates requests and forwards them to the ACE pseudonymization
service, authenticating each call with a Keycloak bearer token.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from acelink.auth import make_api_key_checker
from acelink.config import AcelinkConfig, load_config
from acelink.domains import DomainConnector
from acelink.errors import (
    ConfigError,
    ConnectorError,
    SelectorError,
    TokenError,
    UpstreamError,
)
from acelink.pseudonyms import PseudonymConnector
from acelink.routes import domains, meta, pseudonyms
from acelink.session import AceSession
from acelink.tokens import KeycloakTokenProvider

logger = logging.getLogger("acelink")
audit_logger = logging.getLogger("acelink.audit")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: open the outbound client and connectors. Shutdown: close it."""
    config: AcelinkConfig = app.state.config
    missing = config.missing()
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")

    logger.info(
        "Forwarding to ACE at %s (realm: %s)", config.service_url, config.realm
    )
    client = httpx.Client(timeout=config.timeout, transport=app.state.transport)
    tokens = KeycloakTokenProvider(
        client,
        keycloak_url=config.keycloak_url,
        realm=config.realm,
        client_id=config.client_id,
        client_secret=config.client_secret,
        username=config.username,
        password=config.password,
    )
    session = AceSession(client, config.service_url, tokens)
    app.state.domains = DomainConnector(session)
    app.state.pseudonyms = PseudonymConnector(session)
    logger.info("acelink ready")
    yield
    client.close()
    logger.info("acelink shut down")


def create_app(
    config: AcelinkConfig | None = None,
    transport: httpx.BaseTransport | None = None,
) -> FastAPI:
    """Application factory.

    transport replaces the outbound network stack, e.g. with an
    httpx.MockTransport in tests.
    """
    if config is None:
        config = load_config()

    app = FastAPI(
        title="acelink",
        description="REST connector for the ACE pseudonymization service",
        version=meta.VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.transport = transport

    check_key = make_api_key_checker(config.api_key)

    # ── Exception handlers ────────────────────────────────────

    @app.exception_handler(SelectorError)
    async def selector_handler(request: Request, exc: SelectorError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(TokenError)
    async def token_handler(request: Request, exc: TokenError):
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(UpstreamError)
    async def upstream_handler(request: Request, exc: UpstreamError):
        # A 401 that survived the token refresh is our credential problem,
        # not the caller's.
        status = exc.status_code
        if status is None or status == 401 or not 400 <= status < 500:
            status = 502
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    @app.exception_handler(ConnectorError)
    async def connector_handler(request: Request, exc: ConnectorError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    # ── Audit middleware ──────────────────────────────────────

    @app.middleware("http")
    async def audit_log(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = time.monotonic() - start
        audit_logger.info(
            "%s %s %d %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    # ── Routers ───────────────────────────────────────────────

    app.include_router(meta.router, dependencies=[Depends(check_key)])
    app.include_router(pseudonyms.router, dependencies=[Depends(check_key)])
    app.include_router(domains.router, dependencies=[Depends(check_key)])

    return app
