# Vault - FastAPI Backend
#
# REST API for the credential vault. Startup builds the store handle, the
# cipher engine and the session token once and keeps them on app.state;
# routes reach them through dependencies, never through module globals.

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings, load_settings
from ..core import EventSeverity, EventType, configure_audit_logger
from ..vault import CipherEngine, VaultDatabase, VaultStore
from .generator_routes import router as generator_router
from .security import get_session_token, initialize_session_token
from .vault_routes import router as vault_router

logger = logging.getLogger(__name__)

# CORS configuration: local front ends only
_allowed_origins = [
    "http://localhost:3000", "http://127.0.0.1:3000",
    "http://localhost:8000", "http://127.0.0.1:8000",
]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Resolved settings; read from the environment at startup
                  when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or load_settings()
        audit_logger = configure_audit_logger(resolved.audit_log_dir)

        initialize_session_token()

        database = VaultDatabase(resolved.db_path)
        database.initialize()
        cipher = CipherEngine(resolved.encryption_key, key_version=resolved.key_version)

        app.state.settings = resolved
        app.state.vault_store = VaultStore(database, cipher, audit_logger=audit_logger)

        audit_logger.log_event(
            event_type=EventType.SYSTEM_START,
            severity=EventSeverity.INFO,
            message="passvault API server starting",
            details={"version": __version__, "key_version": resolved.key_version},
        )
        logger.info("passvault API ready (db=%s)", resolved.db_path)

        yield

        audit_logger.log_event(
            event_type=EventType.SYSTEM_STOP,
            severity=EventSeverity.INFO,
            message="passvault API server shutting down",
        )
        app.state.vault_store = None

    app = FastAPI(
        title="passvault API",
        description="Encrypted credential vault with generator and strength scoring",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(vault_router)
    app.include_router(generator_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/api/session")
    async def get_session():
        """
        Get session token for API authentication.

        The front end calls this once on load and sends the token in the
        X-Session-Token header on every protected call. Unprotected: the
        token changes every restart and the server binds to localhost.
        """
        return {"session_token": get_session_token()}

    return app


# Default application; settings are read from the environment at startup
app = create_app()


def start_api_server(
    host: str = "127.0.0.1",
    port: int = 8000,
    settings: Optional[Settings] = None,
):
    """
    Start FastAPI server.

    Args:
        host: Host to bind to (default: localhost only for security)
        port: Port to listen on
        settings: Settings to run with instead of the environment
    """
    target = create_app(settings) if settings is not None else app
    uvicorn.run(target, host=host, port=port, log_level="info")


if __name__ == "__main__":
    start_api_server()
