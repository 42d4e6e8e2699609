# chatterlite/main.py
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatterlite.api import auth, chats, friend_requests, messages, realtime, users
from chatterlite.config import AppConfig
from chatterlite.domain.errors import ChatterLiteError, UpstreamError
from chatterlite.domain.events import ROW_EVENT_TYPES
from chatterlite.infrastructure.change_feed import ChangeFeed
from chatterlite.infrastructure.database import Database
from chatterlite.infrastructure.event_dispatcher import EventDispatcher
from chatterlite.infrastructure.event_handlers import EventHandlers
from chatterlite.infrastructure.redis_client import RedisClient
from chatterlite.infrastructure.security import SecurityService
from chatterlite.infrastructure.storage import LocalObjectStorage
from chatterlite.infrastructure.store import (
    DatabaseStoreProvider,
    MemoryStoreProvider,
    StoreProvider,
)
from chatterlite.infrastructure.test_data import init_test_data
from chatterlite.interactors.auth_interactor import AuthStateNotifier


class Application:
    def __init__(self, config: AppConfig):
        self.config = config
        self.logger = self.setup_logger()
        self.store_provider = self.create_store_provider()
        self.storage = LocalObjectStorage(
            config.STORAGE_ROOT,
            config.STORAGE_BUCKET,
            config.STORAGE_PUBLIC_URL,
            config.MAX_UPLOAD_SIZE,
        )
        self.redis_client = RedisClient(config.REDIS_HOST, config.REDIS_PORT, self.logger)
        self.event_dispatcher = EventDispatcher(self.logger)
        self.change_feed = ChangeFeed(self.logger)
        self.security_service = SecurityService(config)
        self.auth_notifier = AuthStateNotifier(self.logger)
        self.event_handlers = EventHandlers(self.redis_client)

        # Every committed row change reaches in-process subscribers, and Redis when configured
        for event_type in ROW_EVENT_TYPES:
            self.event_dispatcher.register(event_type.__name__, self.change_feed.publish)
            if config.redis_configured:
                self.event_dispatcher.register(
                    event_type.__name__, self.event_handlers.publish_row_changed
                )
        self.auth_notifier.subscribe(self.log_auth_state)

        if not config.auth_configured:
            self.logger.warning("SECRET_KEY is not set, sign-in and sign-up are disabled")

    def create_store_provider(self) -> StoreProvider:
        if self.config.STORE_BACKEND == "database":
            self.logger.info("Using the relational store")
            return DatabaseStoreProvider(Database.from_url(self.config.DATABASE_URL))
        self.logger.info("Using the in-memory store")
        return MemoryStoreProvider()

    def log_auth_state(self, event, session) -> None:
        if session is not None:
            self.logger.info(f"{event} for user {session.user.id}")
        else:
            self.logger.info(event)

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        await self.store_provider.connect()
        await self.redis_client.connect()
        Path(self.config.STORAGE_ROOT, self.config.STORAGE_BUCKET).mkdir(
            parents=True, exist_ok=True
        )
        if self.config.SEED_DEMO_USERS:
            await init_test_data(self.store_provider, self.logger)
        yield
        await self.change_feed.drain()
        await self.store_provider.disconnect()
        await self.redis_client.disconnect()

    def setup_logger(self):
        logger = logging.getLogger("ChatterLite")
        logger.setLevel(self.config.LOG_LEVEL.upper())

        if not logger.handlers:
            c_handler = logging.StreamHandler(sys.stdout)
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            c_handler.setFormatter(formatter)
            logger.addHandler(c_handler)

        return logger

    def create_app(self) -> FastAPI:
        prefix = self.config.API_PREFIX
        app = FastAPI(
            title=self.config.PROJECT_NAME,
            version=self.config.PROJECT_VERSION,
            description=self.config.PROJECT_DESCRIPTION,
            openapi_url=f"{prefix}/openapi.json",
            lifespan=self.lifespan,
        )

        app.state.config = self.config
        app.state.logger = self.logger
        app.state.store_provider = self.store_provider
        app.state.storage = self.storage
        app.state.security_service = self.security_service
        app.state.event_dispatcher = self.event_dispatcher
        app.state.change_feed = self.change_feed
        app.state.auth_notifier = self.auth_notifier
        app.state.redis_client = self.redis_client

        app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
        app.include_router(users.router, prefix=f"{prefix}/users", tags=["users"])
        app.include_router(
            friend_requests.router,
            prefix=f"{prefix}/friend-requests",
            tags=["friend-requests"],
        )
        app.include_router(chats.router, prefix=f"{prefix}/chats", tags=["chats"])
        app.include_router(messages.router, prefix=f"{prefix}/messages", tags=["messages"])
        app.include_router(realtime.router, prefix=f"{prefix}/realtime", tags=["realtime"])

        app.mount(
            self.config.STORAGE_PUBLIC_URL,
            StaticFiles(directory=self.config.STORAGE_ROOT, check_dir=False),
            name="files",
        )

        @app.exception_handler(ChatterLiteError)
        async def chatterlite_exception_handler(request: Request, exc: ChatterLiteError):
            if isinstance(exc, UpstreamError):
                self.logger.error(f"Upstream failure on {request.url.path}: {exc.__cause__!r}")
            return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            errors = exc.errors()
            detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
            return JSONResponse(status_code=400, content={"message": detail})

        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            return JSONResponse(
                status_code=exc.status_code,
                content={"message": str(exc.detail)},
                headers=getattr(exc, "headers", None),
            )

        @app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            self.logger.exception(f"Unhandled error on {request.url.path}")
            return JSONResponse(
                status_code=500,
                content={"message": "An unexpected error occurred"},
            )

        @app.get("/")
        async def root():
            return {"message": f"Welcome to the {self.config.PROJECT_NAME}"}

        return app


def create(config: AppConfig | None = None) -> FastAPI:
    application = Application(config or AppConfig())
    app = application.create_app()
    application.logger.info("Application created and configured")

    return app


app = create()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
