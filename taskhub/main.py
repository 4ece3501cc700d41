import logging
from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import Optional

from fastapi import FastAPI, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text
from starlette.middleware.cors import CORSMiddleware

from taskhub.api import auth_api, user_api, task_api
from taskhub.auth.password import PasswordHasher
from taskhub.auth.session_manager import SessionManager
from taskhub.auth.token_service import TokenService
from taskhub.configs import Settings, get_settings
from taskhub.configs.database import get_db, init_db, make_engine
from taskhub.errors import Internal

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Store error on {request.method} {request.url.path}")
    return JSONResponse(status_code=Internal.status_code, content={"detail": Internal.message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(app.state.engine)
        yield
        app.state.engine.dispose()

    app = FastAPI(title="taskhub", lifespan=lifespan)

    # built once, read-only for the lifetime of the process
    app.state.settings = settings
    app.state.engine = make_engine(settings)
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.token_service = TokenService.from_settings(settings)
    app.state.session_manager = SessionManager(
        app.state.token_service,
        app.state.password_hasher,
        secure_cookies=not settings.is_development,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,  # Allowed origins
        allow_credentials=True,  # refresh token travels as a cookie
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_exception_handler)

    # Include routers
    app.include_router(auth_api.router)
    app.include_router(user_api.router)
    app.include_router(task_api.router)

    @app.get("/")
    def root():
        return {
            "message": "taskhub API",
            "status": "Server is running",
            "endpoints": {"auth": "/auth", "users": "/users", "tasks": "/tasks"},
        }

    @app.get("/health")
    def health(db: Session = Depends(get_db)):
        try:
            db.exec(text("SELECT 1"))
            database = "connected"
        except SQLAlchemyError as e:
            logger.warning(f"Health check could not reach the database: {e}")
            database = "disconnected"
        return {
            "status": "OK" if database == "connected" else "DEGRADED",
            "database": database,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


def run():
    import uvicorn

    uvicorn.run("taskhub.main:create_app", factory=True, host="0.0.0.0", port=8000)
