import logging
import subprocess
import sys
import time
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

import click
import redis
import uvicorn
from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import or_, text
from sqlalchemy.exc import SQLAlchemyError

from app.core.cache import get_redis_client
from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.core.exceptions import AppException
from app.core.init import initialize_application
from app.core.limiter import custom_rate_limit_exceeded_handler, limiter
from app.core.schedular import shutdown_scheduler, start_scheduler
from app.core.security import jwt_manager
from app.models import *
from app.routers import routes

# ============================================================================
# Paths
# ============================================================================
BASE_DIR = Path(__file__).parent
LOG_FILE = Path(settings.log_file)
if not LOG_FILE.is_absolute():
    LOG_FILE = BASE_DIR / LOG_FILE
LOG_FILE.parent.mkdir(parents=True, exist_ok=True)


# ============================================================================
# Logging
# ============================================================================
def setup_logging():
    """Send application logs to stdout and the log file."""
    if settings.debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8"),
        ],
        force=True,
    )

    for noisy in ("sqlalchemy.engine", "uvicorn.access", "apscheduler"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger("eduquest")


logger = setup_logging()


# ============================================================================
# Lifespan
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("✓ Tables ready")

        db = SessionLocal()
        try:
            initialize_application(db)
        finally:
            db.close()

        app.state.scheduler = start_scheduler()
    except Exception as e:
        logger.error(f"✗ Startup aborted: {e}", exc_info=True)
        raise

    yield

    shutdown_scheduler(app.state.scheduler)
    logger.info(f"{settings.app_name} stopped")


# ============================================================================
# Application
# ============================================================================
app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    debug=settings.debug,
    lifespan=lifespan,
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every response with a request id and its processing time."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()

    response = await call_next(request)

    elapsed = time.perf_counter() - started
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    if response.status_code >= 500:
        logger.warning(
            f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)"
        )
    return response


# ============================================================================
# Error responses
# ============================================================================
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "type": "validation_error",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error: {type(exc).__name__}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Database error occurred", "type": "storage_error"},
    )


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)


# ============================================================================
# Status endpoints
# ============================================================================
@app.get("/")
async def root():
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": "production" if settings.production else "development",
        "docs": "/docs" if settings.debug else None,
    }


@app.get("/health")
@limiter.limit("10/minute")
async def health_check(request: Request):
    """Database and cache reachability."""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unreachable: {e}")
        database = "unhealthy"
    finally:
        db.close()

    if settings.question_bank_cache_ttl <= 0:
        cache = "disabled"
    else:
        try:
            get_redis_client().ping()
            cache = "healthy"
        except redis.RedisError as e:
            logger.warning(f"Health check: redis unreachable: {e}")
            cache = "unhealthy"

    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "timestamp": time.time(),
        "database": database,
        "cache": cache,
    }


for router in routes:
    app.include_router(router)

logger.info(f"✓ Registered {len(routes)} routers")


# ============================================================================
# CLI
# ============================================================================
@click.group()
def cli():
    """EduQuest management commands."""


def run_migrations():
    alembic_cfg = Config(str(BASE_DIR / "alembic.ini"))
    try:
        command.upgrade(alembic_cfg, "head")
    except Exception as e:
        logger.error(f"Migration failed: {e}", exc_info=True)
        raise click.ClickException(f"Migration failed: {e}")
    logger.info("✓ Database at head revision")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to run the server on")
@click.option("--reload", is_flag=True, help="Enable auto-reload (development only)")
def dev(host: str, port: int, reload: bool):
    """Run development server with Uvicorn."""
    logger.info(f"Development server on http://{host}:{port} (reload={reload})")
    uvicorn.run("main:app", host=host, port=port, reload=reload, log_level="debug")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to run the server on")
@click.option("--workers", default=4, help="Number of worker processes")
@click.option("--skip-migrations", is_flag=True, help="Do not run alembic upgrade first")
def prod(host: str, port: int, workers: int, skip_migrations: bool):
    """Migrate the database, then serve with Gunicorn + Uvicorn workers."""
    if not skip_migrations:
        run_migrations()

    gunicorn_options = {
        "--worker-class": "uvicorn.workers.UvicornWorker",
        "--workers": str(workers),
        "--bind": f"{host}:{port}",
        "--access-logfile": "-",
        "--error-logfile": "-",
        "--log-level": settings.log_level,
        "--timeout": "120",
        "--graceful-timeout": "30",
    }
    cmd = ["gunicorn", "main:app"]
    for option, value in gunicorn_options.items():
        cmd.extend([option, value])

    logger.info(f"Production server on {host}:{port} with {workers} workers")
    try:
        subprocess.run(cmd, check=True)
    except FileNotFoundError:
        raise click.ClickException("Gunicorn not installed")
    except subprocess.CalledProcessError as e:
        raise click.ClickException(f"Gunicorn exited with status {e.returncode}")


@cli.command()
def info():
    """Display application information."""
    click.echo(f"Application: {settings.app_name} v{settings.app_version}")
    click.echo(f"Debug Mode: {settings.debug}")
    click.echo(f"Database: {settings.sqlalchemy_database_uri.split('@')[-1]}")
    click.echo(f"Redis: {settings.redis_url}")
    click.echo(f"Question cache TTL: {settings.question_bank_cache_ttl}s")
    click.echo(f"Result retention: {settings.quiz_result_retention_days or 'forever'} days")
    click.echo(f"Log file: {LOG_FILE}")


@cli.command("create-user")
@click.option("--email", required=True, help="User email")
@click.option("--name", "full_name", required=True, help="Full name")
@click.option(
    "--role",
    default=settings.authorization_default_role,
    type=click.Choice(settings.authorization_roles),
    help="User role",
)
def create_user(email: str, full_name: str, role: str):
    """Create a user record for an identity-provider account."""
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            raise click.ClickException(f"User with email {email} already exists")
        user = User(email=email, full_name=full_name, role=role, is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        click.echo(f"Created {role} #{user.id} <{user.email}>")
    finally:
        db.close()


@cli.command("issue-token")
@click.argument("identifier")
@click.option("--minutes", default=None, type=int, help="Override token lifetime")
def issue_token(identifier: str, minutes: int):
    """Print an access token for a user, looked up by ID or email."""
    db = SessionLocal()
    try:
        filters = [User.email == identifier]
        if identifier.isdigit():
            filters.append(User.id == int(identifier))
        user = db.query(User).filter(or_(*filters)).first()
        if user is None:
            raise click.ClickException(f"No user matches '{identifier}'")
        expiration = timedelta(minutes=minutes) if minutes else None
        click.echo(jwt_manager.create_access_token(user, custom_expiration=expiration))
    finally:
        db.close()


if __name__ == "__main__":
    cli()
