# impostor/main.py
# Start backend using uvicorn impostor.main:app --reload --host 0.0.0.0
import asyncio
import json
import logging
import logging.config
import logging.handlers
import pathlib
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from impostor.api import abilities as abilities_router
from impostor.api import game as game_router
from impostor.api import game_content as game_content_router
from impostor.api import messages as messages_router
from impostor.api import players as players_router
from impostor.api import rooms as rooms_router
from impostor.core.config import settings
from impostor.core.exceptions import GameError
from impostor.db.base import Base  # For initial table creation if not using Alembic
from impostor.db.session import SessionLocal, engine
from impostor.services import room_service, turn_service

_queue_handler_instance: Optional[logging.handlers.QueueHandler] = None  # Module-level variable
_turn_sweep_task: Optional[asyncio.Task] = None
_room_sweep_task: Optional[asyncio.Task] = None


def _expire_turns_once() -> int:
    db = SessionLocal()
    try:
        return turn_service.expire_stale_turns(db)
    finally:
        db.close()


def _sweep_rooms_once() -> int:
    db = SessionLocal()
    try:
        return room_service.sweep_inactive_rooms(db)
    finally:
        db.close()


async def turn_expiry_task(interval_seconds: int = 2):
    """Advances expired turns server-side so play never depends on a client calling auto-pass."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(_expire_turns_once)
        except Exception as e:
            logger.error(f"Error in turn expiry task: {e}", exc_info=True)


async def room_sweep_task(interval_seconds: int = 60):
    """Deletes idle rooms periodically, on top of the sweep done when rooms are created or joined."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(_sweep_rooms_once)
        except Exception as e:
            logger.error(f"Error in room sweep task: {e}", exc_info=True)


def _fall_back_to_stdout_logging(config_file: pathlib.Path, reason: Exception) -> None:
    print(f"ERROR: Could not apply logging config {config_file} ({reason!r}). Using basic stdout logging.")
    logging.basicConfig(level=logging.INFO, format='%(levelname)-8s [%(name)s] %(message)s')
    logging.getLogger("impostor.main.logging_setup_fallback").error(
        f"Logging config {config_file.name} unusable: {type(reason).__name__}."
    )


def configure_logging_from_file(config_file: Optional[pathlib.Path] = None) -> Optional[logging.handlers.QueueHandler]:
    """
    Applies the dictConfig in logging_config.json and remembers its QueueHandler, whose
    listener the lifespan starts and stops. A missing or broken file leaves plain stdout logging.
    """
    global _queue_handler_instance
    config_file = config_file or pathlib.Path(__file__).parent / "logging_config.json"
    try:
        config = json.loads(config_file.read_text())
        pathlib.Path("logs").mkdir(exist_ok=True)
        logging.config.dictConfig(config)
    except (OSError, ValueError, TypeError) as e:  # JSONDecodeError and dictConfig errors are ValueErrors
        _fall_back_to_stdout_logging(config_file, e)
        return None

    _queue_handler_instance = next(
        (h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.QueueHandler)), None
    )
    if _queue_handler_instance is None:
        logging.getLogger("impostor.main.logging_setup_check").error(
            "No QueueHandler on the root logger; records will be written on the request thread."
        )
    return _queue_handler_instance


# Configure logging when the module is loaded. Listener is started/stopped by lifespan.
configure_logging_from_file()
logger = logging.getLogger("impostor.main")  # Logger for this module


# Alembic owns the schema in production; this keeps local SQLite runs zero-setup
def create_tables():
    Base.metadata.create_all(bind=engine)
create_tables()


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _turn_sweep_task
    global _room_sweep_task

    logger.info("Application startup sequence initiated...")
    if _queue_handler_instance and getattr(_queue_handler_instance, "listener", None):
        try:
            _queue_handler_instance.listener.start()
            logger.info("Logging QueueListener started successfully via lifespan.")
        except Exception as e:
            logger.error(f"Failed to start QueueListener in lifespan: {e}", exc_info=True)
    else:
        logger.warning("QueueHandler or its listener not found during startup; off-thread logging might not be active.")

    if settings.SERVER_TURN_TIMER_ENABLED:
        logger.info(f"Starting turn expiry task (every {settings.TURN_SWEEP_INTERVAL_SECONDS}s)...")
        _turn_sweep_task = asyncio.create_task(turn_expiry_task(settings.TURN_SWEEP_INTERVAL_SECONDS))
    _room_sweep_task = asyncio.create_task(room_sweep_task(settings.ROOM_SWEEP_INTERVAL_SECONDS))
    yield  # This is where the application will run

    logger.info("Application shutdown sequence initiated...")
    for name, task in (("turn expiry", _turn_sweep_task), ("room sweep", _room_sweep_task)):
        if task:
            logger.info(f"Cancelling {name} background task...")
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info(f"{name.capitalize()} background task successfully cancelled.")

    if _queue_handler_instance and getattr(_queue_handler_instance, "listener", None):
        try:
            logger.info("Attempting to stop Logging QueueListener...")
            _queue_handler_instance.listener.stop()
        except Exception as e:
            logger.error(f"Failed to stop QueueListener gracefully in lifespan: {e}", exc_info=True)


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    if exc.status_code >= 403:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.code}): {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include Routers
app.include_router(rooms_router.router, prefix=settings.API_V1_STR + "/rooms", tags=["Rooms"])
app.include_router(game_router.router, prefix=settings.API_V1_STR + "/rooms", tags=["Game"])
app.include_router(abilities_router.router, prefix=settings.API_V1_STR + "/rooms", tags=["Abilities"])
app.include_router(messages_router.router, prefix=settings.API_V1_STR + "/rooms", tags=["Messages"])
app.include_router(players_router.router, prefix=settings.API_V1_STR + "/players", tags=["Players"])
app.include_router(game_content_router.router, prefix=settings.API_V1_STR + "/game-content", tags=["Game Content"])

logger.info("--- FastAPI Registered Routes ---")
for route in app.routes:
    if isinstance(route, APIRoute):
        logger.info(f"Path: {route.path}, Methods: {route.methods}, Name: {route.name}")
logger.info("--- End Registered Routes ---\n")


@app.get(settings.API_V1_STR + "/health", tags=["Health Check"])
async def health_check():
    return {"status": "healthy", "project": settings.PROJECT_NAME}
