"""Service entrypoint: runs the reaction role bot alongside a health endpoint."""

import logging
import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from logging_config import setup_logging
from discord_bot import discord_bot_instance

# Setup logging
setup_logging()

logger = logging.getLogger("uvicorn")


def _log_bot_exit(task: asyncio.Task) -> None:
    """Log a bot task that stopped with an error."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Discord bot stopped: {exc}")


def _bot_failed(task) -> bool:
    return task is not None and task.done() and not task.cancelled() and task.exception() is not None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the Discord bot on startup and disconnect it on shutdown."""
    logger.info("Starting up reaction role bot...")
    bot_task = asyncio.create_task(discord_bot_instance.start())
    bot_task.add_done_callback(_log_bot_exit)
    app.state.bot_task = bot_task

    yield

    logger.info("Shutting down reaction role bot...")
    await discord_bot_instance.close()
    if not bot_task.done():
        bot_task.cancel()
        try:
            await bot_task
        except asyncio.CancelledError:
            pass


# Initialize FastAPI app
app = FastAPI(lifespan=lifespan)


@app.get("/health")
async def health() -> JSONResponse:
    """Health check endpoint. Reports 503 once the bot task has crashed."""
    failed = _bot_failed(getattr(app.state, "bot_task", None))
    return JSONResponse(
        status_code=503 if failed else 200,
        content={
            "status": "error" if failed else "ok",
            "bot_ready": discord_bot_instance.ready,
            "active_menus": discord_bot_instance.active_menus,
        },
    )
