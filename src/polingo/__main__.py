"""Main entry point for the bot."""
import asyncio
import logging
import signal

from polingo import __version__
from polingo.app import PolingoBot
from polingo.config import ensure_directories
from polingo.logging_config import setup_logging

logger = logging.getLogger("polingo")


def shutdown(sig: signal.Signals, main_task: asyncio.Task) -> None:
    """Cancel the main task so the bot can stop cleanly."""
    logger.info(f"Received exit signal {sig.name}...")
    main_task.cancel()


def handle_exception(loop, context):
    """Log exceptions nobody retrieved from their task."""
    msg = context.get("exception", context["message"])
    logger.error(f"Caught exception: {msg}")


async def run() -> None:
    """Run the bot until it is cancelled."""
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda s=sig: shutdown(s, main_task)
        )

    loop.set_exception_handler(handle_exception)

    bot = PolingoBot()
    try:
        logger.info("Starting bot...")
        await bot.start()

        # Keep the application running
        while True:
            try:
                await asyncio.sleep(1)
            except asyncio.CancelledError:
                break
    finally:
        logger.info("Cleaning up...")
        await bot.stop()


def main() -> None:
    """Console entry point."""
    ensure_directories()
    setup_logging(f"Starting Polingo v{__version__} ...")

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        loop.run_until_complete(run())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
