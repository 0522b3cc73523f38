"""Worker service entry point."""

import asyncio
import logging
import signal

from .config import get_settings
from .consumer import JobConsumer
from .context import build_context
from .dispatcher import JobDispatcher
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


async def main() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    logger.info("Starting document processing worker...")
    ctx = await build_context(settings)
    dispatcher = JobDispatcher(ctx)
    consumer = JobConsumer(ctx.redis_client, settings.JOB_CHANNEL, dispatcher)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(signum, consumer.stop)

    try:
        await consumer.run()
        logger.info(
            "Received shutdown signal, waiting for in-flight jobs...",
            extra={"in_flight": dispatcher.in_flight},
        )
        await dispatcher.drain()
    finally:
        await ctx.aclose()
        logger.info("Worker shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
