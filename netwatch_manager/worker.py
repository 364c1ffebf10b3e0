"""
독립 실행 상태 폴러

    python -m netwatch_manager.worker

API 서버와 함께 실행할 때는 API 프로세스에 RUN_POLLER_IN_APP=false 를 설정해
폴러가 두 번 실행되지 않도록 한다.
"""
import asyncio
import logging
import signal

from netwatch_manager.core.log_config import setup_logging
from netwatch_manager.db.session import engine
from netwatch_manager.services.poller import status_poller

logger = logging.getLogger(__name__)


async def run_worker(stop_event: asyncio.Event | None = None):
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows 이벤트 루프는 시그널 핸들러 미지원
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))

    logger.info("Starting netwatch poller worker...")
    try:
        await status_poller.start()
        await stop_event.wait()
        logger.info("Shutdown signal received, waiting for in-flight poll to finish...")
    finally:
        await status_poller.stop()
        await engine.dispose()
        logger.info("Worker stopped")


def main():
    setup_logging()
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
