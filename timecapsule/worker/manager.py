"""
Dispatcher management module.
Handles starting, stopping, and sharing the enrichment dispatcher.
"""

import asyncio
import logging
import threading
import atexit
from typing import Optional

from timecapsule.worker.dispatcher import EnrichmentDispatcher
from timecapsule.core.config import config

logger = logging.getLogger(__name__)

# Global dispatcher state
_dispatcher_instance: Optional[EnrichmentDispatcher] = None
_dispatcher_thread: Optional[threading.Thread] = None
_start_lock = threading.Lock()

def start_dispatcher() -> bool:
    """
    Start the enrichment dispatcher in a background thread.

    Returns:
        True if the dispatcher was started, False if already running
    """
    global _dispatcher_instance, _dispatcher_thread

    with _start_lock:
        if _dispatcher_thread and _dispatcher_thread.is_alive():
            logger.info("Dispatcher is already running")
            return False

        settings = config.get_dispatcher_config()
        dispatcher = EnrichmentDispatcher(
            url=settings["url"],
            token=settings["token"],
            timeout=settings["timeout"],
            polling_interval=settings["polling_interval"],
            max_concurrent_jobs=settings["max_concurrent_jobs"]
        )

        def run_dispatcher():
            """Run the dispatcher loop in the thread."""
            try:
                asyncio.run(dispatcher.start())
            except Exception as e:
                logger.error(f"Dispatcher crashed: {e}", exc_info=True)

        _dispatcher_instance = dispatcher
        _dispatcher_thread = threading.Thread(target=run_dispatcher, name="enrichment-dispatcher", daemon=True)
        _dispatcher_thread.start()

    logger.info("✅ Background enrichment dispatcher started")
    return True

def get_dispatcher() -> EnrichmentDispatcher:
    """Get the shared dispatcher, starting it on first use."""
    if _dispatcher_instance is None or not is_dispatcher_running():
        start_dispatcher()
    return _dispatcher_instance

def stop_dispatcher(timeout: float = 5.0):
    """Stop the dispatcher and wait briefly for in-flight deliveries."""
    if _dispatcher_instance is None:
        return

    logger.info("🛑 Stopping enrichment dispatcher...")
    _dispatcher_instance.stop()
    if _dispatcher_thread and _dispatcher_thread.is_alive():
        _dispatcher_thread.join(timeout=timeout)
    logger.info("✅ Enrichment dispatcher stopped")

def is_dispatcher_running() -> bool:
    """Check if the dispatcher thread is alive."""
    return _dispatcher_thread is not None and _dispatcher_thread.is_alive()

def get_dispatcher_stats() -> dict:
    """Get dispatcher statistics."""
    if not _dispatcher_instance:
        return {
            "dispatcher_status": "not_started",
            "message": "Dispatcher not initialized"
        }
    return _dispatcher_instance.get_status()

# Register cleanup function to stop the dispatcher on exit
atexit.register(stop_dispatcher)
