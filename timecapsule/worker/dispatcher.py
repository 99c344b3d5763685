"""
Enrichment dispatcher.
Delivers enrichment jobs from the capsule repository to the enrichment
endpoint from a background event loop. Each capsule is delivered at most once
per process; failed deliveries are reported through the job's callback and
dropped.
"""

import asyncio
import logging
import queue
import threading
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

class EnrichmentJob:
    """One enrichment request waiting for delivery."""

    __slots__ = ("capsule_id", "title", "content", "on_failure")

    def __init__(
        self,
        capsule_id: str,
        title: str,
        content: str,
        on_failure: Optional[Callable[[], Any]] = None
    ):
        self.capsule_id = capsule_id
        self.title = title
        self.content = content
        self.on_failure = on_failure

    def to_payload(self) -> Dict[str, str]:
        return {
            "capsuleId": self.capsule_id,
            "title": self.title,
            "content": self.content
        }

class EnrichmentDispatcher:
    """Background delivery of enrichment jobs."""

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: float = 60.0,
        polling_interval: float = 1.0,
        max_concurrent_jobs: int = 3,
        max_tracked_capsules: int = 10000,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the dispatcher.

        Args:
            url: Enrichment endpoint
            token: Bearer credential sent with every request
            timeout: HTTP timeout in seconds
            polling_interval: How often to poll the queue when idle (seconds)
            max_concurrent_jobs: Maximum number of deliveries in flight
            max_tracked_capsules: How many submitted capsule ids are remembered
                for de-duplication; the oldest are forgotten first
            transport: Optional httpx transport (used by tests)
        """
        self.url = url
        self.token = token
        self.timeout = timeout
        self.polling_interval = polling_interval
        self.max_concurrent_jobs = max_concurrent_jobs
        self.transport = transport
        self.max_tracked_capsules = max_tracked_capsules

        self.is_running = False
        self._stop_requested = False
        self.active_jobs = set()
        self.delivered_count = 0
        self.failed_count = 0

        self._queue: "queue.Queue[EnrichmentJob]" = queue.Queue()
        self._submitted: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.Lock()

        logger.info(f"✅ Enrichment dispatcher initialized (target: {url}, max_concurrent: {max_concurrent_jobs})")

    def submit(self, job: EnrichmentJob) -> bool:
        """
        Queue a job for delivery.

        Returns:
            True if queued, False if this capsule was already submitted
        """
        with self._lock:
            if job.capsule_id in self._submitted:
                logger.debug(f"Capsule {job.capsule_id} already submitted, ignoring")
                return False
            self._submitted[job.capsule_id] = None
            while len(self._submitted) > self.max_tracked_capsules:
                self._submitted.popitem(last=False)

        self._queue.put(job)
        logger.info(f"Queued enrichment for capsule {job.capsule_id} (queue depth: {self._queue.qsize()})")
        return True

    def _client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=headers,
            transport=self.transport
        )

    async def start(self):
        """Start the dispatcher loop."""
        if self.is_running:
            logger.warning("Dispatcher is already running")
            return
        if self._stop_requested:
            logger.info("Dispatcher was stopped before it started")
            return

        self.is_running = True
        logger.info("🚀 Starting enrichment dispatcher")

        try:
            async with self._client() as client:
                await self._main_loop(client)
        except asyncio.CancelledError:
            logger.info("Dispatcher main loop cancelled")
            raise
        except Exception as e:
            logger.error(f"❌ Dispatcher main loop crashed: {e}", exc_info=True)
        finally:
            self.is_running = False
            logger.info("🛑 Enrichment dispatcher stopped")

    def stop(self):
        """Stop the dispatcher loop."""
        logger.info("Stopping enrichment dispatcher...")
        self._stop_requested = True
        self.is_running = False

    async def _main_loop(self, client: httpx.AsyncClient):
        try:
            while self.is_running and not self._stop_requested:
                self._cleanup_completed_jobs()

                if len(self.active_jobs) >= self.max_concurrent_jobs:
                    await asyncio.sleep(self.polling_interval)
                    continue

                try:
                    job = self._queue.get_nowait()
                except queue.Empty:
                    await asyncio.sleep(self.polling_interval)
                    continue

                task = asyncio.create_task(self.deliver(job, client))
                self.active_jobs.add(task)
        finally:
            # Deliveries already in flight are allowed to finish
            if self.active_jobs:
                await asyncio.gather(*self.active_jobs, return_exceptions=True)
            self._cleanup_completed_jobs()

    async def deliver(self, job: EnrichmentJob, client: Optional[httpx.AsyncClient] = None) -> bool:
        """
        POST one job to the enrichment endpoint. Never raises.

        Args:
            job: Job to deliver
            client: Shared HTTP client (a temporary one is opened if omitted)

        Returns:
            True if the endpoint answered with success, False otherwise
        """
        if client is None:
            async with self._client() as own_client:
                return await self.deliver(job, own_client)

        start_time = datetime.now(timezone.utc)
        try:
            response = await client.post(self.url, json=job.to_payload())
        except httpx.TimeoutException:
            self._fail(job, "request timed out")
            return False
        except httpx.RequestError as e:
            self._fail(job, f"request error: {e}")
            return False
        except Exception as e:
            self._fail(job, f"unexpected error: {e}")
            return False

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        if response.is_success:
            self.delivered_count += 1
            logger.info(f"✅ AI processing successful for capsule {job.capsule_id} in {duration:.2f}s")
            return True

        self._fail(job, f"{response.status_code} - {response.text[:500]}")
        return False

    def _fail(self, job: EnrichmentJob, reason: str):
        self.failed_count += 1
        logger.error(f"❌ AI processing failed for capsule {job.capsule_id}: {reason}")
        if job.on_failure is None:
            return
        try:
            job.on_failure()
        except Exception as e:
            logger.error(f"Failure callback raised for capsule {job.capsule_id}: {e}")

    def _cleanup_completed_jobs(self):
        completed_jobs = {job for job in self.active_jobs if job.done()}
        self.active_jobs -= completed_jobs

    def get_status(self) -> dict:
        """Get current dispatcher status."""
        return {
            "dispatcher_status": "running" if self.is_running else "stopped",
            "queue_depth": self._queue.qsize(),
            "active_jobs": len(self.active_jobs),
            "max_concurrent_jobs": self.max_concurrent_jobs,
            "delivered": self.delivered_count,
            "failed": self.failed_count
        }
