"""Preview-then-upgrade scheduling of surface generation.

A request first gets a small preview raster, generated synchronously and
installed on its view straight away. The high-resolution raster is produced
afterwards by a single asyncio worker that fills a few rows at a time and
hands control back to the host between chunks, so the render loop never
blocks on generation.
"""

import asyncio
import logging
from collections import deque
from enum import Enum
from typing import Awaitable, Callable, Deque, List, Optional

from ..utils.config import Configuration
from .bodies import SurfaceRequest
from .cache import TextureCache
from .compositor import SurfaceCompositor, SurfaceRaster, validate_resolution
from .errors import UpgradeAllocationError

logger = logging.getLogger(__name__)

IdleCallback = Callable[[], Awaitable[None]]


async def yield_to_host() -> None:
    """Default idle primitive: let every other ready task run once."""
    await asyncio.sleep(0)


class SurfaceView:
    """Host-side holder of the texture currently shown for one body.

    ``on_release`` is called with a raster once it has been replaced, so the
    host can free whatever GPU-side resource it built from it.
    """

    def __init__(self, name: str = "",
                 on_release: Optional[Callable[[SurfaceRaster], None]] = None):
        self.name = name
        self.active: Optional[SurfaceRaster] = None
        self._on_release = on_release

    def install(self, raster: SurfaceRaster) -> Optional[SurfaceRaster]:
        """Make ``raster`` the active texture and release the previous one."""
        previous = self.active
        self.active = raster
        if previous is not None and previous is not raster and self._on_release:
            self._on_release(previous)
        return previous


class JobState(Enum):
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


class UpgradeJob:
    """Handle of one queued high-resolution generation."""

    def __init__(self, request: SurfaceRequest, view: Optional[SurfaceView],
                 chunk_rows: int, future: asyncio.Future):
        self.request = request
        self.view = view
        self.chunk_rows = chunk_rows
        self.future = future
        self.state = JobState.QUEUED
        self.rows_done = 0

    @property
    def finished(self) -> bool:
        return self.state in (JobState.DONE, JobState.CANCELLED, JobState.FAILED)

    @property
    def cancelled(self) -> bool:
        return self.state is JobState.CANCELLED

    def cancel(self) -> bool:
        """Cancel the job; a no-op if it already finished or was cancelled.

        Returns:
            True if this call cancelled the job
        """
        if self.finished:
            return False
        self.state = JobState.CANCELLED
        if not self.future.done():
            self.future.cancel()
        return True

    def result(self) -> SurfaceRaster:
        """Raster of a finished job (raises like ``Future.result``)."""
        return self.future.result()

    async def wait(self) -> Optional[SurfaceRaster]:
        """Wait for the upgrade.

        Returns:
            The high-resolution raster, or None if the job was cancelled

        Raises:
            UpgradeAllocationError: If the raster could not be allocated
        """
        try:
            return await asyncio.shield(self.future)
        except asyncio.CancelledError:
            if self.cancelled:
                return None
            # The waiter itself was cancelled: the job is no longer wanted
            self.cancel()
            raise

    def _complete(self, raster: SurfaceRaster) -> None:
        self.state = JobState.DONE
        if not self.future.done():
            self.future.set_result(raster)

    def _fail(self, error: BaseException) -> None:
        self.state = JobState.FAILED
        if not self.future.done():
            self.future.set_exception(error)


class GenerationScheduler:
    """Runs preview generation synchronously and upgrades one at a time."""

    def __init__(self, compositor: Optional[SurfaceCompositor] = None,
                 cache: Optional[TextureCache] = None,
                 config: Optional[Configuration] = None,
                 idle: Optional[IdleCallback] = None):
        """Initialize the scheduler.

        Args:
            compositor: Compositor producing rasters
            cache: Cache shared by previews and upgrades
            config: Preview resolution and default chunk size
            idle: Host "run when idle" primitive awaited between chunks
        """
        self.config = config or Configuration()
        self.compositor = compositor or SurfaceCompositor(self.config.max_resolution)
        self.cache = cache if cache is not None else TextureCache()
        self._idle = idle or yield_to_host

        self._queue: Deque[UpgradeJob] = deque()
        self._active: Optional[UpgradeJob] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def active_job(self) -> Optional[UpgradeJob]:
        return self._active

    @property
    def pending(self) -> List[UpgradeJob]:
        return [job for job in self._queue if not job.finished]

    def _generate(self, request: SurfaceRequest) -> SurfaceRaster:
        return self.cache.get_or_create(
            request.cache_key(),
            lambda: self.compositor.generate(request.profile_for(self.config),
                                             request.resolution, request.seed,
                                             request.satellite_index,
                                             request.development_level))

    def preview(self, request: SurfaceRequest) -> SurfaceRaster:
        """Synchronously produce the preview raster of a request."""
        resolution = min(self.config.preview_resolution, request.resolution)
        return self._generate(request.with_resolution(resolution))

    def request(self, request: SurfaceRequest, view: Optional[SurfaceView] = None,
                chunk_rows: Optional[int] = None) -> UpgradeJob:
        """Install a preview on ``view`` and queue the high-resolution upgrade.

        Must be called from a running event loop.

        Args:
            request: Surface to generate, at upgrade resolution
            view: View receiving the preview and, later, the upgrade
            chunk_rows: Rows generated between yields

        Returns:
            Handle of the queued upgrade

        Raises:
            InvalidResolutionError: If the request resolution is unusable
        """
        loop = asyncio.get_running_loop()
        validate_resolution(request.resolution, self.compositor.max_resolution)
        chunk_rows = chunk_rows or self.config.chunk_rows
        if chunk_rows < 1:
            raise ValueError(f"chunk_rows must be at least 1, got {chunk_rows}")

        # The preview is always installed before its upgrade is queued
        if view is not None:
            view.install(self.preview(request))

        job = UpgradeJob(request, view, chunk_rows, loop.create_future())
        self._queue.append(job)
        self._ensure_worker(loop)
        return job

    def cancel_view(self, view: SurfaceView) -> int:
        """Cancel every queued or running upgrade of a torn-down view.

        Returns:
            Number of jobs this call cancelled
        """
        jobs = list(self._queue)
        if self._active is not None:
            jobs.append(self._active)
        cancelled = sum(1 for job in jobs if job.view is view and job.cancel())
        self._queue = deque(job for job in self._queue if not job.finished)
        return cancelled

    def cancel_all(self) -> int:
        jobs = list(self._queue)
        if self._active is not None:
            jobs.append(self._active)
        cancelled = sum(1 for job in jobs if job.cancel())
        self._queue.clear()
        return cancelled

    async def drain(self) -> None:
        """Wait until every queued upgrade has been processed."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    def _ensure_worker(self, loop: asyncio.AbstractEventLoop) -> None:
        if (self._worker is None or self._worker.done()
                or self._worker.get_loop() is not loop):
            self._worker = loop.create_task(self._run())

    async def _run(self) -> None:
        while self._queue:
            job = self._queue.popleft()
            if job.finished:
                continue
            self._active = job
            try:
                await self._process(job)
            except Exception as exc:
                # Hand the error to whoever awaits the job and keep serving the queue
                logger.error("Surface upgrade failed: %s", exc)
                job._fail(exc)
            finally:
                self._active = None

    async def _process(self, job: UpgradeJob) -> None:
        await self._idle()
        if job.cancelled:
            return
        job.state = JobState.RUNNING

        request = job.request
        key = request.cache_key()
        raster = self.cache.get(key)
        if raster is None:
            try:
                builder = self.compositor.begin(request.profile_for(self.config),
                                                request.resolution, request.seed,
                                                request.satellite_index,
                                                request.development_level)
                for y0 in range(0, builder.height, job.chunk_rows):
                    builder.fill_rows(y0, y0 + job.chunk_rows)
                    job.rows_done = builder.rows_done
                    if builder.complete:
                        break
                    await self._idle()
                    if job.cancelled:
                        return
                raster = self.cache.put(key, builder.finish())
            except MemoryError as exc:
                logger.warning("Could not allocate %dx%d %s surface, keeping preview",
                               request.resolution, request.resolution,
                               request.planet_type)
                error = UpgradeAllocationError(
                    f"Cannot allocate a {request.resolution}x{request.resolution} raster")
                error.__cause__ = exc
                job._fail(error)
                return

        if job.view is not None:
            job.view.install(raster)
        job._complete(raster)
        logger.debug("Upgraded %s surface to %dx%d", request.planet_type,
                     raster.width, raster.height)
