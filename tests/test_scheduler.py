"""Tests for preview/upgrade scheduling."""

import asyncio

import pytest

from src.surface_generation.api import clear_surface_cache, generate_surface_upgrade
from src.surface_generation.bodies import SurfaceRequest
from src.surface_generation.cache import TextureCache
from src.surface_generation.compositor import SurfaceCompositor
from src.surface_generation.errors import InvalidResolutionError, UpgradeAllocationError
from src.surface_generation.scheduler import GenerationScheduler, JobState, SurfaceView
from src.utils.config import Configuration

CONFIG = Configuration(preview_resolution=16, upgrade_resolution=64, chunk_rows=8)


def make_request(resolution=64, body_index=0, planet_type="terran"):
    return SurfaceRequest(0.123, 0.456, body_index, planet_type, resolution,
                          development_level=0.5)


class StarvedCompositor(SurfaceCompositor):
    """Compositor that cannot allocate anything above preview size."""

    def begin(self, profile, resolution, seed, satellite_index=0, development_level=0.0):
        if resolution > CONFIG.preview_resolution:
            raise MemoryError("out of texture memory")
        return super().begin(profile, resolution, seed, satellite_index,
                             development_level)


def test_preview_installed_before_upgrade_is_queued():
    async def main():
        scheduler = GenerationScheduler(config=CONFIG)
        view = SurfaceView("terran")
        job = scheduler.request(make_request(), view)
        assert view.active is not None
        assert view.active.resolution == CONFIG.preview_resolution
        assert job.state is JobState.QUEUED
        raster = await job.wait()
        return view, raster

    view, raster = asyncio.run(main())
    assert raster.resolution == 64
    assert view.active is raster


def test_upgrade_releases_preview():
    released = []

    async def main():
        scheduler = GenerationScheduler(config=CONFIG)
        view = SurfaceView("terran", on_release=released.append)
        job = scheduler.request(make_request(), view)
        preview = view.active
        await job.wait()
        return preview

    preview = asyncio.run(main())
    assert released == [preview]


def test_upgrade_yields_between_chunks():
    seen = []

    async def main():
        view = SurfaceView("big")

        async def idle():
            seen.append(view.active.resolution)
            await asyncio.sleep(0)

        scheduler = GenerationScheduler(config=Configuration(), idle=idle)
        job = scheduler.request(make_request(512), view, chunk_rows=12)
        raster = await job.wait()
        return raster, job

    raster, job = asyncio.run(main())
    assert raster.resolution == 512
    # One yield before the job starts plus one between each of the 43 chunks
    assert len(seen) == 43
    assert all(resolution == 128 for resolution in seen)
    assert job.state is JobState.DONE


def test_one_job_runs_at_a_time():
    running = []

    async def main():
        async def idle():
            running.append(sum(1 for job in jobs if job.state is JobState.RUNNING))
            await asyncio.sleep(0)

        scheduler = GenerationScheduler(config=CONFIG, idle=idle)
        jobs = [scheduler.request(make_request(body_index=i), SurfaceView(str(i)))
                for i in range(3)]
        results = await asyncio.gather(*(job.wait() for job in jobs))
        return results

    results = asyncio.run(main())
    assert all(raster is not None for raster in results)
    assert max(running) <= 1


def test_chunked_upgrade_matches_synchronous_generation():
    async def main():
        scheduler = GenerationScheduler(config=CONFIG)
        return await scheduler.request(make_request(), chunk_rows=5).wait()

    upgraded = asyncio.run(main())
    request = make_request()
    direct = SurfaceCompositor().generate(request.profile, 64, request.seed, 0, 0.5)
    assert upgraded.to_bytes() == direct.to_bytes()
    assert upgraded.mask_bytes() == direct.mask_bytes()


def test_cancel_view_before_start():
    async def main():
        scheduler = GenerationScheduler(config=CONFIG)
        view = SurfaceView("gone")
        job = scheduler.request(make_request(), view)
        preview = view.active
        assert scheduler.cancel_view(view) == 1
        assert scheduler.cancel_view(view) == 0
        assert job.cancel() is False
        result = await job.wait()
        await scheduler.drain()
        return job, view, preview, result

    job, view, preview, result = asyncio.run(main())
    assert result is None
    assert job.cancelled
    assert view.active is preview


def test_cancel_while_running():
    async def main():
        compositor = SurfaceCompositor()
        view = SurfaceView("mid-flight")
        chunks = []

        async def idle():
            chunks.append(1)
            if len(chunks) == 3:
                scheduler.cancel_view(view)
            await asyncio.sleep(0)

        scheduler = GenerationScheduler(compositor=compositor, config=CONFIG, idle=idle)
        job = scheduler.request(make_request(), view)
        preview = view.active
        result = await job.wait()
        await scheduler.drain()
        return job, view, preview, result, scheduler, len(chunks)

    job, view, preview, result, scheduler, chunks = asyncio.run(main())
    assert result is None
    assert job.state is JobState.CANCELLED
    assert view.active is preview
    assert chunks == 3
    assert len(scheduler.cache) == 1


def test_allocation_failure_keeps_preview():
    async def main():
        scheduler = GenerationScheduler(compositor=StarvedCompositor(), config=CONFIG)
        view = SurfaceView("starved")
        job = scheduler.request(make_request(), view)
        preview = view.active
        with pytest.raises(UpgradeAllocationError):
            await job.wait()
        return job, view, preview

    job, view, preview = asyncio.run(main())
    assert job.state is JobState.FAILED
    assert view.active is preview


def test_queue_survives_a_failed_job():
    async def main():
        scheduler = GenerationScheduler(compositor=StarvedCompositor(), config=CONFIG)
        failing = scheduler.request(make_request(64))
        small = scheduler.request(make_request(16, body_index=4))
        with pytest.raises(UpgradeAllocationError):
            await failing.wait()
        return await small.wait()

    assert asyncio.run(main()).resolution == 16


def test_invalid_upgrade_resolution_fails_fast():
    async def main():
        scheduler = GenerationScheduler(config=CONFIG)
        view = SurfaceView("bad")
        with pytest.raises(InvalidResolutionError):
            scheduler.request(make_request(resolution=96), view)
        return scheduler, view

    scheduler, view = asyncio.run(main())
    assert view.active is None
    assert scheduler.pending == []


def test_cached_upgrade_skips_generation():
    async def main():
        compositor = SurfaceCompositor()
        cache = TextureCache()
        scheduler = GenerationScheduler(compositor=compositor, cache=cache, config=CONFIG)
        first = await scheduler.request(make_request(), SurfaceView("a")).wait()
        calls = compositor.calls
        second = await scheduler.request(make_request(), SurfaceView("b")).wait()
        return first, second, calls, compositor.calls

    first, second, calls_before, calls_after = asyncio.run(main())
    assert first is second
    assert calls_before == calls_after


def test_generate_surface_upgrade_does_not_block_the_loop():
    clear_surface_cache()

    async def main():
        ticks = 0
        finished = False

        async def ticker():
            nonlocal ticks
            while not finished:
                ticks += 1
                await asyncio.sleep(0)

        task = asyncio.ensure_future(ticker())
        raster = await generate_surface_upgrade(0.123, 0.456, 0, "terran", 128,
                                                chunk_rows=12)
        finished = True
        await task
        return raster, ticks

    raster, ticks = asyncio.run(main())
    clear_surface_cache()
    assert raster.resolution == 128
    assert ticks > 1


def test_cancel_all_and_drain():
    async def main():
        scheduler = GenerationScheduler(config=CONFIG)
        views = [SurfaceView(str(i)) for i in range(3)]
        jobs = [scheduler.request(make_request(body_index=i), view)
                for i, view in enumerate(views)]
        assert len(scheduler.pending) == 3
        assert scheduler.cancel_all() == 3
        await scheduler.drain()
        return jobs, views, scheduler

    jobs, views, scheduler = asyncio.run(main())
    assert all(job.cancelled for job in jobs)
    assert all(view.active.resolution == CONFIG.preview_resolution for view in views)
    assert scheduler.active_job is None
    assert scheduler.pending == []


def test_scheduler_uses_configured_default_type():
    config = CONFIG.with_overrides(default_planet_type="lava")

    async def main():
        scheduler = GenerationScheduler(config=config)
        view = SurfaceView("odd")
        job = scheduler.request(make_request(planet_type="unobtainium"), view)
        preview = view.active
        return preview, await job.wait()

    preview, raster = asyncio.run(main())
    assert preview.planet_type == "lava"
    assert raster.planet_type == "lava"
