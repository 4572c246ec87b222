#!/usr/bin/env python3
"""Example script to demonstrate preview-then-upgrade generation.

A small system of bodies is registered with a scheduler. Each body gets a
preview texture immediately and an upgraded texture later, while a fake
render loop keeps drawing frames in between.
"""

import argparse
import asyncio
import logging
import time

from src.surface_generation import (BodyDescriptor, GenerationScheduler, SurfaceView,
                                    request_for_body)
from src.utils import Configuration


def build_system(star_x=0.42, star_y=1.37):
    """Bodies of a demo star system.

    Returns:
        List of BodyDescriptor objects
    """
    return [
        BodyDescriptor("lava", star_x, star_y, 0),
        BodyDescriptor("terran", star_x, star_y, 1, development_level=0.8),
        BodyDescriptor("rocky", star_x, star_y, 1, satellite_index=1),
        BodyDescriptor("gas", star_x, star_y, 2),
        BodyDescriptor("ice", star_x, star_y, 2, satellite_index=1),
    ]


async def render_loop(views, done):
    """Pretend to draw frames until every upgrade has finished."""
    frames = 0
    while not done.is_set():
        frames += 1
        await asyncio.sleep(0)
    print(f"Rendered {frames} frames while upgrading")
    for view in views:
        print(f"{view.name:>18}: {view.active.width}x{view.active.height}")


async def run_demo(config, cancel_last=False):
    """Request every body of the system and wait for the upgrades.

    Args:
        config: Generator configuration
        cancel_last: Tear down the last view before its upgrade runs
    """
    print("\n=== Progressive Surface Upgrade ===")

    scheduler = GenerationScheduler(config=config)
    released = []
    views = []
    jobs = []

    start = time.perf_counter()
    for body in build_system():
        name = f"{body.planet_type}-{body.body_index}.{body.satellite_index}"
        view = SurfaceView(name, on_release=released.append)
        jobs.append(scheduler.request(request_for_body(body, config), view))
        views.append(view)
    print(f"Previews installed in {time.perf_counter() - start:.2f}s")

    if cancel_last:
        scheduler.cancel_view(views[-1])
        print(f"Cancelled upgrade of {views[-1].name}")

    done = asyncio.Event()
    renderer = asyncio.ensure_future(render_loop(views, done))
    await asyncio.gather(*(job.wait() for job in jobs))
    done.set()
    await renderer

    print(f"Upgrades finished in {time.perf_counter() - start:.2f}s, "
          f"released {len(released)} preview textures")


def main():
    """Main function to demonstrate asynchronous upgrades."""
    parser = argparse.ArgumentParser(description="Preview and upgrade planet surfaces.")
    parser.add_argument("--config", help="JSON file with configuration overrides")
    parser.add_argument("--cancel-last", action="store_true",
                        help="Cancel the upgrade of the last body")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    config = Configuration.from_file(args.config) if args.config else Configuration()
    asyncio.run(run_demo(config, cancel_last=args.cancel_last))

    print("\nDemo complete!")


if __name__ == "__main__":
    main()
