import argparse
import logging

import pyglet

from blockworld.game.window import GameWindow
from blockworld.graphics.rendering import setup_gl


def run(
    seed: int = 90125,
    render_distance: int | None = None,
    rebuild_budget_ms: float | None = None,
    profile: bool = False,
) -> None:
    GameWindow(seed=seed, render_distance=render_distance, rebuild_budget_ms=rebuild_budget_ms, profile=profile)
    setup_gl()
    pyglet.app.run()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Block World: an editable voxel terrain")
    parser.add_argument("--seed", type=int, default=90125, help="Terrain seed (same seed => same world)")
    parser.add_argument("--render-distance", type=int, default=None, help="Chunks generated around the player")
    parser.add_argument(
        "--rebuild-budget-ms",
        type=float,
        default=None,
        help="Milliseconds per tick spent rebuilding chunk meshes (0 = unbounded)",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None, help="Write the log to this file instead of stderr")
    parser.add_argument("--profile", action="store_true", help="Write a timing report to ./profiling on exit")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        filename=args.log_file,
        format="[%(asctime)s] [%(levelname)s] (%(module)s.py/%(funcName)s) %(message)s",
    )
    run(
        seed=args.seed,
        render_distance=args.render_distance,
        rebuild_budget_ms=args.rebuild_budget_ms,
        profile=args.profile,
    )
