from __future__ import annotations

import argparse
from typing import Sequence

from geocoin.cli.pygame_viewer import (
    DEFAULT_SAVE_DIR,
    build_viewer_session,
    env_flag_enabled,
    parse_geo_fix,
    report_saved_slot,
    run_pygame_viewer,
)
from geocoin.cli.viewer import run_console
from geocoin.sim.config import DEFAULT_SEED


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="geocoin-play", description="Canonical Geocoin Carrier launcher.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed used when no valid save exists.")
    parser.add_argument("--save-dir", default=DEFAULT_SAVE_DIR, help="Directory holding the save slot file.")
    parser.add_argument(
        "--geo-fix",
        type=parse_geo_fix,
        action="append",
        default=[],
        metavar="LAT,LNG",
        help="Scripted geolocation fix delivered after geolocation is enabled (repeatable).",
    )
    parser.add_argument("--console", action="store_true", help="Play in the terminal instead of the pygame window.")
    parser.add_argument("--headless", action="store_true", help="Run startup path in headless mode.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.console:
        session = build_viewer_session(args.save_dir, seed=args.seed, geo_fixes=args.geo_fix)
        result = run_console(session)
        report_saved_slot(session)
        return result
    return run_pygame_viewer(
        save_dir=args.save_dir,
        seed=args.seed,
        geo_fixes=args.geo_fix,
        headless=args.headless or env_flag_enabled("GEOCOIN_HEADLESS"),
    )


if __name__ == "__main__":
    raise SystemExit(main())
