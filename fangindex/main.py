"""Main orchestrator for the Fangindex report."""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .astro import TZ
from .errors import ProviderUnavailable
from .fetch import WaterLevelReading, fetch_water_level, fetch_weather
from .geo import resolve_user_location
from .insights import build_fishing_context, generate_headline, generate_insights
from .message import format_report
from .ranking import build_recommendations, rank_nearby_spots
from .waters import LoadResult, WaterBody, load_waters

logger = logging.getLogger(__name__)


def fetch_water_levels(waters: List[WaterBody]) -> Dict[str, WaterLevelReading]:
    """Fetch gauge readings for all waters with a station (missing ones are skipped)."""
    readings: Dict[str, WaterLevelReading] = {}
    for station_id in sorted({w.station_id for w in waters if w.station_id}):
        reading = fetch_water_level(station_id)
        if reading is not None:
            readings[station_id] = reading
    return readings


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fangindex: where do the fish bite now?")
    parser.add_argument("--lat", type=float, help="Your latitude (default: configured fallback)")
    parser.add_argument("--lon", type=float, help="Your longitude (default: configured fallback)")
    parser.add_argument("--radius", type=_positive_float, help="Search radius in km")
    parser.add_argument("--limit", type=_non_negative_int, help="Number of spots to show")
    parser.add_argument("--waters", type=Path, help="Path to waters YAML file")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    args = parse_args(argv)
    now = datetime.now(TZ)

    # Load waters
    try:
        load_result: LoadResult = load_waters(args.waters)
    except ProviderUnavailable as e:
        logger.error(f"Water bodies unavailable: {e}")
        sys.exit(1)

    settings = load_result.settings
    if load_result.n_skipped > 0:
        logger.info(f"Loaded {len(load_result.waters)} waters ({load_result.n_skipped} skipped: malformed)")
    else:
        logger.info(f"Loaded {len(load_result.waters)} waters")

    provider = None
    if args.lat is not None and args.lon is not None:
        provider = lambda: (args.lat, args.lon)  # noqa: E731
    user = resolve_user_location(provider, settings.fallback_location)

    try:
        weather = fetch_weather(user.lat, user.lon)
    except (ProviderUnavailable, RuntimeError) as e:
        logger.error(f"Weather unavailable, try again later: {e}")
        sys.exit(1)

    water_levels = fetch_water_levels(load_result.waters)

    spots = rank_nearby_spots(
        load_result.waters,
        user.lat,
        user.lon,
        weather,
        now=now,
        radius_km=args.radius if args.radius is not None else settings.search_radius_km,
        limit=args.limit if args.limit is not None else settings.limit,
        water_levels=water_levels,
    )
    logger.info(f"Ranked {len(spots)} spots around ({user.lat:.4f}, {user.lon:.4f})")

    context = build_fishing_context(now, weather, user.lat, user.lon)

    print(format_report(
        now,
        generate_headline(context),
        weather,
        generate_insights(context),
        spots,
        build_recommendations(spots, context),
        n_skipped=load_result.n_skipped,
    ))


if __name__ == "__main__":
    main()
