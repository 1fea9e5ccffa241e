"""Nearby-spot ranking and smart recommendations."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .astro import TZ
from .fetch import WaterLevelReading, WeatherSnapshot
from .geo import distance_km
from .insights import FishingContext
from .score import FangindexResult, compute_fangindex, round_half_up, select_best_fish
from .waters import Species, WaterBody, _is_valid_coordinates

logger = logging.getLogger(__name__)

WEIGHT_DISTANCE = 0.4
WEIGHT_FANGINDEX = 0.4
SMALL_WATER_BONUS = 20


@dataclass
class RankedSpot:
    """Water body with its Fangindex and distance for ranking."""
    water: WaterBody
    fangindex_result: FangindexResult
    distance_km: float  # one decimal
    ranking_score: int  # sort key only, not for display

    @property
    def id(self) -> str:
        return self.water.id

    @property
    def name(self) -> str:
        return self.water.name

    @property
    def fangindex(self) -> int:
        return self.fangindex_result.score


def calculate_ranking_score(distance: float, fangindex: int, water: WaterBody, radius_km: float) -> int:
    """Combine distance, Fangindex and water type into one ranking score.

    - distance_score = max(0, 100 - distance * 100 / radius)
    - small waters (ponds) get a flat +20
    - ranking = 0.4 * distance_score + 0.4 * fangindex + bonus
    """
    distance_score = max(0.0, 100.0 - distance * (100.0 / radius_km))
    type_bonus = SMALL_WATER_BONUS if water.is_small_water else 0
    return round_half_up(distance_score * WEIGHT_DISTANCE + fangindex * WEIGHT_FANGINDEX + type_bonus)


def _candidate_coordinates(water: WaterBody) -> Optional[Tuple[float, float]]:
    """Return (lat, lon), or None if the candidate must be skipped."""
    if not str(water.name or "").strip():
        logger.warning(f"Skipping water '{water.id}': missing name")
        return None
    try:
        lat = float(water.latitude)
        lon = float(water.longitude)
    except (TypeError, ValueError) as e:
        logger.warning(f"Skipping water '{water.id}': invalid coordinates ({e})")
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)) or not _is_valid_coordinates(lat, lon):
        logger.warning(f"Skipping water '{water.id}': invalid coordinates (lat={lat}, lon={lon})")
        return None
    return lat, lon


def rank_nearby_spots(
    candidates: List[WaterBody],
    user_lat: float,
    user_lon: float,
    weather: WeatherSnapshot,
    now: Optional[datetime] = None,
    radius_km: float = 20.0,
    limit: int = 3,
    water_levels: Optional[Dict[str, WaterLevelReading]] = None,
) -> List[RankedSpot]:
    """Rank candidate waters for a user location and return the top N.

    Candidates outside the radius are dropped. If none is inside, the
    `limit` nearest ones are used instead so the result is never empty
    for a non-empty input. Ties keep the input order.

    Args:
        candidates: Water bodies to rank.
        user_lat: User latitude.
        user_lon: User longitude.
        weather: Current weather shared by all candidates.
        now: Local time of the evaluation (defaults to now in Europe/Berlin).
        radius_km: Search radius.
        limit: Maximum number of results.
        water_levels: Gauge readings keyed by station id.
    """
    if radius_km <= 0:
        raise ValueError(f"radius_km must be positive, got {radius_km}")
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")
    if now is None:
        now = datetime.now(TZ)
    water_levels = water_levels or {}

    with_distance: List[Tuple[WaterBody, float]] = []
    for water in candidates:
        coords = _candidate_coordinates(water)
        if coords is None:
            continue
        with_distance.append((water, distance_km(user_lat, user_lon, coords[0], coords[1])))

    if not with_distance:
        return []

    nearby = [(w, d) for w, d in with_distance if d <= radius_km]
    if not nearby:
        logger.info(f"No water within {radius_km:.0f} km, using the {limit} nearest")
        nearby = sorted(with_distance, key=lambda wd: wd[1])[:limit]

    ranked: List[RankedSpot] = []
    for water, distance in nearby:
        reading = water_levels.get(water.station_id) if water.station_id else None
        result = compute_fangindex(water.name, weather, reading, now=now)
        ranked.append(RankedSpot(
            water=water,
            fangindex_result=result,
            distance_km=round(distance, 1),
            ranking_score=calculate_ranking_score(distance, result.score, water, radius_km),
        ))

    # Sort by ranking score descending (stable)
    ranked.sort(key=lambda s: s.ranking_score, reverse=True)
    return ranked[:limit]


@dataclass
class Recommendation:
    """A categorized spot pick with its explanation."""
    category: str  # perfect_now|nearby|weather_pick
    label: str
    icon: str
    spot: RankedSpot
    reason: str
    best_fish: List[Species]
    timing: str

    @property
    def id(self) -> str:
        return f"{self.category}_{self.spot.id}"


TIMING_MESSAGES = {
    "early_morning": "Morning bite is on!",
    "morning": "2-3 more good hours",
    "midday": "Quieter phase",
    "afternoon": "Evening bite starts soon",
    "evening": "Best bite time!",
    "night": "Night fishing",
}


def calculate_weather_boost(species: List[Species], weather: WeatherSnapshot) -> int:
    """Bonus for waters stocked with fish that suit the current weather."""
    boost = 0
    if weather.temp < 12 and any(f in species for f in (Species.TROUT, Species.GRAYLING, Species.CHAR)):
        boost += 15
    if weather.temp > 18 and any(f in species for f in (Species.CARP, Species.TENCH, Species.CATFISH)):
        boost += 15
    if weather.clouds > 60 and any(f in species for f in (Species.PIKE, Species.ZANDER, Species.EEL)):
        boost += 10
    return boost


def _reason(fangindex: int, context: FishingContext) -> str:
    if fangindex >= 80:
        return "Excellent conditions!"
    if fangindex >= 65:
        return "Good chances today"
    if context.is_golden_hour:
        return "Golden hour active"
    return "Decent conditions"


def _best_of(spots: List[RankedSpot], key) -> Optional[RankedSpot]:
    # max() returns the first maximal element, so ties keep ranking order
    return max(spots, key=key) if spots else None


def build_recommendations(spots: List[RankedSpot], context: FishingContext) -> List[Recommendation]:
    """Pick up to three spots for different needs.

    - perfect_now: highest Fangindex
    - nearby: best Fangindex minus 2 points per km
    - weather_pick: best Fangindex plus weather boost (needs weather)
    Each spot is recommended at most once.
    """
    recommendations: List[Recommendation] = []

    best_now = _best_of(spots, lambda s: s.fangindex)
    if best_now is None:
        return recommendations

    recommendations.append(Recommendation(
        category="perfect_now",
        label="Perfect for NOW",
        icon="🔥",
        spot=best_now,
        reason=_reason(best_now.fangindex, context),
        best_fish=best_now.water.fish_species[:2],
        timing="Golden hour active!" if context.is_golden_hour else TIMING_MESSAGES[context.time_of_day],
    ))

    remaining = [s for s in spots if s.id != best_now.id]
    nearby = _best_of(remaining, lambda s: s.fangindex - s.distance_km * 2)
    if nearby is not None:
        recommendations.append(Recommendation(
            category="nearby",
            label="Close & good",
            icon="📍",
            spot=nearby,
            reason=f"Only {nearby.distance_km:.1f} km away",
            best_fish=nearby.water.fish_species[:2],
            timing=f"~{math.ceil(nearby.distance_km * 2)} min drive",
        ))
        remaining = [s for s in remaining if s.id != nearby.id]

    weather = context.weather
    if weather is not None:
        pick = _best_of(
            remaining,
            lambda s: s.fangindex + calculate_weather_boost(s.water.fish_species, weather),
        )
        if pick is not None:
            recommendations.append(Recommendation(
                category="weather_pick",
                label="Weather tip",
                icon="🌤️",
                spot=pick,
                reason=f"Ideal at {weather.temp:.0f}°C",
                best_fish=select_best_fish(weather)[:2],
                timing=weather.description,
            ))

    return recommendations
