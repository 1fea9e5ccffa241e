"""Fangindex scoring engine."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from .astro import TZ, moon_phase_index, moon_phase_label
from .fetch import WaterLevelReading, WaterLevelTrend, WeatherSnapshot
from .waters import Species

# Composite weights (sum to 1.0)
WEIGHT_WEATHER = 0.35
WEIGHT_TIME = 0.30
WEIGHT_MOON = 0.20
WEIGHT_WATER_LEVEL = 0.15

# Index 0 = new moon, 4 = full moon
MOON_PHASE_SCORES = [85, 60, 45, 60, 90, 60, 45, 60]

WATER_LEVEL_DEFAULT_SCORE = 60
WATER_LEVEL_SCORES = {
    WaterLevelTrend.STABLE: 75,
    WaterLevelTrend.RISING: 85,
    WaterLevelTrend.FALLING: 50,
}

GOOD_TIME_THRESHOLD = 70
MAX_BEST_FISH = 3

COLD_WATER_FISH = [Species.TROUT, Species.GRAYLING]
MODERATE_WATER_FISH = [Species.PIKE, Species.ZANDER, Species.PERCH]
WARM_WATER_FISH = [Species.CARP, Species.TENCH, Species.CATFISH]
LOW_LIGHT_FISH = Species.EEL


@dataclass
class FangindexResult:
    """Catch probability for one water body under the given conditions."""
    score: int  # 0-100
    factors: Dict[str, int]  # weather, time_of_day, moon_phase, water_level
    best_fish: List[Species]
    reasoning: str
    recommendation: str


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def calculate_weather_score(weather: WeatherSnapshot) -> int:
    """Calculate weather sub-score (0-100).

    Scoring formula:
    - base = 50
    - pressure 1010..1020 hPa: +20, below 1000 or above 1030: -15
    - temp 10..20°C: +15, below 5 or above 28: -20
    - wind below 3 m/s: +10, above 8: -15
    - clouds 30..70%: +10
    """
    score = 50

    if 1010 <= weather.pressure <= 1020:
        score += 20
    elif weather.pressure < 1000 or weather.pressure > 1030:
        score -= 15

    if 10 <= weather.temp <= 20:
        score += 15
    elif weather.temp < 5 or weather.temp > 28:
        score -= 20

    if weather.wind_speed < 3:
        score += 10
    elif weather.wind_speed > 8:
        score -= 15

    if 30 <= weather.clouds <= 70:
        score += 10

    return int(clamp(score, 0, 100))


def calculate_time_score(hour: int) -> int:
    """Calculate time-of-day sub-score from the hour (0-23).

    Dawn (5-8) and dusk (17-21) are the prime bite windows, midday is slow.
    """
    if 5 <= hour <= 8 or 17 <= hour <= 21:
        return 90
    if 9 <= hour <= 11 or 15 <= hour <= 16:
        return 65
    if 12 <= hour <= 14:
        return 35
    return 20


def calculate_water_level_score(reading: Optional[WaterLevelReading]) -> int:
    """Water-level sub-score; 60 when no reading is available."""
    if reading is None:
        return WATER_LEVEL_DEFAULT_SCORE
    return WATER_LEVEL_SCORES.get(reading.trend, WATER_LEVEL_DEFAULT_SCORE)


def calculate_moon_score(moon_index: int) -> int:
    return MOON_PHASE_SCORES[moon_index % 8]


def select_best_fish(weather: WeatherSnapshot) -> List[Species]:
    """Pick up to 3 species for the current temperature band.

    Overcast skies (>60% clouds) add eel as low-light species.
    """
    if weather.temp < 12:
        fish = list(COLD_WATER_FISH)
    elif weather.temp <= 20:
        fish = list(MODERATE_WATER_FISH)
    else:
        fish = list(WARM_WATER_FISH)

    if weather.clouds > 60:
        fish.append(LOW_LIGHT_FISH)

    return fish[:MAX_BEST_FISH]


def format_recommendation(score: int, water_body_name: str, moon_label: str) -> str:
    if score >= 75:
        return (
            f"Excellent conditions at {water_body_name}! The {moon_label} and the "
            f"current weather promise good catches."
        )
    if score >= 50:
        return "Decent chances today. Focus on the early morning or late evening hours."
    return "Difficult conditions. Try bottom fishing or wait for better weather."


def compute_fangindex(
    water_body_name: str,
    weather: WeatherSnapshot,
    water_level: Optional[WaterLevelReading] = None,
    now: Optional[datetime] = None,
    target_species: Optional[Species] = None,
) -> FangindexResult:
    """Calculate the Fangindex for a water body.

    Fangindex = 0.35 * weather + 0.30 * time_of_day + 0.20 * moon_phase
                + 0.15 * water_level

    Args:
        water_body_name: Used in the recommendation text only.
        weather: Current weather snapshot.
        water_level: Latest gauge reading, None if unavailable.
        now: Local time of the evaluation. Defaults to the current time
            in Europe/Berlin.
        target_species: Accepted for API compatibility, not used in scoring.
    """
    if now is None:
        now = datetime.now(TZ)

    moon_index = moon_phase_index(now.date())
    moon_label = moon_phase_label(moon_index)

    factors = {
        "weather": int(clamp(calculate_weather_score(weather), 0, 100)),
        "time_of_day": int(clamp(calculate_time_score(now.hour), 0, 100)),
        "moon_phase": int(clamp(calculate_moon_score(moon_index), 0, 100)),
        "water_level": int(clamp(calculate_water_level_score(water_level), 0, 100)),
    }

    total = (
        factors["weather"] * WEIGHT_WEATHER
        + factors["time_of_day"] * WEIGHT_TIME
        + factors["moon_phase"] * WEIGHT_MOON
        + factors["water_level"] * WEIGHT_WATER_LEVEL
    )
    score = int(clamp(round_half_up(total), 0, 100))

    time_remark = (
        "Good bite time!"
        if factors["time_of_day"] >= GOOD_TIME_THRESHOLD
        else "Not the best time of day."
    )
    reasoning = (
        f"{moon_label}, {weather.temp:.0f}°C, pressure {weather.pressure} hPa. {time_remark}"
    )

    return FangindexResult(
        score=score,
        factors=factors,
        best_fish=select_best_fish(weather),
        reasoning=reasoning,
        recommendation=format_recommendation(score, water_body_name, moon_label),
    )
