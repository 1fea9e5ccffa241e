"""Contextual fishing insights (non-scoring, advisory only)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .astro import FULL_MOON, NEW_MOON, is_golden_hour_now, moon_phase_index, moon_phase_label
from .fetch import WeatherSnapshot
from .waters import Species

MAX_INSIGHTS = 3
PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

PREDATOR_FISH = [Species.PIKE, Species.ZANDER, Species.PERCH]
NIGHT_FISH = [Species.EEL, Species.CATFISH]


@dataclass
class FishingContext:
    """Situation of the angler at a given moment."""
    now: datetime
    hour: int
    time_of_day: str  # early_morning|morning|midday|afternoon|evening|night
    is_golden_hour: bool
    moon_phase_index: int
    moon_phase: str
    weather: Optional[WeatherSnapshot]
    season: str  # spring|summer|autumn|winter
    day_of_week: int  # Monday = 0
    is_weekend: bool


@dataclass
class InsightAction:
    """Optional follow-up the UI can offer with an insight."""
    label: str
    action: str  # filter|navigate|info
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Insight:
    kind: str  # tip|warning|opportunity|timing
    icon: str
    title: str
    message: str
    priority: str  # high|medium|low
    action: Optional[InsightAction] = None


def classify_time_of_day(hour: int) -> str:
    if 5 <= hour < 8:
        return "early_morning"
    if 8 <= hour < 12:
        return "morning"
    if 12 <= hour < 14:
        return "midday"
    if 14 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def classify_season(month: int) -> str:
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "autumn"
    return "winter"


def build_fishing_context(
    now: datetime,
    weather: Optional[WeatherSnapshot] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> FishingContext:
    """Build the context for insights and recommendations.

    With a coordinate the golden hour follows the actual sunrise/sunset,
    without one it falls back to fixed hours (5-7 and 18-20).
    """
    hour = now.hour
    if lat is not None and lon is not None:
        golden = is_golden_hour_now(lat, lon, now)
    else:
        golden = 5 <= hour <= 7 or 18 <= hour <= 20

    moon_index = moon_phase_index(now.date())
    weekday = now.weekday()

    return FishingContext(
        now=now,
        hour=hour,
        time_of_day=classify_time_of_day(hour),
        is_golden_hour=golden,
        moon_phase_index=moon_index,
        moon_phase=moon_phase_label(moon_index),
        weather=weather,
        season=classify_season(now.month),
        day_of_week=weekday,
        is_weekend=weekday >= 5,
    )


def _time_insights(context: FishingContext) -> List[Insight]:
    insights = []

    if context.time_of_day == "early_morning":
        insights.append(Insight(
            kind="opportunity",
            icon="☕",
            title="Early start!",
            message="Perfect time for predators. Pike and zander are active now.",
            priority="high",
            action=InsightAction(
                label="Predator spots",
                action="filter",
                payload={"fish": list(PREDATOR_FISH)},
            ),
        ))

    if context.is_golden_hour:
        insights.append(Insight(
            kind="timing",
            icon="🌅",
            title="Golden hour!",
            message="Best bite time of the day. Get to the water now!",
            priority="high",
        ))

    if context.time_of_day == "midday":
        insights.append(Insight(
            kind="tip",
            icon="☀️",
            title="Midday heat",
            message="Fish retreat to deeper water. Bottom fishing recommended.",
            priority="medium",
        ))

    if context.time_of_day == "night" and context.moon_phase_index == FULL_MOON:
        insights.append(Insight(
            kind="opportunity",
            icon="🌕",
            title="Full moon night",
            message="Eel and catfish are especially active under a full moon!",
            priority="high",
            action=InsightAction(
                label="Night spots",
                action="filter",
                payload={"fish": list(NIGHT_FISH)},
            ),
        ))

    return insights


def _weather_insights(weather: WeatherSnapshot) -> List[Insight]:
    insights = []

    if weather.pressure < 1010:
        insights.append(Insight(
            kind="opportunity",
            icon="📉",
            title="Pressure drop!",
            message="Low air pressure activates the fish. Very good chances today!",
            priority="high",
        ))

    if weather.pressure > 1025:
        insights.append(Insight(
            kind="tip",
            icon="📈",
            title="High pressure",
            message="Fish are sluggish. Try smaller baits and a slower retrieve.",
            priority="medium",
        ))

    if weather.wind_speed > 10:
        insights.append(Insight(
            kind="warning",
            icon="💨",
            title="Strong wind",
            message=f"{weather.wind_speed:.0f} m/s wind. Look for sheltered spots.",
            priority="medium",
        ))

    if (1010 <= weather.pressure <= 1020
            and 12 <= weather.temp <= 22
            and weather.wind_speed < 5
            and 30 <= weather.clouds <= 70):
        insights.append(Insight(
            kind="opportunity",
            icon="✨",
            title="Perfect conditions!",
            message="Everything lines up. Today is your day!",
            priority="high",
        ))

    if weather.temp < 10:
        insights.append(Insight(
            kind="tip",
            icon="🥶",
            title="Cold water",
            message="Trout and grayling love it. Salmonid time.",
            priority="low",
        ))
    elif weather.temp > 25:
        insights.append(Insight(
            kind="tip",
            icon="🌡️",
            title="Warm water",
            message="Carp, tench and catfish are most active now.",
            priority="low",
        ))

    return insights


def generate_insights(context: FishingContext) -> List[Insight]:
    """Evaluate all insight rules, highest priority first, at most 3.

    Weather rules are skipped when no weather is available.
    """
    insights = _time_insights(context)

    if context.weather is not None:
        insights.extend(_weather_insights(context.weather))

    if context.moon_phase_index == NEW_MOON:
        insights.append(Insight(
            kind="tip",
            icon="🌑",
            title="New moon",
            message="Dark nights mean active predators. Good time for night fishing.",
            priority="low",
        ))

    if context.is_weekend:
        insights.append(Insight(
            kind="tip",
            icon="👥",
            title="Weekend",
            message="Popular spots may be crowded. Arrive early or try a hidden gem.",
            priority="low",
        ))

    # sorted() is stable: equal priorities keep rule order
    insights = sorted(insights, key=lambda i: PRIORITY_ORDER[i.priority])
    return insights[:MAX_INSIGHTS]


HEADLINES = {
    "early_morning": ("🌅 Early start!", "The predators are already waiting."),
    "morning": ("☀️ Good morning", "Still good chances until noon."),
    "midday": ("☀️ Lunch break?", "Bottom fishing works best now."),
    "afternoon": ("🎣 Afternoon session", "The golden hour starts soon."),
    "evening": ("🌅 Golden hour!", "Best bite time of the day, go!"),
}


def generate_headline(context: FishingContext) -> Dict[str, str]:
    """Greeting for the time of day; extreme weather overrides the subheadline."""
    if context.time_of_day == "night":
        headline = "🌙 Night fishing?"
        if context.moon_phase_index == FULL_MOON:
            subheadline = "Full moon makes the eels active!"
        else:
            subheadline = "Enjoy the quiet at the water."
    else:
        headline, subheadline = HEADLINES[context.time_of_day]

    if context.weather is not None:
        if context.weather.wind_speed > 15:
            subheadline = "💨 Careful, strong wind today!"
        if context.weather.pressure < 1005:
            subheadline = "📉 Pressure drop = fish are biting!"

    return {"headline": headline, "subheadline": subheadline}
