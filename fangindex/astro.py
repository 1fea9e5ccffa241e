"""Moon phase and sun time approximations (advisory only)."""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

TZ = ZoneInfo("Europe/Berlin")

SYNODIC_MONTH_DAYS = 29.5305882
ZENITH_DEG = 90.833  # official zenith incl. refraction and solar disc
GOLDEN_HOUR = timedelta(hours=1)

MOON_PHASE_LABELS = [
    "New Moon",
    "Waxing",
    "First Quarter",
    "Waxing",
    "Full Moon",
    "Waning",
    "Last Quarter",
    "Waning",
]

NEW_MOON = 0
FULL_MOON = 4


@dataclass(frozen=True)
class SunTimes:
    """Sunrise/sunset for one day. None when the sun does not rise or set."""
    sunrise: Optional[datetime]
    sunset: Optional[datetime]


@dataclass(frozen=True)
class GoldenHourWindows:
    """End of the morning window and start of the evening window."""
    morning_end: Optional[datetime]
    evening_start: Optional[datetime]


def moon_phase_index(day: date) -> int:
    """Return the moon phase of a calendar date as 0..7 (0 = new, 4 = full).

    Julian-day approximation: January and February count as months 13/14
    of the previous year, the fractional lunation is scaled to eight steps
    and rounded, 8 wraps to 0.
    """
    year = day.year
    month = day.month
    if month < 3:
        year -= 1
        month += 12
    month += 1

    c = math.floor(365.25 * year)
    e = math.floor(30.6 * month)
    jd = c + e + day.day - 694039.09
    phase = jd / SYNODIC_MONTH_DAYS
    fraction = phase - math.floor(phase)

    index = int(math.floor(fraction * 8 + 0.5))
    return index % 8


def moon_phase_label(index: int) -> str:
    """Return the display label for a moon phase index."""
    return MOON_PHASE_LABELS[index % 8]


def _sun_event_utc_hours(lat: float, lon: float, day_of_year: int, rising: bool) -> Optional[float]:
    """Sunrise equation, returns UTC hours in [0, 24) or None (no event)."""
    lng_hour = lon / 15.0
    base_hour = 6.0 if rising else 18.0
    t = day_of_year + (base_hour - lng_hour) / 24.0

    # Sun's mean anomaly and true longitude
    m = 0.9856 * t - 3.289
    true_long = m + 1.916 * math.sin(math.radians(m)) + 0.020 * math.sin(math.radians(2 * m)) + 282.634
    true_long %= 360.0

    # Right ascension, moved into the same quadrant as the true longitude
    ra = math.degrees(math.atan(0.91764 * math.tan(math.radians(true_long)))) % 360.0
    ra += math.floor(true_long / 90.0) * 90.0 - math.floor(ra / 90.0) * 90.0
    ra /= 15.0

    sin_dec = 0.39782 * math.sin(math.radians(true_long))
    cos_dec = math.cos(math.asin(sin_dec))

    cos_h = (
        math.cos(math.radians(ZENITH_DEG)) - sin_dec * math.sin(math.radians(lat))
    ) / (cos_dec * math.cos(math.radians(lat)))
    if cos_h > 1.0 or cos_h < -1.0:
        return None

    if rising:
        h = 360.0 - math.degrees(math.acos(cos_h))
    else:
        h = math.degrees(math.acos(cos_h))
    h /= 15.0

    local_mean_time = h + ra - 0.06571 * t - 6.622
    return (local_mean_time - lng_hour) % 24.0


def sun_times(lat: float, lon: float, day: date, tz: Optional[tzinfo] = None) -> SunTimes:
    """Approximate sunrise and sunset for a coordinate and date.

    Accurate to a few minutes at mid latitudes. Returned datetimes are aware
    and expressed in ``tz`` (Europe/Berlin by default).
    """
    tz = tz or TZ
    day_of_year = day.timetuple().tm_yday
    midnight_utc = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)

    def _event(rising: bool) -> Optional[datetime]:
        try:
            hours = _sun_event_utc_hours(lat, lon, day_of_year, rising)
        except (ValueError, ZeroDivisionError) as e:
            # cos(lat) == 0 at the poles
            logger.debug(f"Sun time undefined at lat={lat}, lon={lon}: {e}")
            return None
        if hours is None:
            return None
        event = (midnight_utc + timedelta(hours=hours)).astimezone(tz)
        # UTC hours wrap at midnight; move the event onto ``day`` in ``tz``
        if event.date() < day:
            event = (event + timedelta(days=1)).astimezone(tz)
        elif event.date() > day:
            event = (event - timedelta(days=1)).astimezone(tz)
        return event

    return SunTimes(sunrise=_event(True), sunset=_event(False))


def golden_hour_windows(sunrise: Optional[datetime], sunset: Optional[datetime]) -> GoldenHourWindows:
    """Morning window ends one hour after sunrise, evening starts one hour before sunset."""
    return GoldenHourWindows(
        morning_end=sunrise + GOLDEN_HOUR if sunrise is not None else None,
        evening_start=sunset - GOLDEN_HOUR if sunset is not None else None,
    )


def is_golden_hour_now(lat: float, lon: float, now: datetime) -> bool:
    """True if ``now`` is within one hour of sunrise or sunset.

    Naive datetimes are interpreted as Europe/Berlin local time.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=TZ)

    times = sun_times(lat, lon, now.date(), tz=now.tzinfo)
    for event in (times.sunrise, times.sunset):
        if event is not None and abs(now - event) <= GOLDEN_HOUR:
            return True
    return False
